"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the account service happen here. No module
should call os.getenv() or os.environ.get() directly -- import get_settings()
or accept a Settings instance instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. Entry
      points (asgi.py, main.py) use it; the app factory and AccountService take
      the instance as an explicit argument so tests can build their own.

  Frozen BaseSettings: the model is immutable once constructed. The signing
      secret and database location are read once at startup and never change
      for the lifetime of the process.

  field_validator on secret_key: dev mode generates a key with a warning,
      production mode refuses to start without one.

Security notes:
  [M6] SECRET_KEY shorter than 32 chars is rejected outright. JWT HS256
       signing relies on key entropy -- a short key weakens it.

  [M7] In production mode (DEBUG not set or false), a missing SECRET_KEY is a
       hard startup failure.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import AliasChoices, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("accountsvc.config")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.

    Environment variable name mapping: field names are matched
    case-insensitively, e.g. `secret_key` reads from SECRET_KEY. The signing
    secret also accepts JWT_SECRET for existing deployments.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The validator below
    # either generates a dev key or raises, so callers never see "".
    secret_key: str = Field(
        default="",
        validation_alias=AliasChoices("secret_key", "jwt_secret"),
        validate_default=True,
    )

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_expire_seconds: int = Field(default=3600, gt=0)
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    # A full SQLAlchemy URL takes precedence over the DB_* parts below.
    database_url: str = ""
    db_driver: str = "mysql+pymysql"
    db_host: str = ""
    db_port: int | None = None
    db_database: str = ""
    db_user: str = ""
    db_password: str = ""

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = ["*"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, value: str, info: ValidationInfo) -> str:
        """Enforce SECRET_KEY policy [M7].

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters [M6].
        """
        if not value:
            if info.data.get("debug"):
                logger.warning("WARNING: Using auto-generated SECRET_KEY. Tokens will not persist across restarts.")
                return secrets.token_hex(32)
            raise ValueError(
                "SECRET_KEY is required in production mode. "
                "Set SECRET_KEY (or JWT_SECRET) in your environment or .env file. "
                "To run in development mode, set DEBUG=true."
            )
        if len(value) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return value


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables, or build Settings(...) directly
    and hand it to api.main.create_app().
    """
    return Settings()
