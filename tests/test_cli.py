"""Tests for main.py -- the create-user / list-users / delete-user commands.

Each test points DATABASE_URL at a temporary SQLite file and clears the
get_settings() cache so the CLI picks up the environment for that test.
"""

from __future__ import annotations

import pytest

import main
from core.config import get_settings


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("SECRET_KEY", "c" * 40)
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_create_list_delete(cli_env, capsys) -> None:
    assert main.main(["create-user", "Ana", "ana@x.com", "--password", "secret1"]) == 0
    assert "ana@x.com" in capsys.readouterr().out

    assert main.main(["list-users"]) == 0
    listing = capsys.readouterr().out
    assert "ana@x.com" in listing
    assert "Ana" in listing

    assert main.main(["delete-user", "1"]) == 0
    assert main.main(["delete-user", "1"]) == 1
    assert "User not found" in capsys.readouterr().err


def test_duplicate_email_exits_nonzero(cli_env, capsys) -> None:
    assert main.main(["create-user", "Ana", "ana@x.com", "--password", "secret1"]) == 0
    assert main.main(["create-user", "Ana", "ana@x.com", "--password", "secret1"]) == 1
    assert "already exists" in capsys.readouterr().err


def test_prompted_password_mismatch(cli_env, monkeypatch, capsys) -> None:
    answers = iter(["secret1", "secret2"])
    monkeypatch.setattr("getpass.getpass", lambda prompt="": next(answers))
    assert main.main(["create-user", "Ana", "ana@x.com"]) == 1
    assert "do not match" in capsys.readouterr().err


def test_no_command_prints_help(cli_env, capsys) -> None:
    assert main.main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()
