#!/usr/bin/env python3
"""
Account Service -- command-line entry point.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080 --reload
  python main.py create-user "Ana" ana@x.com
  python main.py list-users
  python main.py delete-user 3

Configuration is read from the environment / .env (see core/config.py):
  SECRET_KEY    Token signing secret (min 32 chars). Required unless DEBUG=true.
  DATABASE_URL  SQLAlchemy URL, or DB_HOST / DB_DATABASE / DB_USER / DB_PASSWORD.
  PORT          Listening port (default 3000).
"""

import argparse
import getpass
import sys
from typing import Optional

from auth.errors import AccountError
from auth.service import AccountService
from auth.store import UserStore, database_url
from core.config import Settings, get_settings


def _open_service(settings: Settings) -> AccountService:
    return AccountService(UserStore(database_url(settings)), settings)


def _serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    uvicorn.run(
        "asgi:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def _create_user(args: argparse.Namespace, settings: Settings) -> int:
    password: Optional[str] = args.password
    if password is None:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Confirm password: "):
            print("  [!] Passwords do not match.", file=sys.stderr)
            return 1

    service = _open_service(settings)
    try:
        user = service.register(args.name, args.email, password)
    except AccountError as exc:
        print(f"  [!] {exc.message}", file=sys.stderr)
        return 1
    finally:
        service.store.close()
    print(f"  Created user {user.id} <{user.email}>")
    return 0


def _list_users(args: argparse.Namespace, settings: Settings) -> int:
    service = _open_service(settings)
    try:
        users = service.list_users()
    finally:
        service.store.close()
    if not users:
        print("  No users.")
        return 0
    for user in users:
        print(f"  {user.id:>5}  {user.email:<40} {user.name}")
    return 0


def _delete_user(args: argparse.Namespace, settings: Settings) -> int:
    service = _open_service(settings)
    try:
        service.delete_user(args.user_id)
    except AccountError as exc:
        print(f"  [!] {exc.message}", file=sys.stderr)
        return 1
    finally:
        service.store.close()
    print(f"  Deleted user {args.user_id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="account-service",
        description="User accounts with password login and bearer tokens.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py serve --port 8080
  python main.py create-user "Ana" ana@x.com
  SECRET_KEY=... DATABASE_URL=sqlite:///accounts.db python main.py list-users
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: PORT setting)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    serve.set_defaults(handler=_serve)

    create = sub.add_parser("create-user", help="Register a user from the command line")
    create.add_argument("name")
    create.add_argument("email")
    create.add_argument(
        "--password",
        default=None,
        help="Password (prompted for when omitted; avoid passing secrets on the command line)",
    )
    create.set_defaults(handler=_create_user)

    list_cmd = sub.add_parser("list-users", help="Print every user")
    list_cmd.set_defaults(handler=_list_users)

    delete = sub.add_parser("delete-user", help="Delete a user by id")
    delete.add_argument("user_id", type=int)
    delete.set_defaults(handler=_delete_user)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "handler", None):
        parser.print_help()
        return 0
    return args.handler(args, get_settings())


if __name__ == "__main__":
    sys.exit(main())
