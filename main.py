"""Command-line interface for the landing builder backend."""

from __future__ import annotations

import argparse
import logging
import sys
from getpass import getpass
from typing import Sequence

from landingbuilder.config import Settings, load_settings
from landingbuilder.database import Database

logger = logging.getLogger("landingbuilder.main")

PASSWORD_ATTEMPTS = 3
KNOWN_COMMANDS = {"serve", "init-db", "create-user", "list-users"}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Landing builder backend utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Initialise the user database")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP service")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for the HTTP API (default: 8080)",
    )

    create_parser = subparsers.add_parser("create-user", help="Register a new account")
    create_parser.add_argument("email", help="Unique email address for login")

    subparsers.add_parser("list-users", help="List registered accounts")

    args_list = list(argv) if argv is not None else sys.argv[1:]

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in KNOWN_COMMANDS:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _initialise_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, settings: Settings, database: Database, host: str, port: int) -> None:
    from landingbuilder.service import create_app
    import uvicorn

    logger.info("Starting landing builder API on http://%s:%s", host, port)

    app = create_app(settings=settings, database=database)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _prompt_for_password() -> str | None:
    for _ in range(PASSWORD_ATTEMPTS):
        password = getpass("Password: ")
        if not password:
            print("Password must not be empty. Please try again.")
            continue
        confirmation = getpass("Confirm password: ")
        if password != confirmation:
            print("Passwords do not match. Please try again.")
            continue
        return password
    return None


def _create_user(database: Database, email: str) -> int:
    from landingbuilder.auth import register_user
    from landingbuilder.errors import DuplicateAccountError
    from landingbuilder.security import PasswordHasher

    email = email.strip()
    if not email:
        print("Error: email must not be empty", file=sys.stderr)
        return 1

    password = _prompt_for_password()
    if password is None:
        print("Aborted creating user.", file=sys.stderr)
        return 1

    try:
        user = register_user(database, PasswordHasher(), email, password)
    except DuplicateAccountError:
        print("Error: Email already exists", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created user #{user.id}: {user.email} ({', '.join(user.roles)})")
    return 0


def _list_users(database: Database) -> int:
    users = database.list_users()
    if not users:
        print("No users are currently registered.")
        return 0

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>4}  {'Email':<32}  {'Roles':<16}  Created")
    print("-" * 80)
    for user in users:
        created = user.created_at.strftime("%Y-%m-%d %H:%M:%S %Z") if user.created_at else "-"
        print(f"{user.id:>4}  {user.email:<32}  {','.join(user.roles):<16}  {created}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = _parse_args(argv)
    settings = load_settings()
    database = _initialise_database(settings)

    if args.command == "init-db":
        return 0
    if args.command == "create-user":
        return _create_user(database, args.email)
    if args.command == "list-users":
        return _list_users(database)

    _serve(settings=settings, database=database, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
