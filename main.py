#!/usr/bin/env python3
"""
SessionGate -- account provisioning CLI.

Users are created out of band; the HTTP surface only logs them in and lets
them change their own email and password.

Usage:
  python main.py init-db
  python main.py add-user alice@example.com
  python main.py add-user alice@example.com --password-stdin < secret.txt
  python main.py set-password alice@example.com

Environment variables:
  DATABASE_URL   SQLAlchemy URL of the store (default: sqlite:///data/sessiongate.db)
  BCRYPT_ROUNDS  bcrypt cost factor for new hashes (default: 12)
"""

import argparse
import getpass
import sys

from api.routes.pages import clean_email
from auth.credentials import hash_password
from auth.errors import Conflict, GatewayError
from auth.store import AuthStore
from core.config import get_settings


def _read_password(from_stdin: bool) -> str:
    """Read a new password from stdin or prompt twice on the terminal."""
    if from_stdin:
        return sys.stdin.readline().rstrip("\n")
    first = getpass.getpass("Password: ")
    second = getpass.getpass("Repeat password: ")
    if first != second:
        print("  [!] Passwords do not match.")
        sys.exit(1)
    return first


def _email_arg(raw: str) -> str:
    email = clean_email(raw)
    if email is None:
        raise argparse.ArgumentTypeError(f"'{raw}' is not a valid email address")
    return email


def cmd_init_db(store: AuthStore, args: argparse.Namespace) -> int:
    # AuthStore creates missing tables on construction.
    print(f"  Schema ready at {get_settings().database_url}")
    return 0


def cmd_add_user(store: AuthStore, args: argparse.Namespace) -> int:
    password_hash = hash_password(_read_password(args.password_stdin))
    try:
        user_id = store.create_user(args.email, password_hash)
    except Conflict:
        print(f"  [!] A user with email '{args.email}' already exists.")
        return 1
    print(f"  Created user {args.email} (id {user_id})")
    return 0


def cmd_set_password(store: AuthStore, args: argparse.Namespace) -> int:
    credentials = store.get_credentials(args.email)
    if credentials is None:
        print(f"  [!] No user with email '{args.email}'.")
        return 1
    store.update_hash(credentials.id, hash_password(_read_password(args.password_stdin)))
    print(f"  Password updated for {args.email}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sessiongate",
        description="Manage SessionGate user accounts.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_init = sub.add_parser("init-db", help="Create the database schema")
    p_init.set_defaults(func=cmd_init_db)

    p_add = sub.add_parser("add-user", help="Provision a new user")
    p_add.add_argument("email", type=_email_arg)
    p_add.add_argument("--password-stdin", action="store_true", help="Read the password from stdin")
    p_add.set_defaults(func=cmd_add_user)

    p_pass = sub.add_parser("set-password", help="Reset a user's password")
    p_pass.add_argument("email", type=_email_arg)
    p_pass.add_argument("--password-stdin", action="store_true", help="Read the password from stdin")
    p_pass.set_defaults(func=cmd_set_password)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    store = AuthStore(get_settings().database_url)
    try:
        return args.func(store, args)
    except GatewayError as e:
        print(f"  [!] {e.message}")
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
