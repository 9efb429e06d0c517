"""
Account administration against the configured store.

Users are never deleted; an operator disables the account instead, which
makes login and every existing token fail.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from contacts_api.config import get_settings
from contacts_api.db import DbClient, build_db_client
from contacts_api.validation import normalize_email

logger = logging.getLogger(__name__)


def set_account_active(db: DbClient, email: str, active: bool) -> bool:
    user = db.get_user_by_email(normalize_email(email))
    if not user:
        return False
    db.set_user_active(user.user_id, active)
    logger.info("%s user %s", "Activated" if active else "Deactivated", user.user_id)
    return True


def main(argv: Optional[Sequence[str]] = None, db: Optional[DbClient] = None) -> int:
    parser = argparse.ArgumentParser(description="Contacts account administration")
    subparsers = parser.add_subparsers(dest="command", required=True)
    for command in ("activate", "deactivate"):
        sub = subparsers.add_parser(command, help=f"{command.capitalize()} an account")
        sub.add_argument("email")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    owns_db = db is None
    if db is None:
        settings = get_settings()
        if not settings.database_url:
            print("DATABASE_URL must point at the service database", file=sys.stderr)
            return 2
        db = build_db_client(settings.database_url)
    try:
        if not set_account_active(db, args.email, args.command == "activate"):
            print(f"No user with email {args.email}", file=sys.stderr)
            return 1
        print(f"{args.command.capitalize()}d {normalize_email(args.email)}")
        return 0
    finally:
        if owns_db:
            db.close()


if __name__ == "__main__":
    raise SystemExit(main())
