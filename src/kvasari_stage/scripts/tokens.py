# src/kvasari_stage/scripts/tokens.py
"""Print a bearer token for a user, optionally creating the user first.

Account registration lives outside this service; this script is the way to
obtain credentials for development and operations.
"""
from __future__ import annotations

import argparse
import sys

from sqlalchemy.orm import Session

from kvasari_stage.core.security import create_access_token
from kvasari_stage.db.session import SessionLocal, create_tables
from kvasari_stage.models import User
from kvasari_stage.models.user import ALIAS_MAX_LENGTH, ALIAS_MIN_LENGTH
from kvasari_stage.services.identity import IdentityDirectory


def ensure_user(db: Session, alias: str, name: str | None, create: bool) -> User | None:
    """Return the user with ``alias``, creating it when allowed."""
    user = IdentityDirectory(db).get_by_alias(alias)
    if user is None and create:
        user = User(alias=alias, name=name)
        db.add(user)
        db.commit()
        db.refresh(user)
        print(f"Created user {alias} ({user.id})", file=sys.stderr)
    return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("alias", help="alias of the user to authenticate")
    parser.add_argument("--create", action="store_true", help="create the user when missing")
    parser.add_argument("--name", default=None, help="display name for a created user")
    args = parser.parse_args(argv)

    if not ALIAS_MIN_LENGTH <= len(args.alias) <= ALIAS_MAX_LENGTH:
        parser.error(f"alias must be {ALIAS_MIN_LENGTH} to {ALIAS_MAX_LENGTH} characters long")

    create_tables()
    db = SessionLocal()
    try:
        user = ensure_user(db, args.alias, args.name, args.create)
    finally:
        db.close()

    if user is None:
        print(f"No user with alias {args.alias}; pass --create to add it", file=sys.stderr)
        return 1
    print(create_access_token(user.id))
    return 0


if __name__ == "__main__":
    sys.exit(main())
