"""Utility script to register a user in the local directory mirror."""

from __future__ import annotations

import argparse
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError

from interest_hub.domain.entities import User
from interest_hub.infrastructure.database import SessionLocal, initialize_database
from interest_hub.infrastructure.repositories import UserRepository


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for user creation."""

    parser = argparse.ArgumentParser(
        description="Register a user that can send and receive interests.",
    )
    parser.add_argument("--name", required=True, help="Display name used in notifications")
    parser.add_argument(
        "--id",
        dest="user_id",
        default=None,
        help="Identifier from the user directory (generated when omitted)",
    )
    parser.add_argument(
        "--inactive",
        action="store_true",
        help="Register the user as inactive so it cannot receive interests.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    initialize_database()

    session = SessionLocal()
    try:
        user = UserRepository(session).create(
            User(id=args.user_id or str(uuid4()), name=args.name, is_active=not args.inactive)
        )
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not store the user: {exc}") from exc
    else:
        print(
            "User created:\n"
            f"  ID: {user.id}\n"
            f"  Name: {user.name}\n"
            f"  Active: {user.is_active}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
