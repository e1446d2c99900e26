"""Maintenance commands: expiry sweeps, counter rebuild and match reconciliation."""

from __future__ import annotations

import argparse
import logging

from interest_hub.application.use_cases.interests import (
    DEFAULT_SWEEP_BATCH_SIZE,
    expire_overdue_interests,
)
from interest_hub.application.use_cases.matches import reconcile_mutual_matches
from interest_hub.application.use_cases.notifications import (
    CLEANUP_BATCH_SIZE,
    cleanup_expired_notifications,
)
from interest_hub.application.use_cases.stats import rebuild_user_counters
from interest_hub.domain.errors import InterestHubError
from interest_hub.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Interest Hub maintenance tasks.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    expire = subcommands.add_parser("expire", help="Expire overdue pending interests")
    expire.add_argument("--batch-size", type=int, default=DEFAULT_SWEEP_BATCH_SIZE)

    cleanup = subcommands.add_parser(
        "cleanup-notifications", help="Delete notifications past their expiry date"
    )
    cleanup.add_argument("--batch-size", type=int, default=CLEANUP_BATCH_SIZE)

    rebuild = subcommands.add_parser("rebuild-counters", help="Recount a user's counters")
    rebuild.add_argument("user_id")

    reconcile = subcommands.add_parser(
        "reconcile-matches", help="Claim mutual matches missed by earlier failures"
    )
    reconcile.add_argument("user_id")
    return parser.parse_args()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    args = parse_args()

    initialize_database()

    session = SessionLocal()
    try:
        if args.command == "expire":
            expired = expire_overdue_interests(session, batch_size=args.batch_size)
            print(f"Expired {expired} interest(s)")
        elif args.command == "cleanup-notifications":
            removed = cleanup_expired_notifications(session, batch_size=args.batch_size)
            print(f"Removed {removed} expired notification(s)")
        elif args.command == "rebuild-counters":
            counters = rebuild_user_counters(session, user_id=args.user_id)
            print(f"Counters rebuilt: {counters}")
        else:
            matches = reconcile_mutual_matches(session, user_id=args.user_id)
            print(f"Claimed {len(matches)} mutual match(es)")
    except InterestHubError as exc:
        raise SystemExit(f"{args.command} failed: {exc.message}") from exc
    finally:
        session.close()


if __name__ == "__main__":
    main()
