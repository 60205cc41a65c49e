"""
Batch jobs run as the service identity:
  advance   reconcile gameweek statuses with real match completion
  refresh   recompute every player's cumulative stats
  all       advance, then refresh
  promote   grant the admin role to a user

Run from project root: python -m fantasy_backend.run_batch all --db data/fantasy.db
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from fantasy_backend.access import Principal, Role, assert_can_run_batch_jobs
from fantasy_backend.models import UserRole
from fantasy_backend.persistence import UserRepository, get_connection, init_db, transaction
from fantasy_backend.persistence.db import get_db_path, set_db_path
from fantasy_backend.services import GameweekService, PlayerStatsService

logger = logging.getLogger(__name__)

SERVICE_PRINCIPAL = Principal(user_id="service", role=Role.SERVICE.value)


def run(job: str, username: str | None = None) -> None:
    assert_can_run_batch_jobs(SERVICE_PRINCIPAL)
    conn = get_connection()
    try:
        if job in ("advance", "all"):
            with transaction(conn):
                changes = GameweekService().advance_gameweek_statuses(conn)
            print(f"Gameweek transitions: {len(changes)}")
            for number, old, new in changes:
                print(f"  GW{number}: {old} -> {new}")
        if job in ("refresh", "all"):
            with transaction(conn):
                count = PlayerStatsService().refresh_all_player_stats(conn)
            print(f"Refreshed stats for {count} players")
        if job == "promote":
            if not username:
                raise SystemExit("promote requires --username")
            user_repo = UserRepository()
            user = user_repo.get_by_username(conn, username)
            if user is None:
                raise SystemExit(f"User not found: {username}")
            with transaction(conn):
                user_repo.update_role(conn, user.id, UserRole.ADMIN.value)
            print(f"{username} is now an admin")
    finally:
        conn.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Fantasy football batch jobs")
    parser.add_argument("job", choices=["advance", "refresh", "all", "promote"])
    parser.add_argument("--db", type=Path, default=None, help="SQLite path (default: $FANTASY_DB_PATH or data/fantasy.db)")
    parser.add_argument("--username", default=None, help="User to promote (promote job)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.db is not None:
        set_db_path(args.db)
    init_db(get_db_path())
    logger.info("running %s against %s", args.job, get_db_path())
    run(args.job, username=args.username)


if __name__ == "__main__":
    main(sys.argv[1:])
