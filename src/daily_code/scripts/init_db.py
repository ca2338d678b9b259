# src/daily_code/scripts/init_db.py
"""Create the daily code tables directly, without Alembic.

Handy for local SQLite databases. Optionally seeds the reset time.
"""
from __future__ import annotations

import argparse
import sys

from daily_code.db.session import SessionLocal, create_tables
from daily_code.services.clock import ResetPolicy
from daily_code.services.daily_code import get_daily_code_service
from daily_code.services.errors import DailyCodeError


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the daily code tables")
    parser.add_argument(
        "--reset-time",
        default=None,
        help="Store this HH:MM reset time after creating the tables.",
    )
    args = parser.parse_args()

    create_tables()
    print("[init_db] tables created")

    if args.reset_time:
        try:
            policy = ResetPolicy.parse(args.reset_time)
            with SessionLocal() as db:
                saved = get_daily_code_service(db).save_reset_policy(policy)
        except (ValueError, DailyCodeError) as exc:
            print(f"[init_db] ERROR: {exc}", file=sys.stderr)
            sys.exit(1)
        print(f"[init_db] reset time set to {saved.label}")


if __name__ == "__main__":
    main()
