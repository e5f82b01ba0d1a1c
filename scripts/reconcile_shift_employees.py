"""Backfill schedules.employee_id for rows that only carry an employee name.

Run once after the 0002 migration:

    python scripts/reconcile_shift_employees.py --dry-run
    python scripts/reconcile_shift_employees.py
"""

from __future__ import annotations

import argparse
import sys

from taproom.config import get_settings
from taproom.db.session import session_scope
from taproom.logging_conf import configure_logging
from taproom.services.schedule import reconcile_shift_employees


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", help="report matches without writing")
    parser.add_argument("--database-url", default=None, help="override TAPROOM_DATABASE_URL")
    args = parser.parse_args(argv)

    configure_logging(level=get_settings().log_level)

    with session_scope(args.database_url) as db:
        report = reconcile_shift_employees(db, dry_run=args.dry_run)

    print(f"Linked {report.linked} shift row(s){' (dry run)' if args.dry_run else ''}.")
    if report.unmatched:
        print("No employee matches these stored names:")
        for name in report.unmatched:
            print(f" - {name}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
