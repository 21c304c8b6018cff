from __future__ import annotations

import argparse
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.services.topics import MIGRATION_DEFAULT_LIMIT, migrate_topic_short_ids


def backfill_all(db: Session, offset: datetime | None = None, limit: int = MIGRATION_DEFAULT_LIMIT) -> tuple[int, int]:
    pages = 0
    scanned_total = 0
    while True:
        scanned, last = migrate_topic_short_ids(db, offset, limit)
        pages += 1
        scanned_total += scanned
        if scanned < limit:
            break
        offset = last
    return pages, scanned_total


def main() -> None:
    parser = argparse.ArgumentParser(description="Backfill missing topic short ids, newest first.")
    parser.add_argument("--offset", help="ISO timestamp to start below (defaults to now)")
    parser.add_argument("--limit", type=int, default=MIGRATION_DEFAULT_LIMIT, help="rows per page")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    offset = datetime.fromisoformat(args.offset) if args.offset else None
    db = SessionLocal()
    try:
        pages, scanned = backfill_all(db, offset, max(int(args.limit), 1))
    finally:
        db.close()
    print(f"topic short id backfill done: pages={pages}, scanned={scanned}")


if __name__ == "__main__":
    main()
