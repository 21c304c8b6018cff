from unittest.mock import patch

from tests.topics.base import *  # noqa: F401,F403
from app.scripts.backfill_topic_short_ids import backfill_all
from app.services.short_ids import generate_short_id, timestamp_nanos
from app.services.topics import migrate_topic_short_ids


class TopicShortIdBackfillTests(ForumTopicsBase):
    def _seed_legacy(self, db, count: int, keep_every: int = 0):
        author = self._user(db, "legacy-author")
        category = self._category(db, "general")
        base = datetime.now(timezone.utc) - timedelta(days=30)
        stamps = []
        for index in range(count):
            created_at = base - timedelta(hours=index)
            keep = keep_every and index % keep_every == 0
            self._topic(
                db,
                user=author,
                category=category,
                title=f"Legacy {index}",
                created_at=created_at,
                short_id=f"keep{index:04d}" if keep else None,
            )
            stamps.append(created_at)
        return stamps

    def test_sweep_fills_missing_short_ids_from_row_timestamps(self):
        with self.SessionLocal() as db:
            stamps = self._seed_legacy(db, 4, keep_every=2)

        with self.SessionLocal() as db:
            scanned, last = migrate_topic_short_ids(db, None, 10)
            self.assertEqual(scanned, 4)
            self.assertEqual(last.replace(tzinfo=None), stamps[-1].replace(tzinfo=None))

        with self.SessionLocal() as db:
            rows = {row.title: row.short_id for row in db.query(Topic).all()}
        self.assertEqual(rows["Legacy 0"], "keep0000")
        self.assertEqual(rows["Legacy 2"], "keep0002")
        self.assertEqual(rows["Legacy 1"], generate_short_id(stamps[1]))
        self.assertEqual(rows["Legacy 3"], generate_short_id(stamps[3]))

    def test_sweep_is_idempotent(self):
        with self.SessionLocal() as db:
            self._seed_legacy(db, 3)

        with self.SessionLocal() as db:
            migrate_topic_short_ids(db, None, 10)
        with self.SessionLocal() as db:
            first = {row.id: row.short_id for row in db.query(Topic).all()}

        with self.SessionLocal() as db:
            scanned, _ = migrate_topic_short_ids(db, None, 10)
            self.assertEqual(scanned, 3)
        with self.SessionLocal() as db:
            second = {row.id: row.short_id for row in db.query(Topic).all()}

        self.assertEqual(first, second)
        self.assertTrue(all(first.values()))

    def test_sweep_pages_backward_with_returned_offset(self):
        with self.SessionLocal() as db:
            self._seed_legacy(db, 5)

        with self.SessionLocal() as db:
            scanned, last = migrate_topic_short_ids(db, None, 2)
            self.assertEqual(scanned, 2)
            self.assertEqual(db.query(Topic).filter(Topic.short_id.is_(None)).count(), 3)

            scanned, last = migrate_topic_short_ids(db, last, 2)
            self.assertEqual(scanned, 2)
            scanned, last = migrate_topic_short_ids(db, last, 2)
            self.assertEqual(scanned, 1)
            scanned, after = migrate_topic_short_ids(db, last, 2)
            self.assertEqual(scanned, 0)
            self.assertEqual(after, last)
            self.assertEqual(db.query(Topic).filter(Topic.short_id.is_(None)).count(), 0)

    def test_sweep_gives_rows_sharing_a_timestamp_distinct_short_ids(self):
        with self.SessionLocal() as db:
            author = self._user(db, "legacy-author")
            category = self._category(db, "general")
            stamp = datetime.now(timezone.utc) - timedelta(days=30)
            self._topic(db, user=author, category=category, title="Twin A", created_at=stamp)
            self._topic(db, user=author, category=category, title="Twin B", created_at=stamp)

        with self.SessionLocal() as db:
            scanned, _ = migrate_topic_short_ids(db, None, 10)
            self.assertEqual(scanned, 2)
        with self.SessionLocal() as db:
            short_ids = {row.short_id for row in db.query(Topic).all()}

        nanos = timestamp_nanos(stamp)
        self.assertEqual(short_ids, {generate_short_id(nanos), generate_short_id(nanos + 1)})

        with self.SessionLocal() as db:
            migrate_topic_short_ids(db, None, 10)
            self.assertEqual(db.query(Topic).filter(Topic.short_id.is_(None)).count(), 0)

    def test_sweep_skips_row_when_every_candidate_is_taken(self):
        with self.SessionLocal() as db:
            self._seed_legacy(db, 2, keep_every=2)

        with self.SessionLocal() as db:
            with patch("app.services.topics.generate_short_id", return_value="keep0000"):
                with self.assertLogs("app.services.topics", level="WARNING"):
                    scanned, _ = migrate_topic_short_ids(db, None, 10)
            self.assertEqual(scanned, 2)
            missing = db.query(Topic).filter(Topic.short_id.is_(None)).one()
            self.assertEqual(missing.title, "Legacy 1")

    def test_sweep_leaves_empty_short_ids_alone(self):
        with self.SessionLocal() as db:
            author = self._user(db, "legacy-author")
            category = self._category(db, "general")
            base = datetime.now(timezone.utc) - timedelta(days=30)
            self._topic(db, user=author, category=category, title="Blank", created_at=base, short_id="")
            self._topic(db, user=author, category=category, title="Missing", created_at=base - timedelta(hours=1))

        with self.SessionLocal() as db:
            with self.assertLogs("app.services.topics", level="INFO") as logs:
                migrate_topic_short_ids(db, None, 10)
        self.assertIn("updated=1 ", logs.output[-1])

        with self.SessionLocal() as db:
            rows = {row.title: row.short_id for row in db.query(Topic).all()}
        self.assertEqual(rows["Blank"], "")
        self.assertTrue(rows["Missing"])

    def test_script_backfills_all_pages(self):
        with self.SessionLocal() as db:
            self._seed_legacy(db, 7)

        with self.SessionLocal() as db:
            pages, scanned = backfill_all(db, None, 3)
            self.assertEqual(pages, 3)
            self.assertEqual(scanned, 7)
            self.assertEqual(db.query(Topic).filter(Topic.short_id.is_(None)).count(), 0)

    def test_celery_task_runs_one_page(self):
        with self.SessionLocal() as db:
            stamps = self._seed_legacy(db, 3)

        result = topics_task.backfill_topic_short_ids(None, 2)
        self.assertEqual(result["scanned"], 2)
        self.assertEqual(
            datetime.fromisoformat(result["last"]).replace(tzinfo=None),
            stamps[1].replace(tzinfo=None),
        )

        result = topics_task.backfill_topic_short_ids(result["last"], 2)
        self.assertEqual(result["scanned"], 1)
        with self.SessionLocal() as db:
            self.assertEqual(db.query(Topic).filter(Topic.short_id.is_(None)).count(), 0)


if __name__ == "__main__":
    unittest.main()
