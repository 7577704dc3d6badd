from __future__ import annotations

import json
import sqlite3
import tempfile
import unittest
from pathlib import Path

from postkeeper.config_schema import AppConfig
from postkeeper.errors import InvalidInputError, PostNotFoundError, StorageError
from postkeeper.event_log import EventLogger
from postkeeper.models import StoreSnapshot
from postkeeper.session import PostSession
from postkeeper.storage import SQLitePostArchive
from postkeeper.store import PostStore


def _config(td: str, *, storage: bool = True) -> AppConfig:
    return AppConfig.model_validate(
        {
            "share": {"fingerprint_chars": 0},
            "storage": {"enabled": storage, "path": str(Path(td) / "posts.sqlite")},
            "log": {"path": str(Path(td) / "events.log")},
        }
    )


class _FullDiskArchive(SQLitePostArchive):
    def save(self, snapshot: StoreSnapshot) -> None:
        raise StorageError("disk full")


class TestPostSession(unittest.TestCase):
    def test_state_survives_reopen(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = _config(td)

            with PostSession.open(cfg) as session:
                a = session.create_post("hello")
                b = session.create_post("world")
                session.add_comment(a, "nice")
                session.like(a)
                session.dislike(b)
                session.delete_post(b)

            with PostSession.open(cfg) as session:
                posts = session.list_posts()
                self.assertEqual([p.id for p in posts], [a])
                self.assertEqual(posts[0].likes, 1)
                self.assertEqual(posts[0].comment_count, 1)
                self.assertEqual(session.create_post("again"), 3)
                self.assertEqual(session.get_share_link(a), f"http://myapp.com/post/{a}")

    def test_storage_disabled_keeps_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = _config(td, storage=False)
            with PostSession.open(cfg) as session:
                session.create_post("hello")
            with PostSession.open(cfg) as session:
                self.assertEqual(session.list_posts(), [])
            self.assertFalse((Path(td) / "posts.sqlite").exists())

    def test_failed_save_rolls_back_the_change(self) -> None:
        store = PostStore()
        kept = store.create_post("kept")
        store.like(kept)

        with _FullDiskArchive.open(":memory:") as archive:
            session = PostSession(store, archive=archive)
            before = store.snapshot()

            with self.assertRaises(StorageError):
                session.create_post("lost")
            with self.assertRaises(StorageError):
                session.like(kept)
            with self.assertRaises(StorageError):
                session.delete_post(kept)

            self.assertEqual(store.snapshot(), before)
            self.assertEqual(store.get_post(kept).likes, 1)

    def test_invalid_archive_data_is_a_storage_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = _config(td)
            with PostSession.open(cfg) as session:
                session.create_post("hi")

            conn = sqlite3.connect(cfg.storage.path)
            with conn:
                conn.execute("UPDATE posts SET content = '  '")
            conn.close()

            with self.assertRaises(StorageError) as ctx:
                PostSession.open(cfg)
            self.assertIn("invalid data", str(ctx.exception))
            self.assertIsInstance(ctx.exception.__cause__, InvalidInputError)

    def test_logs_operations_and_rejections(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = _config(td, storage=False)
            log_path = Path(td) / "events.log"

            with EventLogger(log_path) as log:
                with PostSession.open(cfg, logger=log) as session:
                    pid = session.create_post("hello")
                    session.like(pid)
                    with self.assertRaises(PostNotFoundError):
                        session.like(99)
                    with self.assertRaises(InvalidInputError):
                        session.create_post("")

            records = [
                json.loads(ln)
                for ln in log_path.read_text(encoding="utf-8").splitlines()
                if ln.strip()
            ]

        self.assertEqual(
            [(r["event"], r.get("operation")) for r in records],
            [
                ("session_opened", None),
                ("operation_applied", "create_post"),
                ("operation_applied", "like"),
                ("operation_rejected", "like"),
                ("operation_rejected", "create_post"),
            ],
        )
        self.assertEqual(records[3]["post_id"], 99)
        self.assertEqual(records[3]["level"], "WARN")
        self.assertEqual(records[3]["data"]["error_type"], "PostNotFoundError")


if __name__ == "__main__":
    unittest.main()
