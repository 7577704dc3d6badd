from __future__ import annotations

import sqlite3
from pathlib import Path

from .errors import StorageError
from .models import Comment, PostView, StoreSnapshot
from .storage_schema import initialize_sqlite

_NEXT_ID_KEY = "next_id"


def _as_path(value: str | Path) -> str:
    return str(value)


class SQLitePostArchive:
    """
    Local snapshot of the post store, rewritten after each mutation.

    The archive only holds state; ids and comment sequences are validated
    again when the snapshot is loaded back into a PostStore.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._conn.row_factory = sqlite3.Row

    @classmethod
    def open(cls, path: str | Path) -> "SQLitePostArchive":
        db_path = _as_path(path)
        if db_path != ":memory:":
            p = Path(db_path)
            p.parent.mkdir(parents=True, exist_ok=True)

        try:
            conn = sqlite3.connect(db_path)
        except sqlite3.DatabaseError as e:
            raise StorageError(f"Failed to open sqlite database: {db_path}: {e}") from e

        try:
            initialize_sqlite(conn)
        except (sqlite3.DatabaseError, RuntimeError) as e:
            conn.close()
            raise StorageError(f"Failed to initialize sqlite schema: {e}") from e

        return cls(conn)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "SQLitePostArchive":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        return self._conn

    def save(self, snapshot: StoreSnapshot) -> None:
        post_rows = [
            (post.id, position, post.content, post.likes, post.dislikes)
            for position, post in enumerate(snapshot.posts)
        ]
        comment_rows = [
            (post.id, comment.sequence, comment.text)
            for post in snapshot.posts
            for comment in post.comments
        ]

        try:
            with self._conn:
                self._conn.execute("DELETE FROM comments")
                self._conn.execute("DELETE FROM posts")
                self._conn.executemany(
                    "INSERT INTO posts(id, position, content, likes, dislikes) VALUES (?, ?, ?, ?, ?)",
                    post_rows,
                )
                self._conn.executemany(
                    "INSERT INTO comments(post_id, sequence, text) VALUES (?, ?, ?)",
                    comment_rows,
                )
                self._conn.execute(
                    """
                    INSERT INTO store_meta(key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """.strip(),
                    (_NEXT_ID_KEY, str(int(snapshot.next_id))),
                )
        except sqlite3.DatabaseError as e:
            raise StorageError(f"Failed to save post archive: {e}") from e

    def load(self) -> StoreSnapshot:
        try:
            meta = self._conn.execute(
                "SELECT value FROM store_meta WHERE key = ?",
                (_NEXT_ID_KEY,),
            ).fetchone()
            post_rows = self._conn.execute(
                "SELECT id, content, likes, dislikes FROM posts ORDER BY position, id"
            ).fetchall()
            comment_rows = self._conn.execute(
                "SELECT post_id, sequence, text FROM comments ORDER BY post_id, sequence"
            ).fetchall()
        except sqlite3.DatabaseError as e:
            raise StorageError(f"Failed to read post archive: {e}") from e

        try:
            next_id = int(meta["value"]) if meta is not None else 1
        except ValueError as e:
            raise StorageError(f"Stored next_id is not an integer: {meta['value']!r}") from e

        comments: dict[int, list[Comment]] = {}
        for r in comment_rows:
            pid = int(r["post_id"])
            comments.setdefault(pid, []).append(
                Comment(post_id=pid, text=str(r["text"]), sequence=int(r["sequence"]))
            )

        posts = tuple(
            PostView(
                id=int(r["id"]),
                content=str(r["content"]),
                comments=tuple(comments.get(int(r["id"]), [])),
                likes=int(r["likes"]),
                dislikes=int(r["dislikes"]),
            )
            for r in post_rows
        )
        return StoreSnapshot(next_id=next_id, posts=posts)

    def post_count(self) -> int:
        row = self._conn.execute("SELECT COUNT(1) AS n FROM posts").fetchone()
        return int(row["n"]) if row is not None else 0

    def comment_count(self) -> int:
        row = self._conn.execute("SELECT COUNT(1) AS n FROM comments").fetchone()
        return int(row["n"]) if row is not None else 0
