from __future__ import annotations

from typing import Callable, TypeVar

from .config import build_store, config_sha256
from .config_schema import AppConfig
from .errors import IdCollisionError, InvalidInputError, PostNotFoundError, StorageError
from .event_log import EventLogger
from .models import PostSummary, PostView
from .storage import SQLitePostArchive
from .store import PostStore

T = TypeVar("T")


class PostSession:
    """
    Front door used by the CLI: runs one store operation per call, records it
    in the event log and rewrites the archive after every mutation.

    Rejected operations are logged as warnings and re-raised unchanged. If the
    archive cannot be written, the store is rolled back to its state before
    the mutation and the StorageError propagates, so memory and disk agree.
    """

    def __init__(
        self,
        store: PostStore,
        *,
        archive: SQLitePostArchive | None = None,
        logger: EventLogger | None = None,
    ) -> None:
        self.store = store
        self._archive = archive
        self._log = logger or EventLogger()

    @classmethod
    def open(cls, config: AppConfig, *, logger: EventLogger | None = None) -> "PostSession":
        log = logger or EventLogger()

        archive: SQLitePostArchive | None = None
        if config.storage.enabled:
            archive = SQLitePostArchive.open(config.storage.path)
            try:
                store = build_store(config, archive.load())
            except (InvalidInputError, IdCollisionError) as e:
                archive.close()
                raise StorageError(
                    f"Post archive {config.storage.path} holds invalid data: {e}"
                ) from e
            except Exception:
                archive.close()
                raise
        else:
            store = build_store(config)

        log.note(
            "session_opened",
            config_hash=config_sha256(config),
            storage_path=config.storage.path if archive is not None else None,
            posts=len(store),
            next_id=store.next_id,
        )
        return cls(store, archive=archive, logger=log)

    def close(self) -> None:
        if self._archive is not None:
            self._archive.close()
            self._archive = None

    def __enter__(self) -> "PostSession":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def create_post(self, content: str) -> int:
        post_id = self._mutate("create_post", lambda: self.store.create_post(content))
        self._log.applied("create_post", post_id=post_id, content_chars=len(content.strip()))
        return post_id

    def add_comment(self, post_id: int, text: str) -> int:
        sequence = self._mutate(
            "add_comment",
            lambda: self.store.add_comment(post_id, text),
            post_id=post_id,
        )
        self._log.applied("add_comment", post_id=post_id, sequence=sequence)
        return sequence

    def like(self, post_id: int) -> int:
        likes = self._mutate("like", lambda: self.store.like(post_id), post_id=post_id)
        self._log.applied("like", post_id=post_id, likes=likes)
        return likes

    def dislike(self, post_id: int) -> int:
        dislikes = self._mutate("dislike", lambda: self.store.dislike(post_id), post_id=post_id)
        self._log.applied("dislike", post_id=post_id, dislikes=dislikes)
        return dislikes

    def get_share_link(self, post_id: int) -> str:
        link = self._run(
            "get_share_link",
            lambda: self.store.get_share_link(post_id),
            post_id=post_id,
        )
        self._log.applied("get_share_link", post_id=post_id, link=link)
        return link

    def delete_post(self, post_id: int) -> None:
        self._mutate("delete_post", lambda: self.store.delete_post(post_id), post_id=post_id)
        self._log.applied("delete_post", post_id=post_id)

    def list_posts(self) -> list[PostSummary]:
        return self.store.list_posts()

    def get_post(self, post_id: int) -> PostView:
        return self._run("get_post", lambda: self.store.get_post(post_id), post_id=post_id)

    def _run(self, op: str, fn: Callable[[], T], *, post_id: int | None = None) -> T:
        try:
            return fn()
        except (InvalidInputError, PostNotFoundError) as e:
            self._log.rejected(op, e, post_id=post_id)
            raise

    def _mutate(self, op: str, fn: Callable[[], T], *, post_id: int | None = None) -> T:
        if self._archive is None:
            return self._run(op, fn, post_id=post_id)

        before = self.store.snapshot()
        result = self._run(op, fn, post_id=post_id)
        try:
            self._archive.save(self.store.snapshot())
        except StorageError as e:
            self.store.restore(before)
            self._log.failed("archive_save_failed", e, operation=op, post_id=post_id)
            raise
        return result
