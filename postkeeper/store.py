from __future__ import annotations

from threading import Lock
from typing import Iterable

from .errors import IdCollisionError, InvalidInputError, PostNotFoundError
from .models import Comment, PostRecord, PostSummary, PostView, StoreSnapshot
from .share_link import ShareLinkBuilder


def _require_text(value: str, *, what: str, max_chars: int = 0) -> str:
    if not isinstance(value, str):
        raise InvalidInputError(f"{what} must be a string")

    text = value.strip()
    if not text:
        raise InvalidInputError(f"{what} must be non-empty")
    if max_chars > 0 and len(text) > max_chars:
        raise InvalidInputError(f"{what} must be at most {max_chars} characters")
    return text


class PostStore:
    """
    In-memory registry of posts and their comments, reactions and share links.

    Ids come from a monotonic counter starting at 1 and are never reused, even
    after a post is deleted. Every operation runs under a single lock so id
    allocation and deletion stay atomic for any concurrent caller.
    """

    def __init__(
        self,
        *,
        share_links: ShareLinkBuilder | None = None,
        max_content_chars: int = 0,
    ) -> None:
        if max_content_chars < 0:
            raise ValueError("max_content_chars must be non-negative")

        self._share_links = share_links or ShareLinkBuilder()
        self._max_content_chars = int(max_content_chars)
        self._posts: dict[int, PostRecord] = {}
        self._order: list[int] = []
        self._next_id = 1
        self._lock = Lock()

    @classmethod
    def from_snapshot(
        cls,
        snapshot: StoreSnapshot,
        *,
        share_links: ShareLinkBuilder | None = None,
        max_content_chars: int = 0,
    ) -> "PostStore":
        store = cls(share_links=share_links, max_content_chars=max_content_chars)
        store._load(snapshot.posts, next_id=snapshot.next_id)
        return store

    def __len__(self) -> int:
        with self._lock:
            return len(self._posts)

    def __contains__(self, post_id: object) -> bool:
        if isinstance(post_id, bool):
            return False
        with self._lock:
            return post_id in self._posts

    @property
    def next_id(self) -> int:
        with self._lock:
            return self._next_id

    def create_post(self, content: str) -> int:
        text = _require_text(content, what="content", max_chars=self._max_content_chars)

        with self._lock:
            post_id = self._next_id
            if post_id in self._posts:
                raise IdCollisionError(f"Post id {post_id} is already in use")

            self._posts[post_id] = PostRecord(id=post_id, content=text)
            self._order.append(post_id)
            self._next_id = post_id + 1
            return post_id

    def add_comment(self, post_id: int, text: str) -> int:
        with self._lock:
            post = self._get(post_id)
            body = _require_text(text, what="comment")

            sequence = len(post.comments)
            post.comments.append(Comment(post_id=post.id, text=body, sequence=sequence))
            return sequence

    def like(self, post_id: int) -> int:
        with self._lock:
            post = self._get(post_id)
            post.likes += 1
            return post.likes

    def dislike(self, post_id: int) -> int:
        with self._lock:
            post = self._get(post_id)
            post.dislikes += 1
            return post.dislikes

    def get_share_link(self, post_id: int) -> str:
        with self._lock:
            post = self._get(post_id)
            if post.share_link is None:
                post.share_link = self._share_links.build(post.id, post.content)
            return post.share_link

    def delete_post(self, post_id: int) -> None:
        with self._lock:
            self._get(post_id)
            del self._posts[post_id]
            self._order.remove(post_id)

    def list_posts(self) -> list[PostSummary]:
        with self._lock:
            return [self._posts[pid].summary() for pid in self._order]

    def get_post(self, post_id: int) -> PostView:
        with self._lock:
            return self._get(post_id).view()

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(
                next_id=self._next_id,
                posts=tuple(self._posts[pid].view() for pid in self._order),
            )

    def restore(self, snapshot: StoreSnapshot) -> None:
        """Replace the whole store state, e.g. to undo a change that could not be archived."""
        self._load(snapshot.posts, next_id=snapshot.next_id)

    def _get(self, post_id: int) -> PostRecord:
        # bool is an int subclass; True must not resolve to post 1.
        if isinstance(post_id, bool) or not isinstance(post_id, int):
            raise PostNotFoundError(post_id)

        post = self._posts.get(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        return post

    def _load(self, posts: Iterable[PostView], *, next_id: int) -> None:
        with self._lock:
            records: dict[int, PostRecord] = {}
            order: list[int] = []
            for view in posts:
                if view.id in records:
                    raise IdCollisionError(f"Duplicate post id {view.id} in snapshot")
                if view.id < 1:
                    raise InvalidInputError(f"Post id must be positive, got {view.id}")
                if view.likes < 0 or view.dislikes < 0:
                    raise InvalidInputError(f"Post {view.id} has negative reaction counts")

                content = _require_text(view.content, what="content")
                comments: list[Comment] = []
                ordered = sorted(view.comments, key=lambda c: c.sequence)
                for sequence, comment in enumerate(ordered):
                    body = _require_text(comment.text, what="comment")
                    comments.append(Comment(post_id=view.id, text=body, sequence=sequence))

                records[view.id] = PostRecord(
                    id=view.id,
                    content=content,
                    comments=comments,
                    likes=int(view.likes),
                    dislikes=int(view.dislikes),
                )
                order.append(view.id)

            self._posts = records
            self._order = order
            self._next_id = max([int(next_id), 1] + [pid + 1 for pid in order])
