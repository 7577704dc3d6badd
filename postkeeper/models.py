from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Comment:
    post_id: int
    text: str
    sequence: int


@dataclass(frozen=True)
class PostView:
    """Immutable snapshot of a post, comments in sequence order."""

    id: int
    content: str
    comments: tuple[Comment, ...] = ()
    likes: int = 0
    dislikes: int = 0
    share_link: str | None = None


@dataclass(frozen=True)
class PostSummary:
    id: int
    content: str
    comment_count: int
    likes: int
    dislikes: int


@dataclass(frozen=True)
class StoreSnapshot:
    """Whole-store state in creation order, used for archiving and bulk-load."""

    next_id: int = 1
    posts: tuple[PostView, ...] = ()


@dataclass
class PostRecord:
    id: int
    content: str
    comments: list[Comment] = field(default_factory=list)
    likes: int = 0
    dislikes: int = 0
    share_link: str | None = None

    def view(self) -> PostView:
        return PostView(
            id=self.id,
            content=self.content,
            comments=tuple(self.comments),
            likes=self.likes,
            dislikes=self.dislikes,
            share_link=self.share_link,
        )

    def summary(self) -> PostSummary:
        return PostSummary(
            id=self.id,
            content=self.content,
            comment_count=len(self.comments),
            likes=self.likes,
            dislikes=self.dislikes,
        )
