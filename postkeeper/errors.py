from __future__ import annotations


class ConfigError(RuntimeError):
    """Raised when configuration is missing or invalid."""


class StorageError(RuntimeError):
    """Raised when reading or writing the post archive in SQLite fails."""


class InvalidInputError(ValueError):
    """Raised when post content or comment text is empty or malformed."""


class PostNotFoundError(LookupError):
    """Raised when a post id does not reference a live post."""

    def __init__(self, post_id: int) -> None:
        super().__init__(f"Post with ID {post_id} does not exist.")
        self.post_id = post_id


class IdCollisionError(RuntimeError):
    """Raised when a post id would be assigned twice."""
