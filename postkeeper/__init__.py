from __future__ import annotations

from .config import load_config
from .config_schema import AppConfig
from .errors import (
    ConfigError,
    IdCollisionError,
    InvalidInputError,
    PostNotFoundError,
    StorageError,
)
from .models import Comment, PostSummary, PostView, StoreSnapshot
from .share_link import ShareLinkBuilder
from .store import PostStore

__all__ = [
    "AppConfig",
    "Comment",
    "ConfigError",
    "IdCollisionError",
    "InvalidInputError",
    "PostNotFoundError",
    "PostStore",
    "PostSummary",
    "PostView",
    "ShareLinkBuilder",
    "StorageError",
    "StoreSnapshot",
    "load_config",
]
