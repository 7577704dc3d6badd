from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .share_link import DEFAULT_BASE_URL, MAX_FINGERPRINT_CHARS, normalize_base_url

NonNegativeInt = Annotated[int, Field(ge=0)]


def _non_empty_path(value: str) -> str:
    path = (value or "").strip()
    if not path:
        raise ValueError("must be a non-empty path")
    return path


class PostsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_content_chars: NonNegativeInt = 0  # 0 disables the cap


class ShareConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: str = DEFAULT_BASE_URL
    fingerprint_chars: int = Field(8, ge=0, le=MAX_FINGERPRINT_CHARS)

    @field_validator("base_url")
    @classmethod
    def _base_url_must_be_http(cls, v: str) -> str:
        return normalize_base_url(v)


class StorageConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool = True
    path: str = "posts.sqlite"

    @field_validator("path")
    @classmethod
    def _path_must_be_set(cls, v: str) -> str:
        return _non_empty_path(v)


class LogConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool = True
    path: str = "postkeeper.log"

    @field_validator("path")
    @classmethod
    def _path_must_be_set(cls, v: str) -> str:
        return _non_empty_path(v)


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    posts: PostsConfig = Field(default_factory=PostsConfig)
    share: ShareConfig = Field(default_factory=ShareConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    log: LogConfig = Field(default_factory=LogConfig)
