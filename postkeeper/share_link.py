from __future__ import annotations

import hashlib
from urllib.parse import urlsplit, urlunsplit

DEFAULT_BASE_URL = "http://myapp.com"
MAX_FINGERPRINT_CHARS = 64


def normalize_base_url(url: str) -> str:
    value = (url or "").strip()
    if not value:
        raise ValueError("base_url must be non-empty")

    parts = urlsplit(value)
    scheme = parts.scheme.lower()
    if scheme not in ("http", "https") or not parts.netloc:
        raise ValueError("base_url must be an absolute http(s) URL")

    path = (parts.path or "").rstrip("/")
    return urlunsplit((scheme, parts.netloc.lower(), path, "", ""))


def content_fingerprint(post_id: int, content: str, *, chars: int) -> str:
    payload = f"{int(post_id)}:{content}".encode("utf-8")
    return hashlib.sha256(payload).hexdigest()[:chars]


class ShareLinkBuilder:
    """
    Derives the external reference string for a post.

    Links are a pure function of the post id and content: the id is embedded
    verbatim, so two posts never share a link, and the optional content
    fingerprint makes links harder to guess.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        fingerprint_chars: int = 8,
    ) -> None:
        if not 0 <= fingerprint_chars <= MAX_FINGERPRINT_CHARS:
            raise ValueError(
                f"fingerprint_chars must be between 0 and {MAX_FINGERPRINT_CHARS}"
            )
        self._base_url = normalize_base_url(base_url)
        self._fingerprint_chars = int(fingerprint_chars)

    @property
    def base_url(self) -> str:
        return self._base_url

    def build(self, post_id: int, content: str) -> str:
        slug = str(int(post_id))
        if self._fingerprint_chars:
            fp = content_fingerprint(post_id, content, chars=self._fingerprint_chars)
            slug = f"{slug}-{fp}"
        return f"{self._base_url}/post/{slug}"
