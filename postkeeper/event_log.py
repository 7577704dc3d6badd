from __future__ import annotations

import json
import traceback
import uuid
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, TextIO

_MAX_TRACEBACK_LINES = 40


class EventLogger:
    """
    Append-only JSONL audit trail of what the operator did to the store.

    Every line carries the session id. Store operations are recorded by name
    (`applied` / `rejected`) so a trail can be filtered per operation or per
    post; lifecycle events and failures use `note` and `failed`.

    Without a path the logger records nothing.
    """

    def __init__(self, path: str | Path | None = None, *, session_id: str | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._session_id = (session_id or "").strip() or uuid.uuid4().hex
        self._fp: TextIO | None = None
        self._lock = Lock()

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def enabled(self) -> bool:
        return self._path is not None

    def close(self) -> None:
        with self._lock:
            if self._fp is not None:
                self._fp.close()
                self._fp = None

    def __enter__(self) -> "EventLogger":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def note(self, event: str, **data: Any) -> None:
        self._emit("INFO", event, data=data)

    def applied(self, operation: str, *, post_id: int | None = None, **result: Any) -> None:
        self._emit("INFO", "operation_applied", operation=operation, post_id=post_id, data=result)

    def rejected(self, operation: str, exc: BaseException, *, post_id: int | None = None) -> None:
        self._emit(
            "WARN",
            "operation_rejected",
            operation=operation,
            post_id=post_id,
            data={"error_type": type(exc).__name__, "reason": str(exc)},
        )

    def failed(
        self,
        event: str,
        exc: BaseException,
        *,
        operation: str | None = None,
        post_id: int | None = None,
        **data: Any,
    ) -> None:
        lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
        data["error"] = {
            "type": type(exc).__name__,
            "message": str(exc),
            "traceback": "".join(lines[-_MAX_TRACEBACK_LINES:]),
        }
        self._emit("ERROR", event, operation=operation, post_id=post_id, data=data)

    def _emit(
        self,
        level: str,
        event: str,
        *,
        operation: str | None = None,
        post_id: int | None = None,
        data: dict[str, Any],
    ) -> None:
        if self._path is None:
            return

        record: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "event": event,
            "session_id": self._session_id,
        }
        if operation is not None:
            record["operation"] = operation
        if post_id is not None:
            record["post_id"] = post_id
        if data:
            record["data"] = data

        line = json.dumps(record, ensure_ascii=False, sort_keys=True, default=str)

        with self._lock:
            if self._fp is None:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._fp = self._path.open("a", encoding="utf-8", newline="\n")
            self._fp.write(line + "\n")
            self._fp.flush()
