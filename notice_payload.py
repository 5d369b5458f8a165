"""Notice: the error report payload that filters refine before sending."""

from __future__ import annotations

import traceback
from typing import Any, Optional

PAYLOAD_SECTIONS = ("errors", "context", "environment", "session", "params")


def build_errors(exception: BaseException) -> list[dict[str, Any]]:
    """Describe an exception and its causes, innermost last."""
    errors = []
    current: Optional[BaseException] = exception
    seen: set[int] = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        frames = traceback.extract_tb(current.__traceback__)
        errors.append({
            "type": type(current).__name__,
            "message": str(current),
            "backtrace": [
                {"file": f.filename, "line": f.lineno, "function": f.name}
                for f in reversed(frames)
            ],
        })
        current = current.__cause__ or current.__context__
    return errors


class Notice:
    """An error notice with fixed payload sections.

    ``notice["params"]`` and friends give direct, mutable access to the
    sections, which is what the filter chain works on.
    """

    def __init__(
        self,
        exception: BaseException,
        params: Optional[dict[str, Any]] = None,
    ) -> None:
        self._payload: dict[str, Any] = {
            "errors": build_errors(exception),
            "context": {},
            "environment": {},
            "session": {},
            "params": dict(params or {}),
        }
        self._ignored = False

    @property
    def ignored(self) -> bool:
        return self._ignored

    def ignore(self) -> None:
        """Mark the notice so no further filters run and it is not sent."""
        self._ignored = True

    def __getitem__(self, key: str) -> Any:
        return self._payload[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if self._ignored:
            raise RuntimeError("cannot modify an ignored notice")
        if key not in PAYLOAD_SECTIONS:
            raise KeyError(f"unknown notice section: {key!r}")
        self._payload[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._payload

    def get(self, key: str, default: Any = None) -> Any:
        return self._payload.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        return self._payload
