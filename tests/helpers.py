"""Shared test helpers for the notice-guard test suite.

Fixtures are in conftest.py. This module contains non-fixture builders
used across multiple test files.
"""

from typing import Any, Optional

from notice_payload import Notice


def build_payload(
    params: Optional[dict[str, Any]] = None,
    context: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Build a plain-dict payload shaped like a notice."""
    return {
        "errors": [{"type": "ZeroDivisionError", "message": "division by zero"}],
        "context": context if context is not None else {
            "url": "https://example.com/path?user=alice&token=abc123",
            "user": {"id": 7, "email": "alice@example.com", "password": "hunter2"},
        },
        "environment": {"HOME": "/home/alice", "SECRET_KEY": "s3cr3t"},
        "session": {"session_id": "abc", "csrf": {"token": "t0k"}},
        "params": params if params is not None else {
            "bongo": "bango",
            "password": "hunter2",
            "nested": {"password": "deep", "color": "red"},
        },
    }


def build_notice(
    params: Optional[dict[str, Any]] = None,
    message: str = "boom",
) -> Notice:
    """Build a Notice from a real raised exception."""
    try:
        raise RuntimeError(message)
    except RuntimeError as e:
        return Notice(e, params=params)
