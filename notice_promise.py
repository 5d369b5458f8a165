"""Settle-once result values for notify checks."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

logger = logging.getLogger(__name__)


class Promise:
    """A value that is settled once, either resolved or rejected.

    Checks return promises instead of raising so that callers can decide
    whether to send a notice by inspecting ``is_rejected``. A rejected
    promise's ``value`` is ``{"error": reason}``.
    """

    def __init__(self) -> None:
        self._value: dict[str, Any] = {}
        self._on_resolved: list[Callable[[Any], Any]] = []
        self._on_rejected: list[Callable[[Any], Any]] = []

    @classmethod
    def resolved(cls, value: Any = "resolved") -> Promise:
        return cls().resolve(value)

    @classmethod
    def rejected(cls, reason: Any = "rejected") -> Promise:
        return cls().reject(reason)

    @property
    def is_pending(self) -> bool:
        return not self._value

    @property
    def is_resolved(self) -> bool:
        return "ok" in self._value

    @property
    def is_rejected(self) -> bool:
        return "error" in self._value

    @property
    def value(self) -> Any:
        """The success payload when resolved, else the raw state mapping."""
        if self.is_resolved:
            return self._value["ok"]
        return dict(self._value)

    def resolve(self, value: Any = "resolved") -> Promise:
        if not self.is_pending:
            logger.debug("Ignoring resolve() on settled promise")
            return self
        self._value = {"ok": value}
        for callback in self._on_resolved:
            callback(value)
        self._on_resolved.clear()
        self._on_rejected.clear()
        return self

    def reject(self, reason: Any = "rejected") -> Promise:
        if not self.is_pending:
            logger.debug("Ignoring reject() on settled promise")
            return self
        self._value = {"error": reason}
        for callback in self._on_rejected:
            callback(reason)
        self._on_resolved.clear()
        self._on_rejected.clear()
        return self

    def then(self, callback: Callable[[Any], Any]) -> Promise:
        """Run ``callback`` with the success value now or once resolved."""
        if self.is_resolved:
            callback(self._value["ok"])
        elif self.is_pending:
            self._on_resolved.append(callback)
        return self

    def rescue(self, callback: Callable[[Any], Any]) -> Promise:
        """Run ``callback`` with the rejection reason now or once rejected."""
        if self.is_rejected:
            callback(self._value["error"])
        elif self.is_pending:
            self._on_rejected.append(callback)
        return self

    def __repr__(self) -> str:
        if self.is_resolved:
            return f"<Promise resolved={self._value['ok']!r}>"
        if self.is_rejected:
            return f"<Promise rejected={self._value['error']!r}>"
        return "<Promise pending>"


def first_rejected(checks: Iterable[Callable[[], Promise]], value: Any = None) -> Promise:
    """Evaluate promise factories in order, stopping at the first rejection.

    Returns that rejected promise, or a promise resolved with ``value`` when
    every check passes. Checks after a rejection are never called.
    """
    for check in checks:
        promise = check()
        if promise.is_rejected:
            return promise
    return Promise.resolved(value)
