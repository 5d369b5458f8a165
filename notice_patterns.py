"""Key patterns for notice filters: classification and lazy, one-time resolution."""

from __future__ import annotations

import collections.abc
import logging
import re
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Union

logger = logging.getLogger(__name__)

LOG_LABEL = "**notice-guard:"


@dataclass(frozen=True)
class ExactKey:
    """Matches a key whose textual form equals ``text``."""

    text: str

    def matches(self, key: Any) -> bool:
        return str(key) == self.text


@dataclass(frozen=True)
class RegexMatch:
    """Matches a key whose textual form contains a match of ``regex``."""

    regex: re.Pattern

    def matches(self, key: Any) -> bool:
        return self.regex.search(str(key)) is not None


@dataclass(frozen=True)
class DeferredSource:
    """Zero-argument callable producing more patterns, evaluated once."""

    source: Callable[[], Any]

    def matches(self, key: Any) -> bool:
        raise RuntimeError("deferred pattern sources must be resolved before matching")


@dataclass(frozen=True)
class InvalidPattern:
    """Anything that is not a recognized pattern kind. Never matches."""

    raw: Any

    def matches(self, key: Any) -> bool:
        return False


Pattern = Union[ExactKey, RegexMatch, DeferredSource, InvalidPattern]
_PATTERN_TYPES = (ExactKey, RegexMatch, DeferredSource, InvalidPattern)


def to_pattern(raw: Any) -> Pattern:
    """Classify a raw user-supplied value as a Pattern variant."""
    if isinstance(raw, _PATTERN_TYPES):
        return raw
    # Enum members stand in for symbol-like keys
    if isinstance(raw, Enum):
        if isinstance(raw.value, str):
            return ExactKey(raw.value)
        return InvalidPattern(raw)
    if isinstance(raw, str):
        return ExactKey(str(raw))
    if isinstance(raw, re.Pattern):
        return RegexMatch(raw)
    if callable(raw):
        return DeferredSource(raw)
    return InvalidPattern(raw)


def _expand(pattern: Pattern) -> list[Pattern]:
    """Evaluate a deferred source; other patterns pass through.

    A produced callable is not evaluated again: it is classified invalid.
    """
    if not isinstance(pattern, DeferredSource):
        return [pattern]

    produced = pattern.source()
    if isinstance(produced, (str, bytes)) or not isinstance(produced, collections.abc.Iterable):
        produced = [produced]

    expanded: list[Pattern] = []
    for raw in produced:
        item = to_pattern(raw)
        if isinstance(item, DeferredSource):
            item = InvalidPattern(item.source)
        expanded.append(item)
    return expanded


class PatternSet:
    """Ordered key patterns resolved and validated on first use.

    Construction keeps the raw input untouched so deferred sources can read
    state that only exists after configuration. ``resolve`` runs once per
    instance; the validity it computes is memoized for the set's lifetime.
    """

    def __init__(self, raw_patterns: Optional[Iterable[Any]] = None) -> None:
        self._raw = list(raw_patterns or [])
        self._patterns: tuple[Pattern, ...] = ()
        self._valid = False
        self._resolved = False
        self._lock = threading.Lock()

    @property
    def resolved(self) -> bool:
        return self._resolved

    @property
    def valid(self) -> bool:
        return self._valid

    @property
    def patterns(self) -> tuple[Pattern, ...]:
        if not self._resolved:
            raise RuntimeError("pattern set has not been resolved yet")
        return self._patterns

    def resolve(self, on_invalid: Optional[Callable[[list], None]] = None) -> bool:
        """Resolve deferred sources and validate, once. Returns validity."""
        if self._resolved:
            return self._valid

        with self._lock:
            if self._resolved:
                return self._valid

            patterns: list[Pattern] = []
            for raw in self._raw:
                patterns.extend(_expand(to_pattern(raw)))

            self._patterns = tuple(patterns)
            self._valid = not any(isinstance(p, InvalidPattern) for p in patterns)
            self._resolved = True

        if not self._valid:
            logger.debug("Invalid pattern set: %s", self.raw_values())
            if on_invalid is not None:
                on_invalid(self.raw_values())
        return self._valid

    def raw_values(self) -> list:
        """Resolved patterns in their user-facing form, for diagnostics."""
        values = []
        for pattern in self.patterns:
            if isinstance(pattern, ExactKey):
                values.append(pattern.text)
            elif isinstance(pattern, RegexMatch):
                values.append(pattern.regex)
            elif isinstance(pattern, InvalidPattern):
                values.append(pattern.raw)
            else:
                values.append(pattern.source)
        return values

    def matches_any(self, key: Any) -> bool:
        """True if the set is valid and at least one pattern matches ``key``."""
        if not self._resolved:
            raise RuntimeError("pattern set has not been resolved yet")
        if not self._valid:
            return False
        return any(pattern.matches(key) for pattern in self._patterns)

    def __len__(self) -> int:
        return len(self._patterns) if self._resolved else len(self._raw)

    def __repr__(self) -> str:
        state = "resolved" if self._resolved else "pending"
        return f"PatternSet({self._raw!r}, {state})"
