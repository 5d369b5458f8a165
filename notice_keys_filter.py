"""Keys filters: replace sensitive notice values with a fixed marker.

A keys filter walks the filterable sections of a notice payload and asks a
single predicate, ``should_filter(key)``, for every key it meets. Blocklist
and allowlist filters share the traversal and differ only in that predicate.
Query parameters of ``context.url`` are filtered the same way.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Callable, Iterable, Optional
from urllib.parse import SplitResult, parse_qsl, quote_plus, urlsplit, urlunsplit

from notice_patterns import LOG_LABEL, PatternSet

FILTERED = "[Filtered]"

# Top-level payload sections walked by every keys filter
FILTERABLE_KEYS = ("environment", "session", "params")

KeyPredicate = Callable[[Any], bool]


def filter_mapping(mapping: MutableMapping, should_filter: KeyPredicate) -> None:
    """Replace values of matching keys in place, recursing into nested mappings.

    A filtered value is not descended into.
    """
    for key in list(mapping.keys()):
        if should_filter(key):
            mapping[key] = FILTERED
        elif isinstance(mapping[key], MutableMapping):
            filter_mapping(mapping[key], should_filter)


def _split_url(url: str) -> SplitResult:
    # urlsplit silently drops tabs and newlines, so refuse anything with whitespace
    if not url.isascii() or any(ch.isspace() or not ch.isprintable() for ch in url):
        raise ValueError(f"not a valid URI: {url!r}")
    parts = urlsplit(url)
    _ = parts.port  # raises ValueError on a non-numeric or out-of-range port
    return parts


def _form_encode(raw: bytes) -> str:
    """application/x-www-form-urlencoded escaping: keep ``*``, escape ``~``."""
    return quote_plus(raw, safe="*").replace("~", "%7E")


def filter_url(url: str, should_filter: KeyPredicate) -> str:
    """Return ``url`` with the values of matching query parameters filtered.

    Malformed URLs and URLs without a query come back unchanged. Parameter
    order and duplicates are kept, and unfiltered values keep their bytes.
    """
    try:
        parts = _split_url(url)
    except ValueError:
        return url

    if not parts.query:
        return url

    pairs = []
    # latin-1 maps every percent-escaped byte to one character and back
    for key, value in parse_qsl(parts.query, keep_blank_values=True, encoding="latin-1"):
        key_bytes = key.encode("latin-1")
        if should_filter(key_bytes.decode("utf-8", errors="replace")):
            pairs.append(f"{_form_encode(key_bytes)}={FILTERED}")
        else:
            pairs.append(f"{_form_encode(key_bytes)}={_form_encode(value.encode('latin-1'))}")

    return urlunsplit(parts._replace(query="&".join(pairs)))


def redact(payload: Any, policy: "KeysFilter") -> None:
    """Filter a notice payload in place using ``policy.should_filter``."""
    for section in FILTERABLE_KEYS:
        value = payload.get(section)
        if isinstance(value, MutableMapping):
            filter_mapping(value, policy.should_filter)

    context = payload.get("context")
    if not isinstance(context, MutableMapping):
        return

    user = context.get("user")
    if user is not None:
        if policy.should_filter("user"):
            context["user"] = FILTERED
        elif isinstance(user, MutableMapping):
            filter_mapping(user, policy.should_filter)

    url = context.get("url")
    if isinstance(url, str) and url:
        context["url"] = filter_url(url, policy.should_filter)


class KeysFilter:
    """Base class for filters driven by a list of key patterns.

    Patterns may be strings, ``Enum`` members with string values, compiled
    regular expressions, or zero-argument callables returning more patterns.
    Callables are evaluated on the first notice, not at construction.
    """

    weight = -100

    def __init__(self, logger: Any, patterns: Optional[Iterable[Any]] = None) -> None:
        self._logger = logger
        self._patterns = PatternSet(patterns)

    @property
    def patterns(self) -> PatternSet:
        return self._patterns

    def resolve_patterns(self) -> bool:
        return self._patterns.resolve(self._report_invalid)

    def _report_invalid(self, patterns: list) -> None:
        self._logger.error(
            f"{LOG_LABEL} one of the patterns in {type(self).__name__} is invalid. "
            f"Known patterns: {patterns}"
        )

    def should_filter(self, key: Any) -> bool:
        raise NotImplementedError("should_filter must be implemented by a subclass")

    def filter_url(self, url: str) -> str:
        self.resolve_patterns()
        return filter_url(url, self.should_filter)

    def __call__(self, notice: Any) -> None:
        self.resolve_patterns()
        redact(notice, self)


class KeysBlocklist(KeysFilter):
    """Filters keys that match at least one pattern."""

    def should_filter(self, key: Any) -> bool:
        return self._patterns.matches_any(key)


class KeysAllowlist(KeysFilter):
    """Filters every key that matches none of the patterns."""

    def should_filter(self, key: Any) -> bool:
        return not self._patterns.matches_any(key)
