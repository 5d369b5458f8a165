"""Weight-ordered chain of filters applied to every notice."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from notice_keys_filter import KeysAllowlist, KeysBlocklist

if TYPE_CHECKING:
    from notice_config import NotifierConfig

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 0


class FilterChain:
    """Runs filters from the highest weight to the lowest.

    A filter is any callable taking a notice; its ``weight`` attribute
    (default 0) decides its position. Filters of equal weight keep the
    order they were added in.
    """

    def __init__(self) -> None:
        self._filters: list[Any] = []

    def add_filter(self, notice_filter: Any) -> None:
        self._filters.append(notice_filter)
        self._filters.sort(key=lambda f: -getattr(f, "weight", DEFAULT_WEIGHT))

    def delete_filter(self, filter_class: type) -> None:
        self._filters = [f for f in self._filters if not isinstance(f, filter_class)]

    def includes(self, filter_class: type) -> bool:
        return any(isinstance(f, filter_class) for f in self._filters)

    def refine(self, notice: Any) -> None:
        """Apply filters in order; stop as soon as the notice is ignored."""
        for notice_filter in self._filters:
            notice_filter(notice)
            if getattr(notice, "ignored", False):
                logger.debug("Notice ignored by %s", type(notice_filter).__name__)
                break

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self):
        return iter(self._filters)


def build_filter_chain(config: NotifierConfig) -> FilterChain:
    """Chain with the keys filters the config asks for."""
    chain = FilterChain()
    if config.blocklist_keys:
        chain.add_filter(KeysBlocklist(config.logger, config.blocklist_keys))
    if config.allowlist_keys:
        chain.add_filter(KeysAllowlist(config.logger, config.allowlist_keys))
    return chain
