"""Notifier configuration: options, defaults, and the checks built on them."""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urljoin

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

import notice_validator
from notice_promise import Promise

logger = logging.getLogger(__name__)

LOGGER_NAME = "notice_guard"


def default_logger() -> logging.Logger:
    """Library logger writing to stdout at WARNING, configured once."""
    log = logging.getLogger(LOGGER_NAME)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        log.addHandler(handler)
        log.setLevel(logging.WARNING)
    return log


class NotifierConfig(BaseModel):
    """Root configuration of the notifier.

    Key patterns (``blocklist_keys``/``allowlist_keys``) are stored as given
    and validated by the keys filters on first use, since they may contain
    callables that must not run at configuration time.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    project_id: Optional[int] = Field(default=None)
    project_key: Optional[str] = Field(default=None)
    logger: Any = Field(default_factory=default_logger)
    app_version: Optional[str] = Field(default=None)
    versions: dict[str, str] = Field(default_factory=dict)

    host: str = Field(default="https://api.airbrake.io")
    error_host: Optional[str] = Field(
        default=None, description="Host for error notices; falls back to host",
    )
    apm_host: Optional[str] = Field(
        default=None, description="Host for performance stats; falls back to host",
    )
    remote_config_host: str = Field(default="https://notifier-configs.airbrake.io")

    workers: int = Field(default=1, ge=1)
    queue_size: int = Field(default=100, ge=1)
    timeout: Optional[float] = Field(default=None, gt=0)
    root_directory: str = Field(default_factory=os.getcwd)

    environment: Optional[str] = Field(default=None)
    ignore_environments: list[Any] = Field(
        default_factory=list,
        description="Environment names or compiled regexes that suppress notifying",
    )

    blocklist_keys: list[Any] = Field(default_factory=list)
    allowlist_keys: list[Any] = Field(default_factory=list)

    performance_stats: bool = Field(default=True)
    performance_stats_flush_period: int = Field(default=15, ge=1)
    query_stats: bool = Field(default=True)
    job_stats: bool = Field(default=True)
    error_notifications: bool = Field(default=True)
    remote_config: bool = Field(default=True)
    backlog: bool = Field(default=True)

    @field_validator("ignore_environments")
    @classmethod
    def _check_ignore_environments(cls, value: list[Any]) -> list[Any]:
        for item in value:
            if not isinstance(item, (str, re.Pattern)):
                raise ValueError(
                    f"ignore_environments accepts strings and regexes, got {item!r}"
                )
        return value

    @property
    def error_endpoint(self) -> str:
        # urljoin keeps the host's path only when it ends with a slash
        return urljoin(
            self.error_host or self.host,
            f"api/v3/projects/{self.project_id}/notices",
        )

    @property
    def performance_host(self) -> str:
        return self.apm_host or self.host

    def is_valid(self) -> bool:
        return not notice_validator.check_config_completeness(self).is_rejected

    def is_ignored_environment(self) -> bool:
        return notice_validator.check_environment(self).is_rejected

    def check_configuration(self) -> Promise:
        """Completeness first, then the environment check."""
        return notice_validator.check_configuration(self)

    def check_performance_options(self, metric: Any) -> Promise:
        return notice_validator.check_feature_toggles(self, metric)


# Options whose entries may be written as {"regex": "...", "ignorecase": true}
PATTERN_OPTIONS = ("blocklist_keys", "allowlist_keys", "ignore_environments")


def _compile_entry(option: str, entry: Any) -> Any:
    if not isinstance(entry, dict):
        return entry
    if set(entry) - {"regex", "ignorecase"} or not isinstance(entry.get("regex"), str):
        raise ValueError(f"{option}: expected {{'regex': str}}, got {entry!r}")
    flags = re.IGNORECASE if entry.get("ignorecase") else 0
    return re.compile(entry["regex"], flags)


def patterns_from_json(raw: dict[str, Any]) -> dict[str, Any]:
    """Compile ``{"regex": ...}`` entries of the pattern options in place."""
    for option in PATTERN_OPTIONS:
        entries = raw.get(option)
        if isinstance(entries, list):
            raw[option] = [_compile_entry(option, entry) for entry in entries]
    return raw


def load_config(config_path: str | Path, **overrides: Any) -> Promise:
    """Load notifier config from a JSON file.

    Resolves with a ``NotifierConfig``; rejects with ``{"error": reason}``
    when the file is not JSON, a regex does not compile, or an option fails
    validation. ``overrides`` (e.g. ``logger`` or callable key patterns,
    which JSON cannot express) are applied on top of the file.
    """
    path = Path(config_path)
    raw: dict[str, Any] = {}
    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            return Promise.rejected(f"invalid JSON in {path}: {e}")
        if not isinstance(raw, dict):
            return Promise.rejected(f"{path} must contain a JSON object")
    else:
        logger.info("Config not found at %s, using defaults", path)

    try:
        raw = patterns_from_json(raw)
    except (ValueError, re.error) as e:
        return Promise.rejected(f"invalid pattern in {path}: {e}")

    try:
        config = NotifierConfig.model_validate({**raw, **overrides})
    except ValidationError as e:
        return Promise.rejected(f"invalid config in {path}: {e}")
    return Promise.resolved(config)
