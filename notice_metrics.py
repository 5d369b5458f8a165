"""Performance metric records checked by the notify gate before sending."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Optional


class MetricKind(str, Enum):
    REQUEST = "request"
    QUERY = "query"
    QUEUE = "queue"
    BREAKDOWN = "breakdown"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Request:
    """A served HTTP request (route stats)."""

    kind: ClassVar[MetricKind] = MetricKind.REQUEST

    method: str
    route: str
    status_code: int
    timing: float
    time: datetime = field(default_factory=_utcnow)


@dataclass
class Query:
    """A database query (query stats)."""

    kind: ClassVar[MetricKind] = MetricKind.QUERY

    method: str
    route: str
    query: str
    timing: float
    func: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None
    time: datetime = field(default_factory=_utcnow)


@dataclass
class Queue:
    """A background job run (job stats)."""

    kind: ClassVar[MetricKind] = MetricKind.QUEUE

    queue: str
    error_count: int
    timing: float
    groups: dict[str, float] = field(default_factory=dict)
    time: datetime = field(default_factory=_utcnow)


@dataclass
class PerformanceBreakdown:
    """Per-group timing breakdown of a request."""

    kind: ClassVar[MetricKind] = MetricKind.BREAKDOWN

    method: str
    route: str
    response_type: str
    timing: float
    groups: dict[str, float] = field(default_factory=dict)
    time: datetime = field(default_factory=_utcnow)
