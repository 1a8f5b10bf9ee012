"""Data models for route classification and analysis."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

Pattern = Union[str, "re.Pattern[str]"]


class RouteCategory(str, Enum):
    """Coarse route category, first match wins."""

    ADMIN = "admin"
    API = "api"
    AUTH = "auth"
    USER = "user"
    DASHBOARD = "dashboard"
    DOCS = "docs"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    RouteCategory.ADMIN: "Admin",
    RouteCategory.API: "API",
    RouteCategory.AUTH: "Auth",
    RouteCategory.USER: "User",
    RouteCategory.DASHBOARD: "Dashboard",
    RouteCategory.DOCS: "Docs",
    RouteCategory.OTHER: "Other",
}


class SuspiciousCategory(str, Enum):
    """Independent rule sets for anomalous paths."""

    SECURITY_SCAN = "security_scan"
    BOT_BEHAVIOR = "bot_behavior"
    MALFORMED = "malformed"
    ERROR_PRONE = "error_prone"


class FilterOp(str, Enum):
    """Predicate kinds understood by downstream query layers."""

    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    MATCHES = "matches"
    NOT_MATCHES = "not_matches"
    MATCHES_ANY = "matches_any"


@dataclass(frozen=True)
class RouteClass:
    category: RouteCategory
    label: str


@dataclass(frozen=True)
class RouteDecision:
    """Per-request route verdict: trackable?, pattern, category, anomalies."""

    trackable: bool
    pattern: str
    category: RouteCategory
    suspicious_categories: frozenset = frozenset()

    @property
    def is_suspicious(self) -> bool:
        return bool(self.suspicious_categories)


@dataclass(frozen=True)
class QueryAnalysis:
    has_query: bool
    param_count: int
    params: dict[str, str]
    base_path: str


@dataclass(frozen=True)
class SuspiciousPath:
    path: str
    categories: tuple[SuspiciousCategory, ...]


@dataclass(frozen=True)
class SuspiciousReport:
    total_paths: int
    suspicious_paths: int
    suspicious_percentage: float
    details: list[SuspiciousPath] = field(default_factory=list)


@dataclass(frozen=True)
class PerformanceSample:
    """One request duration for a concrete path."""

    path: str
    duration_ms: float


@dataclass(frozen=True)
class PatternStats:
    """Duration statistics for one route pattern, in milliseconds."""

    count: int
    min: float
    max: float
    avg: float
    median: float
    p95: float
    p99: float


@dataclass(frozen=True)
class PerformanceReport:
    """Per-pattern duration statistics.

    ``slow_patterns`` is the number of patterns whose mean exceeds the
    threshold; ``slowest_routes`` lists them slowest first.
    """

    total_patterns: int
    performance_groups: dict[str, PatternStats]
    slow_patterns: int
    slowest_routes: list[tuple[str, PatternStats]]


@dataclass(frozen=True)
class RouteFilter:
    """Compiled declarative route filter.

    ``value`` is a substring for contains/not_contains, a compiled regex for
    matches/not_matches, and a tuple of compiled regexes for matches_any.
    """

    field: str
    op: FilterOp
    value: object

    def matches(self, path: str) -> bool:
        """Evaluate the predicate against a path."""
        if self.op is FilterOp.CONTAINS:
            return self.value in path
        if self.op is FilterOp.NOT_CONTAINS:
            return self.value not in path
        if self.op is FilterOp.MATCHES:
            return self.value.search(path) is not None
        if self.op is FilterOp.NOT_MATCHES:
            return self.value.search(path) is None
        return any(pattern.search(path) for pattern in self.value)


def describe_pattern(pattern: Optional[Pattern]) -> str:
    """Readable form of a string or regex pattern for display."""
    if isinstance(pattern, re.Pattern):
        return f"/{pattern.pattern}/"
    return str(pattern)
