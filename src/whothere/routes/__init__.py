"""Route normalization, classification and analysis for whothere."""

from .classify import CATEGORY_RULES, classify_route
from .decision import evaluate_route
from .filtering import (
    STATIC_ASSET_PATTERNS,
    build_route_filters,
    filter_trackable_paths,
    is_trackable_path,
)
from .models import (
    FilterOp,
    PatternStats,
    PerformanceReport,
    PerformanceSample,
    QueryAnalysis,
    RouteCategory,
    RouteClass,
    RouteDecision,
    RouteFilter,
    SuspiciousCategory,
    SuspiciousPath,
    SuspiciousReport,
)
from .normalize import (
    DEFAULT_ID_PATTERNS,
    analyze_query_parameters,
    group_similar_paths,
    normalize_dynamic_path,
)
from .performance import analyze_path_performance
from .suspicious import detect_suspicious_paths

__all__ = [
    "CATEGORY_RULES",
    "classify_route",
    "evaluate_route",
    "STATIC_ASSET_PATTERNS",
    "build_route_filters",
    "filter_trackable_paths",
    "is_trackable_path",
    "FilterOp",
    "PatternStats",
    "PerformanceReport",
    "PerformanceSample",
    "QueryAnalysis",
    "RouteCategory",
    "RouteClass",
    "RouteDecision",
    "RouteFilter",
    "SuspiciousCategory",
    "SuspiciousPath",
    "SuspiciousReport",
    "DEFAULT_ID_PATTERNS",
    "analyze_query_parameters",
    "group_similar_paths",
    "normalize_dynamic_path",
    "analyze_path_performance",
    "detect_suspicious_paths",
]
