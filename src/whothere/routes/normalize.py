"""Path normalization, query analysis and grouping."""

from __future__ import annotations

import itertools
import re
from typing import Iterable, Optional
from urllib.parse import unquote_plus

from ..utils.logger import get_logger
from .models import Pattern, QueryAnalysis

logger = get_logger(__name__)

NUMERIC_RE = re.compile(r"\d+")
UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)
# Letters, digits, "_" or "-" with at least one digit: "post123", "a1b2-c3"
ALNUM_ID_RE = re.compile(r"(?=.*\d)[A-Za-z0-9_-]+")
VERSION_RE = re.compile(r"v\d+(\.\d+)*")
EXTENSION_RE = re.compile(r"(?P<stem>.+)\.(?P<ext>[A-Za-z][A-Za-z0-9]{0,9})")

BASE_ID_PATTERNS: tuple[re.Pattern, ...] = (NUMERIC_RE, UUID_RE)
DEFAULT_ID_PATTERNS: tuple[re.Pattern, ...] = BASE_ID_PATTERNS + (ALNUM_ID_RE,)

ID_PLACEHOLDER = ":id"
FILE_PLACEHOLDER = ":file"

GROUPING_STRATEGIES = ("exact", "normalized", "pattern")


def compile_patterns(patterns: Optional[Iterable[Pattern]]) -> list[re.Pattern]:
    """Compile string patterns, passing compiled ones through.

    Invalid regexes and non-pattern elements are skipped.
    """
    compiled = []
    for pattern in patterns or ():
        if isinstance(pattern, re.Pattern):
            compiled.append(pattern)
        elif isinstance(pattern, str):
            try:
                compiled.append(re.compile(pattern))
            except re.error:
                logger.debug("invalid pattern ignored", pattern=pattern)
        else:
            logger.debug("non-pattern element ignored", pattern=repr(pattern))
    return compiled


def _strip_query(path: str) -> str:
    return path.split("?", 1)[0].split("#", 1)[0]


def _looks_like_id(segment: str, id_patterns: list[re.Pattern]) -> bool:
    return any(pattern.fullmatch(segment) for pattern in id_patterns)


def _normalize_segment(
    segment: str,
    id_patterns: list[re.Pattern],
    preserve_extensions: bool,
) -> str:
    if not segment or VERSION_RE.fullmatch(segment):
        return segment
    if _looks_like_id(segment, id_patterns):
        return ID_PLACEHOLDER

    match = EXTENSION_RE.fullmatch(segment)
    if match and _looks_like_id(match.group("stem"), id_patterns):
        if preserve_extensions:
            return f"{FILE_PLACEHOLDER}.{match.group('ext')}"
        return FILE_PLACEHOLDER
    return segment


def normalize_dynamic_path(
    path: str,
    *,
    id_patterns: Optional[Iterable[Pattern]] = None,
    alphanumeric_ids: bool = True,
    preserve_extensions: bool = False,
    max_segments: Optional[int] = None,
) -> str:
    """Normalize a path by replacing ID-like segments with placeholders.

    Segments are tested against numeric, UUID and alphanumeric-with-digit
    patterns, then any custom ``id_patterns``. With ``alphanumeric_ids``
    off, only all-digit and UUID segments (plus ``id_patterns``) count, so
    route words like ``oauth2`` or ``s3`` survive. Version segments such as
    ``v1`` or ``v2.1`` are left alone.

    Examples:
        /users/123 -> /users/:id
        /posts/456/comments/789 -> /posts/:id/comments/:id
        /files/123.pdf -> /files/:file (/files/:file.pdf with preserve_extensions)
        /api/v2/items/550e8400-e29b-41d4-a716-446655440000 -> /api/v2/items/:id

    Args:
        path: Request path, optionally with a query string (ignored)
        id_patterns: Extra regexes (strings or compiled) that mark an ID segment
        alphanumeric_ids: Treat letter-digit mixes such as ``post123`` as IDs
        preserve_extensions: Keep the file extension on ``:file`` placeholders
        max_segments: Keep only this many leading segments

    Returns:
        Normalized route pattern
    """
    if not isinstance(path, str):
        return path

    defaults = DEFAULT_ID_PATTERNS if alphanumeric_ids else BASE_ID_PATTERNS
    patterns = list(defaults) + compile_patterns(id_patterns)
    segments = _strip_query(path).split("/")
    normalized = [_normalize_segment(seg, patterns, preserve_extensions) for seg in segments]

    if max_segments is not None:
        limit = max(max_segments, 0)
        if normalized[0] == "":
            normalized = [""] + normalized[1:][:limit]
            if len(normalized) == 1:
                return "/"
        else:
            normalized = normalized[:limit]

    return "/".join(normalized)


def _normalize_value(value: str, long_value_threshold: int) -> str:
    if NUMERIC_RE.fullmatch(value):
        return ":number"
    if UUID_RE.fullmatch(value):
        return ":uuid"
    if len(value) > long_value_threshold:
        return ":long_string"
    return value


def analyze_query_parameters(
    path: str,
    *,
    exclude_params: Iterable[str] = (),
    max_params: Optional[int] = None,
    long_value_threshold: int = 20,
    normalize_values: bool = True,
) -> QueryAnalysis:
    """Split off and analyze the query string of a path.

    Names and values are decoded with ``unquote_plus``. Excluded parameters
    are dropped before counting; ``max_params`` then caps what is kept. When
    a parameter repeats, the last value wins.

    Examples:
        analyze_query_parameters("/search?q=test&limit=10")
        -> QueryAnalysis(has_query=True, param_count=2,
                         params={"q": "test", "limit": ":number"}, base_path="/search")
    """
    base_path, sep, query = path.partition("?")
    query = query.split("#", 1)[0]
    if not sep or not query:
        return QueryAnalysis(has_query=False, param_count=0, params={}, base_path=base_path)

    excluded = set(exclude_params or ())
    params: dict[str, str] = {}
    for pair in query.split("&"):
        if not pair:
            continue
        raw_name, _, raw_value = pair.partition("=")
        name = unquote_plus(raw_name)
        if not name or name in excluded:
            continue
        value = unquote_plus(raw_value)
        params[name] = _normalize_value(value, long_value_threshold) if normalize_values else value

    if max_params is not None:
        params = dict(itertools.islice(params.items(), max(max_params, 0)))

    return QueryAnalysis(
        has_query=True,
        param_count=len(params),
        params=params,
        base_path=base_path,
    )


def _pattern_key(path: str) -> str:
    segments = [seg for seg in _strip_query(path).split("/") if seg]
    if not segments:
        return "/"
    if len(segments) == 1:
        return f"/{segments[0]}"
    return f"/{segments[0]}/*"


def group_similar_paths(
    paths: Iterable[str],
    *,
    grouping_strategy: str = "normalized",
    min_group_size: int = 1,
    max_groups: Optional[int] = None,
    **normalize_options,
) -> dict[str, list[str]]:
    """Group paths by a key derived from the chosen strategy.

    Strategies:
        exact       the path itself
        normalized  normalize_dynamic_path(path, **normalize_options)
        pattern     top-level segment, e.g. /admin/users/5 -> /admin/*

    Groups smaller than ``min_group_size`` are dropped. The result is ordered
    by descending member count (ties in first-seen order) and truncated to
    ``max_groups``.

    Raises:
        ValueError: If ``grouping_strategy`` is unknown
    """
    if grouping_strategy not in GROUPING_STRATEGIES:
        raise ValueError(f"Unknown grouping strategy: {grouping_strategy!r}")

    groups: dict[str, list[str]] = {}
    for path in paths:
        if not isinstance(path, str):
            continue
        if grouping_strategy == "exact":
            key = path
        elif grouping_strategy == "normalized":
            key = normalize_dynamic_path(path, **normalize_options)
        else:
            key = _pattern_key(path)
        groups.setdefault(key, []).append(path)

    kept = [(key, members) for key, members in groups.items() if len(members) >= min_group_size]
    kept.sort(key=lambda item: len(item[1]), reverse=True)
    if max_groups is not None:
        kept = kept[:max(max_groups, 0)]
    return dict(kept)
