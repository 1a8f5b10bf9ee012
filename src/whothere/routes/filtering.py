"""Trackable-path filtering and declarative route filters."""

from __future__ import annotations

import re
from typing import Iterable, Optional

from ..exceptions import UnknownRouteCategoryError
from ..utils.logger import get_logger
from .classify import category_patterns
from .models import FilterOp, Pattern, RouteCategory, RouteFilter

logger = get_logger(__name__)

DEFAULT_MAX_LENGTH = 2000

STATIC_ASSET_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"^/(assets|static|images|css|js|fonts)/"),
    re.compile(r"^/(favicon\.ico|robots\.txt|sitemap\.xml)$"),
    re.compile(r"\.(css|js|map|png|jpe?g|gif|svg|ico|webp|woff2?|ttf|eot)$"),
)


def utf8_length(path: str) -> int:
    """Length of a path in UTF-8 bytes (lone surrogates count as 3)."""
    return len(path.encode("utf-8", "surrogatepass"))


def is_valid_path(path, max_length: int = DEFAULT_MAX_LENGTH) -> bool:
    """Check that a path is a non-empty string starting with "/" within max_length bytes."""
    return (
        isinstance(path, str)
        and path.startswith("/")
        and utf8_length(path) <= max_length
    )


def is_static_asset(path: str) -> bool:
    """Check a path (query ignored) against the static asset rules."""
    bare = path.split("?", 1)[0]
    return any(pattern.search(bare) for pattern in STATIC_ASSET_PATTERNS)


def _matches_pattern(pattern: Pattern, path: str) -> bool:
    if isinstance(pattern, re.Pattern):
        return pattern.search(path) is not None
    if isinstance(pattern, str):
        return pattern in path
    return False


def _matches_any(patterns: Iterable[Pattern], path: str) -> bool:
    return any(_matches_pattern(pattern, path) for pattern in patterns)


def is_trackable_path(
    path,
    *,
    exclude_patterns: Iterable[Pattern] = (),
    include_patterns: Iterable[Pattern] = (),
    max_length: int = DEFAULT_MAX_LENGTH,
    exclude_static_assets: bool = True,
) -> bool:
    """Decide whether a single path should be tracked.

    Include patterns override exclusions; they never override the validity
    check (string, leading "/", length limit).
    """
    if not is_valid_path(path, max_length):
        return False
    if include_patterns and _matches_any(include_patterns, path):
        return True
    if exclude_static_assets and is_static_asset(path):
        return False
    return not _matches_any(exclude_patterns or (), path)


def filter_trackable_paths(
    paths: Iterable,
    *,
    exclude_patterns: Iterable[Pattern] = (),
    include_patterns: Iterable[Pattern] = (),
    max_length: int = DEFAULT_MAX_LENGTH,
    exclude_static_assets: bool = True,
) -> list[str]:
    """Keep only paths worth tracking, preserving input order.

    Patterns are strings (substring match) or compiled regexes (search).
    Invalid elements are dropped without failing the batch.

    Examples:
        filter_trackable_paths(["/home", "/assets/app.css", "/api/users", "/favicon.ico"])
        -> ["/home", "/api/users"]
    """
    exclude = list(exclude_patterns or ())
    include = list(include_patterns or ())
    return [
        path
        for path in paths
        if is_trackable_path(
            path,
            exclude_patterns=exclude,
            include_patterns=include,
            max_length=max_length,
            exclude_static_assets=exclude_static_assets,
        )
    ]


def _include_filter(pattern: Pattern) -> RouteFilter:
    if isinstance(pattern, re.Pattern):
        return RouteFilter("path", FilterOp.MATCHES, pattern)
    return RouteFilter("path", FilterOp.CONTAINS, pattern)


def _exclude_filter(pattern: Pattern) -> RouteFilter:
    if isinstance(pattern, re.Pattern):
        return RouteFilter("path", FilterOp.NOT_MATCHES, pattern)
    return RouteFilter("path", FilterOp.NOT_CONTAINS, pattern)


def _category_filter(name) -> RouteFilter:
    try:
        category = RouteCategory(name)
    except ValueError:
        raise UnknownRouteCategoryError(name) from None
    patterns = category_patterns(category)
    if not patterns:
        raise UnknownRouteCategoryError(name)
    return RouteFilter("path", FilterOp.MATCHES_ANY, patterns)


def _compile_spec(spec) -> Optional[RouteFilter]:
    if isinstance(spec, (str, re.Pattern)):
        return _include_filter(spec)
    if isinstance(spec, (tuple, list)) and len(spec) == 2:
        kind, value = spec
        if kind == "category":
            return _category_filter(value)
        if isinstance(value, (str, re.Pattern)):
            if kind == "include":
                return _include_filter(value)
            if kind == "exclude":
                return _exclude_filter(value)
    return None


def build_route_filters(route_specs: Iterable) -> list[RouteFilter]:
    """Compile declarative route specs into filter predicates.

    Accepted specs:
        ("include", pattern)  -> contains / matches
        ("exclude", pattern)  -> not_contains / not_matches
        ("category", name)    -> matches_any over the category's rules
        "text" or re.compile  -> treated as include

    Malformed specs are skipped. Nothing is evaluated here; use
    ``RouteFilter.matches`` downstream.

    Raises:
        UnknownRouteCategoryError: If a category spec names no known category
    """
    filters = []
    for spec in route_specs:
        compiled = _compile_spec(spec)
        if compiled is None:
            logger.debug("malformed route spec ignored", spec=repr(spec))
            continue
        filters.append(compiled)
    return filters
