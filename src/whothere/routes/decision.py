"""Per-request route evaluation."""

from typing import Iterable, Optional

from .classify import classify_route
from .filtering import DEFAULT_MAX_LENGTH, is_trackable_path
from .models import Pattern, RouteCategory, RouteDecision
from .normalize import normalize_dynamic_path
from .suspicious import suspicious_categories


def evaluate_route(
    path,
    *,
    exclude_patterns: Iterable[Pattern] = (),
    include_patterns: Iterable[Pattern] = (),
    max_length: int = DEFAULT_MAX_LENGTH,
    exclude_static_assets: bool = True,
    id_patterns: Optional[Iterable[Pattern]] = None,
    alphanumeric_ids: bool = True,
    preserve_extensions: bool = False,
    max_segments: Optional[int] = None,
    categories: Optional[Iterable] = None,
) -> RouteDecision:
    """Filter, normalize, classify and anomaly-check one request path.

    The pattern depends only on the path and the normalization options.
    """
    if not isinstance(path, str):
        return RouteDecision(trackable=False, pattern="", category=RouteCategory.OTHER)

    trackable = is_trackable_path(
        path,
        exclude_patterns=exclude_patterns,
        include_patterns=include_patterns,
        max_length=max_length,
        exclude_static_assets=exclude_static_assets,
    )
    pattern = normalize_dynamic_path(
        path,
        id_patterns=id_patterns,
        alphanumeric_ids=alphanumeric_ids,
        preserve_extensions=preserve_extensions,
        max_segments=max_segments,
    )
    return RouteDecision(
        trackable=trackable,
        pattern=pattern,
        category=classify_route(path).category,
        suspicious_categories=frozenset(suspicious_categories(path, categories, max_length)),
    )
