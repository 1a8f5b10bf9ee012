"""Route category classification."""

import re

from .models import RouteCategory, RouteClass

# Ordered table, first match wins. Matching is case-sensitive and every
# prefix rule ends on a segment boundary, so classifying a normalized
# pattern ("/users/:id") gives the same category as the concrete path.
CATEGORY_RULES: tuple[tuple[RouteCategory, tuple["re.Pattern[str]", ...]], ...] = (
    (RouteCategory.ADMIN, (re.compile(r"^/admin(/|$)"),)),
    (RouteCategory.API, (re.compile(r"^/api(/|$)"),)),
    (RouteCategory.AUTH, (
        re.compile(r"^/auth(/|$)"),
        re.compile(r"(^|/)(login|logout|register)(/|$)"),
    )),
    (RouteCategory.USER, (
        re.compile(r"^/users(/|$)"),
        re.compile(r"^/profile(/|$)"),
    )),
    (RouteCategory.DASHBOARD, (re.compile(r"^/dashboard(/|$)"),)),
    (RouteCategory.DOCS, (
        re.compile(r"^/docs(/|$)"),
        re.compile(r"^/documentation(/|$)"),
    )),
)


def category_patterns(category: RouteCategory) -> tuple:
    """Rule patterns for one category (empty for ``other``)."""
    for rule_category, patterns in CATEGORY_RULES:
        if rule_category is category:
            return patterns
    return ()


def classify_route(path) -> RouteClass:
    """Classify a path into a route category.

    Any query string is ignored. Non-string input is ``other``.

    Examples:
        classify_route("/admin/users") -> RouteClass(RouteCategory.ADMIN, "Admin")
        classify_route("/login") -> RouteClass(RouteCategory.AUTH, "Auth")
    """
    if isinstance(path, str):
        bare = path.split("?", 1)[0]
        for category, patterns in CATEGORY_RULES:
            if any(pattern.search(bare) for pattern in patterns):
                return RouteClass(category, category.label)
    return RouteClass(RouteCategory.OTHER, RouteCategory.OTHER.label)
