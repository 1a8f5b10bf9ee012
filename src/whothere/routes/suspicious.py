"""Anomalous path detection."""

import re
from typing import Iterable, Optional

from .filtering import DEFAULT_MAX_LENGTH, utf8_length
from .models import SuspiciousCategory, SuspiciousPath, SuspiciousReport

SECURITY_SCAN_PATTERNS = (
    re.compile(r"\.\./"),
    re.compile(r"\.\.\\"),
    re.compile(r"%2e%2e", re.IGNORECASE),
    re.compile(r"^/admin"),
    re.compile(r"/wp-(admin|login|content|includes)"),
    re.compile(r"phpmyadmin", re.IGNORECASE),
    re.compile(r"\.php$"),
    re.compile(r"/\.env"),
    re.compile(r"/config"),
    re.compile(r"/\.git"),
    re.compile(r"/backup"),
    re.compile(r"\.(bak|sql|old)$"),
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"union.*select", re.IGNORECASE),
    re.compile(r"/etc/passwd"),
)

BOT_BEHAVIOR_PATTERNS = (
    re.compile(r"/crawl"),
    re.compile(r"/spider"),
    re.compile(r"/bot"),
    re.compile(r"/sitemap"),
    re.compile(r"/feed"),
    re.compile(r"/rss"),
    re.compile(r"^/robots\.txt$"),
)

ERROR_PRONE_PATTERNS = (
    re.compile(r"/undefined(/|$)"),
    re.compile(r"/null(/|$)"),
    re.compile(r"\[object"),
    re.compile(r"/NaN"),
    re.compile(r"/error"),
    re.compile(r"/(404|500)(/|$)"),
)

WHITESPACE_OR_CONTROL_RE = re.compile(r"[\s\x00-\x1f\x7f]")
LONE_SURROGATE_RE = re.compile(r"[\ud800-\udfff]")


_RULES = {
    SuspiciousCategory.SECURITY_SCAN: SECURITY_SCAN_PATTERNS,
    SuspiciousCategory.BOT_BEHAVIOR: BOT_BEHAVIOR_PATTERNS,
    SuspiciousCategory.ERROR_PRONE: ERROR_PRONE_PATTERNS,
}


def is_malformed_path(path: str, max_length: int = DEFAULT_MAX_LENGTH) -> bool:
    """Double slashes, whitespace/control characters, excess length or broken unicode."""
    return (
        "//" in path
        or WHITESPACE_OR_CONTROL_RE.search(path) is not None
        or utf8_length(path) > max_length
        or LONE_SURROGATE_RE.search(path) is not None
    )


def suspicious_categories(
    path: str,
    categories: Optional[Iterable[SuspiciousCategory]] = None,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> tuple[SuspiciousCategory, ...]:
    """All suspicious categories a single path falls into, in enum order."""
    selected = (
        set(SuspiciousCategory)
        if categories is None
        else {SuspiciousCategory(c) for c in categories}
    )
    found = []
    for category in SuspiciousCategory:
        if category not in selected:
            continue
        if category is SuspiciousCategory.MALFORMED:
            hit = is_malformed_path(path, max_length)
        else:
            hit = any(p.search(path) for p in _RULES[category])
        if hit:
            found.append(category)
    return tuple(found)


def detect_suspicious_paths(
    paths: Iterable,
    *,
    categories: Optional[Iterable] = None,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> SuspiciousReport:
    """Test each path against every selected rule set.

    Categories are not exclusive: "/admin/../.env" is a security scan and
    malformed at once. Non-string elements are skipped.

    Raises:
        ValueError: If ``categories`` names an unknown category
    """
    selected = None if categories is None else [SuspiciousCategory(c) for c in categories]

    total = 0
    details = []
    for path in paths:
        if not isinstance(path, str):
            continue
        total += 1
        found = suspicious_categories(path, selected, max_length)
        if found:
            details.append(SuspiciousPath(path=path, categories=found))

    percentage = round(len(details) / total * 100, 2) if total else 0.0
    return SuspiciousReport(
        total_paths=total,
        suspicious_paths=len(details),
        suspicious_percentage=percentage,
        details=details,
    )
