"""Visualization utilities for whothere."""

from .console import (
    escape_rich,
    format_bot,
    format_categories,
    format_confidence,
    format_ip,
    format_location,
    format_ms,
    format_path,
)

__all__ = [
    "escape_rich",
    "format_bot",
    "format_categories",
    "format_confidence",
    "format_ip",
    "format_location",
    "format_ms",
    "format_path",
]
