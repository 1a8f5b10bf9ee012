"""Utility functions for whothere."""

from .ip import parse_ip, is_valid_ip, format_ip, to_tuple
from .logger import configure_logging, get_logger

__all__ = [
    "parse_ip",
    "is_valid_ip",
    "format_ip",
    "to_tuple",
    "configure_logging",
    "get_logger",
]
