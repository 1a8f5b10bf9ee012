"""CLI commands for whothere."""

from .config_cmd import config
from .enrich import enrich
from .geo import geo
from .headers import headers
from .perf import perf
from .routes import routes
from .version import version

__all__ = [
    "config",
    "enrich",
    "geo",
    "headers",
    "perf",
    "routes",
    "version",
]
