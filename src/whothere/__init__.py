"""whothere - request metadata enrichment: client IP trust, privacy-respecting geo, route analytics."""

__version__ = "0.1.0"

from .exceptions import (
    ConfigError,
    InvalidCountryCodeError,
    MissingCoordinatesError,
    RequestLoadError,
    UnknownRouteCategoryError,
    WhoThereError,
)

__all__ = [
    "__version__",
    "ConfigError",
    "InvalidCountryCodeError",
    "MissingCoordinatesError",
    "RequestLoadError",
    "UnknownRouteCategoryError",
    "WhoThereError",
]
