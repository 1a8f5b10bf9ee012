"""Exception types for whothere.

Soft-degrade conditions (bad IP candidates, malformed embedded JSON, unknown
country or timezone) never raise. The classes below cover explicit rejects only.
"""


class WhoThereError(Exception):
    """Base class for all whothere errors."""


class ConfigError(WhoThereError):
    """Raised when a config file cannot be read or is invalid."""


class RequestLoadError(WhoThereError):
    """Raised when a request log file cannot be loaded."""


class InvalidCountryCodeError(WhoThereError, ValueError):
    """Raised when a value is not an ISO 3166-1 alpha-2 country code."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid country code: {value!r}")


class MissingCoordinatesError(WhoThereError, ValueError):
    """Raised when a distance is requested for a location without lat/lon."""


class UnknownRouteCategoryError(WhoThereError, ValueError):
    """Raised when a route filter refers to a category that does not exist."""

    def __init__(self, category: object):
        self.category = category
        super().__init__(f"Unknown route category: {category!r}")
