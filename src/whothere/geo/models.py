"""Data models for geographic resolution."""

import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional

COUNTRY_CODE_RE = re.compile(r"[A-Z]{2}")


class AnonymizationLevel(str, Enum):
    """How many low-order address bits are zeroed before any further use."""

    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"

    @property
    def ipv4_prefix(self) -> int:
        return {"none": 32, "partial": 24, "full": 16}[self.value]

    @property
    def ipv6_prefix(self) -> int:
        return {"none": 128, "partial": 48, "full": 32}[self.value]


class GeoSource(str, Enum):
    """Where a geographic result came from."""

    CLOUDFLARE = "cloudflare"
    CLOUDFRONT = "cloudfront"
    FASTLY = "fastly"
    GENERIC = "generic"
    IP_GEOLOCATION = "ip_geolocation"
    UNKNOWN = "unknown"

    @property
    def is_proxy_header(self) -> bool:
        """True for results read from proxy/CDN headers."""
        return self in (GeoSource.CLOUDFLARE, GeoSource.CLOUDFRONT, GeoSource.FASTLY, GeoSource.GENERIC)


class Confidence(str, Enum):
    """Coarse reliability label for a geographic result."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PiiType(str, Enum):
    """Kinds of personal data recognized in free text."""

    EMAIL = "email"
    PHONE = "phone"
    SSN = "ssn"
    CREDIT_CARD = "credit_card"
    IP_ADDRESS = "ip_address"


class PrivacyViolation(str, Enum):
    RAW_IP = "raw_ip"
    PII_IN_USER_AGENT = "pii_in_user_agent"
    PII_IN_PATH = "pii_in_path"
    TRACKING_PIXEL = "tracking_pixel"


@dataclass(frozen=True)
class GeoResult:
    """Normalized location estimate for one request.

    ``ip_address`` only ever holds the anonymized form of the client address.
    """

    country_code: Optional[str] = None
    country_name: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    timezone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    ip_address: Optional[str] = None
    source: GeoSource = GeoSource.UNKNOWN
    confidence: Confidence = Confidence.LOW

    def __post_init__(self) -> None:
        code = self.country_code
        if code is not None and not (isinstance(code, str) and COUNTRY_CODE_RE.fullmatch(code)):
            raise ValueError(f"country_code must match [A-Z]{{2}}, got {self.country_code!r}")

    def to_dict(self) -> dict:
        """Plain dict with enum values flattened to strings."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["source"] = self.source.value
        data["confidence"] = self.confidence.value
        return data


@dataclass(frozen=True)
class VpnAssessment:
    """Outcome of the VPN/proxy voting heuristics."""

    is_vpn_likely: bool
    vpn_score: int
    checks_passed: int
    total_checks: int


@dataclass(frozen=True)
class TimezoneLookup:
    """Timezone lookup outcome; ``error`` is set instead of raising."""

    timezone: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.timezone is not None


UNKNOWN_TIMEZONE = "unknown_timezone"
INSUFFICIENT_LOCATION_DATA = "insufficient_location_data"
