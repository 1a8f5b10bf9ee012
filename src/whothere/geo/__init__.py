"""Privacy-respecting geographic resolution for whothere."""

from .models import (
    AnonymizationLevel,
    Confidence,
    GeoResult,
    GeoSource,
    PiiType,
    PrivacyViolation,
    TimezoneLookup,
    VpnAssessment,
)
from .privacy import (
    anonymize_ip,
    anonymize_ip_data,
    detect_pii,
    has_do_not_track,
    hash_ip,
    is_private_ip,
    remove_pii,
    sanitize_pii,
    sanitize_user_agent,
    should_exclude,
    validate_privacy_compliance,
)
from .resolver import (
    DEFAULT_TRUSTED_SOURCES,
    calculate_distance,
    detect_vpn_proxy,
    extract_from_proxy_headers,
    extract_geographic_data,
    geolocate_ip,
    get_timezone_info,
    is_valid_country_code,
    normalize_country_code,
)

__all__ = [
    "AnonymizationLevel",
    "Confidence",
    "GeoResult",
    "GeoSource",
    "PiiType",
    "PrivacyViolation",
    "TimezoneLookup",
    "VpnAssessment",
    "anonymize_ip",
    "anonymize_ip_data",
    "detect_pii",
    "has_do_not_track",
    "hash_ip",
    "is_private_ip",
    "remove_pii",
    "sanitize_pii",
    "sanitize_user_agent",
    "should_exclude",
    "validate_privacy_compliance",
    "DEFAULT_TRUSTED_SOURCES",
    "calculate_distance",
    "detect_vpn_proxy",
    "extract_from_proxy_headers",
    "extract_geographic_data",
    "geolocate_ip",
    "get_timezone_info",
    "is_valid_country_code",
    "normalize_country_code",
]
