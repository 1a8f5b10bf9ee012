"""Privacy-respecting geographic resolution.

Location comes from trusted CDN headers when available, otherwise from the
builtin prefix table using the anonymized client address. The full client
address never reaches a lookup or a result.
"""

from __future__ import annotations

import ipaddress
import math
from collections.abc import Mapping
from dataclasses import replace
from typing import Iterable, Optional, Union

from ..exceptions import InvalidCountryCodeError, MissingCoordinatesError
from ..proxy.headers import HeaderSet, HeadersInput
from ..proxy.resolver import extract_real_ip
from ..utils.ip import format_ip, parse_ip
from ..utils.logger import get_logger
from . import tables
from .models import (
    COUNTRY_CODE_RE,
    INSUFFICIENT_LOCATION_DATA,
    UNKNOWN_TIMEZONE,
    AnonymizationLevel,
    Confidence,
    GeoResult,
    GeoSource,
    TimezoneLookup,
    VpnAssessment,
)
from .privacy import anonymize_ip

logger = get_logger(__name__)

DEFAULT_TRUSTED_SOURCES: tuple[str, ...] = ("cloudflare", "cloudfront", "fastly")

EARTH_RADIUS_KM = 6371

# Vendor extractors in priority order; field -> header names tried in turn.
# The generic headers are not tied to a vendor and are always consulted.
VENDOR_GEO_HEADERS: tuple[tuple[GeoSource, dict[str, tuple[str, ...]]], ...] = (
    (GeoSource.CLOUDFLARE, {
        "country_code": ("cf-ipcountry",),
        "city": ("cf-ipcity",),
        "region": ("cf-region",),
        "timezone": ("cf-timezone",),
        "latitude": ("cf-iplatitude",),
        "longitude": ("cf-iplongitude",),
    }),
    (GeoSource.CLOUDFRONT, {
        "country_code": ("cloudfront-viewer-country",),
        "city": ("cloudfront-viewer-city",),
        "region": ("cloudfront-viewer-country-region",),
        "timezone": ("cloudfront-viewer-time-zone",),
        "latitude": ("cloudfront-viewer-latitude",),
        "longitude": ("cloudfront-viewer-longitude",),
    }),
    (GeoSource.FASTLY, {
        "country_code": ("fastly-client-country",),
        "city": ("fastly-client-city",),
        "region": ("fastly-client-region",),
    }),
    (GeoSource.GENERIC, {
        "country_code": ("x-country-code", "x-country"),
        "city": ("x-city",),
        "region": ("x-region", "x-state"),
    }),
)

HEADER_CONFIDENCE = {
    GeoSource.CLOUDFLARE: Confidence.HIGH,
    GeoSource.CLOUDFRONT: Confidence.HIGH,
    GeoSource.FASTLY: Confidence.HIGH,
    GeoSource.GENERIC: Confidence.MEDIUM,
}


# --- Country codes ---

def is_valid_country_code(value) -> bool:
    """Strict ISO 3166-1 alpha-2 shape check. No trimming, no upper-casing."""
    return isinstance(value, str) and COUNTRY_CODE_RE.fullmatch(value) is not None


def normalize_country_code(value) -> str:
    """Trim and upper-case a country code, rejecting anything else.

    Examples:
        normalize_country_code(" us ") -> "US"
        normalize_country_code("USA") -> InvalidCountryCodeError

    Raises:
        InvalidCountryCodeError: If the result is not exactly two ASCII letters
    """
    if not isinstance(value, str):
        raise InvalidCountryCodeError(value)
    normalized = value.strip()
    if not normalized.isascii():
        raise InvalidCountryCodeError(value)
    normalized = normalized.upper()
    if not is_valid_country_code(normalized):
        raise InvalidCountryCodeError(value)
    return normalized


# --- Header extraction ---

def _parse_coordinate(raw: Optional[str], limit: float) -> Optional[float]:
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value) or abs(value) > limit:
        return None
    return value


def _extract_vendor(
    headers: HeaderSet,
    source: GeoSource,
    fields: dict[str, tuple[str, ...]],
) -> Optional[GeoResult]:
    raw_country = headers.first(*fields["country_code"])
    if raw_country is None:
        return None
    try:
        country_code = normalize_country_code(raw_country)
    except InvalidCountryCodeError:
        logger.debug("unusable country header ignored", source=source.value)
        return None

    def field(name):
        names = fields.get(name)
        return headers.first(*names) if names else None

    return GeoResult(
        country_code=country_code,
        city=field("city"),
        region=field("region"),
        timezone=field("timezone"),
        latitude=_parse_coordinate(field("latitude"), 90.0),
        longitude=_parse_coordinate(field("longitude"), 180.0),
        source=source,
        confidence=HEADER_CONFIDENCE[source],
    )


def extract_from_proxy_headers(
    headers: HeadersInput,
    trusted_sources: Optional[Iterable[str]] = None,
) -> Optional[GeoResult]:
    """Read location from CDN/proxy headers.

    Vendors are tried in a fixed order (Cloudflare, CloudFront, Fastly) and
    each is consulted only when listed in ``trusted_sources``. Generic
    ``X-Country-Code``/``X-City``/``X-Region`` headers come last with medium
    confidence.

    Returns:
        GeoResult without ``ip_address``, or None when no usable header exists
    """
    header_set = HeaderSet.coerce(headers)
    if trusted_sources is None:
        trusted_sources = DEFAULT_TRUSTED_SOURCES
    trusted = {str(source).strip().lower() for source in trusted_sources}

    for source, fields in VENDOR_GEO_HEADERS:
        if source is not GeoSource.GENERIC and source.value not in trusted:
            continue
        found = _extract_vendor(header_set, source, fields)
        if found is not None:
            return found
    return None


# --- Builtin IP lookup ---

def _builtin_lookup(address) -> Optional[str]:
    for network, country in tables.BUILTIN_IP_COUNTRIES:
        if address.version == network.version and address in network:
            return country
    return None


def geolocate_ip(
    ip,
    ip_anonymization: Union[AnonymizationLevel, str] = AnonymizationLevel.PARTIAL,
) -> Optional[GeoResult]:
    """Look up an address in the builtin prefix table.

    The address is anonymized first; only the anonymized form is looked up
    and stored. Private ranges resolve to ``XX``.

    Returns:
        GeoResult with low confidence, or None when the range is unknown
    """
    parsed = parse_ip(ip)
    if parsed is None:
        return None
    address = anonymize_ip(parsed, ip_anonymization)

    country = _builtin_lookup(address)
    if country is None:
        logger.debug("no builtin range for address", ip=str(address))
        return None

    return GeoResult(
        country_code=country,
        ip_address=str(address),
        source=GeoSource.IP_GEOLOCATION,
        confidence=Confidence.LOW,
    )


# --- Timezones ---

def _get(location, name: str):
    if isinstance(location, Mapping):
        return location.get(name)
    return getattr(location, name, None)


def get_timezone_info(location) -> TimezoneLookup:
    """Most likely timezone for a location (GeoResult or mapping).

    City-level entries win over country-level ones. Failure is reported in
    ``TimezoneLookup.error``, never raised.
    """
    country = _get(location, "country_code")
    city = _get(location, "city")

    if not country:
        return TimezoneLookup(error=INSUFFICIENT_LOCATION_DATA)

    timezone = None
    if city:
        timezone = tables.CITY_TIMEZONES.get((country, city))
    if timezone is None:
        timezone = tables.COUNTRY_TIMEZONES.get(country)

    if timezone is None:
        return TimezoneLookup(error=UNKNOWN_TIMEZONE)
    return TimezoneLookup(timezone=timezone)


# --- VPN / proxy heuristics ---

def _in_ranges(address, ranges: Iterable[str]) -> bool:
    for cidr in ranges:
        try:
            network = ipaddress.ip_network(cidr, strict=False)
        except ValueError:
            logger.debug("invalid range ignored", range=str(cidr))
            continue
        if address.version == network.version and address in network:
            return True
    return False


def detect_vpn_proxy(
    ip,
    *,
    vpn_ranges: Optional[Iterable[str]] = None,
    hosting_ranges: Optional[Iterable[str]] = None,
    datacenter_ranges: Optional[Iterable[str]] = None,
) -> VpnAssessment:
    """Vote on whether an address belongs to a VPN or proxy service.

    Three independent range checks run (known VPN, hosting provider and
    datacenter ranges). The address is reported as likely VPN only when at
    least two of them agree.
    """
    tables_in_order = (
        tables.VPN_RANGES if vpn_ranges is None else tuple(vpn_ranges),
        tables.HOSTING_PROVIDER_RANGES if hosting_ranges is None else tuple(hosting_ranges),
        tables.DATACENTER_RANGES if datacenter_ranges is None else tuple(datacenter_ranges),
    )
    address = parse_ip(ip)
    checks = [address is not None and _in_ranges(address, ranges) for ranges in tables_in_order]

    score = sum(checks)
    return VpnAssessment(
        is_vpn_likely=score >= 2,
        vpn_score=score,
        checks_passed=score,
        total_checks=len(checks),
    )


# --- Distance ---

def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coordinates(location) -> tuple[float, float]:
    if isinstance(location, (tuple, list)) and len(location) == 2:
        lat, lon = location
    else:
        lat = _get(location, "latitude")
        lon = _get(location, "longitude")

    if not (_is_number(lat) and _is_number(lon)):
        raise MissingCoordinatesError(f"Location has no numeric latitude/longitude: {location!r}")
    return float(lat), float(lon)


def calculate_distance(loc1, loc2) -> float:
    """Great-circle distance in kilometres (Haversine, R = 6371 km).

    Locations may be GeoResult objects, mappings with ``latitude`` and
    ``longitude`` keys, or ``(lat, lon)`` pairs.

    Raises:
        MissingCoordinatesError: If either location lacks numeric coordinates
    """
    lat1, lon1 = _coordinates(loc1)
    lat2, lon2 = _coordinates(loc2)

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


# --- Entry point ---

def _enrich(result: GeoResult, country_only: bool) -> GeoResult:
    updates = {}
    if result.country_code is not None:
        updates["country_name"] = tables.country_name(result.country_code)
    if result.timezone is None:
        lookup = get_timezone_info(result)
        if lookup.ok:
            updates["timezone"] = lookup.timezone
    if country_only:
        updates.update(city=None, region=None, latitude=None, longitude=None)
    return replace(result, **updates) if updates else result


def _resolve(
    request_context,
    level: AnonymizationLevel,
    trust_proxy_headers: bool,
    trusted_proxies: Iterable[str],
) -> tuple[Optional[GeoResult], Optional[str]]:
    headers = HeaderSet.coerce(_get(request_context, "headers"))
    remote_ip = _get(request_context, "remote_ip")

    if trust_proxy_headers and headers:
        client_ip = extract_real_ip(headers, remote_ip)
        found = extract_from_proxy_headers(headers, trusted_proxies)
        if found is None and client_ip is not None:
            found = geolocate_ip(client_ip, level)
            if found is not None:
                found = replace(found, confidence=Confidence.MEDIUM)
    else:
        client_ip = format_ip(remote_ip)
        found = geolocate_ip(client_ip, level) if client_ip else None

    anonymized = anonymize_ip(client_ip, level) if client_ip else None
    return found, anonymized


def extract_geographic_data(
    request_context,
    *,
    ip_anonymization: Union[AnonymizationLevel, str] = AnonymizationLevel.PARTIAL,
    country_only: bool = False,
    trust_proxy_headers: bool = True,
    trusted_proxies: Iterable[str] = DEFAULT_TRUSTED_SOURCES,
) -> GeoResult:
    """Resolve a privacy-respecting location for one request.

    ``request_context`` is a mapping or object carrying ``headers`` and
    ``remote_ip``. Resolution order:

      1. Trusted proxy headers (when ``trust_proxy_headers`` and headers exist)
      2. Builtin lookup of the anonymized client address (medium confidence
         as a fallback, low when used directly)
      3. Default result (source unknown, confidence low)

    Never raises; unexpected errors are logged and the default is returned.

    Examples:
        extract_geographic_data({"headers": {"cf-ipcountry": "US", "cf-ipcity": "San Francisco"}})
        -> GeoResult(country_code="US", country_name="United States",
                     city="San Francisco", timezone="America/Los_Angeles",
                     source=GeoSource.CLOUDFLARE, confidence=Confidence.HIGH)
    """
    try:
        level = AnonymizationLevel(ip_anonymization)
        found, anonymized = _resolve(request_context, level, trust_proxy_headers, trusted_proxies)
        if found is None:
            logger.debug("no location data, using default")
            return GeoResult(ip_address=anonymized)
        return _enrich(replace(found, ip_address=anonymized), country_only)
    except Exception:
        logger.debug("geo resolution failed, using default", exc_info=True)
        return GeoResult()
