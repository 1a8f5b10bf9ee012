"""Header trust resolution for proxied requests.

Works out which client IP to believe when a request has passed through one
or more proxies/CDNs, which vendor forwarded it, and whether the forwarding
headers agree with each other. Every function here is pure and accepts
either raw headers or a prebuilt :class:`HeaderSet`.

Client IP precedence (first valid address wins):
  1. CF-Connecting-IP (Cloudflare)
  2. True-Client-IP (Cloudflare Enterprise)
  3. X-Real-IP (nginx)
  4. X-Forwarded-For (first hop)
  5. X-Client-IP
  6. Transport remote address
"""

from __future__ import annotations

import ipaddress
import json
import re
from typing import Iterable, Optional

from ..utils.ip import format_ip, is_valid_ip, parse_ip
from ..utils.logger import get_logger
from .headers import HeaderSet, HeadersInput
from .models import (
    ConnectionInfo,
    HeaderIssue,
    ParsedRequest,
    ProxyResolution,
    ProxyVendor,
)

logger = get_logger(__name__)

IP_HEADER_PRECEDENCE: tuple[str, ...] = (
    "cf-connecting-ip",
    "true-client-ip",
    "x-real-ip",
    "x-forwarded-for",
    "x-client-ip",
)

CLOUDFLARE_HEADERS: frozenset[str] = frozenset({
    "cf-ray",
    "cf-connecting-ip",
    "cf-ipcountry",
    "cf-ipcity",
    "cf-visitor",
})

CLOUDFRONT_PREFIX = "cloudfront-viewer-"

# Ray IDs look like "7d1c2b3a4f5e6d7c-SFO"
CF_RAY_RE = re.compile(r"^[0-9a-f]+-[A-Z]{3}$")

CLOUDFLARE_GEO_HEADERS: dict[str, str] = {
    "country": "cf-ipcountry",
    "city": "cf-ipcity",
    "continent": "cf-ipcontinent",
    "region": "cf-region",
    "metro_code": "cf-metro-code",
    "postal_code": "cf-postal-code",
    "timezone": "cf-timezone",
    "latitude": "cf-iplatitude",
    "longitude": "cf-iplongitude",
}

AWS_GEO_HEADERS: dict[str, str] = {
    "country": "cloudfront-viewer-country",
    "country_name": "cloudfront-viewer-country-name",
    "region": "cloudfront-viewer-country-region",
    "city": "cloudfront-viewer-city",
    "postal_code": "cloudfront-viewer-postal-code",
    "timezone": "cloudfront-viewer-time-zone",
    "latitude": "cloudfront-viewer-latitude",
    "longitude": "cloudfront-viewer-longitude",
}


def _candidate(headers: HeaderSet, name: str) -> Optional[str]:
    if name == "x-forwarded-for":
        raw = headers.value(name)
        return raw.split(",", 1)[0].strip() if raw else None
    return headers.value(name)


def extract_real_ip(headers: HeadersInput, remote_address=None) -> Optional[str]:
    """Extract the most credible client IP address.

    Invalid candidates are skipped in favour of the next tier; nothing here
    raises on missing or malformed headers.

    Args:
        headers: Request headers (mapping, list of pairs or HeaderSet)
        remote_address: Transport-level peer address (string, 4/8-tuple or
                        ipaddress object), used when no header yields an IP

    Returns:
        IP address string, or None if no tier produced a valid address
    """
    header_set = HeaderSet.coerce(headers)

    for name in IP_HEADER_PRECEDENCE:
        candidate = _candidate(header_set, name)
        if candidate is None:
            continue
        address = format_ip(candidate)
        if address is not None:
            return address
        logger.debug("invalid ip candidate skipped", header=name)

    return format_ip(remote_address)


def detect_proxy_type(headers: HeadersInput) -> ProxyVendor:
    """Detect which proxy or CDN produced the headers."""
    header_set = HeaderSet.coerce(headers)

    if header_set.has_any(CLOUDFLARE_HEADERS):
        return ProxyVendor.CLOUDFLARE
    if header_set.has_prefix(CLOUDFRONT_PREFIX):
        return ProxyVendor.AWS_CLOUDFRONT
    if "x-forwarded-for" in header_set and "x-forwarded-proto" in header_set:
        return ProxyVendor.AWS_ALB
    if "x-real-ip" in header_set:
        return ProxyVendor.NGINX
    if "x-forwarded-for" in header_set:
        return ProxyVendor.GENERIC_PROXY
    return ProxyVendor.DIRECT


def _visitor_scheme(headers: HeaderSet) -> Optional[str]:
    """Scheme from the JSON ``CF-Visitor`` header, or None if unusable."""
    raw = headers.value("cf-visitor")
    if raw is None:
        return None
    try:
        decoded = json.loads(raw)
    except ValueError:
        logger.debug("malformed cf-visitor header ignored")
        return None
    if not isinstance(decoded, dict):
        return None
    scheme = decoded.get("scheme")
    if isinstance(scheme, str) and scheme.lower() in ("http", "https"):
        return scheme.lower()
    return None


def _detect_protocol(headers: HeaderSet) -> str:
    proto = (headers.value("x-forwarded-proto") or "").lower()
    if proto == "https":
        return "https"
    if (headers.value("x-forwarded-ssl") or "").lower() == "on":
        return "https"
    return _visitor_scheme(headers) or "http"


def _detect_port(headers: HeaderSet) -> Optional[int]:
    raw = headers.value("x-forwarded-port")
    if raw is None:
        return None
    try:
        port = int(raw)
    except ValueError:
        return None
    return port if 0 < port <= 65535 else None


def extract_connection_info(headers: HeadersInput) -> ConnectionInfo:
    """Extract protocol, port, host and user agent from proxy headers."""
    header_set = HeaderSet.coerce(headers)
    protocol = _detect_protocol(header_set)

    return ConnectionInfo(
        protocol=protocol,
        scheme="https" if protocol == "https" else "http",
        port=_detect_port(header_set),
        host=header_set.value("host"),
        user_agent=header_set.value("user-agent"),
    )


def _collect(headers: HeaderSet, mapping: dict[str, str]) -> dict[str, str]:
    found = {}
    for key, header in mapping.items():
        value = headers.value(header)
        if value is not None:
            found[key] = value
    return found


def extract_cloudflare_geo(headers: HeadersInput) -> dict[str, str]:
    """Extract raw geographic fields from Cloudflare headers.

    Examples:
        extract_cloudflare_geo({"cf-ipcountry": "US", "cf-ipcity": "San Francisco"})
        -> {"country": "US", "city": "San Francisco"}
    """
    return _collect(HeaderSet.coerce(headers), CLOUDFLARE_GEO_HEADERS)


def extract_aws_geo(headers: HeadersInput) -> dict[str, str]:
    """Extract raw geographic fields from CloudFront viewer headers."""
    return _collect(HeaderSet.coerce(headers), AWS_GEO_HEADERS)


def _check_cloudflare(headers: HeaderSet) -> Optional[HeaderIssue]:
    ray = headers.value("cf-ray")
    connecting_ip = headers.value("cf-connecting-ip")

    if ray is not None and not CF_RAY_RE.match(ray):
        return HeaderIssue.INVALID_CF_HEADERS
    if connecting_ip is not None and not is_valid_ip(connecting_ip):
        return HeaderIssue.INVALID_CF_HEADERS
    return None


def _trusted_networks(trusted_proxies: Iterable[str]) -> list:
    networks = []
    for entry in trusted_proxies:
        try:
            networks.append(ipaddress.ip_network(str(entry).strip(), strict=False))
        except ValueError:
            logger.debug("invalid trusted proxy entry ignored", entry=str(entry))
    return networks


def _check_forwarded(
    headers: HeaderSet,
    trusted_proxies: Optional[Iterable[str]],
) -> Optional[HeaderIssue]:
    hops = headers.forwarded_chain()
    if not hops:
        return None
    parsed = [parse_ip(hop) for hop in hops]
    if any(address is None for address in parsed):
        return HeaderIssue.UNTRUSTED_FORWARDED_HEADERS

    if trusted_proxies:
        networks = _trusted_networks(trusted_proxies)
        for address in parsed[1:]:
            if not any(address in network for network in networks):
                return HeaderIssue.UNTRUSTED_FORWARDED_HEADERS
    return None


def _check_consistency(headers: HeaderSet) -> Optional[HeaderIssue]:
    proto = headers.value("x-forwarded-proto")
    ssl = headers.value("x-forwarded-ssl")
    visitor = _visitor_scheme(headers)

    if proto is not None:
        proto = proto.lower()
        if ssl is not None and (proto == "https") != (ssl.lower() == "on"):
            return HeaderIssue.INCONSISTENT_HEADERS
        if visitor is not None and visitor != proto:
            return HeaderIssue.INCONSISTENT_HEADERS

    claimed = {
        format_ip(ip) or ip
        for ip in (
            headers.value("cf-connecting-ip"),
            headers.value("x-real-ip"),
            _candidate(headers, "x-forwarded-for"),
        )
        if ip
    }
    if len(claimed) > 2:
        return HeaderIssue.INCONSISTENT_HEADERS
    return None


def validate_headers(
    headers: HeadersInput,
    trusted_proxies: Optional[Iterable[str]] = None,
) -> Optional[HeaderIssue]:
    """Validate that proxy headers look legitimate.

    Only classifies trust; the headers are never modified.

    Args:
        headers: Request headers
        trusted_proxies: Optional allow-list of proxy addresses. When given,
                         every X-Forwarded-For hop after the client must be in it.

    Returns:
        None if the headers look legitimate, otherwise the first HeaderIssue found
    """
    header_set = HeaderSet.coerce(headers)
    trusted = list(trusted_proxies) if trusted_proxies else None

    return (
        _check_cloudflare(header_set)
        or _check_forwarded(header_set, trusted)
        or _check_consistency(header_set)
    )


def resolve_proxy(
    headers: HeadersInput,
    remote_address=None,
    trusted_proxies: Optional[Iterable[str]] = None,
) -> ProxyResolution:
    """Resolve the client IP and vendor, flagging inconsistent headers."""
    header_set = HeaderSet.coerce(headers)
    return ProxyResolution(
        real_ip=extract_real_ip(header_set, remote_address),
        proxy_vendor=detect_proxy_type(header_set),
        headers_consistent=validate_headers(header_set, trusted_proxies) is None,
    )


def parse_all(
    headers: HeadersInput,
    remote_address=None,
    trusted_proxies: Optional[Iterable[str]] = None,
) -> ParsedRequest:
    """Extract all available information from proxy headers in one pass.

    This is the single per-request entry point for a serving layer.
    """
    header_set = HeaderSet.coerce(headers)
    issue = validate_headers(header_set, trusted_proxies)

    # CloudFront fields first so Cloudflare wins on overlap
    geo = {**extract_aws_geo(header_set), **extract_cloudflare_geo(header_set)}

    return ParsedRequest(
        real_ip=extract_real_ip(header_set, remote_address),
        geo=geo,
        connection=extract_connection_info(header_set),
        proxy_type=detect_proxy_type(header_set),
        headers_valid=issue is None,
        header_issue=issue,
    )
