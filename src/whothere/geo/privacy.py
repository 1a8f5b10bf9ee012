"""Privacy helpers.

Anonymization zeroes low-order bits so that nothing downstream (lookups,
stored results, logs) ever sees the full client address. The PII helpers
mask personal data that leaks into paths, query strings and user agents
before a record is stored.
"""

import base64
import hashlib
import ipaddress
import re
import secrets
from collections.abc import Mapping
from typing import Any, Optional, Union

from ..proxy.headers import HeaderSet, HeadersInput
from ..utils.ip import parse_ip, to_tuple
from .models import AnonymizationLevel, PiiType, PrivacyViolation

PRIVATE_NETWORKS = tuple(
    ipaddress.ip_network(cidr)
    for cidr in (
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "127.0.0.0/8",
        "fe80::/10",  # link-local
        "fc00::/7",  # unique local
        "::1/128",
    )
)

# Checked in this order by detect_pii and sanitize_pii
PII_PATTERNS: tuple[tuple[PiiType, re.Pattern], ...] = (
    (PiiType.EMAIL, re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")),
    (PiiType.PHONE, re.compile(r"(\+\d{1,3}\s?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}")),
    (PiiType.SSN, re.compile(r"\b\d{3}-\d{2}-\d{4}\b")),
    (PiiType.CREDIT_CARD, re.compile(r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b")),
    (PiiType.IP_ADDRESS, re.compile(r"\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b")),
)

UA_VERSION_RE = re.compile(r"\b\d+\.\d+\.\d+(\.\d+)?\b")
UA_TOKEN_RE = re.compile(r"\b[A-Z0-9]{8,}\b")
UA_DETAILS_RE = re.compile(r"\(.+?\)")
WHITESPACE_RE = re.compile(r"\s+")
DOTTED_IPV4_RE = re.compile(r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}")

IP_FIELDS = ("ip_address", "client_ip", "remote_ip")
FORWARDED_FIELD = "forwarded_for"
PII_FIELDS = frozenset({"email", "phone", "ssn", "credit_card"})

TRACKING_PIXELS = ("pixel.gif", "beacon.png", "track.gif")
HEALTH_CHECK_PATHS = frozenset({"/health", "/api/health", "/api/_health", "/_health"})


def anonymize_ip(ip, level: Union[AnonymizationLevel, str] = AnonymizationLevel.PARTIAL):
    """Zero the host bits of an address according to ``level``.

    The result has the same representation as the input: strings stay
    strings, tuples stay tuples and ``ipaddress`` objects stay objects.
    Values that do not parse as an address are returned unchanged.

    Examples:
        anonymize_ip("192.168.1.100") -> "192.168.1.0"
        anonymize_ip("192.168.1.100", "full") -> "192.168.0.0"
        anonymize_ip((10, 1, 2, 3), "none") -> (10, 1, 2, 3)

    Raises:
        ValueError: If ``level`` is not a known anonymization level
    """
    level = AnonymizationLevel(level)
    address = parse_ip(ip)
    if address is None:
        return ip

    prefix = level.ipv4_prefix if address.version == 4 else level.ipv6_prefix
    masked = ipaddress.ip_network(f"{address}/{prefix}", strict=False).network_address

    if isinstance(ip, tuple):
        return to_tuple(masked)
    if isinstance(ip, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return masked
    if isinstance(ip, bytes):
        return str(masked).encode("latin-1")
    return str(masked)


def hash_ip(ip, salt: Optional[str] = None) -> str:
    """Salted one-way hash of an address, 16 base64 characters long.

    Without a salt a random one is generated, so the hash cannot be linked
    across calls.
    """
    address = parse_ip(ip)
    if address is not None:
        text = str(address)
    elif isinstance(ip, str):
        text = ip
    else:
        text = ""

    salt = salt if salt is not None else secrets.token_hex(16)
    digest = hashlib.sha256(f"{salt}{text}".encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")[:16]


def is_private_ip(ip) -> bool:
    """Check whether an address is private, loopback or link-local."""
    address = parse_ip(ip)
    if address is None:
        return False
    return any(
        address.version == network.version and address in network
        for network in PRIVATE_NETWORKS
    )


# --- PII ---

def detect_pii(text) -> list[PiiType]:
    """List the kinds of personal data found in ``text``.

    Examples:
        detect_pii("My email is john@example.com") -> [PiiType.EMAIL]
        detect_pii("Call me at (555) 123-4567") -> [PiiType.PHONE]
        detect_pii(None) -> []
    """
    if not isinstance(text, str):
        return []
    return [kind for kind, pattern in PII_PATTERNS if pattern.search(text)]


def sanitize_pii(text, mask_char: str = "*", preserve_domain: bool = False):
    """Mask every recognized piece of personal data in ``text``.

    Each match is replaced by ``mask_char`` repeated to the same length.
    With ``preserve_domain`` only the local part of an email is masked.
    Non-string values are returned unchanged.

    Examples:
        sanitize_pii("mail jane@example.com") -> "mail ****************"
        sanitize_pii("jane@example.com", preserve_domain=True) -> "****@example.com"
    """
    if not isinstance(text, str):
        return text

    def mask(match: re.Match) -> str:
        return mask_char * len(match.group(0))

    def mask_email(match: re.Match) -> str:
        local, _, domain = match.group(0).partition("@")
        return f"{mask_char * len(local)}@{domain}"

    for kind, pattern in PII_PATTERNS:
        replace = mask_email if kind is PiiType.EMAIL and preserve_domain else mask
        text = pattern.sub(replace, text)
    return text


def sanitize_user_agent(user_agent):
    """Strip identifying detail from a user agent.

    Full version numbers, long build tokens and parenthesized platform
    details are removed; product names stay usable for analytics.

    Examples:
        sanitize_user_agent("Mozilla/5.0 (X11; Linux x86_64) Chrome/120.0.6099.109")
        -> "Mozilla/5.0 () Chrome/x.x.x"
    """
    if not isinstance(user_agent, str):
        return user_agent
    user_agent = UA_VERSION_RE.sub("x.x.x", user_agent)
    user_agent = UA_TOKEN_RE.sub("XXXXXXXX", user_agent)
    user_agent = UA_DETAILS_RE.sub("()", user_agent)
    return WHITESPACE_RE.sub(" ", user_agent).strip()


def anonymize_ip_data(data: Any, level: Union[AnonymizationLevel, str] = AnonymizationLevel.PARTIAL):
    """Anonymize addresses inside nested dicts and lists.

    Known address fields (``ip_address``, ``client_ip``, ``remote_ip``,
    every hop of ``forwarded_for``) and any string that is a dotted IPv4
    address are anonymized. Everything else is copied as is.
    """
    if isinstance(data, Mapping):
        result = {}
        for key, value in data.items():
            if key in IP_FIELDS:
                result[key] = anonymize_ip(value, level)
            elif key == FORWARDED_FIELD and isinstance(value, str):
                result[key] = ", ".join(anonymize_ip(hop.strip(), level) for hop in value.split(","))
            else:
                result[key] = anonymize_ip_data(value, level)
        return result
    if isinstance(data, (list, tuple)):
        return [anonymize_ip_data(item, level) for item in data]
    if isinstance(data, str) and DOTTED_IPV4_RE.fullmatch(data):
        return anonymize_ip(data, level)
    return data


def remove_pii(data: Any):
    """Remove personal data from a nested structure.

    ``email``, ``phone``, ``ssn`` and ``credit_card`` fields are dropped,
    ``user_agent`` is sanitized, address fields are anonymized and every
    other string has its PII masked.
    """
    if isinstance(data, Mapping):
        result = {}
        for key, value in anonymize_ip_data(data).items():
            if key in PII_FIELDS:
                continue
            if key == "user_agent":
                result[key] = sanitize_pii(sanitize_user_agent(value))
            elif key in IP_FIELDS or key == FORWARDED_FIELD:
                result[key] = value
            else:
                result[key] = remove_pii(value)
        return result
    if isinstance(data, (list, tuple)):
        return [remove_pii(item) for item in data]
    return sanitize_pii(data)


# --- Compliance ---

def _is_raw_ip(value) -> bool:
    address = parse_ip(value)
    if address is None:
        return False
    return anonymize_ip(address) != address


def _user_agent(data: Mapping):
    connection = data.get("connection")
    if isinstance(connection, Mapping) and connection.get("user_agent"):
        return connection["user_agent"]
    return data.get("user_agent")


def validate_privacy_compliance(data) -> list[PrivacyViolation]:
    """Check a record before storage, returning violations (empty = compliant).

    A ``raw_ip`` violation is an ``ip_address`` with host bits still set and
    no ``ip_hash`` alongside it. The user agent and path must carry no
    recognizable PII, and the path must not be a tracking pixel.
    """
    if not isinstance(data, Mapping):
        return []

    violations = []
    if "ip_hash" not in data and _is_raw_ip(data.get("ip_address")):
        violations.append(PrivacyViolation.RAW_IP)
    if detect_pii(_user_agent(data)):
        violations.append(PrivacyViolation.PII_IN_USER_AGENT)

    path = data.get("path")
    if isinstance(path, str):
        if detect_pii(path):
            violations.append(PrivacyViolation.PII_IN_PATH)
        if any(pixel in path for pixel in TRACKING_PIXELS):
            violations.append(PrivacyViolation.TRACKING_PIXEL)
    return violations


def has_do_not_track(headers: HeadersInput) -> bool:
    """True when the request carries ``DNT: 1``."""
    return HeaderSet.coerce(headers).value("dnt") == "1"


def should_exclude(data) -> bool:
    """Decide whether a request stays out of analytics.

    Bots are never excluded here (they are reported separately). Otherwise
    a request is excluded for Do-Not-Track, ``/admin`` paths, health checks
    or an explicit ``exclude_analytics`` flag.
    """
    if not isinstance(data, Mapping):
        return False
    if data.get("is_bot"):
        return False
    if data.get("do_not_track") or data.get("exclude_analytics"):
        return True

    path = data.get("path")
    if not isinstance(path, str):
        return False
    return path.startswith("/admin") or path in HEALTH_CHECK_PATHS
