"""Header trust resolution for whothere."""

from .headers import HeaderSet
from .models import (
    ConnectionInfo,
    HeaderIssue,
    ParsedRequest,
    ProxyResolution,
    ProxyVendor,
)
from .resolver import (
    detect_proxy_type,
    extract_aws_geo,
    extract_cloudflare_geo,
    extract_connection_info,
    extract_real_ip,
    parse_all,
    resolve_proxy,
    validate_headers,
)

__all__ = [
    "HeaderSet",
    "ConnectionInfo",
    "HeaderIssue",
    "ParsedRequest",
    "ProxyResolution",
    "ProxyVendor",
    "detect_proxy_type",
    "extract_aws_geo",
    "extract_cloudflare_geo",
    "extract_connection_info",
    "extract_real_ip",
    "parse_all",
    "resolve_proxy",
    "validate_headers",
]
