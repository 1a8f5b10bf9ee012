"""Data models for proxy header resolution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ProxyVendor(str, Enum):
    """Proxy or CDN that produced the request headers."""

    CLOUDFLARE = "cloudflare"
    AWS_CLOUDFRONT = "aws_cloudfront"
    AWS_ALB = "aws_alb"
    NGINX = "nginx"
    GENERIC_PROXY = "generic_proxy"
    DIRECT = "direct"


class HeaderIssue(str, Enum):
    """Reason a header set failed trust validation."""

    INVALID_CF_HEADERS = "invalid_cf_headers"
    UNTRUSTED_FORWARDED_HEADERS = "untrusted_forwarded_headers"
    INCONSISTENT_HEADERS = "inconsistent_headers"


@dataclass(frozen=True)
class ConnectionInfo:
    """Connection metadata reported by the proxy."""

    protocol: str = "http"
    scheme: str = "http"
    port: Optional[int] = None
    host: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class ProxyResolution:
    """Most credible client IP and the vendor that forwarded it."""

    real_ip: Optional[str]
    proxy_vendor: ProxyVendor
    headers_consistent: bool


@dataclass(frozen=True)
class ParsedRequest:
    """Everything the header trust resolver can tell about one request."""

    real_ip: Optional[str]
    geo: dict[str, str] = field(default_factory=dict)
    connection: ConnectionInfo = field(default_factory=ConnectionInfo)
    proxy_type: ProxyVendor = ProxyVendor.DIRECT
    headers_valid: bool = True
    header_issue: Optional[HeaderIssue] = None
