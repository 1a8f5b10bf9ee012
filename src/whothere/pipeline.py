"""Per-request enrichment pipeline.

Combines header trust resolution, geo resolution, route evaluation and bot
detection into one record. Only the anonymized client address is kept, and
with ``privacy_mode`` on the stored path and user agent are stripped of
personal data.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional

from .bots import BotInfo, detect_bot
from .config import WhoThereConfig
from .geo import (
    GeoResult,
    anonymize_ip,
    extract_geographic_data,
    has_do_not_track,
    sanitize_pii,
    sanitize_user_agent,
    should_exclude,
)
from .proxy import HeaderSet, ProxyVendor, parse_all
from .proxy.models import ConnectionInfo, HeaderIssue
from .routes import RouteDecision, evaluate_route
from .utils.ip import format_ip
from .utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class RequestMetadata:
    """Raw metadata for one request, as handed over by a serving layer or log."""

    path: str
    headers: Any = field(default_factory=dict)
    remote_ip: Any = None
    method: str = "GET"
    timestamp: str = ""
    duration_ms: Optional[float] = None
    request_frequency: float = 0


@dataclass(frozen=True)
class EnrichmentRecord:
    """Everything derived from one request."""

    method: str
    path: str
    timestamp: str
    ip_address: Optional[str]
    proxy_vendor: ProxyVendor
    headers_valid: bool
    header_issue: Optional[HeaderIssue]
    connection: ConnectionInfo
    geo: GeoResult
    route: RouteDecision
    bot: BotInfo
    duration_ms: Optional[float] = None
    excluded: bool = False

    def to_dict(self) -> dict:
        """JSON-ready dict."""
        return {
            "method": self.method,
            "path": self.path,
            "timestamp": self.timestamp,
            "ip_address": self.ip_address,
            "proxy_vendor": self.proxy_vendor.value,
            "headers_valid": self.headers_valid,
            "header_issue": self.header_issue.value if self.header_issue else None,
            "connection": {
                "protocol": self.connection.protocol,
                "scheme": self.connection.scheme,
                "port": self.connection.port,
                "host": self.connection.host,
                "user_agent": self.connection.user_agent,
            },
            "geo": self.geo.to_dict(),
            "route": {
                "trackable": self.route.trackable,
                "pattern": self.route.pattern,
                "category": self.route.category.value,
                "suspicious_categories": sorted(c.value for c in self.route.suspicious_categories),
            },
            "bot": {
                "is_bot": self.bot.is_bot,
                "bot_type": self.bot.bot_type.value,
                "bot_name": self.bot.bot_name,
                "confidence": self.bot.confidence,
            },
            "duration_ms": self.duration_ms,
            "excluded": self.excluded,
        }


def _enrich(
    request: RequestMetadata,
    config: WhoThereConfig,
    geo_options: dict,
    route_options: dict,
) -> EnrichmentRecord:
    headers = HeaderSet(request.headers)
    parsed = parse_all(headers, request.remote_ip, config.trusted_proxy_ips or None)

    client_ip = parsed.real_ip if config.trust_proxy_headers else format_ip(request.remote_ip)
    anonymized = anonymize_ip(client_ip, config.ip_anonymization) if client_ip else None

    geo = extract_geographic_data(
        {"headers": headers, "remote_ip": request.remote_ip},
        **geo_options,
    )
    route = evaluate_route(request.path, **route_options)
    bot = detect_bot(parsed.connection.user_agent, anonymized, request.request_frequency)

    path = request.path
    connection = parsed.connection
    if config.privacy_mode:
        path = sanitize_pii(path)
        route = replace(route, pattern=sanitize_pii(route.pattern))
        user_agent = sanitize_pii(sanitize_user_agent(connection.user_agent))
        connection = replace(connection, user_agent=user_agent)

    excluded = should_exclude({
        "is_bot": bot.is_bot,
        "do_not_track": config.honor_do_not_track and has_do_not_track(headers),
        "path": request.path,
    })

    if not parsed.headers_valid:
        logger.info(
            "untrusted proxy headers",
            path=path,
            issue=parsed.header_issue.value,
        )

    return EnrichmentRecord(
        method=request.method,
        path=path,
        timestamp=request.timestamp,
        ip_address=anonymized,
        proxy_vendor=parsed.proxy_type,
        headers_valid=parsed.headers_valid,
        header_issue=parsed.header_issue,
        connection=connection,
        geo=geo,
        route=route,
        bot=bot,
        duration_ms=request.duration_ms,
        excluded=excluded,
    )


def enrich_request(
    request: RequestMetadata,
    config: Optional[WhoThereConfig] = None,
) -> EnrichmentRecord:
    """Enrich a single request.

    Args:
        request: Raw request metadata
        config: Optional WhoThereConfig (defaults when omitted)

    Returns:
        EnrichmentRecord holding only the anonymized client address
    """
    config = config or WhoThereConfig()
    return _enrich(request, config, config.geo_options(), config.route_options())


def enrich_requests(
    requests: Iterable[RequestMetadata],
    config: Optional[WhoThereConfig] = None,
) -> list[EnrichmentRecord]:
    """Enrich a batch of requests, compiling config options once."""
    config = config or WhoThereConfig()
    geo_options = config.geo_options()
    route_options = config.route_options()
    return [_enrich(request, config, geo_options, route_options) for request in requests]
