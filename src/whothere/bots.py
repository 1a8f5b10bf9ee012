"""Bot detection from user agent, crawler address ranges and request rate.

Examples:
    detect_bot(user_agent="Googlebot/2.1")
    -> BotInfo(is_bot=True, bot_type=BotType.SEARCH_ENGINE, bot_name="Googlebot", confidence=0.9)

    detect_bot(user_agent="Mozilla/5.0 ... Chrome/91.0")
    -> BotInfo(is_bot=False, bot_type=BotType.HUMAN, bot_name=None, confidence=0.8)
"""

import ipaddress
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .utils.ip import parse_ip


class BotType(str, Enum):
    SEARCH_ENGINE = "search_engine"
    SOCIAL_MEDIA = "social_media"
    SEO = "seo"
    MONITORING = "monitoring"
    SECURITY = "security"
    UNKNOWN_BOT = "unknown_bot"
    HUMAN = "human"


@dataclass(frozen=True)
class BotInfo:
    is_bot: bool
    bot_type: BotType
    bot_name: Optional[str]
    confidence: float


# First match wins, so specific names come before the generic patterns.
BOT_PATTERNS: tuple[tuple["re.Pattern[str]", BotType, str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), bot_type, name)
    for pattern, bot_type, name in (
        (r"googlebot", BotType.SEARCH_ENGINE, "Googlebot"),
        (r"bingbot", BotType.SEARCH_ENGINE, "Bingbot"),
        (r"slurp", BotType.SEARCH_ENGINE, "Yahoo Slurp"),
        (r"duckduckbot", BotType.SEARCH_ENGINE, "DuckDuckBot"),
        (r"baiduspider", BotType.SEARCH_ENGINE, "Baiduspider"),
        (r"yandexbot", BotType.SEARCH_ENGINE, "YandexBot"),
        (r"facebookexternalhit", BotType.SOCIAL_MEDIA, "Facebook"),
        (r"twitterbot", BotType.SOCIAL_MEDIA, "Twitter"),
        (r"linkedinbot", BotType.SOCIAL_MEDIA, "LinkedIn"),
        (r"slackbot", BotType.SOCIAL_MEDIA, "Slack"),
        (r"discordbot", BotType.SOCIAL_MEDIA, "Discord"),
        (r"telegrambot", BotType.SOCIAL_MEDIA, "Telegram"),
        (r"ahrefsbot", BotType.SEO, "AhrefsBot"),
        (r"semrushbot", BotType.SEO, "SemrushBot"),
        (r"mj12bot", BotType.SEO, "MJ12bot"),
        (r"dotbot", BotType.SEO, "DotBot"),
        (r"uptimerobot", BotType.MONITORING, "UptimeRobot"),
        (r"pingdom", BotType.MONITORING, "Pingdom"),
        (r"nessus", BotType.SECURITY, "Nessus"),
        (r"nmap", BotType.SECURITY, "Nmap"),
        (r"masscan", BotType.SECURITY, "Masscan"),
        (r"bot\b", BotType.UNKNOWN_BOT, "Generic Bot"),
        (r"crawler", BotType.UNKNOWN_BOT, "Crawler"),
        (r"spider", BotType.UNKNOWN_BOT, "Spider"),
        (r"scraper", BotType.UNKNOWN_BOT, "Scraper"),
    )
)

CRAWLER_NETWORKS = tuple(
    ipaddress.ip_network(cidr)
    for cidr in (
        "66.249.0.0/16",  # Google
        "207.46.0.0/16",  # Microsoft
        "69.63.176.0/24",  # Facebook
        "69.171.0.0/16",  # Facebook
    )
)

# Requests per minute above which a client behaves like a bot
MAX_HUMAN_REQUEST_RATE = 60

MAX_CONFIDENCE = 0.99


def _match_user_agent(user_agent) -> Optional[tuple[BotType, str]]:
    if not isinstance(user_agent, str) or not user_agent:
        return None
    for pattern, bot_type, name in BOT_PATTERNS:
        if pattern.search(user_agent):
            return bot_type, name
    return None


def is_crawler_ip(ip) -> bool:
    """Check whether an address is in a known crawler range."""
    address = parse_ip(ip)
    if address is None:
        return False
    return any(
        address.version == network.version and address in network
        for network in CRAWLER_NETWORKS
    )


def _is_high_rate(request_frequency) -> bool:
    return (
        isinstance(request_frequency, (int, float))
        and not isinstance(request_frequency, bool)
        and request_frequency > MAX_HUMAN_REQUEST_RATE
    )


def detect_bot(user_agent=None, ip_address=None, request_frequency=0) -> BotInfo:
    """Classify a request as bot or human.

    Args:
        user_agent: User-Agent header value
        ip_address: Client address (anonymized is fine for the /16 ranges)
        request_frequency: Requests per minute from this client

    Returns:
        BotInfo; confidence starts at 0.6 for bots and 0.8 for humans and
        grows by 0.3/0.2/0.1 for each matching signal, capped at 0.99
    """
    match = _match_user_agent(user_agent)
    by_ip = is_crawler_ip(ip_address)
    by_rate = _is_high_rate(request_frequency)
    is_bot = match is not None or by_ip or by_rate

    confidence = 0.6 if is_bot else 0.8
    if match is not None:
        confidence += 0.3
    if by_ip:
        confidence += 0.2
    if by_rate:
        confidence += 0.1
    confidence = round(min(confidence, MAX_CONFIDENCE), 2)

    if match is not None:
        bot_type, bot_name = match
        return BotInfo(True, bot_type, bot_name, confidence)
    if is_bot:
        return BotInfo(True, BotType.UNKNOWN_BOT, None, confidence)
    return BotInfo(False, BotType.HUMAN, None, confidence)


def is_bot(user_agent=None, ip_address=None, request_frequency=0) -> bool:
    return detect_bot(user_agent, ip_address, request_frequency).is_bot
