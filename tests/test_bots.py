"""Tests for bot detection."""

import pytest

from whothere.bots import BotType, detect_bot, is_bot, is_crawler_ip


class TestDetectBot:
    def test_googlebot(self):
        info = detect_bot(user_agent="Mozilla/5.0 (compatible; Googlebot/2.1)")
        assert info.is_bot
        assert info.bot_type is BotType.SEARCH_ENGINE
        assert info.bot_name == "Googlebot"
        assert info.confidence == 0.9

    def test_human(self):
        info = detect_bot(user_agent="Mozilla/5.0 (X11; Linux x86_64) Chrome/120.0")
        assert not info.is_bot
        assert info.bot_type is BotType.HUMAN
        assert info.bot_name is None
        assert info.confidence == 0.8

    @pytest.mark.parametrize("ua,bot_type", [
        ("facebookexternalhit/1.1", BotType.SOCIAL_MEDIA),
        ("AhrefsBot/7.0", BotType.SEO),
        ("UptimeRobot/2.0", BotType.MONITORING),
        ("Nmap Scripting Engine", BotType.SECURITY),
        ("my-little-crawler", BotType.UNKNOWN_BOT),
    ])
    def test_types(self, ua, bot_type):
        assert detect_bot(user_agent=ua).bot_type is bot_type

    def test_crawler_ip(self):
        info = detect_bot(ip_address="66.249.66.1")
        assert info.is_bot
        assert info.bot_type is BotType.UNKNOWN_BOT
        assert info.confidence == 0.8

    def test_all_signals_capped(self):
        info = detect_bot("Googlebot/2.1", "66.249.66.0", request_frequency=500)
        assert info.confidence == 0.99

    def test_high_request_rate(self):
        assert detect_bot(request_frequency=61).is_bot
        assert not detect_bot(request_frequency=60).is_bot

    def test_empty_inputs(self):
        info = detect_bot()
        assert not info.is_bot
        assert info.confidence == 0.8

    def test_is_bot(self):
        assert is_bot("Bingbot/2.0")
        assert not is_bot("Mozilla/5.0")


class TestIsCrawlerIp:
    def test_ranges(self):
        assert is_crawler_ip("207.46.13.1")
        assert is_crawler_ip("69.63.176.12")
        assert not is_crawler_ip("69.63.177.12")
        assert not is_crawler_ip("garbage")
