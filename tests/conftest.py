"""Pytest fixtures for whothere tests."""

import json

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cloudflare_headers():
    """Headers as forwarded by Cloudflare for a San Francisco visitor."""
    return {
        "CF-Connecting-IP": "203.0.113.195",
        "CF-Ray": "7d1c2b3a4f5e6d7c-SFO",
        "CF-IPCountry": "US",
        "CF-IPCity": "San Francisco",
        "CF-Region": "California",
        "CF-IPLatitude": "37.7749",
        "CF-IPLongitude": "-122.4194",
        "CF-Visitor": '{"scheme":"https"}',
        "X-Forwarded-Proto": "https",
        "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) Chrome/120.0",
    }


@pytest.fixture
def sample_requests():
    """Request log entries covering proxies, bots and suspicious paths."""
    return [
        {
            "method": "GET",
            "path": "/users/123",
            "timestamp": "2024-01-01T10:00:00Z",
            "duration_ms": 120,
            "headers": {
                "CF-Connecting-IP": "203.0.113.195",
                "CF-Ray": "7d1c2b3a4f5e6d7c-SFO",
                "CF-IPCountry": "US",
                "CF-IPCity": "San Francisco",
                "User-Agent": "Mozilla/5.0 Chrome/120.0",
            },
            "remote_ip": "173.245.48.10",
        },
        {
            "method": "GET",
            "path": "/users/456",
            "timestamp": "2024-01-01T10:00:01Z",
            "duration_ms": 180,
            "headers": {"X-Forwarded-For": "8.8.8.8, 10.0.0.1"},
            "remote_ip": "10.0.0.1",
        },
        {
            "method": "GET",
            "path": "/robots.txt",
            "timestamp": "2024-01-01T10:00:02Z",
            "duration_ms": 5,
            "headers": {"User-Agent": "Googlebot/2.1 (+http://www.google.com/bot.html)"},
            "remote_ip": "66.249.66.1",
        },
        {
            "method": "POST",
            "path": "/../../../etc/passwd",
            "timestamp": "2024-01-01T10:00:03Z",
            "duration_ms": 2500,
            "headers": {},
            "remote_ip": "1.1.1.1",
        },
    ]


@pytest.fixture
def sample_request_file(tmp_path, sample_requests):
    """Write the sample request log to a JSON file."""
    path = tmp_path / "requests.json"
    path.write_text(json.dumps(sample_requests), encoding="utf-8")
    return path


@pytest.fixture
def sample_har():
    """Minimal HAR archive with two entries out of timestamp order."""
    return {
        "log": {
            "version": "1.2",
            "entries": [
                {
                    "startedDateTime": "2024-01-01T10:00:05Z",
                    "time": 250.5,
                    "request": {
                        "method": "POST",
                        "url": "https://api.example.com/api/orders?page=2",
                        "headers": [
                            {"name": "X-Real-IP", "value": "8.8.4.4"},
                            {"name": "User-Agent", "value": "curl/8.0"},
                        ],
                    },
                },
                {
                    "startedDateTime": "2024-01-01T10:00:00Z",
                    "time": 42,
                    "request": {
                        "method": "GET",
                        "url": "https://api.example.com/users/42",
                        "headers": [],
                    },
                },
            ],
        }
    }


@pytest.fixture
def sample_har_file(tmp_path, sample_har):
    path = tmp_path / "capture.har"
    path.write_text(json.dumps(sample_har), encoding="utf-8")
    return path
