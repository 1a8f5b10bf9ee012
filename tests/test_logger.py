"""Tests for structured logging setup."""

import importlib
import json

import pytest
import structlog

from whothere.utils.logger import configure_logging, get_logger


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()


class TestLogging:
    def test_json_output_to_stderr(self, capsys):
        configure_logging("INFO", json_output=True)
        get_logger("whothere.test").info("request enriched", path="/users/1")

        captured = capsys.readouterr()
        assert captured.out == ""
        event = json.loads(captured.err.strip())
        assert event["event"] == "request enriched"
        assert event["path"] == "/users/1"
        assert event["level"] == "info"

    def test_level_filtering(self, capsys):
        configure_logging("WARNING")
        get_logger().info("hidden")
        assert capsys.readouterr().err == ""

    def test_console_renderer(self, capsys):
        configure_logging("debug")
        get_logger().debug("visible", key="value")
        err = capsys.readouterr().err
        assert "visible" in err
        assert "key=value" in err

    def test_import_leaves_host_configuration_alone(self):
        renderer = structlog.processors.JSONRenderer()
        structlog.configure(processors=[renderer])

        import whothere.utils.logger
        importlib.reload(whothere.utils.logger)
        importlib.import_module("whothere.geo")

        assert structlog.get_config()["processors"] == [renderer]
