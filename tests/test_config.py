"""Tests for configuration module."""

import re

import pytest

from whothere.config import (
    WhoThereConfig,
    check_value,
    find_config_path,
    get_default_config_yaml,
    load_config,
    save_config_value,
    validate_config,
)
from whothere.exceptions import ConfigError


class TestWhoThereConfigDefaults:
    """Tests for WhoThereConfig default values."""

    def test_geo_defaults(self):
        config = WhoThereConfig()
        assert config.ip_anonymization == "partial"
        assert config.trust_proxy_headers is True
        assert config.country_only is False
        assert config.trusted_proxies == ["cloudflare", "cloudfront", "fastly"]

    def test_route_defaults(self):
        config = WhoThereConfig()
        assert config.max_length == 2000
        assert config.exclude_static_assets is True
        assert config.grouping_strategy == "normalized"
        assert config.max_segments is None

    def test_lists_not_shared(self):
        a, b = WhoThereConfig(), WhoThereConfig()
        a.exclude_params.append("utm_source")
        assert b.exclude_params == []


class TestWhoThereConfigOptions:
    def test_filter_options_compiled(self):
        config = WhoThereConfig(exclude_patterns=[r"^/health"])
        options = config.filter_options()
        assert isinstance(options["exclude_patterns"][0], re.Pattern)
        assert options["exclude_static_assets"] is True

    def test_route_options(self):
        config = WhoThereConfig(preserve_extensions=True, categories=["malformed"])
        options = config.route_options()
        assert options["preserve_extensions"] is True
        assert options["categories"] == ["malformed"]
        assert "max_length" in options

    def test_performance_options_include_normalization(self):
        options = WhoThereConfig(max_segments=2).performance_options()
        assert options["max_segments"] == 2
        assert options["slow_threshold_ms"] == 1000

    def test_privacy_defaults(self):
        config = WhoThereConfig()
        assert config.privacy_mode is True
        assert config.honor_do_not_track is True

    def test_alphanumeric_ids_reaches_normalization(self):
        config = WhoThereConfig(alphanumeric_ids=False)
        assert config.normalize_options()["alphanumeric_ids"] is False
        assert config.route_options()["alphanumeric_ids"] is False
        assert WhoThereConfig().alphanumeric_ids is True


class TestCheckValue:
    @pytest.mark.parametrize("key,value", [
        ("ip_anonymization", "full"),
        ("log_level", "debug"),
        ("max_groups", None),
        ("slow_threshold_ms", 2.5),
        ("exclude_patterns", [r"^/health"]),
        ("categories", ["malformed"]),
    ])
    def test_valid(self, key, value):
        assert check_value(key, value) == []

    @pytest.mark.parametrize("key,value", [
        ("ip_anonymization", "paranoid"),
        ("country_only", "yes"),
        ("max_length", -1),
        ("max_length", True),
        ("exclude_patterns", "not-a-list"),
        ("exclude_patterns", ["(unclosed"]),
        ("categories", ["spam"]),
        ("slow_threshold_ms", "fast"),
        ("alphanumeric_ids", "no"),
        ("privacy_mode", "yes"),
    ])
    def test_invalid(self, key, value):
        assert check_value(key, value)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_no_file_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_config() == WhoThereConfig()

    def test_search_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".whothere.yml").write_text("whothere:\n  country_only: true\n")
        assert find_config_path() == tmp_path / ".whothere.yml"
        assert load_config().country_only is True

    def test_flat_file(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("ip_anonymization: full\nmax_groups: 5\n")
        config = load_config(path)
        assert config.ip_anonymization == "full"
        assert config.max_groups == 5

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("whothere:\n  nonsense: 1\n  min_group_size: 3\n")
        assert load_config(path).min_group_size == 3

    def test_alphanumeric_ids_from_file(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("whothere:\n  alphanumeric_ids: false\n")
        assert load_config(path).alphanumeric_ids is False

    def test_log_level_upper_cased(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("whothere:\n  log_level: debug\n")
        assert load_config(path).log_level == "DEBUG"

    def test_lists_are_plain_strings(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("whothere:\n  trusted_proxy_ips:\n    - 10.0.0.0/8\n")
        assert load_config(path).trusted_proxy_ips == ["10.0.0.0/8"]

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.yaml", exit_on_error=False)

    def test_missing_explicit_file_exits(self, tmp_path):
        with pytest.raises(SystemExit):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("whothere: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(path, exit_on_error=False)

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("whothere:\n  grouping_strategy: fuzzy\n")
        with pytest.raises(ConfigError, match="grouping_strategy"):
            load_config(path, exit_on_error=False)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(path, exit_on_error=False)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("")
        assert load_config(path) == WhoThereConfig()


class TestValidateConfig:
    def test_default_template_valid(self, tmp_path):
        path = tmp_path / "whothere.yaml"
        path.write_text(get_default_config_yaml())
        assert validate_config(path) == []

    def test_default_template_loads_defaults(self, tmp_path):
        path = tmp_path / "whothere.yaml"
        path.write_text(get_default_config_yaml())
        assert load_config(path) == WhoThereConfig()

    def test_reports_every_error(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text(
            "whothere:\n"
            "  bogus: 1\n"
            "  exclude_patterns: ['(bad']\n"
            "  ip_anonymization: paranoid\n"
        )
        errors = validate_config(path)
        assert len(errors) == 3
        assert any("bogus" in e for e in errors)

    def test_syntax_error(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("whothere: [unclosed\n")
        assert validate_config(path)[0].startswith("Invalid YAML syntax")


class TestSaveConfigValue:
    """Tests for save_config_value function."""

    @pytest.fixture
    def config_file(self, tmp_path):
        path = tmp_path / "whothere.yaml"
        path.write_text(get_default_config_yaml())
        return path

    def test_scalar(self, config_file):
        save_config_value(config_file, "max_length", "4096")
        assert load_config(config_file).max_length == 4096

    def test_bool(self, config_file):
        save_config_value(config_file, "country_only", "true")
        assert load_config(config_file).country_only is True

    def test_list(self, config_file):
        save_config_value(config_file, "exclude_params", "utm_source, utm_medium")
        assert load_config(config_file).exclude_params == ["utm_source", "utm_medium"]

    def test_null(self, config_file):
        save_config_value(config_file, "max_groups", "10")
        save_config_value(config_file, "max_groups", "null")
        assert load_config(config_file).max_groups is None

    def test_float(self, config_file):
        save_config_value(config_file, "slow_threshold_ms", "250.5")
        assert load_config(config_file).slow_threshold_ms == 250.5

    def test_comments_preserved(self, config_file):
        save_config_value(config_file, "max_length", "4096")
        assert "# whothere configuration" in config_file.read_text()

    def test_unknown_key(self, config_file):
        with pytest.raises(ConfigError):
            save_config_value(config_file, "nonsense", "1")

    def test_invalid_value(self, config_file):
        with pytest.raises(ConfigError):
            save_config_value(config_file, "ip_anonymization", "paranoid")
