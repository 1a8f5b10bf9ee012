"""Configuration loader for whothere."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

from ruamel.yaml import YAML, YAMLError

from .exceptions import ConfigError

ANONYMIZATION_LEVELS = ("none", "partial", "full")
GROUPING_STRATEGIES = ("exact", "normalized", "pattern")
SUSPICIOUS_CATEGORIES = ("security_scan", "bot_behavior", "malformed", "error_prone")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class WhoThereConfig:
    """whothere configuration."""

    # Geo resolution
    ip_anonymization: str = "partial"
    country_only: bool = False
    trust_proxy_headers: bool = True
    trusted_proxies: list[str] = field(default_factory=lambda: [
        "cloudflare", "cloudfront", "fastly",
    ])

    # Proxy addresses allowed as X-Forwarded-For hops (IPs or CIDRs, empty = no check)
    trusted_proxy_ips: list[str] = field(default_factory=list)

    # Owned by the caller's geo cache, not used here
    cache_ttl_seconds: int = 3600

    # Path filtering (regex strings)
    exclude_patterns: list[str] = field(default_factory=list)
    include_patterns: list[str] = field(default_factory=list)
    max_length: int = 2000
    exclude_static_assets: bool = True

    # Path normalization
    preserve_extensions: bool = False
    max_segments: Optional[int] = None
    id_patterns: list[str] = field(default_factory=list)
    alphanumeric_ids: bool = True

    # Query analysis
    max_params: Optional[int] = None
    exclude_params: list[str] = field(default_factory=list)

    # Grouping
    min_group_size: int = 1
    max_groups: Optional[int] = None
    grouping_strategy: str = "normalized"

    # Performance
    slow_threshold_ms: float = 1000
    min_samples: int = 1

    # Suspicious path rule sets
    categories: list[str] = field(default_factory=lambda: list(SUSPICIOUS_CATEGORIES))

    # Privacy
    privacy_mode: bool = True
    honor_do_not_track: bool = True

    # Logging
    log_level: str = "WARNING"
    json_logs: bool = False

    @staticmethod
    def _compile(patterns: list[str]) -> list[re.Pattern[str]]:
        return [re.compile(p) for p in patterns]

    def geo_options(self) -> dict:
        """Keyword options for extract_geographic_data."""
        return {
            "ip_anonymization": self.ip_anonymization,
            "country_only": self.country_only,
            "trust_proxy_headers": self.trust_proxy_headers,
            "trusted_proxies": list(self.trusted_proxies),
        }

    def filter_options(self) -> dict:
        """Keyword options for filter_trackable_paths (patterns compiled)."""
        return {
            "exclude_patterns": self._compile(self.exclude_patterns),
            "include_patterns": self._compile(self.include_patterns),
            "max_length": self.max_length,
            "exclude_static_assets": self.exclude_static_assets,
        }

    def normalize_options(self) -> dict:
        """Keyword options for normalize_dynamic_path."""
        return {
            "id_patterns": self._compile(self.id_patterns),
            "alphanumeric_ids": self.alphanumeric_ids,
            "preserve_extensions": self.preserve_extensions,
            "max_segments": self.max_segments,
        }

    def query_options(self) -> dict:
        return {
            "exclude_params": list(self.exclude_params),
            "max_params": self.max_params,
        }

    def group_options(self) -> dict:
        return {
            "grouping_strategy": self.grouping_strategy,
            "min_group_size": self.min_group_size,
            "max_groups": self.max_groups,
            **self.normalize_options(),
        }

    def suspicious_options(self) -> dict:
        return {
            "categories": list(self.categories),
            "max_length": self.max_length,
        }

    def performance_options(self) -> dict:
        return {
            "slow_threshold_ms": self.slow_threshold_ms,
            "min_samples": self.min_samples,
            **self.normalize_options(),
        }

    def route_options(self) -> dict:
        """Keyword options for evaluate_route."""
        return {
            **self.filter_options(),
            **self.normalize_options(),
            "categories": list(self.categories),
        }


CONFIG_SEARCH_PATHS = [
    "whothere.yaml",
    "whothere.yml",
    ".whothere.yaml",
    ".whothere.yml",
]

SECTION = "whothere"

LIST_FIELDS = {
    "trusted_proxies", "trusted_proxy_ips", "exclude_patterns",
    "include_patterns", "id_patterns", "exclude_params", "categories",
}

REGEX_LIST_FIELDS = {"exclude_patterns", "include_patterns", "id_patterns"}

BOOL_FIELDS = {
    "country_only", "trust_proxy_headers", "exclude_static_assets",
    "preserve_extensions", "alphanumeric_ids", "privacy_mode",
    "honor_do_not_track", "json_logs",
}

INT_FIELDS = {"cache_ttl_seconds", "max_length", "min_group_size", "min_samples"}

OPTIONAL_INT_FIELDS = {"max_segments", "max_params", "max_groups"}

NUMBER_FIELDS = {"slow_threshold_ms"}

CHOICE_FIELDS = {
    "ip_anonymization": ANONYMIZATION_LEVELS,
    "grouping_strategy": GROUPING_STRATEGIES,
    "log_level": LOG_LEVELS,
}

KNOWN_KEYS = {f.name for f in fields(WhoThereConfig)}


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_value(key: str, value) -> list[str]:
    """Validate one config value, returning error messages (empty = valid)."""
    errors: list[str] = []

    if key in LIST_FIELDS:
        if not isinstance(value, list):
            return [f"'{key}' must be a list"]
        if key in REGEX_LIST_FIELDS:
            for i, pattern in enumerate(value):
                try:
                    re.compile(str(pattern))
                except re.error as e:
                    errors.append(f"Invalid regex in {key}[{i}]: {e}")
        if key == "categories":
            for name in value:
                if str(name) not in SUSPICIOUS_CATEGORIES:
                    errors.append(f"Unknown category in categories: '{name}'")
    elif key in BOOL_FIELDS:
        if not isinstance(value, bool):
            errors.append(f"'{key}' must be true or false, got: {value}")
    elif key in INT_FIELDS:
        if not _is_int(value) or value < 0:
            errors.append(f"'{key}' must be a non-negative integer, got: {value}")
    elif key in OPTIONAL_INT_FIELDS:
        if value is not None and (not _is_int(value) or value < 0):
            errors.append(f"'{key}' must be a non-negative integer or null, got: {value}")
    elif key in NUMBER_FIELDS:
        if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
            errors.append(f"'{key}' must be a non-negative number, got: {value}")
    elif key in CHOICE_FIELDS:
        choices = CHOICE_FIELDS[key]
        normalized = str(value).upper() if key == "log_level" else str(value)
        if normalized not in choices:
            errors.append(f"'{key}' must be one of {', '.join(choices)}, got: {value}")

    return errors


def find_config_path() -> Path | None:
    """Find the active config file path, or None if no config file exists."""
    for name in CONFIG_SEARCH_PATHS:
        path = Path.cwd() / name
        if path.exists():
            return path
    return None


def _parse_scalar(key: str, value: str):
    lowered = value.strip().lower()
    if key in OPTIONAL_INT_FIELDS and lowered in ("null", "none", ""):
        return None
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return int(value)
    except ValueError:
        pass
    if key in NUMBER_FIELDS:
        try:
            return float(value)
        except ValueError:
            pass
    return value


def save_config_value(config_path: Path, key: str, value: str) -> None:
    """Set a single key in the YAML config file (round-trip, preserving comments).

    For list values, the value string is split on commas.

    Raises:
        ConfigError: If the key is unknown or the value is invalid for it
    """
    if key not in KNOWN_KEYS:
        raise ConfigError(f"Unknown key: '{key}'")

    if key in LIST_FIELDS:
        parsed = [v.strip() for v in value.split(",") if v.strip()]
    else:
        parsed = _parse_scalar(key, value)

    errors = check_value(key, parsed)
    if errors:
        raise ConfigError("; ".join(errors))

    yaml = YAML()
    yaml.preserve_quotes = True

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.load(f)

    if data is None:
        data = {}

    target = data
    if SECTION in data:
        target = data[SECTION]

    target[key] = parsed

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f)


def _read_yaml(config_path: Path):
    yaml = YAML()
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.load(f)
    if isinstance(data, dict) and SECTION in data:
        data = data[SECTION]
    return data


def validate_config(config_path: Path) -> list[str]:
    """Validate a config file and return a list of error messages (empty = valid)."""
    try:
        data = _read_yaml(config_path)
    except YAMLError as e:
        return [f"Invalid YAML syntax: {e}"]
    except OSError as e:
        return [f"Cannot read file: {e}"]

    if data is None:
        return []

    if not isinstance(data, dict):
        return [f"Config must be a YAML mapping, got {type(data).__name__}"]

    errors: list[str] = []
    for key, value in data.items():
        if key not in KNOWN_KEYS:
            errors.append(f"Unknown key: '{key}'")
        else:
            errors.extend(check_value(key, value))
    return errors


def _fail(msg: str, exit_on_error: bool, cause: Exception | None = None):
    if exit_on_error:
        print(f"Error: {msg}", file=sys.stderr)
        sys.exit(1)
    raise ConfigError(msg) from cause


def load_config(
    config_path: str | Path | None = None,
    *,
    exit_on_error: bool = True,
) -> WhoThereConfig:
    """Load a configuration file over the defaults.

    Unknown keys are ignored (``validate_config`` reports them).

    Args:
        config_path: Explicit config file; when None the search path is used
        exit_on_error: If True (default), print error and exit on failure.
                       If False, raise ConfigError instead.

    Raises:
        ConfigError: If exit_on_error is False and loading fails
    """
    config = WhoThereConfig()
    explicit = config_path is not None

    if config_path is None:
        config_path = find_config_path()

    if config_path is None:
        return config  # Return default config

    config_path = Path(config_path)
    if not config_path.exists():
        if explicit:
            _fail(f"Config file not found: {config_path}", exit_on_error)
        return config

    try:
        data = _read_yaml(config_path)
    except YAMLError as e:
        _fail(f"Invalid YAML in {config_path}: {e}", exit_on_error, e)
    except OSError as e:
        _fail(f"Cannot read config file {config_path}: {e}", exit_on_error, e)

    if data is None:
        return config

    if not isinstance(data, dict):
        _fail(f"Config must be a YAML mapping, got {type(data).__name__}", exit_on_error)

    for key, value in data.items():
        if key not in KNOWN_KEYS:
            continue
        errors = check_value(key, value)
        if errors:
            _fail(errors[0], exit_on_error)
        if key in LIST_FIELDS:
            value = [str(v) for v in value]
        elif key == "log_level":
            value = str(value).upper()
        elif key in CHOICE_FIELDS:
            value = str(value)
        setattr(config, key, value)

    return config


def get_default_config_yaml() -> str:
    """Return default YAML config template."""
    return r'''# whothere configuration
# Place this file as whothere.yaml in your working directory

whothere:
  # IP anonymization before any lookup: none, partial, full
  ip_anonymization: partial

  # Drop city/region/coordinates from geo results
  country_only: false

  # Read location and client IP from proxy/CDN headers
  trust_proxy_headers: true

  # CDN vendors whose geo headers are trusted
  trusted_proxies:
    - cloudflare
    - cloudfront
    - fastly

  # Proxy addresses allowed in X-Forwarded-For after the client (empty = no check)
  trusted_proxy_ips: []
    # - 10.0.0.0/8
    # - 173.245.48.0/20

  # TTL for a caller-side geo cache (not used by whothere itself)
  cache_ttl_seconds: 3600

  # Extra paths to exclude / force-include (regex)
  exclude_patterns: []
    # - '^/health'
  include_patterns: []
    # - '^/static/landing'

  # Maximum path length in bytes
  max_length: 2000

  # Skip /assets/, /static/, *.css, *.js, favicon.ico, ...
  exclude_static_assets: true

  # Normalization: /files/123.pdf -> /files/:file.pdf
  preserve_extensions: false

  # Keep only this many leading segments (null = unbounded)
  max_segments: null

  # Extra ID segment patterns (regex), tried after numeric/UUID/alphanumeric
  id_patterns: []
    # - 'ORD-[A-Z]{2}-\d{8}'

  # Letter-digit segments (post123, a1b2-c3) count as IDs; turn off to keep
  # route words such as oauth2 or s3
  alphanumeric_ids: true

  # Query analysis
  max_params: null
  exclude_params: []
    # - utm_source

  # Grouping: exact, normalized, pattern
  grouping_strategy: normalized
  min_group_size: 1
  max_groups: null

  # Performance analysis
  slow_threshold_ms: 1000
  min_samples: 1

  # Suspicious path rule sets
  categories:
    - security_scan
    - bot_behavior
    - malformed
    - error_prone

  # Mask personal data in stored paths and strip identifying detail from
  # stored user agents
  privacy_mode: true

  # Mark requests carrying DNT: 1 as excluded
  honor_do_not_track: true

  # Logging (stderr): DEBUG, INFO, WARNING, ERROR, CRITICAL
  log_level: WARNING
  json_logs: false
'''
