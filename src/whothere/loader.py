"""Request log loading.

Reads captured request metadata from:
  - JSON arrays of request objects
  - JSON objects with a "requests" list
  - JSON Lines (.jsonl / .ndjson)
  - HAR 1.2 archives (browser devtools / proxy exports)
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlsplit

from .exceptions import RequestLoadError
from .pipeline import RequestMetadata
from .utils.logger import get_logger

logger = get_logger(__name__)

JSON_LINES_SUFFIXES = {".jsonl", ".ndjson"}


def _path_from_url(url: str) -> str:
    parts = urlsplit(url)
    path = parts.path or "/"
    return f"{path}?{parts.query}" if parts.query else path


def _har_headers(headers) -> list[tuple[str, str]]:
    """Convert HAR-format headers ([{name, value}]) to pairs."""
    pairs = []
    for header in headers or []:
        if isinstance(header, dict) and "name" in header:
            pairs.append((str(header["name"]), str(header.get("value", ""))))
    return pairs


def _number(value) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return None


def _parse_entry(entry) -> Optional[RequestMetadata]:
    """Parse one request object, or None if it is unusable."""
    if not isinstance(entry, dict):
        return None

    path = entry.get("path")
    if path is None and isinstance(entry.get("url"), str):
        path = _path_from_url(entry["url"])
    if not isinstance(path, str):
        return None

    headers = entry.get("headers") or {}
    if isinstance(headers, list):
        if all(isinstance(h, dict) for h in headers):
            headers = _har_headers(headers)
        else:
            headers = [tuple(h) for h in headers if isinstance(h, (list, tuple)) and len(h) == 2]
    elif not isinstance(headers, dict):
        headers = {}

    remote_ip = entry.get("remote_ip")
    if isinstance(remote_ip, list):
        remote_ip = tuple(remote_ip)

    duration = _number(entry.get("duration_ms"))
    if duration is not None and duration < 0:
        duration = None

    return RequestMetadata(
        path=path,
        headers=headers,
        remote_ip=remote_ip,
        method=str(entry.get("method", "GET")),
        timestamp=str(entry.get("timestamp", "")),
        duration_ms=duration,
        request_frequency=_number(entry.get("request_frequency")) or 0,
    )


def _parse_har_entry(entry) -> Optional[RequestMetadata]:
    """Parse a single HAR entry into request metadata."""
    if not isinstance(entry, dict):
        return None
    request = entry.get("request", {})
    url = request.get("url") if isinstance(request, dict) else None
    if not isinstance(url, str) or not url:
        return None

    duration = _number(entry.get("time"))
    if duration is not None and duration < 0:
        duration = None

    return RequestMetadata(
        path=_path_from_url(url),
        headers=_har_headers(request.get("headers", [])),
        method=str(request.get("method", "GET")),
        timestamp=str(entry.get("startedDateTime", "")),
        duration_ms=duration,
    )


def _collect(items, parse) -> list[RequestMetadata]:
    requests = []
    for index, item in enumerate(items):
        parsed = parse(item)
        if parsed is None:
            logger.debug("unusable request entry skipped", index=index)
            continue
        requests.append(parsed)
    return requests


def parse_requests(data) -> list[RequestMetadata]:
    """Parse already-decoded JSON data into request metadata.

    Raises:
        RequestLoadError: If the top-level structure is not recognized
    """
    if isinstance(data, list):
        return _collect(data, _parse_entry)

    if isinstance(data, dict):
        if isinstance(data.get("requests"), list):
            return _collect(data["requests"], _parse_entry)
        log = data.get("log")
        if isinstance(log, dict) and isinstance(log.get("entries"), list):
            requests = _collect(log["entries"], _parse_har_entry)
            requests.sort(key=lambda r: r.timestamp)
            return requests

    raise RequestLoadError(
        "Unrecognized request log format: expected a list, {\"requests\": [...]} or a HAR archive"
    )


def _read_json_lines(handle) -> list:
    items = []
    for number, line in enumerate(handle, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            items.append(json.loads(line))
        except json.JSONDecodeError:
            logger.debug("invalid JSON line skipped", line=number)
    return items


def load_requests(
    request_file: Union[str, Path],
    *,
    exit_on_error: bool = True,
) -> list[RequestMetadata]:
    """Load and parse a request log file.

    Args:
        request_file: Path to a JSON, JSON Lines or HAR file
        exit_on_error: If True (default), print error and exit on failure.
                       If False, raise RequestLoadError instead.

    Returns:
        List of RequestMetadata (unusable entries are skipped)

    Raises:
        RequestLoadError: If exit_on_error is False and loading fails
    """
    request_path = Path(request_file)

    try:
        with open(request_path, "r", encoding="utf-8") as f:
            if request_path.suffix.lower() in JSON_LINES_SUFFIXES:
                data = _read_json_lines(f)
            else:
                data = json.load(f)
        return parse_requests(data)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON in request file '{request_path}': {e}"
        if exit_on_error:
            print(f"Error: {msg}", file=sys.stderr)
            sys.exit(1)
        raise RequestLoadError(msg) from e
    except OSError as e:
        msg = f"Cannot read request file '{request_path}': {e}"
        if exit_on_error:
            print(f"Error: {msg}", file=sys.stderr)
            sys.exit(1)
        raise RequestLoadError(msg) from e
    except RequestLoadError as e:
        if exit_on_error:
            print(f"Error: {e} ({request_path})", file=sys.stderr)
            sys.exit(1)
        raise
