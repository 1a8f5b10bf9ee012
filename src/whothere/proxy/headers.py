"""Case-insensitive header set built once per request."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, Iterator, Optional, Union

FORWARDED_FOR = "x-forwarded-for"

HeadersInput = Union["HeaderSet", Mapping, Iterable[tuple[Any, Any]], None]


def _to_text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1")
    if value is None:
        return ""
    return str(value)


class HeaderSet(Mapping):
    """Read-only header mapping with case-insensitive names.

    Names are lower-cased once at construction so lookups on the hot path
    cost a single ``str.lower()`` of the requested key. ``bytes`` names and
    values (ASGI scopes) are decoded as latin-1. Repeated ``X-Forwarded-For``
    entries are joined into a single comma-separated chain; for every other
    repeated header the last value wins. List or tuple values (multi-dict
    style) are treated the same way as repeated entries.

    Examples:
        HeaderSet({"CF-Connecting-IP": "203.0.113.195"})["cf-connecting-ip"]
        HeaderSet([(b"x-forwarded-for", b"1.2.3.4"), (b"X-Forwarded-For", b"5.6.7.8")])
    """

    __slots__ = ("_data",)

    def __init__(self, headers: HeadersInput = None):
        data: dict[str, str] = {}

        if isinstance(headers, HeaderSet):
            data = dict(headers._data)
        elif headers is not None:
            items = headers.items() if isinstance(headers, Mapping) else headers
            try:
                for item in items:
                    try:
                        key, value = item
                    except (TypeError, ValueError):
                        continue
                    name = _to_text(key).strip().lower()
                    if not name:
                        continue
                    if isinstance(value, (list, tuple)):
                        values = [_to_text(v) for v in value]
                        if not values:
                            continue
                        text = ", ".join(values) if name == FORWARDED_FOR else values[-1]
                    else:
                        text = _to_text(value)
                    if name == FORWARDED_FOR and data.get(name):
                        data[name] = f"{data[name]}, {text}"
                    else:
                        data[name] = text
            except TypeError:
                # Not iterable: treat as no headers
                data = {}

        self._data = data

    @classmethod
    def coerce(cls, headers: HeadersInput) -> "HeaderSet":
        """Return ``headers`` unchanged if already a HeaderSet, else build one."""
        if isinstance(headers, HeaderSet):
            return headers
        return cls(headers)

    def __getitem__(self, name: str) -> str:
        return self._data[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"HeaderSet({self._data!r})"

    def value(self, name: str) -> Optional[str]:
        """Get a stripped header value, treating empty values as missing."""
        raw = self._data.get(name.lower())
        if raw is None:
            return None
        stripped = raw.strip()
        return stripped or None

    def first(self, *names: str) -> Optional[str]:
        """Return the first non-empty value among ``names``."""
        for name in names:
            found = self.value(name)
            if found is not None:
                return found
        return None

    def has_any(self, names: Iterable[str]) -> bool:
        """Check whether any of the given header names is present."""
        return any(name in self._data for name in names)

    def has_prefix(self, prefix: str) -> bool:
        """Check whether any header name starts with ``prefix``."""
        return any(name.startswith(prefix) for name in self._data)

    def forwarded_chain(self) -> list[str]:
        """Split ``X-Forwarded-For`` into its hops (client first, blanks kept)."""
        raw = self._data.get(FORWARDED_FOR)
        if not raw:
            return []
        return [hop.strip() for hop in raw.split(",")]
