"""Helpers shared by CLI commands."""

from __future__ import annotations

from pathlib import Path

import click

from ..config import WhoThereConfig, load_config


def context_config(ctx: click.Context) -> WhoThereConfig:
    """Config loaded by the root group, or defaults + config file when run standalone."""
    obj = ctx.find_root().obj
    if isinstance(obj, dict) and isinstance(obj.get("config"), WhoThereConfig):
        return obj["config"]
    return load_config()


def parse_header_options(values) -> list[tuple[str, str]]:
    """Parse repeated ``-H "Name: value"`` options into header pairs."""
    pairs = []
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"Expected 'Name: value', got {raw!r}", param_hint="-H/--header")
        pairs.append((name.strip(), value.strip()))
    return pairs


def read_paths(paths, path_file) -> list[str]:
    """Paths from arguments plus a file (one per line, blank lines skipped)."""
    collected = list(paths)
    if path_file:
        text = Path(path_file).read_text(encoding="utf-8")
        collected.extend(line.strip() for line in text.splitlines() if line.strip())
    if not collected:
        raise click.UsageError("No paths given. Pass paths as arguments or use --file.")
    return collected
