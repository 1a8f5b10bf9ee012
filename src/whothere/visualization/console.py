"""Rich console formatting utilities for whothere."""

from typing import Iterable, Optional

CONFIDENCE_COLORS = {
    "high": "green",
    "medium": "yellow",
    "low": "dim",
}

SUSPICIOUS_COLORS = {
    "security_scan": "red",
    "bot_behavior": "magenta",
    "malformed": "yellow",
    "error_prone": "blue",
}


def escape_rich(text) -> str:
    """Escape Rich markup characters in text.

    Args:
        text: Text to escape

    Returns:
        Escaped text safe for Rich display
    """
    return str(text).replace("[", "\\[")


def format_path(path: str, max_length: int = 45) -> str:
    """Truncate and escape a request path for table display."""
    if len(path) > max_length:
        path = path[: max_length - 3] + "..."
    return f"[white]{escape_rich(path)}[/white]"


def format_confidence(confidence) -> str:
    """Color a confidence label (enum or string)."""
    value = getattr(confidence, "value", confidence)
    color = CONFIDENCE_COLORS.get(value, "white")
    return f"[{color}]{value}[/{color}]"


def format_location(geo) -> str:
    """Compact location: "US San Francisco", "US", or a dim dash.

    Args:
        geo: GeoResult (or anything with country_code/city attributes)
    """
    if geo.country_code is None:
        return "[dim]-[/dim]"
    parts = [f"[cyan]{geo.country_code}[/cyan]"]
    if geo.city:
        parts.append(escape_rich(geo.city))
    return " ".join(parts)


def format_categories(categories: Iterable) -> str:
    """Colored, sorted list of suspicious categories, or a dim "none"."""
    values = sorted(getattr(c, "value", c) for c in categories)
    if not values:
        return "[dim]none[/dim]"
    return ", ".join(
        f"[{SUSPICIOUS_COLORS.get(v, 'white')}]{v}[/{SUSPICIOUS_COLORS.get(v, 'white')}]"
        for v in values
    )


def format_ms(value: Optional[float]) -> str:
    """Milliseconds with one decimal, or a dim dash."""
    if value is None:
        return "[dim]-[/dim]"
    return f"{value:.1f}"


def format_bot(bot) -> str:
    """Bot name/type in yellow, or a dim "human"."""
    if not bot.is_bot:
        return "[dim]human[/dim]"
    label = bot.bot_name or bot.bot_type.value
    return f"[yellow]{escape_rich(label)}[/yellow]"


def format_ip(value: Optional[str]) -> str:
    if not value:
        return "[dim]-[/dim]"
    return f"[bold]{value}[/bold]"
