"""Enrich command - per-request enrichment of a request log."""

import json
from collections import Counter

import click
from rich.console import Console
from rich.table import Table

from ..loader import load_requests
from ..pipeline import enrich_requests
from ..visualization import (
    format_bot,
    format_categories,
    format_confidence,
    format_ip,
    format_location,
    format_path,
)
from .common import context_config

console = Console()


@click.command()
@click.argument("request_file", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Print records as JSON instead of a table")
@click.option("--limit", "-n", default=50, help="Max number of requests to show in the table")
@click.pass_context
def enrich(ctx, request_file, as_json, limit):
    """Enrich every request in a log with client IP, location, route and bot info.

    REQUEST_FILE may be a JSON array, {"requests": [...]}, JSON Lines or a HAR file.
    """
    cfg = context_config(ctx)
    requests = load_requests(request_file)
    records = enrich_requests(requests, cfg)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in records], indent=2))
        return

    if not records:
        console.print("[yellow]No requests found.[/yellow]")
        return

    table = Table(title=f"Enriched Requests ({len(records)})")
    table.add_column("Method", style="bold magenta")
    table.add_column("Path")
    table.add_column("Client IP")
    table.add_column("Proxy", style="dim")
    table.add_column("Location")
    table.add_column("Conf")
    table.add_column("Category", style="cyan")
    table.add_column("Suspicious")
    table.add_column("Bot")

    for record in records[:limit]:
        path = format_path(record.path)
        if not record.route.trackable:
            path = f"[dim]{path}[/dim]"
        table.add_row(
            record.method,
            path,
            format_ip(record.ip_address),
            record.proxy_vendor.value,
            format_location(record.geo),
            format_confidence(record.geo.confidence),
            record.route.category.label,
            format_categories(record.route.suspicious_categories),
            format_bot(record.bot),
        )

    console.print(table)

    if len(records) > limit:
        console.print(f"[dim]... and {len(records) - limit} more (use --limit to show more)[/dim]")

    untrusted = sum(1 for r in records if not r.headers_valid)
    bots = sum(1 for r in records if r.bot.is_bot)
    excluded = sum(1 for r in records if r.excluded)
    suspicious = sum(1 for r in records if r.route.is_suspicious)
    countries = Counter(r.geo.country_code for r in records if r.geo.country_code)

    console.print()
    console.print(f"[bold]Requests:[/bold] {len(records)}")
    console.print(f"[bold]Untrusted headers:[/bold] {untrusted}")
    console.print(f"[bold]Bots:[/bold] {bots}")
    console.print(f"[bold]Excluded from analytics:[/bold] {excluded}")
    console.print(f"[bold]Suspicious paths:[/bold] {suspicious}")
    if countries:
        top = ", ".join(f"{code} ({count})" for code, count in countries.most_common(5))
        console.print(f"[bold]Top countries:[/bold] {top}")
