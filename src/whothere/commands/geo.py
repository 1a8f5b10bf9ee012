"""Geo command - resolve a privacy-respecting location for one request."""

import json

import click
from rich.console import Console
from rich.table import Table

from ..config import ANONYMIZATION_LEVELS
from ..geo import detect_vpn_proxy, extract_geographic_data
from ..visualization import escape_rich, format_confidence
from .common import context_config, parse_header_options

console = Console()


@click.command()
@click.option("--header", "-H", "header_values", multiple=True, help='Header as "Name: value" (repeatable)')
@click.option("--remote", "-r", default=None, help="Transport remote address")
@click.option("--anonymization", "-a", type=click.Choice(ANONYMIZATION_LEVELS), default=None,
              help="IP anonymization level (overrides config)")
@click.option("--country-only", is_flag=True, help="Drop city/region/coordinates")
@click.option("--no-trust-proxy-headers", is_flag=True, help="Ignore proxy headers, use the remote address only")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def geo(ctx, header_values, remote, anonymization, country_only, no_trust_proxy_headers, as_json):
    """Estimate the location of one request.

    Example: whothere geo -H "CF-IPCountry: US" -H "CF-IPCity: San Francisco"
    """
    cfg = context_config(ctx)
    options = cfg.geo_options()
    if anonymization:
        options["ip_anonymization"] = anonymization
    if country_only:
        options["country_only"] = True
    if no_trust_proxy_headers:
        options["trust_proxy_headers"] = False

    pairs = parse_header_options(header_values)
    result = extract_geographic_data({"headers": pairs, "remote_ip": remote}, **options)
    vpn = detect_vpn_proxy(result.ip_address) if result.ip_address else None

    if as_json:
        data = result.to_dict()
        data["vpn_likely"] = vpn.is_vpn_likely if vpn else None
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(title="Geo Resolution", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    for name, value in result.to_dict().items():
        if name == "confidence":
            table.add_row(name, format_confidence(value))
        elif value is None:
            table.add_row(name, "[dim]-[/dim]")
        else:
            table.add_row(name, escape_rich(value))

    if vpn is not None:
        marker = "[red]yes[/red]" if vpn.is_vpn_likely else "[green]no[/green]"
        table.add_row("vpn_likely", f"{marker} [dim]({vpn.checks_passed}/{vpn.total_checks})[/dim]")

    console.print(table)
