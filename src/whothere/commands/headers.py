"""Headers command - resolve client IP and proxy vendor from headers."""

import json

import click
from rich.console import Console
from rich.table import Table

from ..proxy import parse_all
from ..visualization import escape_rich
from .common import context_config, parse_header_options

console = Console()


@click.command()
@click.option("--header", "-H", "header_values", multiple=True, help='Header as "Name: value" (repeatable)')
@click.option("--remote", "-r", default=None, help="Transport remote address")
@click.option("--trusted-proxy", "trusted_proxies", multiple=True,
              help="Proxy IP/CIDR allowed in X-Forwarded-For (repeatable, overrides config)")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def headers(ctx, header_values, remote, trusted_proxies, as_json):
    """Resolve the client IP, proxy vendor and header trust for one request.

    Example: whothere headers -H "CF-Connecting-IP: 203.0.113.195" -H "CF-Ray: 7d1c2b3a-SFO"
    """
    cfg = context_config(ctx)
    pairs = parse_header_options(header_values)
    trusted = list(trusted_proxies) or cfg.trusted_proxy_ips or None

    parsed = parse_all(pairs, remote, trusted)

    if as_json:
        click.echo(json.dumps({
            "real_ip": parsed.real_ip,
            "proxy_type": parsed.proxy_type.value,
            "headers_valid": parsed.headers_valid,
            "header_issue": parsed.header_issue.value if parsed.header_issue else None,
            "connection": {
                "protocol": parsed.connection.protocol,
                "scheme": parsed.connection.scheme,
                "port": parsed.connection.port,
                "host": parsed.connection.host,
                "user_agent": parsed.connection.user_agent,
            },
            "geo": parsed.geo,
        }, indent=2))
        return

    table = Table(title="Header Trust Resolution", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Real IP", parsed.real_ip or "[dim]-[/dim]")
    table.add_row("Proxy", parsed.proxy_type.value)
    if parsed.headers_valid:
        table.add_row("Headers", "[green]valid[/green]")
    else:
        table.add_row("Headers", f"[red]{parsed.header_issue.value}[/red]")
    table.add_row("Protocol", parsed.connection.protocol)
    table.add_row("Port", str(parsed.connection.port) if parsed.connection.port else "[dim]-[/dim]")
    table.add_row("Host", escape_rich(parsed.connection.host or "-"))
    table.add_row("User-Agent", escape_rich(parsed.connection.user_agent or "-"))
    for key, value in parsed.geo.items():
        table.add_row(f"geo.{key}", escape_rich(value))

    console.print(table)
