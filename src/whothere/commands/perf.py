"""Performance command - per-pattern duration statistics from a request log."""

import click
from rich.console import Console
from rich.table import Table

from ..loader import load_requests
from ..routes import PerformanceSample, analyze_path_performance
from ..visualization import escape_rich, format_ms
from .common import context_config

console = Console()


@click.command()
@click.argument("request_file", type=click.Path(exists=True))
@click.option("--slow-threshold", "-t", type=float, default=None,
              help="Mean duration (ms) above which a pattern is slow (overrides config)")
@click.option("--min-samples", "-m", type=int, default=None,
              help="Minimum samples before a pattern is reported (overrides config)")
@click.option("--top", "-n", default=10, help="Number of slowest routes to list")
@click.pass_context
def perf(ctx, request_file, slow_threshold, min_samples, top):
    """Show duration statistics per route pattern.

    Requests without a duration are ignored.
    """
    cfg = context_config(ctx)
    options = cfg.performance_options()
    if slow_threshold is not None:
        options["slow_threshold_ms"] = slow_threshold
    if min_samples is not None:
        options["min_samples"] = min_samples

    samples = [
        PerformanceSample(r.path, r.duration_ms)
        for r in load_requests(request_file)
        if r.duration_ms is not None
    ]
    if not samples:
        console.print("[yellow]No requests with durations found.[/yellow]")
        return

    report = analyze_path_performance(samples, max_slowest=top, **options)

    table = Table(title=f"Route Performance ({report.total_patterns} patterns)")
    table.add_column("Pattern", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Avg", justify="right", style="bold")
    table.add_column("Median", justify="right")
    table.add_column("P95", justify="right")
    table.add_column("P99", justify="right")
    table.add_column("Max", justify="right")

    threshold = options["slow_threshold_ms"]
    ordered = sorted(report.performance_groups.items(), key=lambda item: item[1].avg, reverse=True)
    for pattern, stats in ordered:
        avg = format_ms(stats.avg)
        if stats.avg > threshold:
            avg = f"[red]{avg}[/red]"
        table.add_row(
            escape_rich(pattern),
            str(stats.count),
            format_ms(stats.min),
            avg,
            format_ms(stats.median),
            format_ms(stats.p95),
            format_ms(stats.p99),
            format_ms(stats.max),
        )

    console.print(table)
    console.print(f"\n[bold]Slow patterns:[/bold] {report.slow_patterns} (mean > {threshold:g} ms)")
    for pattern, stats in report.slowest_routes:
        console.print(f"  [red]{escape_rich(pattern)}[/red] {format_ms(stats.avg)} ms")
