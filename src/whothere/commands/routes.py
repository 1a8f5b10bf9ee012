"""Route commands - path filtering, normalization and analysis."""

import click
from rich.console import Console
from rich.table import Table

from ..config import GROUPING_STRATEGIES, SUSPICIOUS_CATEGORIES
from ..routes import (
    analyze_query_parameters,
    classify_route,
    detect_suspicious_paths,
    filter_trackable_paths,
    group_similar_paths,
    normalize_dynamic_path,
)
from ..visualization import escape_rich, format_categories, format_path
from .common import context_config, read_paths

console = Console()

PATHS_ARGUMENT = click.argument("paths", nargs=-1)
FILE_OPTION = click.option("--file", "-f", "path_file", type=click.Path(exists=True),
                           default=None, help="Read paths from a file, one per line")


@click.group("routes")
def routes():
    """Analyze request paths.

    Paths are given as arguments or read from a file with --file.
    """


@routes.command("filter")
@PATHS_ARGUMENT
@FILE_OPTION
@click.pass_context
def filter_cmd(ctx, paths, path_file):
    """Print only trackable paths (static assets and excluded paths dropped)."""
    cfg = context_config(ctx)
    all_paths = read_paths(paths, path_file)
    kept = filter_trackable_paths(all_paths, **cfg.filter_options())

    for path in kept:
        click.echo(path)
    console.print(f"[dim]{len(kept)} of {len(all_paths)} paths trackable[/dim]", highlight=False)


@routes.command()
@PATHS_ARGUMENT
@FILE_OPTION
@click.option("--preserve-extensions", is_flag=True, help="Keep file extensions (:file.pdf)")
@click.option("--max-segments", type=int, default=None, help="Keep only N leading segments")
@click.pass_context
def normalize(ctx, paths, path_file, preserve_extensions, max_segments):
    """Normalize paths into route patterns (/users/123 -> /users/:id)."""
    cfg = context_config(ctx)
    options = cfg.normalize_options()
    if preserve_extensions:
        options["preserve_extensions"] = True
    if max_segments is not None:
        options["max_segments"] = max_segments

    table = Table(title="Route Patterns")
    table.add_column("Path")
    table.add_column("Pattern", style="cyan")

    for path in read_paths(paths, path_file):
        table.add_row(format_path(path, 60), escape_rich(normalize_dynamic_path(path, **options)))

    console.print(table)


@routes.command()
@PATHS_ARGUMENT
@FILE_OPTION
@click.option("--exclude-param", "exclude_params", multiple=True, help="Parameter to drop (repeatable)")
@click.option("--max-params", type=int, default=None, help="Keep at most N parameters")
@click.pass_context
def query(ctx, paths, path_file, exclude_params, max_params):
    """Analyze query strings (values normalized to :number, :uuid, :long_string)."""
    cfg = context_config(ctx)
    options = cfg.query_options()
    if exclude_params:
        options["exclude_params"] = list(exclude_params)
    if max_params is not None:
        options["max_params"] = max_params

    table = Table(title="Query Parameters")
    table.add_column("Base Path")
    table.add_column("Count", justify="right")
    table.add_column("Params", style="cyan")

    for path in read_paths(paths, path_file):
        analysis = analyze_query_parameters(path, **options)
        params = ", ".join(f"{k}={v}" for k, v in analysis.params.items())
        table.add_row(
            format_path(analysis.base_path),
            str(analysis.param_count),
            escape_rich(params) if params else "[dim]none[/dim]",
        )

    console.print(table)


@routes.command()
@PATHS_ARGUMENT
@FILE_OPTION
@click.option("--strategy", "-s", type=click.Choice(GROUPING_STRATEGIES), default=None,
              help="Grouping strategy (overrides config)")
@click.option("--min-group-size", "-m", type=int, default=None, help="Drop groups smaller than N")
@click.option("--max-groups", type=int, default=None, help="Keep only the N largest groups")
@click.pass_context
def group(ctx, paths, path_file, strategy, min_group_size, max_groups):
    """Group similar paths, largest groups first."""
    cfg = context_config(ctx)
    options = cfg.group_options()
    if strategy:
        options["grouping_strategy"] = strategy
    if min_group_size is not None:
        options["min_group_size"] = min_group_size
    if max_groups is not None:
        options["max_groups"] = max_groups

    groups = group_similar_paths(read_paths(paths, path_file), **options)

    if not groups:
        console.print("[dim]No groups match the criteria.[/dim]")
        return

    table = Table(title=f"Path Groups ({options['grouping_strategy']})")
    table.add_column("Group", style="cyan")
    table.add_column("Count", justify="right", style="bold")
    table.add_column("Examples", style="dim")

    for key, members in groups.items():
        examples = ", ".join(members[:3])
        if len(members) > 3:
            examples += f" +{len(members) - 3}"
        table.add_row(escape_rich(key), str(len(members)), escape_rich(examples))

    console.print(table)


@routes.command()
@PATHS_ARGUMENT
@FILE_OPTION
@click.option("--category", "-c", "categories", multiple=True, type=click.Choice(SUSPICIOUS_CATEGORIES),
              help="Only run these rule sets (repeatable)")
@click.pass_context
def suspicious(ctx, paths, path_file, categories):
    """Flag paths that look like scans, bots, malformed or broken client requests."""
    cfg = context_config(ctx)
    options = cfg.suspicious_options()
    if categories:
        options["categories"] = list(categories)

    report = detect_suspicious_paths(read_paths(paths, path_file), **options)

    console.print(
        f"[bold]Suspicious:[/bold] {report.suspicious_paths} of {report.total_paths} "
        f"({report.suspicious_percentage}%)",
        highlight=False,
    )
    if not report.details:
        return

    table = Table(title="Suspicious Paths")
    table.add_column("Path")
    table.add_column("Categories")

    for detail in report.details:
        table.add_row(format_path(repr(detail.path)[1:-1], 60), format_categories(detail.categories))

    console.print(table)


@routes.command()
@PATHS_ARGUMENT
@FILE_OPTION
def classify(paths, path_file):
    """Classify paths into route categories (admin, api, auth, ...)."""
    table = Table(title="Route Categories")
    table.add_column("Path")
    table.add_column("Category", style="cyan")
    table.add_column("Label", style="bold")

    for path in read_paths(paths, path_file):
        route_class = classify_route(path)
        table.add_row(format_path(path, 60), route_class.category.value, route_class.label)

    console.print(table)
