"""Version command - show version."""

import click
from rich.console import Console

console = Console()


@click.command()
def version():
    """Show version."""
    from whothere import __version__
    console.print(f"whothere {__version__}")
