"""
Rendering functions for gitlogjson output.

The changelog document itself goes to a file (or stdout); this module
prints the human-readable summary, always on stderr.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from rich.markup import escape
from typing import Dict, Any, Optional

from .services import GenerateResult

console = Console(stderr=True)


def render_options(options: Dict[str, Any], out: Optional[Console] = None) -> None:
    """Show the effective options, one per line."""
    out = out or console
    for key, value in options.items():
        out.print(f"[dim]{key}[/dim] = {escape(repr(value))}", highlight=False)


def render_summary(result: GenerateResult, out: Optional[Console] = None) -> None:
    """
    Render a table of tags and their commit counts.

    Args:
        result: Finished run
        out: Console to print to (stderr by default)
    """
    out = out or console

    if not len(result.changelog):
        out.print("[yellow]No release tags found; wrote an empty changelog.[/yellow]")
    else:
        table = Table(
            title=f"Changelog ({escape(result.dest)})",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold magenta"
        )
        table.add_column("Tag", style="cyan")
        table.add_column("Commits", justify="right")

        for label, records in result.changelog:
            table.add_row(label, str(len(records)))

        out.print(table)
        out.print(f"[green]✓[/green] {result.commit_count} commits across {len(result.changelog)} tags")

    if result.diagnostics:
        out.print(f"[yellow]⚠ {len(result.diagnostics)} input(s) skipped, see warnings above[/yellow]")
