"""Journal export CLI command."""

from pathlib import Path

import click
from rich.console import Console

from cli.utils import get_components, resolve_owner

console = Console()


@click.command()
@click.option("-o", "--output", default=None, type=click.Path(),
              help="Output file (json) or directory (markdown)")
@click.option(
    "-f",
    "--format",
    "fmt",
    default="json",
    type=click.Choice(["json", "markdown"]),
    help="Export format",
)
@click.option("-d", "--days", default=None, type=int, help="Only the last N days")
@click.option("-u", "--user", "user", help="Owner id (defaults to the only user)")
def export(output: str | None, fmt: str, days: int | None, user: str | None):
    """Export journal entries to JSON or markdown with frontmatter."""
    from journal.export import JournalExporter

    c = get_components()
    owner = resolve_owner(c["store"], user)
    exporter = JournalExporter(c["store"])
    export_dir = c["config"].paths.export_dir

    with console.status("Exporting..."):
        if fmt == "json":
            target = Path(output) if output else export_dir / f"{owner}.json"
            count = exporter.export_json(owner, target, days=days)
        else:
            target = Path(output) if output else export_dir / owner
            count = exporter.export_markdown(owner, target, days=days)

    console.print(f"[green]Exported {count} entries to {target}[/]")
