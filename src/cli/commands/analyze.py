"""Batch analysis CLI command."""

import click
from rich.console import Console
from rich.table import Table

from cli.utils import get_components, resolve_owner

console = Console()


@click.command("analyze-pending")
@click.option("-n", "--limit", default=None, type=click.IntRange(1, 50),
              help="Max entries per user (default: analysis.batch_limit)")
@click.option("-u", "--user", "user", help="Owner id (default: every user)")
def analyze_pending(limit: int | None, user: str | None):
    """Run the analysis provider over unprocessed entries."""
    from analysis import batch_analyze
    from observability import log_run_summary

    c = get_components(need_analysis=True)
    cfg = c["config"].analysis
    owners = [resolve_owner(c["store"], user)] if user else c["store"].owners()

    table = Table(show_header=True, title="Analysis")
    table.add_column("User", style="dim")
    table.add_column("Entry")
    table.add_column("Result")

    total = failed = 0
    for owner in owners:
        with console.status(f"Analyzing entries for {owner}..."):
            result = batch_analyze(
                c["store"], c["provider"], owner,
                limit=limit or cfg.batch_limit, delay=cfg.batch_delay,
            )
        total += result.processed_count
        failed += result.error_count
        for r in result.results:
            outcome = (
                f"[green]{r['distortion_count']} distortions[/]"
                if r["success"]
                else f"[red]{r['error']}[/]"
            )
            table.add_row(owner, r["title"][:40], outcome)

    if not total:
        console.print("[yellow]Nothing to analyze.[/]")
        return

    console.print(table)
    console.print(f"\n[bold]Processed:[/] {total}  |  Failed: {failed}")
    log_run_summary("analyze_pending")
