"""Analytics CLI commands: stats, trends, distortions, progress."""

import click
from rich.console import Console
from rich.table import Table

from cli.utils import get_components, resolve_owner

console = Console()

TREND_STYLE = {
    "improving": "[green]improving[/]",
    "stable": "[dim]stable[/]",
    "declining": "[red]declining[/]",
    "needs-attention": "[yellow]needs-attention[/]",
}


def _user_option(f):
    return click.option("-u", "--user", "user", help="Owner id (defaults to the only user)")(f)


def _days_option(default: int = 30):
    return click.option("-d", "--days", default=default, type=click.IntRange(1, 365),
                        help="Lookback days")


@click.command()
@_days_option()
@_user_option
def stats(days: int, user: str | None):
    """Entry count, average mood, streak and improvement rate."""
    from analytics import journal_stats

    c = get_components()
    owner = resolve_owner(c["store"], user)
    data = journal_stats(c["store"], owner, days=days, tz=c["tz"])

    table = Table(show_header=False, title=f"Journal stats - last {days} days")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Entries", str(data["total_entries"]))
    table.add_row("Avg mood score", f"{data['avg_mood_score']:.2f}")
    table.add_row("Streak (days)", str(data["streak_days"]))
    table.add_row("Improvement", f"{data['improvement_rate']:+.1f}%")
    console.print(table)


@click.command()
@_days_option()
@click.option("-g", "--group-by", "group_by", default="day",
              type=click.Choice(["day", "week", "month"]), help="Bucket size")
@_user_option
def trends(days: int, group_by: str, user: str | None):
    """Mood counts per day, week or month."""
    from analytics import mood_trends

    c = get_components()
    owner = resolve_owner(c["store"], user)
    buckets = mood_trends(c["store"], owner, days=days, granularity=group_by, tz=c["tz"])

    if not buckets:
        console.print(f"[yellow]No entries in the last {days} days.[/]")
        return

    table = Table(show_header=True, title=f"Mood trends ({group_by}, last {days} days)")
    table.add_column("Bucket", style="dim")
    table.add_column("Entries", justify="right")
    table.add_column("Moods")

    for b in buckets:
        moods = ", ".join(
            f"{m['mood']} x{m['count']} ({m['avg_intensity']:.1f})" for m in b["per_mood"]
        )
        table.add_row(b["bucket_key"], str(b["total_count"]), moods)

    console.print(table)


@click.command()
@_days_option()
@click.option("--examples/--no-examples", default=False, help="Show example snippets")
@_user_option
def distortions(days: int, examples: bool, user: str | None):
    """Cognitive distortion frequency from analysed entries."""
    from analytics import distortion_patterns, distortion_summary

    c = get_components()
    owner = resolve_owner(c["store"], user)
    if examples:
        cfg = c["config"].analytics
        rows = distortion_patterns(
            c["store"], owner, days=days,
            example_limit=cfg.example_limit, example_order=cfg.example_order,
        )
    else:
        rows = distortion_summary(c["store"], owner, days=days)

    if not rows:
        console.print("[yellow]No distortions found. Run analyze-pending first?[/]")
        return

    table = Table(show_header=True, title=f"Distortions - last {days} days")
    table.add_column("Type", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Avg confidence", justify="right")
    for r in rows:
        table.add_row(r["type"], str(r["count"]), f"{r['avg_confidence']:.2f}")
    console.print(table)

    if examples:
        for r in rows:
            for ex in r["examples"]:
                console.print(f"\n[cyan]{r['type']}[/] [dim]{ex['date']:%Y-%m-%d} {ex['entry_title']}[/]")
                console.print(f'  "{ex["snippet"]}"')


@click.command()
@_days_option()
@_user_option
def progress(days: int, user: str | None):
    """Compare this window with the one before it."""
    from analytics import progress_indicators

    c = get_components()
    owner = resolve_owner(c["store"], user)
    indicators = progress_indicators(c["store"], owner, days=days)

    table = Table(show_header=True, title=f"Progress - last {days} days vs previous {days}")
    table.add_column("Indicator")
    table.add_column("Current", justify="right")
    table.add_column("Previous", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Trend")
    for name, ind in indicators.items():
        table.add_row(
            name.replace("_", " "),
            f"{ind['current']:.3f}",
            f"{ind['previous']:.3f}",
            f"{ind['percent_change']:+.1f}%",
            TREND_STYLE.get(ind["trend"], ind["trend"]),
        )
    console.print(table)
