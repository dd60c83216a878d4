"""CLI entry point for mindjournal."""

import sys
from pathlib import Path

import click

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cli.commands import analyze_pending, distortions, export, progress, serve, stats, trends
from cli.config import load_config_model
from cli.logging_config import setup_logging


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """MindJournal - journaling analytics."""
    config = load_config_model()
    setup_logging(
        json_mode=config.logging.json_mode,
        level="DEBUG" if verbose else config.logging.level,
        log_file=config.paths.log_file,
    )


cli.add_command(serve)
cli.add_command(stats)
cli.add_command(trends)
cli.add_command(distortions)
cli.add_command(progress)
cli.add_command(analyze_pending)
cli.add_command(export)


if __name__ == "__main__":
    cli()
