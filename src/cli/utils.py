"""Shared CLI utilities."""

import sys

import structlog
from rich.console import Console

console = Console()
logger = structlog.get_logger()


def get_components(need_analysis: bool = False) -> dict:
    """Initialize components from config.

    Args:
        need_analysis: Also build the LLM-backed analysis provider
    """
    from analysis import AnalysisProvider
    from analytics.windows import resolve_tz
    from cli.config import load_config_model
    from journal import EntryStore
    from llm import LLMError, create_llm_provider

    config = load_config_model()
    store = EntryStore(config.paths.db)

    provider = None
    if need_analysis:
        try:
            llm = create_llm_provider(
                provider=config.llm.provider,
                api_key=config.llm.api_key,
                model=config.llm.model,
            )
        except LLMError as e:
            console.print(f"[red]Config error:[/] {e}")
            sys.exit(1)
        provider = AnalysisProvider(
            llm,
            max_attempts=config.analysis.max_attempts,
            max_tokens=config.llm.max_tokens,
            temperature=config.llm.temperature,
        )

    return {
        "config": config,
        "store": store,
        "tz": resolve_tz(config.analytics.timezone),
        "provider": provider,
    }


def resolve_owner(store, user: str | None) -> str:
    """Owner to report on: --user, else the only owner in the store."""
    if user:
        return user
    owners = store.owners()
    if len(owners) == 1:
        return owners[0]
    if not owners:
        console.print("[yellow]No journal entries yet.[/]")
    else:
        console.print(f"[red]Multiple users found, pass --user:[/] {', '.join(owners)}")
    sys.exit(1)
