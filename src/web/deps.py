"""Dependency injection for FastAPI routes."""

from datetime import tzinfo
from functools import lru_cache
from pathlib import Path

import structlog
from fastapi import Depends, HTTPException, status

from analysis import AnalysisProvider
from analytics.windows import resolve_tz
from cli.config import load_config_model
from cli.config_models import MindJournalConfig
from journal.storage import EntryStore
from llm import LLMError, create_llm_provider

logger = structlog.get_logger()


@lru_cache
def get_config() -> MindJournalConfig:
    """Load shared config (config.yaml + env overrides)."""
    return load_config_model()


@lru_cache
def _store_for(db_path: Path) -> EntryStore:
    return EntryStore(db_path)


def get_entry_store(config: MindJournalConfig = Depends(get_config)) -> EntryStore:
    return _store_for(config.paths.db)


def get_tz(config: MindJournalConfig = Depends(get_config)) -> tzinfo:
    return resolve_tz(config.analytics.timezone)


@lru_cache
def _provider_for(
    provider: str,
    api_key: str | None,
    model: str | None,
    attempts: int,
    max_tokens: int,
    temperature: float,
):
    llm = create_llm_provider(provider=provider, api_key=api_key, model=model)
    logger.info("analysis.provider_ready", provider=llm.provider_name, model=llm.model)
    return AnalysisProvider(
        llm, max_attempts=attempts, max_tokens=max_tokens, temperature=temperature
    )


def get_analysis_provider(
    config: MindJournalConfig = Depends(get_config),
) -> AnalysisProvider:
    """Analysis provider built from config; tests swap it via dependency_overrides."""
    try:
        return _provider_for(
            config.llm.provider,
            config.llm.api_key,
            config.llm.model,
            config.analysis.max_attempts,
            config.llm.max_tokens,
            config.llm.temperature,
        )
    except LLMError as e:
        logger.warning("analysis.provider_unavailable", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI analysis is not configured",
        )
