"""Shared test fixtures for mindjournal."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from journal.models import Distortion, EntryAnalysis  # noqa: E402
from journal.storage import EntryStore  # noqa: E402

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def store(tmp_path):
    return EntryStore(tmp_path / "journal.db")


@pytest.fixture
def make_entry(store):
    """Create an entry, optionally analysed, `days_ago` days before NOW."""

    def _make(
        owner_id="user-1",
        title="Entry",
        content="Some words about my day",
        mood="neutral",
        mood_intensity=5,
        tags=None,
        days_ago=0.0,
        created_at=None,
        distortions=None,
        sentiment=None,
        resolved=False,
        important=False,
    ):
        entry = store.create(
            owner_id=owner_id,
            title=title,
            content=content,
            mood=mood,
            mood_intensity=mood_intensity,
            tags=tags,
            is_important=important,
            created_at=created_at or NOW - timedelta(days=days_ago),
        )
        if resolved:
            entry = store.update(owner_id, entry.id, is_resolved=True)
        if distortions is not None:
            analysis = EntryAnalysis(
                distortions=[
                    d if isinstance(d, Distortion) else Distortion(type=d, confidence=0.8)
                    for d in distortions
                ],
                overall_sentiment=sentiment,
            )
            store.save_analysis(owner_id, entry.id, analysis)
            entry = store.get(owner_id, entry.id)
        return entry

    return _make


@pytest.fixture
def mock_llm():
    """LLMProvider stand-in; set .generate.return_value per test."""
    llm = MagicMock()
    llm.provider_name = "gemini"
    llm.model = "gemini-2.0-flash"
    return llm


@pytest.fixture
def analysis_provider(mock_llm):
    """AnalysisProvider over mock_llm with retry waits disabled."""
    from analysis import AnalysisProvider

    return AnalysisProvider(mock_llm, max_attempts=2, min_wait=0, max_wait=0)
