"""Journal entry data model."""

import math
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Optional

DEFAULT_MOOD_INTENSITY = 5
WORDS_PER_MINUTE = 200


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Normalize to an aware UTC datetime. Naive input is taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_ts(dt: datetime) -> str:
    """Fixed-width ISO string so lexical order equals time order in SQLite."""
    return to_utc(dt).isoformat(timespec="microseconds")


def parse_ts(raw: str | None) -> Optional[datetime]:
    if not raw:
        return None
    return to_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))


def count_words(text: str) -> int:
    return len([w for w in text.split() if w])


def reading_time(word_count: int) -> int:
    return math.ceil(word_count / WORDS_PER_MINUTE)


@dataclass
class Distortion:
    type: str
    confidence: float = 0.0
    explanation: str = ""
    text_snippet: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Distortion":
        return cls(
            type=data.get("type", ""),
            confidence=float(data.get("confidence") or 0.0),
            explanation=data.get("explanation") or "",
            text_snippet=data.get("text_snippet") or data.get("textSnippet") or "",
        )


@dataclass
class Reframe:
    original_thought: str
    reframed_thought: str
    technique: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Reframe":
        return cls(
            original_thought=data.get("original_thought") or data.get("originalThought") or "",
            reframed_thought=data.get("reframed_thought") or data.get("reframedThought") or "",
            technique=data.get("technique") or "",
        )


@dataclass
class EntryAnalysis:
    """Result of the external analysis provider, as stored on the entry."""

    processed: bool = False
    distortions: list[Distortion] = field(default_factory=list)
    reframes: list[Reframe] = field(default_factory=list)
    overall_sentiment: Optional[str] = None
    key_themes: list[str] = field(default_factory=list)
    processed_at: Optional[datetime] = None
    processing_error: Optional[str] = None

    @property
    def distortion_count(self) -> int:
        return len(self.distortions) if self.processed else 0


@dataclass
class JournalEntry:
    owner_id: str
    title: str
    content: str
    mood: str
    mood_intensity: int = DEFAULT_MOOD_INTENSITY
    tags: list[str] = field(default_factory=list)
    is_important: bool = False
    is_resolved: bool = False
    analysis: EntryAnalysis = field(default_factory=EntryAnalysis)
    word_count: int = 0
    reading_time: int = 0
    edit_count: int = 0
    last_edited_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def summary(self) -> dict:
        """Compact dict for dashboard/summary listings."""
        return {
            "id": self.id,
            "title": self.title,
            "mood": self.mood,
            "mood_intensity": self.mood_intensity,
            "word_count": self.word_count,
            "has_distortions": self.analysis.distortion_count > 0,
            "distortion_count": self.analysis.distortion_count,
            "is_important": self.is_important,
            "is_resolved": self.is_resolved,
            "created_at": self.created_at,
        }

    def to_dict(self) -> dict:
        return asdict(self)
