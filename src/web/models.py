"""Pydantic request/response schemas for the web API.

Wire format is camelCase; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shared_types import Mood


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Journal ---


class EntryCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=10_000)
    mood: Mood
    mood_intensity: Optional[int] = Field(None, ge=1, le=10)
    tags: Optional[list[str]] = None
    is_important: bool = False


class EntryUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1, max_length=10_000)
    mood: Optional[Mood] = None
    mood_intensity: Optional[int] = Field(None, ge=1, le=10)
    tags: Optional[list[str]] = None
    is_important: Optional[bool] = None
    is_resolved: Optional[bool] = None


class DistortionOut(CamelModel):
    type: str
    confidence: float
    explanation: str = ""
    text_snippet: str = ""


class ReframeOut(CamelModel):
    original_thought: str
    reframed_thought: str
    technique: str = ""


class AnalysisOut(CamelModel):
    processed: bool = False
    distortions: list[DistortionOut] = []
    reframes: list[ReframeOut] = []
    overall_sentiment: Optional[str] = None
    key_themes: list[str] = []
    processed_at: Optional[datetime] = None
    processing_error: Optional[str] = None


class EntryOut(CamelModel):
    id: str
    title: str
    content: str
    mood: str
    mood_intensity: int
    tags: list[str] = []
    is_important: bool = False
    is_resolved: bool = False
    analysis: AnalysisOut
    word_count: int = 0
    reading_time: int = 0
    edit_count: int = 0
    last_edited_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class EntrySummaryOut(CamelModel):
    id: str
    title: str
    mood: str
    mood_intensity: int
    word_count: int = 0
    has_distortions: bool = False
    distortion_count: int = 0
    is_important: bool = False
    is_resolved: bool = False
    created_at: datetime


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_entries: int
    has_next: bool
    has_prev: bool


class EntryListOut(CamelModel):
    entries: list[EntryOut]
    pagination: Pagination


class EntrySummaryListOut(CamelModel):
    entries: list[EntrySummaryOut]
    pagination: Pagination


# --- Analytics ---


class MoodCount(CamelModel):
    mood: str
    count: int
    avg_intensity: float


class MoodTrendBucket(CamelModel):
    bucket_key: str
    per_mood: list[MoodCount]
    total_count: int


class MoodTrendsOut(CamelModel):
    trends: list[MoodTrendBucket]
    period: str
    group_by: str


class DistortionExample(CamelModel):
    snippet: str
    explanation: str
    entry_title: str
    date: datetime


class DistortionStat(CamelModel):
    type: str
    count: int
    avg_confidence: float
    examples: Optional[list[DistortionExample]] = None


class DistortionSummaryOut(CamelModel):
    distortions: list[DistortionStat]
    period: str


class TypeCount(CamelModel):
    type: str
    count: int


class DistortionDay(CamelModel):
    date: str
    distortions: list[TypeCount]
    total_distortions: int


class DistortionPatternsOut(CamelModel):
    patterns: list[DistortionStat]
    trends: list[DistortionDay]
    period: str


class JournalStatsOut(CamelModel):
    total_entries: int
    avg_mood_score: float
    streak_days: int
    improvement_rate: float


class IndicatorOut(CamelModel):
    current: float
    previous: float
    percent_change: float
    trend: str


class ProgressIndicatorsOut(CamelModel):
    journaling_consistency: IndicatorOut
    mood_stability: IndicatorOut
    cognitive_health: IndicatorOut
    problem_resolution: IndicatorOut
    positivity_ratio: IndicatorOut


class ProgressOut(CamelModel):
    progress_indicators: ProgressIndicatorsOut
    period: str
    comparison_period: str


class DistributionItem(CamelModel):
    mood: str
    count: int


class QuickStats(CamelModel):
    total_entries: int
    avg_mood_intensity: float
    total_distortions: int
    processed_entries: int


class DashboardOut(CamelModel):
    recent_entries: list[EntrySummaryOut]
    quick_stats: QuickStats
    mood_distribution: list[DistributionItem]
    period: str


class WritingSummary(CamelModel):
    total_entries: int
    total_words: int
    avg_words_per_entry: float
    total_reading_time: int
    avg_reading_time: float
    entries_with_distortions: int
    important_entries: int
    resolved_entries: int


class DayCount(CamelModel):
    day_of_week: str
    count: int


class TagCount(CamelModel):
    tag: str
    count: int


class SentimentCount(CamelModel):
    sentiment: str
    count: int


class WritingInsightsOut(CamelModel):
    summary: WritingSummary
    most_common_mood: Optional[str] = None
    writing_frequency: list[DayCount]
    top_tags: list[TagCount]
    sentiment_distribution: list[SentimentCount]
    period: str


# --- AI ---


class AnalyzeOut(CamelModel):
    message: str
    analysis: AnalysisOut
    supportive_message: str


class BatchAnalyzeIn(CamelModel):
    limit: int = Field(5, ge=1, le=50)


class BatchItem(CamelModel):
    entry_id: str
    title: str
    success: bool
    distortion_count: int = 0
    error: Optional[str] = None


class BatchAnalyzeOut(CamelModel):
    message: str
    processed_count: int
    success_count: int = 0
    error_count: int = 0
    results: list[BatchItem] = []


class DistortionInfoOut(CamelModel):
    type: str
    name: str
    description: str


class DetectMoodIn(CamelModel):
    content: str = Field(..., max_length=10_000)
    title: str = ""


class DetectMoodOut(CamelModel):
    message: str
    mood: str
    confidence: float
    explanation: str
    error: Optional[str] = None


class ChatIn(CamelModel):
    message: str = Field(..., min_length=1, max_length=2000)
    entry_id: Optional[str] = None


class ChatOut(CamelModel):
    reply: str


class AIStatusOut(CamelModel):
    status: str
    service: str
    features: list[str]


# --- User ---


class UserMe(CamelModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    created_at: Optional[str] = None
    last_seen_at: Optional[str] = None
    usage: dict[str, int] = {}
