"""Aggregations over a single owner's journal history."""

from .distortions import distortion_patterns, distortion_summary, distortion_trends
from .insights import dashboard, journal_stats, writing_insights
from .progress import improvement_rate, percent_change, progress_indicators
from .streak import compute_streak
from .trends import mood_distribution, mood_trends

__all__ = [
    "compute_streak",
    "mood_trends",
    "mood_distribution",
    "distortion_summary",
    "distortion_patterns",
    "distortion_trends",
    "progress_indicators",
    "improvement_rate",
    "percent_change",
    "journal_stats",
    "writing_insights",
    "dashboard",
]
