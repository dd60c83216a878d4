"""Shared enums and types for mindjournal."""

from enum import StrEnum


class Mood(StrEnum):
    VERY_HAPPY = "very-happy"
    HAPPY = "happy"
    CONTENT = "content"
    NEUTRAL = "neutral"
    SLIGHTLY_SAD = "slightly-sad"
    SAD = "sad"
    VERY_SAD = "very-sad"
    ANXIOUS = "anxious"
    STRESSED = "stressed"
    ANGRY = "angry"
    FRUSTRATED = "frustrated"
    EXCITED = "excited"
    GRATEFUL = "grateful"
    HOPEFUL = "hopeful"
    CONFUSED = "confused"
    OVERWHELMED = "overwhelmed"


POSITIVE_MOODS = frozenset(
    {
        Mood.VERY_HAPPY,
        Mood.HAPPY,
        Mood.CONTENT,
        Mood.GRATEFUL,
        Mood.HOPEFUL,
        Mood.EXCITED,
    }
)


class DistortionType(StrEnum):
    ALL_OR_NOTHING = "all-or-nothing"
    OVERGENERALIZATION = "overgeneralization"
    MENTAL_FILTER = "mental-filter"
    DISQUALIFYING_POSITIVE = "disqualifying-positive"
    JUMPING_TO_CONCLUSIONS = "jumping-to-conclusions"
    MAGNIFICATION = "magnification"
    EMOTIONAL_REASONING = "emotional-reasoning"
    SHOULD_STATEMENTS = "should-statements"
    LABELING = "labeling"
    PERSONALIZATION = "personalization"
    COMPARISON = "comparison"
    BLAME = "blame"


class Sentiment(StrEnum):
    VERY_NEGATIVE = "very-negative"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    POSITIVE = "positive"
    VERY_POSITIVE = "very-positive"


class Granularity(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class TrendLabel(StrEnum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"
    NEEDS_ATTENTION = "needs-attention"
