"""LLM-backed journal analysis: distortions, reframes, sentiment, mood detection."""

import json
import re
from dataclasses import dataclass
from typing import Union

import structlog

from cli.retry import llm_retry
from journal.models import Distortion, EntryAnalysis, Reframe
from llm import LLMError, LLMProvider
from shared_types import Mood, Sentiment

from .catalog import DISTORTION_INFO

logger = structlog.get_logger()

EXPLANATION_MAX = 500
SNIPPET_MAX = 200
THOUGHT_MAX = 500
TECHNIQUE_MAX = 100
THEME_MAX = 50
MAX_THEMES = 5

ANALYSIS_MAX_TOKENS = 2048
ANALYSIS_TEMPERATURE = 0.3
CHAT_MAX_TOKENS = 512
CHAT_TEMPERATURE = 0.7

CHAT_FALLBACK = "Sorry, I could not respond right now."

_DISTORTION_LINES = "\n".join(
    f"- {key}: {info['description']}" for key, info in DISTORTION_INFO.items()
)

ANALYSIS_SYSTEM = f"""You are a caring, supportive friend. When someone shares their journal entry, \
you listen with empathy and warmth. Respond in a friendly, conversational way, never clinical \
or robotic. Use gentle, encouraging language.

COGNITIVE DISTORTIONS TO DETECT:
{_DISTORTION_LINES}

INSTRUCTIONS:
1. Read the journal entry as if your friend is sharing their feelings with you.
2. For each distortion found, quote the text snippet, explain it kindly and give a \
confidence score (0.0-1.0).
3. Suggest 1-3 positive reframes using everyday language and CBT techniques.
4. Determine overall sentiment: one of very-negative, negative, neutral, positive, very-positive.
5. Identify up to 5 key themes.

RESPONSE FORMAT (JSON only, no extra text):
{{
  "distortions": [
    {{"type": "distortion-key", "explanation": "...", "confidence": 0.9, "textSnippet": "..."}}
  ],
  "reframes": [
    {{"originalThought": "...", "reframedThought": "...", "technique": "..."}}
  ],
  "overallSentiment": "...",
  "keyThemes": ["..."]
}}"""

ANALYSIS_PROMPT = """JOURNAL ENTRY ANALYSIS REQUEST

Title: {title}
Reported Mood: {mood}
Content: {content}

Analyze this journal entry for cognitive distortions and provide helpful reframes \
following the specified JSON format. Return only valid JSON."""

MOOD_SYSTEM = (
    "You read short journal entries and name the writer's mood. "
    f"Allowed moods: {', '.join(m.value for m in Mood)}. "
    'Respond with JSON only: {"mood": "...", "confidence": 0.0-1.0, "explanation": "..."}'
)

CHAT_PROMPT = (
    'Your friend just wrote this journal entry: "{entry}". Now they say: "{message}". '
    "Respond warmly, like a friend, with encouragement and empathy."
)


@dataclass
class AnalysisFailure:
    """Provider could not produce a usable analysis."""

    message: str


AnalysisOutcome = Union[EntryAnalysis, AnalysisFailure]


def strip_json_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[-1]
        if cleaned.endswith("```"):
            cleaned = cleaned[: cleaned.rfind("```")]
    return cleaned.strip()


def _parse_object(text: str) -> dict:
    """Parse the first JSON object in an LLM reply."""
    cleaned = strip_json_fences(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = re.search(r"\{.*\}", cleaned, re.DOTALL)
        if not match:
            raise
        parsed = json.loads(match.group(0))
    if not isinstance(parsed, dict):
        raise ValueError("Expected a JSON object")
    return parsed


def _clamp(value, low: float = 0.0, high: float = 1.0) -> float:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return low
    return max(low, min(high, number))


def clean_analysis(raw: dict) -> EntryAnalysis:
    """Validate a raw provider payload into an EntryAnalysis.

    Unknown distortion types and reframes missing either thought are dropped;
    text fields are truncated; sentiment falls back to neutral.
    """
    distortions = []
    for d in raw.get("distortions") or []:
        if not isinstance(d, dict) or not isinstance(d.get("type"), str):
            continue
        if d["type"] not in DISTORTION_INFO:
            continue
        distortions.append(
            Distortion(
                type=d["type"],
                confidence=_clamp(d.get("confidence")),
                explanation=str(d.get("explanation") or "")[:EXPLANATION_MAX],
                text_snippet=str(d.get("textSnippet") or d.get("text_snippet") or "")[
                    :SNIPPET_MAX
                ],
            )
        )

    reframes = []
    for r in raw.get("reframes") or []:
        if not isinstance(r, dict):
            continue
        reframe = Reframe.from_dict(r)
        if not reframe.original_thought or not reframe.reframed_thought:
            continue
        reframes.append(
            Reframe(
                original_thought=reframe.original_thought[:THOUGHT_MAX],
                reframed_thought=reframe.reframed_thought[:THOUGHT_MAX],
                technique=reframe.technique[:TECHNIQUE_MAX],
            )
        )

    sentiment = raw.get("overallSentiment") or raw.get("overall_sentiment")
    if not isinstance(sentiment, str) or sentiment not in set(Sentiment):
        sentiment = Sentiment.NEUTRAL

    themes_raw = raw.get("keyThemes") or raw.get("key_themes") or raw.get("themes") or []
    themes = [t.strip()[:THEME_MAX] for t in themes_raw if isinstance(t, str) and t.strip()]

    return EntryAnalysis(
        distortions=distortions,
        reframes=reframes,
        overall_sentiment=str(sentiment),
        key_themes=themes[:MAX_THEMES],
    )


def supportive_message(analysis: EntryAnalysis) -> str:
    count = len(analysis.distortions)
    if count == 0:
        return "Your thoughts show good emotional balance. Keep up the positive self-reflection!"

    message = f"I noticed {count} potential cognitive pattern{'s' if count > 1 else ''} in your entry. "
    if analysis.reframes:
        message += (
            "I've suggested some alternative perspectives that might help you "
            "see the situation more clearly. "
        )
    message += "Remember, recognizing these patterns is the first step toward more balanced thinking."
    return message


class AnalysisProvider:
    """Wraps an LLMProvider with the journal analysis prompts.

    Constructed once per app (or per test) and passed where needed.
    """

    def __init__(
        self,
        llm: LLMProvider,
        max_attempts: int = 3,
        min_wait: float = 2.0,
        max_wait: float = 30.0,
        max_tokens: int = ANALYSIS_MAX_TOKENS,
        temperature: float = ANALYSIS_TEMPERATURE,
    ):
        self.llm = llm
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._generate = llm_retry(
            max_attempts=max_attempts, min_wait=min_wait, max_wait=max_wait
        )(llm.generate)

    @property
    def name(self) -> str:
        return f"{self.llm.provider_name}:{self.llm.model}"

    def analyze(self, content: str, title: str = "", mood: str = "") -> AnalysisOutcome:
        """Run distortion analysis. Never raises; failures come back as AnalysisFailure."""
        prompt = ANALYSIS_PROMPT.format(title=title, mood=mood, content=content)
        try:
            reply = self._generate(
                messages=[{"role": "user", "content": prompt}],
                system=ANALYSIS_SYSTEM,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                json_reply=True,
            )
            analysis = clean_analysis(_parse_object(reply or ""))
        except (LLMError, ValueError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning("analysis.failed", provider=self.name, error=str(e))
            return AnalysisFailure(message=str(e))

        logger.info(
            "analysis.completed",
            provider=self.name,
            distortions=len(analysis.distortions),
            reframes=len(analysis.reframes),
        )
        return analysis

    def detect_mood(self, content: str, title: str = "") -> dict:
        """Guess the writer's mood. Falls back to neutral with an error string."""
        prompt = f"Title: {title}\nContent: {content}"
        try:
            reply = self._generate(
                messages=[{"role": "user", "content": prompt}],
                system=MOOD_SYSTEM,
                max_tokens=200,
                temperature=self.temperature,
                json_reply=True,
            )
            data = _parse_object(reply or "")
        except (LLMError, ValueError) as e:
            logger.warning("analysis.mood_failed", provider=self.name, error=str(e))
            return {
                "mood": Mood.NEUTRAL.value,
                "confidence": 0.5,
                "explanation": "Could not detect mood, defaulting to neutral",
                "error": str(e),
            }

        mood = data.get("mood")
        if not isinstance(mood, str) or mood not in set(Mood):
            return {
                "mood": Mood.NEUTRAL.value,
                "confidence": 0.5,
                "explanation": "Detected mood was not recognized, defaulting to neutral",
                "error": f"Unknown mood: {mood}",
            }
        return {
            "mood": mood,
            "confidence": round(_clamp(data.get("confidence")), 2),
            "explanation": str(data.get("explanation") or "")[:EXPLANATION_MAX],
            "error": None,
        }

    def chat(self, message: str, entry_content: str = "") -> str:
        prompt = CHAT_PROMPT.format(entry=entry_content, message=message)
        try:
            reply = self._generate(
                messages=[{"role": "user", "content": prompt}],
                system="You are a supportive, friendly companion.",
                max_tokens=CHAT_MAX_TOKENS,
                temperature=CHAT_TEMPERATURE,
            )
        except LLMError as e:
            logger.warning("analysis.chat_failed", provider=self.name, error=str(e))
            return CHAT_FALLBACK
        return (reply or "").strip() or CHAT_FALLBACK

    def test_connection(self) -> bool:
        try:
            reply = self.llm.generate(messages=[{"role": "user", "content": "Hello"}], max_tokens=10)
        except LLMError as e:
            logger.warning("analysis.connection_failed", provider=self.name, error=str(e))
            return False
        return bool(reply)
