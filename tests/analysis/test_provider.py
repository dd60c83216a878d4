"""Tests for the LLM-backed analysis provider."""

import json

import pytest

from analysis.catalog import DISTORTION_INFO, distortion_info, list_distortions
from analysis.provider import (
    CHAT_FALLBACK,
    SNIPPET_MAX,
    AnalysisFailure,
    clean_analysis,
    strip_json_fences,
    supportive_message,
)
from journal.models import Distortion, EntryAnalysis, Reframe
from llm import LLMAuthError, LLMError, LLMRateLimitError

GOOD_REPLY = {
    "distortions": [
        {
            "type": "labeling",
            "explanation": "Calling yourself a failure",
            "confidence": 0.9,
            "textSnippet": "I'm such a failure",
        }
    ],
    "reframes": [
        {
            "originalThought": "I'm such a failure",
            "reframedThought": "I missed one deadline",
            "technique": "Relabeling",
        }
    ],
    "overallSentiment": "negative",
    "keyThemes": ["work", "self-worth"],
}


class TestCatalog:
    def test_twelve_types(self):
        assert len(DISTORTION_INFO) == 12
        assert {d["type"] for d in list_distortions()} == set(DISTORTION_INFO)

    def test_lookup(self):
        assert distortion_info("blame")["name"] == "Blame"
        assert distortion_info("not-a-type")["name"] == "Unknown Distortion"


class TestCleanAnalysis:
    def test_good_payload(self):
        analysis = clean_analysis(GOOD_REPLY)
        assert analysis.distortions[0].text_snippet == "I'm such a failure"
        assert analysis.reframes[0].reframed_thought == "I missed one deadline"
        assert analysis.overall_sentiment == "negative"
        assert analysis.key_themes == ["work", "self-worth"]

    def test_drops_unknown_types_and_bad_reframes(self):
        analysis = clean_analysis(
            {
                "distortions": [{"type": "catastrophizing"}, {"type": ["blame"]}, "blame"],
                "reframes": [{"originalThought": "only half"}],
            }
        )
        assert analysis.distortions == []
        assert analysis.reframes == []

    def test_clamps_and_truncates(self):
        analysis = clean_analysis(
            {
                "distortions": [
                    {"type": "blame", "confidence": 7, "textSnippet": "x" * 1000},
                    {"type": "blame", "confidence": "high"},
                ]
            }
        )
        assert analysis.distortions[0].confidence == 1.0
        assert len(analysis.distortions[0].text_snippet) == SNIPPET_MAX
        assert analysis.distortions[1].confidence == 0.0

    def test_bad_sentiment_falls_back_to_neutral(self):
        assert clean_analysis({"overallSentiment": "meh"}).overall_sentiment == "neutral"
        assert clean_analysis({"overallSentiment": {"x": 1}}).overall_sentiment == "neutral"

    def test_themes_alias(self):
        assert clean_analysis({"themes": ["a", " ", 3, "b"]}).key_themes == ["a", "b"]


def test_strip_json_fences():
    assert strip_json_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_json_fences('{"a": 1}') == '{"a": 1}'


def test_supportive_message():
    assert "good emotional balance" in supportive_message(EntryAnalysis())
    one = EntryAnalysis(distortions=[Distortion("blame")])
    assert "1 potential cognitive pattern " in supportive_message(one)
    two = EntryAnalysis(
        distortions=[Distortion("blame"), Distortion("labeling")],
        reframes=[Reframe("a", "b")],
    )
    message = supportive_message(two)
    assert "2 potential cognitive patterns" in message
    assert "alternative perspectives" in message


class TestAnalyze:
    def test_success(self, analysis_provider, mock_llm):
        mock_llm.generate.return_value = json.dumps(GOOD_REPLY)

        result = analysis_provider.analyze("I'm such a failure", "Bad day", "sad")

        assert isinstance(result, EntryAnalysis)
        assert result.distortions[0].type == "labeling"
        kwargs = mock_llm.generate.call_args.kwargs
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 2048
        assert kwargs["json_reply"] is True
        assert "I'm such a failure" in kwargs["messages"][0]["content"]
        assert "Reported Mood: sad" in kwargs["messages"][0]["content"]

    def test_json_with_surrounding_text(self, analysis_provider, mock_llm):
        mock_llm.generate.return_value = "Sure! " + json.dumps(GOOD_REPLY) + " Hope that helps."
        assert isinstance(analysis_provider.analyze("text"), EntryAnalysis)

    def test_malformed_reply_is_failure(self, analysis_provider, mock_llm):
        mock_llm.generate.return_value = "not json at all"
        assert isinstance(analysis_provider.analyze("text"), AnalysisFailure)

    def test_non_object_reply_is_failure(self, analysis_provider, mock_llm):
        mock_llm.generate.return_value = "[1, 2]"
        assert isinstance(analysis_provider.analyze("text"), AnalysisFailure)

    def test_auth_error_not_retried(self, analysis_provider, mock_llm):
        mock_llm.generate.side_effect = LLMAuthError("bad key")
        result = analysis_provider.analyze("text")
        assert result == AnalysisFailure(message="bad key")
        assert mock_llm.generate.call_count == 1

    def test_rate_limit_retried(self, analysis_provider, mock_llm):
        mock_llm.generate.side_effect = [LLMRateLimitError("slow down"), json.dumps(GOOD_REPLY)]
        assert isinstance(analysis_provider.analyze("text"), EntryAnalysis)
        assert mock_llm.generate.call_count == 2

    def test_rate_limit_exhausted(self, analysis_provider, mock_llm):
        mock_llm.generate.side_effect = LLMRateLimitError("slow down")
        assert isinstance(analysis_provider.analyze("text"), AnalysisFailure)
        assert mock_llm.generate.call_count == 2


class TestDetectMood:
    def test_detected(self, analysis_provider, mock_llm):
        mock_llm.generate.return_value = '{"mood": "anxious", "confidence": 0.834, "explanation": "worry"}'
        result = analysis_provider.detect_mood("I can't stop worrying about tomorrow")
        assert result == {"mood": "anxious", "confidence": 0.83, "explanation": "worry", "error": None}

    def test_unknown_mood_defaults_neutral(self, analysis_provider, mock_llm):
        mock_llm.generate.return_value = '{"mood": "melancholic", "confidence": 0.9}'
        result = analysis_provider.detect_mood("text")
        assert result["mood"] == "neutral"
        assert result["confidence"] == 0.5
        assert result["error"]

    def test_provider_error_defaults_neutral(self, analysis_provider, mock_llm):
        mock_llm.generate.side_effect = LLMError("down")
        result = analysis_provider.detect_mood("text")
        assert result["mood"] == "neutral"
        assert result["error"] == "down"


class TestChat:
    def test_reply(self, analysis_provider, mock_llm):
        mock_llm.generate.return_value = "  That sounds hard.  "
        assert analysis_provider.chat("I'm tired", "Long week") == "That sounds hard."
        assert mock_llm.generate.call_args.kwargs["temperature"] == 0.7

    @pytest.mark.parametrize("outcome", [LLMError("down"), ""])
    def test_fallback(self, analysis_provider, mock_llm, outcome):
        if isinstance(outcome, Exception):
            mock_llm.generate.side_effect = outcome
        else:
            mock_llm.generate.return_value = outcome
        assert analysis_provider.chat("hi") == CHAT_FALLBACK


def test_name_and_connection(analysis_provider, mock_llm):
    assert analysis_provider.name == "gemini:gemini-2.0-flash"
    mock_llm.generate.return_value = "Hello!"
    assert analysis_provider.test_connection() is True
    mock_llm.generate.side_effect = LLMAuthError("no")
    assert analysis_provider.test_connection() is False
