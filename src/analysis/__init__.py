"""Entry analysis via an injected LLM provider."""

from .catalog import DISTORTION_INFO, distortion_info, list_distortions
from .provider import AnalysisFailure, AnalysisProvider, clean_analysis, supportive_message
from .runner import AnalysisRun, BatchResult, analyze_entry, batch_analyze, reanalyze_entry

__all__ = [
    "DISTORTION_INFO",
    "distortion_info",
    "list_distortions",
    "AnalysisFailure",
    "AnalysisProvider",
    "clean_analysis",
    "supportive_message",
    "AnalysisRun",
    "BatchResult",
    "analyze_entry",
    "batch_analyze",
    "reanalyze_entry",
]
