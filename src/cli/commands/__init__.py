"""CLI command modules."""

from .analytics import distortions, progress, stats, trends
from .analyze import analyze_pending
from .export import export
from .serve import serve

__all__ = [
    "serve",
    "stats",
    "trends",
    "distortions",
    "progress",
    "analyze_pending",
    "export",
]
