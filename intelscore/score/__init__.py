"""Scorer registry for the primary scoring dimensions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from intelscore.score.base import BaseScorer

SCORERS: dict[str, type[BaseScorer]] = {}


def register_scorer(name: str):
    """Decorator to register a scoring dimension."""

    def decorator(cls):
        SCORERS[name] = cls
        return cls

    return decorator


from intelscore.score.keywords import KeywordScorer  # noqa: E402, F401
from intelscore.score.entity import EntitySignificanceScorer  # noqa: E402, F401
from intelscore.score.source import SourceCredibilityAssessor  # noqa: E402, F401
from intelscore.score.temporal import TemporalScorer  # noqa: E402, F401
from intelscore.score.geopolitical import GeopoliticalScorer  # noqa: E402, F401
from intelscore.score.threat import ThreatAssessor  # noqa: E402, F401
