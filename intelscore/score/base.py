"""Abstract base class for scoring dimensions."""

from __future__ import annotations

from abc import ABC, abstractmethod

from intelscore.models import DimensionScore, ScoringContext


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return min(max(value, low), high)


class BaseScorer(ABC):
    """Base class for one independent scoring dimension."""

    def __init__(self, config: dict | None = None):
        self.config = config or {}

    @abstractmethod
    def score(self, context: ScoringContext) -> DimensionScore:
        """Score one article. Must return a score within [0, 100]."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Dimension name, as used for weights and breakdowns."""
        ...
