"""Helpers for consumers that rank and summarize a batch of assessments."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

import numpy as np

from intelscore.models import PRIORITY_LEVELS, IntelligenceAssessment

RELEVANCE_THRESHOLD = 40
PRIORITY_WEIGHTS = {"CRITICAL": 1000, "HIGH": 100, "MEDIUM": 10, "LOW": 1}
TOP_CATEGORIES = 5


def filter_by_relevance(
    assessments: Iterable[IntelligenceAssessment],
    threshold: float = RELEVANCE_THRESHOLD,
) -> list[IntelligenceAssessment]:
    """Drop advertisements and anything scoring below ``threshold``."""
    return [a for a in assessments if not a.is_advertisement and a.overall_score >= threshold]


def sort_key(assessment: IntelligenceAssessment) -> float:
    return PRIORITY_WEIGHTS.get(assessment.priority, 0) + assessment.overall_score


def sort_by_priority(assessments: Iterable[IntelligenceAssessment]) -> list[IntelligenceAssessment]:
    """Highest priority first, then highest score. Ties keep their input order."""
    return sorted(assessments, key=sort_key, reverse=True)


def summarize(assessments: Iterable[IntelligenceAssessment]) -> dict:
    items = list(assessments)
    categories = Counter(c for a in items for c in a.categories)
    return {
        "total": len(items),
        "by_priority": {p: sum(1 for a in items if a.priority == p) for p in reversed(PRIORITY_LEVELS)},
        "by_threat_level": {p: sum(1 for a in items if a.threat.level == p) for p in reversed(PRIORITY_LEVELS)},
        "average_score": round(float(np.mean([a.overall_score for a in items])), 1) if items else 0.0,
        "duplicates": sum(1 for a in items if a.duplicate.is_duplicate),
        "advertisements": sum(1 for a in items if a.is_advertisement),
        "fallbacks": sum(1 for a in items if a.is_fallback),
        "top_categories": categories.most_common(TOP_CATEGORIES),
    }
