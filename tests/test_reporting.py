"""Tests for ranking and summarizing assessments."""

from __future__ import annotations

from intelscore.models import DuplicateVerdict, EntityAnalysis, IntelligenceAssessment, ThreatAssessment
from intelscore.reporting import filter_by_relevance, sort_by_priority, summarize


def _assessment(article_id, score, priority="LOW", threat="LOW", categories=("GENERAL",), **kwargs):
    return IntelligenceAssessment(
        article_id=article_id,
        overall_score=score,
        confidence=60.0,
        priority=priority,
        priority_confidence=60.0,
        categories=categories,
        tags=(),
        entities=EntityAnalysis(),
        threat=ThreatAssessment(level=threat),
        duplicate=kwargs.pop("duplicate", DuplicateVerdict()),
        **kwargs,
    )


def test_filter_by_relevance():
    items = [
        _assessment(1, 39.9),
        _assessment(2, 40.0),
        _assessment(3, 95.0, is_advertisement=True),
    ]
    assert [a.article_id for a in filter_by_relevance(items)] == [2]
    assert [a.article_id for a in filter_by_relevance(items, threshold=0)] == [1, 2]


def test_sort_by_priority_then_score():
    """Priority dominates the score; equal keys keep input order."""
    items = [
        _assessment("low-high-score", 49.0, "LOW"),
        _assessment("critical", 40.0, "CRITICAL"),
        _assessment("medium-a", 55.0, "MEDIUM"),
        _assessment("medium-b", 55.0, "MEDIUM"),
        _assessment("high", 70.0, "HIGH"),
    ]
    ranked = [a.article_id for a in sort_by_priority(items)]
    assert ranked == ["critical", "high", "medium-a", "medium-b", "low-high-score"]


def test_summarize_counts():
    items = [
        _assessment(1, 90.0, "CRITICAL", "CRITICAL", ("MILITARY", "NUCLEAR")),
        _assessment(2, 60.0, "MEDIUM", "HIGH", ("MILITARY",)),
        _assessment(3, 30.0, duplicate=DuplicateVerdict(is_duplicate=True, duplicate_of_id=1)),
        _assessment(4, 10.0, is_advertisement=True),
        _assessment(5, 25.0, is_fallback=True),
    ]
    summary = summarize(items)
    assert summary["total"] == 5
    assert summary["by_priority"] == {"CRITICAL": 1, "HIGH": 0, "MEDIUM": 1, "LOW": 3}
    assert summary["by_threat_level"]["HIGH"] == 1
    assert summary["average_score"] == 43.0
    assert summary["duplicates"] == 1
    assert summary["advertisements"] == 1
    assert summary["fallbacks"] == 1
    assert summary["top_categories"][:2] == [("GENERAL", 3), ("MILITARY", 2)]


def test_summarize_empty():
    summary = summarize([])
    assert summary["total"] == 0
    assert summary["average_score"] == 0.0
    assert summary["top_categories"] == []
