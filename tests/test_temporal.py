"""Tests for temporal relevance scoring."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import NOW, make_article
from intelscore.models import Article
from intelscore.process.preprocess import preprocess
from intelscore.score.temporal import (
    TemporalScorer,
    age_hours,
    base_score,
    cyclical_factor,
    time_sensitivity,
)


def _score(article: Article):
    return TemporalScorer().score_article(article, preprocess(article), NOW)


@pytest.mark.parametrize("hours,bucket", [
    (0.5, "BREAKING"),
    (3, "RECENT"),
    (12, "CURRENT"),
    (48, "DAILY"),
    (100, "WEEKLY"),
    (24 * 30, "HISTORICAL"),
])
def test_age_buckets(hours, bucket):
    assert base_score(hours)[0] == bucket


def test_bucket_starts_and_boundaries():
    """Scores start at each bucket's base and meet the next base at the boundary."""
    assert base_score(0)[1] == pytest.approx(100.0)
    assert base_score(1)[1] == pytest.approx(95.0)
    assert base_score(6)[1] == pytest.approx(85.0)
    assert base_score(168)[1] == pytest.approx(30.0)


def test_decay_is_continuous_and_falling():
    """No jumps at bucket edges; older is never fresher."""
    ages = [i * 0.5 for i in range(0, 800)]
    scores = [base_score(a)[1] for a in ages]
    assert all(later <= earlier for earlier, later in zip(scores, scores[1:]))
    for edge in (1, 6, 24, 72, 168):
        assert base_score(edge - 1e-6)[1] == pytest.approx(base_score(edge + 1e-6)[1], abs=0.01)


def test_historical_floor():
    """A month-old article sits near the historical floor."""
    bucket, score = base_score(24 * 30)
    assert bucket == "HISTORICAL"
    assert 10 < score < 20
    assert base_score(24 * 365)[1] == pytest.approx(10.0, abs=0.01)


def test_unknown_age():
    """No timestamps at all is neutral rather than stale."""
    result = _score(make_article("Plain headline", hours_ago=None))
    assert result.details["bucket"] == "UNKNOWN"
    assert result.details["base_score"] == 50.0


def test_future_timestamp_counts_as_now():
    article = make_article("Plain headline", hours_ago=-3)
    assert age_hours(article, NOW) == 0.0


def test_fetch_time_fallback():
    """Without a publication time the fetch time is used."""
    article = Article(title="Plain headline", fetched_at=NOW - timedelta(hours=30))
    assert _score(article).details["bucket"] == "DAILY"


def test_urgency_and_content_multipliers():
    """Urgent language lifts the score and flags time sensitivity."""
    calm = _score(make_article("Committee schedules review", hours_ago=30))
    urgent = _score(make_article("Breaking: invasion underway", "Troops crossed the border today.", hours_ago=30))
    assert urgent.score > calm.score
    assert urgent.details["urgency_level"] == "CRITICAL"
    assert urgent.details["content_category"] == "IMMEDIATE"
    assert urgent.details["is_time_sensitive"] is True
    assert urgent.details["time_sensitivity"] == "MEDIUM"
    assert urgent.details["action_window_hours"] == 24


def test_time_sensitivity_upgrade():
    assert time_sensitivity("BREAKING", False) == "HIGH"
    assert time_sensitivity("BREAKING", True) == "CRITICAL"
    assert time_sensitivity("WEEKLY", False) == "LOW"


def test_cyclical_factor():
    """September and summit mentions bump relevance, capped at 1.2."""
    september = NOW.replace(month=9)
    factor, cycles = cyclical_factor(september, "UN DEBATE")
    assert factor == pytest.approx(1.1)
    assert "UN_GENERAL_ASSEMBLY" in cycles
    capped, _ = cyclical_factor(september, "LEADERS GATHER AT THE NATO SUMMIT AND G7")
    assert capped == pytest.approx(1.2)
    july = NOW.replace(month=7)
    assert cyclical_factor(july, "QUIET WEEK")[0] == 1.0


def test_score_is_clamped():
    """Stacked multipliers never push past 100."""
    result = _score(make_article("Breaking urgent nuclear attack", "Emergency alert now.", hours_ago=0.1))
    assert result.score == 100.0
