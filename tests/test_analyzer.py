"""End-to-end tests for the analyzer orchestrator."""

from __future__ import annotations

import json
import time
from unittest.mock import patch

import pytest

from conftest import make_article
from intelscore.analyzer import IntelligenceAnalyzer, validate_article
from intelscore.errors import InvalidInput
from intelscore.hints import parse_external_analysis
from intelscore.models import Article, Source
from intelscore.process.preprocess import preprocess as real_preprocess

NEUTRAL_BODY = (
    "Officials from Japan and Germany met in Berlin to discuss a defense cooperation agreement. "
    "The talks covered joint research and a planned naval exercise next year."
)


@pytest.fixture
def analyzer(sample_config):
    return IntelligenceAnalyzer(sample_config)


def test_missile_test_scenario(analyzer, missile_test_article, now):
    """A fresh missile test report near Hormuz is urgent."""
    result = analyzer.analyze(missile_test_article, now=now)
    assert result.is_fallback is False
    assert result.priority in ("HIGH", "CRITICAL")
    assert result.threat.primary_threat in ("MILITARY", "NUCLEAR")
    assert "IRAN" in result.entities.countries
    assert "STRAIT OF HORMUZ" in result.entities.locations
    assert result.article_id == "iran-1"


def test_duplicate_scenario(analyzer, now):
    """The second of two near-identical reports two hours apart is a duplicate of the first."""
    body = "Russian forces launched dozens of drones at Kyiv overnight, officials said."
    first = make_article(
        "Russia launches massive drone attack on Kyiv power grid overnight", body,
        hours_ago=3, article_id="first",
    )
    second = make_article(
        "Russia launches massive drone attack on Kyiv power grid overnight again", body,
        hours_ago=1, article_id="second",
    )
    result = analyzer.analyze(second, recent_window=[first], now=now)
    assert result.duplicate.is_duplicate is True
    assert result.duplicate.duplicate_of_id == "first"

    # With the batch as its own window only the later report is flagged
    batch = analyzer.analyze_batch([first, second], recent_window=[first, second], now=now)
    assert batch[0].duplicate.is_duplicate is False
    assert batch[1].duplicate.duplicate_of_id == "first"


def test_advertisement_scenario(analyzer, now):
    """Ad-network URLs with promotional copy score low regardless of keywords."""
    ad = make_article(
        "Nuclear missile war simulator: limited time offer",
        "Buy now and save with this special offer! Click here for a free trial of the military attack game.",
        url="https://ad.doubleclick.net/clk;123;456?https://shop.example.com",
    )
    result = analyzer.analyze(ad, now=now)
    assert result.is_advertisement is True
    assert result.overall_score <= 10
    assert result.priority == "LOW"
    assert "ADVERTISEMENT" in result.tags


def test_old_article_scores_lower(analyzer, now):
    """A month-old article lands in the oldest bucket and scores materially lower."""
    fresh = make_article("Japan and Germany sign defense pact", NEUTRAL_BODY, hours_ago=1)
    old = make_article("Japan and Germany sign defense pact", NEUTRAL_BODY, hours_ago=24 * 30)
    fresh_result = analyzer.analyze(fresh, now=now)
    old_result = analyzer.analyze(old, now=now)
    assert old_result.dimensions["temporal"].details["bucket"] == "HISTORICAL"
    assert old_result.overall_score < fresh_result.overall_score - 3


def test_all_scores_within_bounds(analyzer, missile_test_article, now):
    result = analyzer.analyze(missile_test_article, now=now)
    assert 0 <= result.overall_score <= 100
    assert 30 <= result.confidence <= 95
    for dimension in result.dimensions.values():
        assert 0 <= dimension.score <= 100


def test_analysis_is_deterministic(analyzer, missile_test_article, now):
    """Identical input produces identical output."""
    window = [make_article("Earlier Gulf report", "Iran navy drills.", hours_ago=5, article_id="w1")]
    first = analyzer.analyze(missile_test_article, recent_window=window, now=now)
    second = analyzer.analyze(missile_test_article, recent_window=window, now=now)
    assert first.to_dict() == second.to_dict()


def test_breakdown_is_explainable(analyzer, missile_test_article, now):
    """Weighted contributions and intermediate values are kept."""
    result = analyzer.analyze(missile_test_article, now=now)
    breakdown = result.breakdown
    assert set(breakdown["contributions"]) == {"keyword", "entity", "source", "temporal", "geopolitical", "threat"}
    assert breakdown["secondary_scores"] is not None
    assert breakdown["overall"] == result.overall_score
    assert breakdown["threat_level"] == result.threat.level


def test_secondary_disabled(now, missile_test_article):
    analyzer = IntelligenceAnalyzer({"scoring": {"secondary": {"enabled": False}}})
    result = analyzer.analyze(missile_test_article, now=now)
    assert result.breakdown["secondary"] is None
    assert result.breakdown["secondary_enabled"] is False


def test_incomplete_input_lowers_confidence(analyzer, now):
    """A missing url lowers confidence and is reported."""
    complete = make_article("Japan and Germany sign defense pact", NEUTRAL_BODY, hours_ago=1, domain="example.com")
    partial = Article(
        title=complete.title,
        body=NEUTRAL_BODY,
        published_at=complete.published_at,
        source=complete.source,
    )
    full = analyzer.analyze(complete, now=now)
    degraded = analyzer.analyze(partial, now=now)
    assert degraded.input_issues == ("missing url",)
    assert "INCOMPLETE" in degraded.tags
    assert degraded.breakdown["confidence"]["penalty"] == 10
    assert full.breakdown["confidence"]["penalty"] == 0
    assert degraded.overall_score == full.overall_score
    assert degraded.confidence < full.confidence


def test_validate_article_strict():
    article = Article(title="", body="text")
    assert validate_article(article) == ["missing title", "missing url", "missing publication and fetch time"]
    with pytest.raises(InvalidInput) as exc:
        validate_article(article, strict=True)
    assert "missing title" in exc.value.problems


def test_fallback_on_scorer_failure(analyzer, missile_test_article, now):
    """An internal failure yields the fixed fallback assessment instead of raising."""
    with patch("intelscore.score.keywords.KeywordScorer.score", side_effect=RuntimeError("boom")):
        result = analyzer.analyze(missile_test_article, now=now)
    assert result.is_fallback is True
    assert result.overall_score == 25
    assert result.confidence == 40
    assert result.priority == "LOW"
    assert result.tags == ("UNPROCESSED",)
    assert result.entities.unique_count == 0
    assert result.error == "RuntimeError: boom"


def test_fallback_adopts_hint(analyzer, missile_test_article, now):
    """A validated external hint fills categories, tags and entities on the fallback path."""
    hint = parse_external_analysis({
        "priority": "HIGH",
        "threatLevel": "HIGH",
        "score": 70,
        "categories": ["military", "bogus"],
        "tags": ["missile", "x"],
        "entities": {"countries": ["iran"]},
    })
    with patch("intelscore.analyzer.preprocess", side_effect=ValueError("bad text")):
        result = analyzer.analyze(missile_test_article, now=now, hint=hint)
    assert result.is_fallback is True
    assert result.categories == ("MILITARY",)
    assert result.tags == ("MISSILE", "UNPROCESSED")
    assert result.entities.countries == ("IRAN",)
    # The hint never overrides the fallback score
    assert result.overall_score == 25


def test_fallback_is_serialisable(analyzer, missile_test_article):
    result = analyzer.fallback(missile_test_article, error="KeyError: 'x'")
    data = json.loads(json.dumps(result.to_dict()))
    assert data["is_fallback"] is True
    assert data["tags"] == ["UNPROCESSED"]


def test_assessment_is_json_serialisable(analyzer, missile_test_article, now):
    result = analyzer.analyze(missile_test_article, now=now)
    data = json.loads(json.dumps(result.to_dict(), default=str))
    assert data["priority"] == result.priority
    assert data["entities"]["countries"][0] in result.entities.countries


def _failing_preprocess(original):
    def _run(article):
        if article.title.startswith("Poison"):
            raise RuntimeError("cannot parse")
        return original(article)
    return _run


def test_batch_preserves_order_and_isolates_failures(analyzer, missile_test_article, now):
    """One failing article never affects the others."""
    articles = [
        missile_test_article,
        make_article("Poison pill", "x", article_id="bad"),
        make_article("Japan and Germany sign defense pact", NEUTRAL_BODY, article_id="neutral"),
    ]
    with patch("intelscore.analyzer.preprocess", side_effect=_failing_preprocess(real_preprocess)):
        results = analyzer.analyze_batch(articles, now=now)
    assert [r.article_id for r in results] == ["iran-1", "bad", "neutral"]
    assert [r.is_fallback for r in results] == [False, True, False]


def test_threaded_batch_matches_sequential(sample_config, missile_test_article, now):
    articles = [
        missile_test_article,
        make_article("Japan and Germany sign defense pact", NEUTRAL_BODY, article_id="neutral"),
        make_article("Local bakery wins award", "Bread praised.", article_id="bakery"),
    ]
    sequential = IntelligenceAnalyzer(sample_config).analyze_batch(articles, recent_window=articles, now=now)
    threaded_config = {**sample_config, "batch": {"max_workers": 3}}
    threaded = IntelligenceAnalyzer(threaded_config).analyze_batch(articles, recent_window=articles, now=now)
    assert [r.to_dict() for r in threaded] == [r.to_dict() for r in sequential]


@pytest.mark.asyncio
async def test_async_batch_preserves_order(analyzer, missile_test_article, now):
    articles = [
        make_article("Japan and Germany sign defense pact", NEUTRAL_BODY, article_id="neutral"),
        missile_test_article,
    ]
    results = await analyzer.analyze_batch_async(articles, now=now)
    assert [r.article_id for r in results] == ["neutral", "iran-1"]
    assert results[1].priority == analyzer.analyze(missile_test_article, now=now).priority


@pytest.mark.asyncio
async def test_async_batch_timeout_yields_fallback(missile_test_article, now):
    """An article exceeding the per-article timeout gets a fallback; others are unaffected."""
    analyzer = IntelligenceAnalyzer({"batch": {"timeout_seconds": 0.5, "max_concurrency": 2}})
    real_analyze = analyzer.analyze
    # Warm the regex caches so the fast article finishes well inside the timeout
    real_analyze(missile_test_article, (), now)

    def slow_analyze(article, window, when):
        if article.id == "slow":
            time.sleep(2.0)
        return real_analyze(article, window, when)

    articles = [make_article("Slow story", "text", article_id="slow"), missile_test_article]
    with patch.object(analyzer, "analyze", side_effect=slow_analyze):
        results = await analyzer.analyze_batch_async(articles, now=now)
    assert results[0].is_fallback is True
    assert results[0].error.startswith("TimeoutError")
    assert results[1].is_fallback is False
