"""Tests for source credibility assessment."""

from __future__ import annotations

import pytest

from conftest import make_article
from intelscore.process.preprocess import preprocess
from intelscore.score.source import SourceCredibilityAssessor, base_tier, domain_category, host_matches


def _assess(**kwargs):
    article = make_article(kwargs.pop("title", "Plain headline"), kwargs.pop("body", "Nothing notable."), **kwargs)
    return SourceCredibilityAssessor().assess(article, preprocess(article))


def test_host_matching_rules():
    """Suffix, registered-domain and substring patterns."""
    assert host_matches("state.gov", ".gov")
    assert host_matches("news.bbc.co.uk", "bbc.co.uk")
    assert not host_matches("notreuters.com", "reuters.com")
    assert host_matches("cs.stanford-university.org", "university")
    assert not host_matches("", ".gov")


def test_tier_from_domain():
    assert base_tier("reuters.com", "")["tier"] == "TIER_1_PREMIUM"
    assert base_tier("foo.blogspot.com", "")["tier"] == "TIER_4_QUESTIONABLE"


def test_tier_from_feed_label():
    """Feed labels match on whole words only."""
    assert base_tier("", "Reuters World")["tier"] == "TIER_1_PREMIUM"
    # "AP" must not match inside "MAP"
    assert base_tier("", "Map Digest")["tier"] == "TIER_3_STANDARD"
    assert base_tier("", "")["tier"] == "TIER_3_STANDARD"


def test_social_media_before_commercial():
    """x.com is social media even though it ends in .com."""
    assert domain_category("x.com")["category"] == "SOCIAL_MEDIA"
    assert domain_category("example.com")["category"] == "COMMERCIAL"
    assert domain_category("example.org")["category"] == "GENERAL"


def test_combination_order():
    """(base * domain + bias) * track record + exclusivity + quality."""
    result = _assess(
        body="An exclusive report from a state-run outlet based on anonymous sources.",
        url="https://www.defense.gov/news/1",
        domain="",
        feed_label="Newswire",
        base_credibility=96,
    )
    steps = result.details["steps"]
    assert steps["base"] == 70
    assert steps["after_domain"] == pytest.approx(77.0)
    assert steps["after_bias"] == pytest.approx(57.0)
    assert steps["after_track_record"] == pytest.approx(65.55)
    # exclusive +10, anonymous sources -5
    assert result.score == pytest.approx(70.55, abs=0.06)
    assert result.details["domain_category"] == "GOVERNMENT"
    assert result.details["bias_level"] == "STRONG"
    assert result.details["accuracy_category"] == "EXCELLENT"


def test_url_host_used_without_domain():
    result = _assess(url="https://www.reuters.com/world/x", feed_label="")
    assert result.details["tier"] == "TIER_1_PREMIUM"
    # Premium tier on a .com domain
    assert result.score == pytest.approx(85.5)


def test_questionable_source_recommendation():
    result = _assess(url="https://someone.substack.com/p/1", feed_label="")
    assert result.details["tier"] == "TIER_4_QUESTIONABLE"
    assert result.score < 60
    assert any("higher-tier" in r for r in result.details["recommendations"])


def test_poor_track_record():
    result = _assess(url="https://example.org/a", feed_label="", base_credibility=20)
    assert result.details["accuracy_category"] == "POOR"
    assert result.score == pytest.approx(70 * 0.85)


def test_score_and_confidence_bounds():
    result = _assess(
        body="Propaganda from a state-controlled partisan advocacy outlet; speculation and rumor.",
        url="https://x.com/post/1",
        feed_label="Unverified",
        base_credibility=5,
    )
    assert 0 <= result.score <= 100
    assert 30 <= result.details["confidence"] <= 95
