"""Tests for categories, tags and advertisement detection."""

from __future__ import annotations

from conftest import make_article
from intelscore.classify import MAX_TAGS, classify_categories, generate_tags
from intelscore.models import EntityAnalysis, ThreatAssessment
from intelscore.process.ads import ad_indicators, is_advertisement
from intelscore.process.preprocess import preprocess


def _content(title, body=""):
    return preprocess(make_article(title, body))


def test_general_when_nothing_applies():
    assert classify_categories(EntityAnalysis(), _content("Local bakery wins award")) == ("GENERAL",)


def test_categories_in_fixed_order():
    entities = EntityAnalysis(
        countries=("IRAN", "UNITED STATES"),
        technologies=("NUCLEAR REACTOR",),
        weapons=("BALLISTIC MISSILE",),
    )
    content = _content("Sanctions talk", "New economic sanctions and a ransomware incident.")
    assert classify_categories(entities, content) == (
        "MILITARY", "GEOPOLITICS", "NUCLEAR", "CYBERSECURITY", "FINANCE",
    )


def test_threat_implies_category():
    content = _content("Outbreak feared")
    threat = ThreatAssessment(primary_threat="HEALTH")
    categories = classify_categories(EntityAnalysis(), content, threat)
    assert categories == ("HEALTH",)


def test_tags_sorted_and_deduplicated():
    entities = EntityAnalysis(countries=("RUSSIA", "UKRAINE"), organizations=("NATO",))
    content = _content("NATO summit", "Leaders discussed defense and sanctions.")
    tags = generate_tags(entities, ("GEOPOLITICS",), content)
    assert list(tags) == sorted(tags)
    assert {"RUSSIA", "UKRAINE", "NATO", "GEOPOLITICS", "SUMMIT", "DEFENSE", "SANCTIONS"} <= set(tags)


def test_short_tags_dropped():
    entities = EntityAnalysis(countries=("UK",), organizations=("EU",))
    assert generate_tags(entities, ("GENERAL",), _content("Talks")) == ("GENERAL",)


def test_status_tags_survive_cap():
    """Status tags are kept even when entity and keyword tags exceed the cap."""
    entities = EntityAnalysis(
        countries=("RUSSIA", "CHINA", "IRAN"),
        organizations=("NATO", "IAEA"),
        technologies=("HYPERSONIC", "QUANTUM COMPUTING", "STEALTH"),
        weapons=("BALLISTIC MISSILE", "DRONE"),
    )
    content = _content(
        "Operation update",
        "Deployment, sanctions, treaty, alliance, summit, breach, attack, defense, strategy, "
        "intelligence, surveillance, reconnaissance and analysis.",
    )
    tags = generate_tags(entities, ("MILITARY", "NUCLEAR"), content, status=("INCOMPLETE",))
    assert len(tags) == MAX_TAGS
    assert "INCOMPLETE" in tags


def test_ad_network_url_alone_is_advertisement():
    article = make_article("Defense news", "Plain text.", url="https://googleadservices.com/pagead?x=1")
    assert is_advertisement(article) is True


def test_two_promotional_phrases_needed():
    one = make_article("Drone review", "Click here to read more about the new drone.")
    two = make_article("Drone review", "Click here for a free trial of the drone simulator.")
    assert is_advertisement(one) is False
    assert is_advertisement(two) is True
    assert ad_indicators(two) == ["CLICK HERE", "FREE TRIAL"]


def test_percent_off_counts_as_promotional():
    article = make_article("Tactical gear sale", "Everything 30% off, use this coupon today.")
    assert "% OFF" in ad_indicators(article)
    assert is_advertisement(article) is True
