"""Tests for score combination and priority classification."""

from __future__ import annotations

import pytest

from intelscore.models import DimensionScore, ThreatAssessment
from intelscore.score.combiner import (
    ScoreCombiner,
    classify_priority,
    recommended_action,
    score_priority,
)

ALL_DIMENSIONS = ("keyword", "entity", "source", "temporal", "geopolitical", "threat")


def _dims(**scores: float) -> dict[str, DimensionScore]:
    return {name: DimensionScore(score) for name, score in scores.items()}


def _uniform(value: float) -> dict[str, DimensionScore]:
    return _dims(**{name: value for name in ALL_DIMENSIONS})


@pytest.mark.parametrize("score,priority", [(85, "CRITICAL"), (84.9, "HIGH"), (70, "HIGH"), (50, "MEDIUM"), (49.9, "LOW")])
def test_score_thresholds(score, priority):
    assert score_priority(score)[0] == priority


def test_critical_threat_forces_critical():
    priority, confidence, reasons = classify_priority(30, "CRITICAL", 0, 70)
    assert priority == "CRITICAL"
    assert confidence == 90
    assert "Critical threat level" in reasons


def test_high_threat_lifts_low_to_medium():
    assert classify_priority(20, "HIGH", 0, 70)[0] == "MEDIUM"
    # Only LOW is lifted
    assert classify_priority(75, "HIGH", 0, 70)[0] == "HIGH"


def test_relationships_lift_low_to_medium():
    assert classify_priority(20, "LOW", 2, 70)[0] == "MEDIUM"
    assert classify_priority(20, "LOW", 1, 70)[0] == "LOW"


def test_advertisement_skips_overrides():
    priority, _, reasons = classify_priority(9, "CRITICAL", 3, 70, is_advertisement=True)
    assert priority == "LOW"
    assert "Advertisement" in reasons


def test_priority_confidence_adjustment_and_clamp():
    """+5 above 80 confidence, -10 below 60, always within 30..95."""
    assert classify_priority(90, "LOW", 0, 85)[1] == 95
    assert classify_priority(55, "LOW", 0, 85)[1] == 80
    assert classify_priority(55, "LOW", 0, 50)[1] == 65


def test_priority_is_deterministic():
    args = (72.5, "HIGH", 1, 66.0)
    assert classify_priority(*args) == classify_priority(*args)


def test_combine_uniform_dimensions():
    """Identical dimension scores combine to that score."""
    combined = ScoreCombiner().combine(_uniform(60.0), ThreatAssessment())
    assert combined.overall == pytest.approx(60.0)
    assert combined.priority == "MEDIUM"
    assert combined.breakdown["secondary"] is None
    assert sum(combined.breakdown["contributions"].values()) == pytest.approx(60.0)


def test_combine_clamps_to_100():
    combined = ScoreCombiner().combine(_uniform(100.0), ThreatAssessment(), context_multiplier=1.5)
    assert combined.overall == 100.0
    assert combined.priority == "CRITICAL"
    assert combined.requires_escalation is True


def test_secondary_blend():
    """Secondary signals are blended 70/30 when present."""
    secondary = {"content_depth": 0, "linguistic": 0, "cross_reference": 0, "operational": 0, "strategic": 0}
    combined = ScoreCombiner().combine(_uniform(80.0), ThreatAssessment(), secondary=secondary)
    assert combined.overall == pytest.approx(56.0)
    assert combined.breakdown["blend"] == {"primary": 0.7, "secondary": 0.3}


def test_missing_dimensions_use_defaults():
    combined = ScoreCombiner().combine(_dims(keyword=50.0), ThreatAssessment())
    scores = combined.breakdown["scores"]
    assert scores["source"] == 70.0
    assert scores["temporal"] == 50.0
    assert combined.breakdown["quality"]["completeness"] < 50


def test_advertisement_capped():
    combined = ScoreCombiner().combine(
        _uniform(95.0), ThreatAssessment(level="CRITICAL"), is_advertisement=True,
    )
    assert combined.overall == 10.0
    assert combined.priority == "LOW"


def test_threat_override_in_combine():
    combined = ScoreCombiner().combine(_uniform(20.0), ThreatAssessment(score=85, level="CRITICAL"))
    assert combined.priority == "CRITICAL"
    assert combined.breakdown["score_priority"] == "LOW"


def test_confidence_bounds_and_consistency():
    """Consistent inputs are more confident than scattered ones."""
    steady = ScoreCombiner.confidence(
        {"keyword": 70, "entity": 70, "source": 70, "temporal": 70}, entity_count=3,
    )[0]
    scattered = ScoreCombiner.confidence(
        {"keyword": 0, "entity": 100, "source": 70, "temporal": 5}, entity_count=3,
    )[0]
    assert steady > scattered
    assert 30 <= scattered <= steady <= 95


def test_confidence_penalty():
    scores = {"keyword": 70, "entity": 70, "source": 70, "temporal": 70}
    base = ScoreCombiner.confidence(scores, entity_count=3)[0]
    penalized = ScoreCombiner.confidence(scores, entity_count=3, penalty=20)[0]
    assert penalized == pytest.approx(base - 20)


def test_recommended_action():
    assert recommended_action("CRITICAL", 85) == "IMMEDIATE_ACTION_REQUIRED"
    assert recommended_action("HIGH", 75) == "ESCALATE_TO_LEADERSHIP"
    assert recommended_action("MEDIUM", 65) == "MONITOR_AND_BRIEF"
    assert recommended_action("CRITICAL", 50) == "VERIFY_WITH_ADDITIONAL_SOURCES"
    assert recommended_action("LOW", 70) == "STANDARD_PROCESSING"


def test_custom_weights_from_config():
    weights = {"keyword": 1.0, "entity": 0.0, "source": 0.0, "temporal": 0.0, "geopolitical": 0.0, "threat": 0.0}
    combiner = ScoreCombiner({"scoring": {"weights": {"primary": weights}}})
    combined = combiner.combine(_dims(keyword=42.0, entity=100.0), ThreatAssessment())
    assert combined.overall == pytest.approx(42.0)
