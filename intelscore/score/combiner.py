"""Weighted combination of dimension scores into score, confidence and priority."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from intelscore.config import get_blend_weights, get_primary_weights, get_secondary_weights
from intelscore.models import DimensionScore, ThreatAssessment
from intelscore.score.base import clamp

logger = logging.getLogger(__name__)

# Used when a dimension is missing from the input
PRIMARY_DEFAULTS = {"keyword": 0.0, "entity": 0.0, "source": 70.0, "temporal": 50.0, "geopolitical": 0.0, "threat": 0.0}
SECONDARY_DEFAULTS = {
    "content_depth": 50.0,
    "linguistic": 50.0,
    "cross_reference": 50.0,
    "operational": 30.0,
    "strategic": 30.0,
}

# (priority, minimum score, base priority confidence), highest first
PRIORITY_THRESHOLDS = (
    ("CRITICAL", 85, 95),
    ("HIGH", 70, 85),
    ("MEDIUM", 50, 75),
    ("LOW", 0, 60),
)
CRITICAL_THREAT_CONFIDENCE = 90
HIGH_THREAT_CONFIDENCE = 80
RELATIONSHIP_OVERRIDE_MIN = 2
RELATIONSHIP_CONFIDENCE = 75

CONFIDENCE_WEIGHTS = {"consistency": 0.4, "source": 0.3, "entity": 0.2, "temporal": 0.1}
CONFIDENCE_FLOOR = 30
CONFIDENCE_CEILING = 95
ENTITY_CONFIDENCE_BASE = 50
ENTITY_CONFIDENCE_PER_ENTITY = 10

ADVERTISEMENT_MAX_SCORE = 10.0

ACTIONABLE_SCORE = 60
ACTIONABLE_CONFIDENCE = 70


@dataclass(frozen=True)
class CombinedScore:
    overall: float
    confidence: float
    priority: str
    priority_confidence: float
    recommended_action: str
    is_actionable: bool
    requires_escalation: bool
    breakdown: dict[str, Any] = field(default_factory=dict)


def score_priority(score: float) -> tuple[str, float]:
    for priority, minimum, confidence in PRIORITY_THRESHOLDS:
        if score >= minimum:
            return priority, confidence
    return "LOW", 60


def classify_priority(
    score: float,
    threat_level: str,
    relationship_count: int,
    confidence: float,
    is_advertisement: bool = False,
) -> tuple[str, float, list[str]]:
    """Priority from the score thresholds, then the threat and relationship overrides.

    Depends only on its arguments, so identical inputs always classify the same.
    """
    priority, priority_confidence = score_priority(score)
    reasons = [f"Score: {score:.1f}"]

    if is_advertisement:
        priority = "LOW"
        reasons.append("Advertisement")
    else:
        if threat_level == "CRITICAL" and priority != "CRITICAL":
            priority = "CRITICAL"
            priority_confidence = max(priority_confidence, CRITICAL_THREAT_CONFIDENCE)
            reasons.append("Critical threat level")
        elif threat_level == "HIGH" and priority == "LOW":
            priority = "MEDIUM"
            priority_confidence = max(priority_confidence, HIGH_THREAT_CONFIDENCE)
            reasons.append("High threat level")

        if relationship_count >= RELATIONSHIP_OVERRIDE_MIN and priority == "LOW":
            priority = "MEDIUM"
            priority_confidence = max(priority_confidence, RELATIONSHIP_CONFIDENCE)
            reasons.append(f"{relationship_count} geopolitical relationships")

    if confidence > 80:
        priority_confidence += 5
    elif confidence < 60:
        priority_confidence -= 10
    return priority, clamp(priority_confidence, CONFIDENCE_FLOOR, CONFIDENCE_CEILING), reasons


def recommended_action(priority: str, confidence: float) -> str:
    if priority == "CRITICAL" and confidence >= 80:
        return "IMMEDIATE_ACTION_REQUIRED"
    if priority == "HIGH" and confidence >= 70:
        return "ESCALATE_TO_LEADERSHIP"
    if priority == "MEDIUM" and confidence >= 60:
        return "MONITOR_AND_BRIEF"
    if confidence < 60:
        return "VERIFY_WITH_ADDITIONAL_SOURCES"
    return "STANDARD_PROCESSING"


def quality_level(value: float) -> str:
    if value >= 85:
        return "EXCELLENT"
    if value >= 75:
        return "GOOD"
    if value >= 60:
        return "ACCEPTABLE"
    return "POOR"


class ScoreCombiner:
    """Merges dimension outputs into the final score, confidence and priority.

    Every intermediate value lands in ``breakdown`` so a result can be
    explained (and tested) without re-running the scorers.
    """

    def __init__(self, config: dict | None = None):
        self.config = config or {}
        self.primary_weights = get_primary_weights(self.config)
        self.secondary_weights = get_secondary_weights(self.config)
        self.blend = get_blend_weights(self.config)

    def combine(
        self,
        dimensions: dict[str, DimensionScore],
        threat: ThreatAssessment,
        secondary: dict[str, float] | None = None,
        relationship_count: int = 0,
        entity_count: int = 0,
        is_advertisement: bool = False,
        context_multiplier: float = 1.0,
        confidence_penalty: float = 0.0,
    ) -> CombinedScore:
        scores = {
            name: float(dimensions[name].score) if name in dimensions else default
            for name, default in PRIMARY_DEFAULTS.items()
        }
        contributions = {name: scores[name] * weight for name, weight in self.primary_weights.items()}
        primary = min(sum(contributions.values()), 100.0)

        if secondary is not None:
            secondary_scores = {name: float(secondary.get(name, default)) for name, default in SECONDARY_DEFAULTS.items()}
            secondary_contributions = {
                name: secondary_scores[name] * weight for name, weight in self.secondary_weights.items()
            }
            secondary_composite = min(sum(secondary_contributions.values()), 100.0)
            blended = primary * self.blend["primary"] + secondary_composite * self.blend["secondary"]
        else:
            secondary_scores = secondary_contributions = None
            secondary_composite = None
            blended = primary

        adjusted = clamp(blended * context_multiplier)
        if is_advertisement:
            adjusted = min(adjusted, ADVERTISEMENT_MAX_SCORE)
        # Classify on the reported value so priority never disagrees with the stored score
        overall = round(adjusted, 1)

        confidence, confidence_parts = self.confidence(scores, entity_count, confidence_penalty)
        priority, priority_confidence, reasons = classify_priority(
            overall, threat.level, relationship_count, confidence, is_advertisement,
        )
        action = recommended_action(priority, confidence)
        quality = self.quality_metrics(scores, dimensions, secondary is not None, entity_count, threat)

        logger.debug("Combined %.1f -> %s (confidence %.1f)", overall, priority, confidence)

        return CombinedScore(
            overall=overall,
            confidence=confidence,
            priority=priority,
            priority_confidence=priority_confidence,
            recommended_action=action,
            is_actionable=overall >= ACTIONABLE_SCORE and confidence >= ACTIONABLE_CONFIDENCE,
            requires_escalation=priority in ("CRITICAL", "HIGH"),
            breakdown={
                "scores": scores,
                "weights": dict(self.primary_weights),
                "contributions": {k: round(v, 4) for k, v in contributions.items()},
                "primary": round(primary, 4),
                "secondary_scores": secondary_scores,
                "secondary_contributions": (
                    {k: round(v, 4) for k, v in secondary_contributions.items()} if secondary_contributions else None
                ),
                "secondary": round(secondary_composite, 4) if secondary_composite is not None else None,
                "blend": dict(self.blend) if secondary is not None else {"primary": 1.0, "secondary": 0.0},
                "blended": round(blended, 4),
                "context_multiplier": context_multiplier,
                "advertisement_cap": ADVERTISEMENT_MAX_SCORE if is_advertisement else None,
                "overall": overall,
                "confidence": confidence_parts,
                "priority_reasons": reasons,
                "score_priority": score_priority(overall)[0],
                "threat_level": threat.level,
                "relationship_count": relationship_count,
                "quality": quality,
            },
        )

    @staticmethod
    def confidence(scores: dict[str, float], entity_count: int, penalty: float = 0.0) -> tuple[float, dict]:
        """Consistency of the core dimensions, source, entity coverage and freshness."""
        core = np.array([scores["keyword"], scores["entity"], scores["source"], scores["temporal"]])
        deviation = float(np.std(core))
        parts = {
            "consistency": max(0.0, 100.0 - 2 * deviation),
            "source": scores["source"],
            "entity": float(min(ENTITY_CONFIDENCE_BASE + ENTITY_CONFIDENCE_PER_ENTITY * entity_count, 100)),
            "temporal": scores["temporal"],
        }
        weighted = sum(parts[k] * w for k, w in CONFIDENCE_WEIGHTS.items())
        confidence = round(clamp(weighted - penalty, CONFIDENCE_FLOOR, CONFIDENCE_CEILING), 1)
        return confidence, {
            **{k: round(v, 2) for k, v in parts.items()},
            "standard_deviation": round(deviation, 2),
            "penalty": penalty,
            "value": confidence,
        }

    @staticmethod
    def quality_metrics(
        scores: dict[str, float],
        dimensions: dict[str, DimensionScore],
        has_secondary: bool,
        entity_count: int,
        threat: ThreatAssessment,
    ) -> dict[str, Any]:
        core = np.array([scores["keyword"], scores["entity"], scores["source"], scores["temporal"]])
        stability = max(0.0, 100.0 - float(np.std(core)))

        present = sum(1 for name in PRIMARY_DEFAULTS if name in dimensions) + (1 if has_secondary else 0)
        completeness = present / (len(PRIMARY_DEFAULTS) + 1) * 100

        data_quality = 70
        if scores["source"] >= 85:
            data_quality += 15
        elif scores["source"] < 60:
            data_quality -= 15
        if entity_count > 0:
            data_quality += 10
        if threat.confidence >= 80:
            data_quality += 10
        elif threat.confidence < 60:
            data_quality -= 10
        data_quality = clamp(data_quality)

        overall = float(np.mean([stability, completeness, data_quality]))
        recommendations = []
        if stability < 70:
            recommendations.append("Improve score consistency across factors")
        if completeness < 90:
            recommendations.append("Ensure all scoring factors are present")
        if data_quality < 70:
            recommendations.append("Verify data quality and source reliability")

        return {
            "stability": round(stability, 2),
            "completeness": round(completeness, 2),
            "data_quality": data_quality,
            "overall": round(overall, 2),
            "level": quality_level(overall),
            "recommendations": recommendations,
        }
