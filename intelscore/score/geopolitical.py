"""Geopolitical context: known tension relationships between detected actors."""

from __future__ import annotations

import logging

from intelscore.models import DimensionScore, EntityAnalysis, PreprocessedContent, ScoringContext
from intelscore.process.matching import matched
from intelscore.score import register_scorer
from intelscore.score.base import BaseScorer, clamp

logger = logging.getLogger(__name__)

# (side a, side b, tension, strategic importance)
TENSION_MATRIX = (
    ("CHINA", "UNITED STATES", 0.9, 1.0),
    ("RUSSIA", "NATO", 0.95, 1.0),
    ("IRAN", "ISRAEL", 0.9, 0.8),
    ("INDIA", "PAKISTAN", 0.85, 0.7),
    ("NORTH KOREA", "UNITED STATES", 0.8, 0.9),
    ("CHINA", "TAIWAN", 0.9, 0.9),
)
RELATIONSHIP_SCALE = 50

TENSION_REGIONS = {
    "EAST_ASIA": ("CHINA", "TAIWAN", "NORTH KOREA", "SOUTH KOREA", "JAPAN", "PHILIPPINES", "VIETNAM"),
    "MIDDLE_EAST": ("IRAN", "ISRAEL", "SYRIA", "IRAQ", "SAUDI ARABIA", "TURKEY", "PALESTINE"),
    "EASTERN_EUROPE": ("RUSSIA", "UKRAINE", "NATO", "EU"),
    "SOUTH_ASIA": ("INDIA", "PAKISTAN", "AFGHANISTAN"),
}
MIN_REGION_ACTORS = 2
HIGH_TENSION_REGION_ACTORS = 3

COMPETITION_TECHNOLOGIES = ("ai", "artificial intelligence", "quantum", "hypersonic", "cyber", "space")
MIN_COMPETITION_TECHNOLOGIES = 2
MIN_COMPETITION_COUNTRIES = 2


def relationships(actors: set[str]) -> list[dict]:
    """Matrix entries with both sides among the detected actors, in matrix order."""
    found = []
    for side_a, side_b, tension, importance in TENSION_MATRIX:
        if side_a in actors and side_b in actors:
            found.append({
                "relationship": f"{side_a}-{side_b}",
                "members": [side_a, side_b],
                "tension": tension,
                "importance": importance,
                "score": round(tension * importance * RELATIONSHIP_SCALE, 2),
            })
    return found


def regional_tensions(actors: set[str]) -> list[dict]:
    clusters = []
    for region, members in TENSION_REGIONS.items():
        present = [m for m in members if m in actors]
        if len(present) >= MIN_REGION_ACTORS:
            clusters.append({
                "region": region,
                "members": present,
                "tension_level": "HIGH" if len(present) >= HIGH_TENSION_REGION_ACTORS else "MEDIUM",
            })
    return clusters


def technology_competition(entities: EntityAnalysis, text: str) -> dict | None:
    technologies = matched(text, COMPETITION_TECHNOLOGIES)
    if len(technologies) >= MIN_COMPETITION_TECHNOLOGIES and len(entities.countries) >= MIN_COMPETITION_COUNTRIES:
        return {"technologies": [t.upper() for t in technologies], "countries": list(entities.countries)}
    return None


def context_summary(details: dict) -> str:
    """Readable summary of the geopolitical context found."""
    parts = [f"{c['region'].replace('_', ' ')} regional tensions" for c in details.get("regional_tensions", [])]
    if details.get("technology_competition"):
        parts.append("Technology competition dynamics")
    return ", ".join(parts) or "General intelligence context"


@register_scorer("geopolitical")
class GeopoliticalScorer(BaseScorer):
    """Sums tension x importance over every known rivalry present in the article."""

    @property
    def name(self) -> str:
        return "geopolitical"

    def score(self, context: ScoringContext) -> DimensionScore:
        return self.score_entities(context.entities, context.content)

    def score_entities(self, entities: EntityAnalysis, content: PreprocessedContent | None = None) -> DimensionScore:
        actors = entities.actors
        found = relationships(actors)
        total = sum(r["score"] for r in found)
        final = round(clamp(total), 1)

        details = {
            "relationships": found,
            "relationship_count": len(found),
            "regional_tensions": regional_tensions(actors),
            "technology_competition": technology_competition(entities, content.text) if content else None,
        }
        details["summary"] = context_summary(details)
        details["analysis"] = f"{len(found)} geopolitical relationships detected"

        logger.debug("Geopolitical score %.1f (%d relationships)", final, len(found))
        return DimensionScore(score=final, details=details)
