"""Entity significance: how much weight the detected actors and systems carry."""

from __future__ import annotations

import logging
from types import MappingProxyType

from intelscore.models import DimensionScore, EntityAnalysis, ScoringContext
from intelscore.process.entities import strategic_implications
from intelscore.score import register_scorer
from intelscore.score.base import BaseScorer, clamp

logger = logging.getLogger(__name__)

CLASS_WEIGHTS = MappingProxyType({
    "countries": 0.4,
    "organizations": 0.3,
    "technologies": 0.2,
    "weapons": 0.1,
})

# (label, points, members); the first matching label wins
COUNTRY_CLASSES = (
    ("MAJOR_POWER", 30, frozenset({"UNITED STATES", "CHINA", "RUSSIA"})),
    ("CONFLICT_ZONE", 25, frozenset({
        "UKRAINE", "TAIWAN", "SYRIA", "IRAN", "ISRAEL", "NORTH KOREA", "PALESTINE",
    })),
    ("REGIONAL_POWER", 20, frozenset({"INDIA", "PAKISTAN", "TURKEY", "SAUDI ARABIA", "JAPAN"})),
)
COUNTRY_DEFAULT = ("STANDARD", 10)

ORGANIZATION_CLASSES = (
    ("TERRORIST", 30, frozenset({
        "ISIS", "AL-QAEDA", "TALIBAN", "HEZBOLLAH", "HAMAS", "HOUTHIS", "BOKO HARAM",
    })),
    ("INTELLIGENCE", 25, frozenset({
        "CIA", "NSA", "FSB", "SVR", "MSS", "MOSSAD", "MI6", "BND", "DGSE", "ISI",
    })),
    ("MILITARY", 20, frozenset({"NATO", "PENTAGON", "PLA", "IRGC", "IDF", "WAGNER GROUP"})),
    ("INTERNATIONAL", 15, frozenset({"UN", "IAEA", "WHO"})),
)
ORGANIZATION_DEFAULT = ("STANDARD", 5)

TECHNOLOGY_CLASSES = (
    ("STRATEGIC", 25, frozenset({
        "NUCLEAR WEAPON", "NUCLEAR REACTOR", "URANIUM ENRICHMENT", "PLUTONIUM",
        "QUANTUM COMPUTING", "HYPERSONIC MISSILE", "ARTIFICIAL INTELLIGENCE", "SATELLITE",
    })),
    ("CYBER", 20, frozenset({"MALWARE", "ZERO-DAY", "RANSOMWARE", "BOTNET", "DEEPFAKE"})),
    ("MILITARY", 15, frozenset({"STEALTH TECHNOLOGY", "RADAR", "DRONE", "SONAR", "SURVEILLANCE"})),
)
TECHNOLOGY_DEFAULT = ("STANDARD", 5)

WEAPON_CLASSES = (
    ("STRATEGIC", 30, frozenset({
        "ICBM", "SLBM", "HYPERSONIC MISSILE", "NUCLEAR WARHEAD", "HYDROGEN BOMB",
        "TACTICAL NUCLEAR WEAPON", "SARMAT", "KINZHAL", "ZIRCON",
    })),
    ("ADVANCED", 20, frozenset({
        "F-35", "F-22", "SU-57", "J-20", "B-21", "S-400", "S-500", "THAAD", "IRON DOME",
        "AEGIS", "DF-21", "DF-26",
    })),
    ("CONVENTIONAL", 10, frozenset({
        "CRUISE MISSILE", "BALLISTIC MISSILE", "AIRCRAFT CARRIER", "SUBMARINE", "DESTROYER",
        "FRIGATE", "B-52", "S-300", "ISKANDER", "PATRIOT", "HIMARS", "JAVELIN",
    })),
)
WEAPON_DEFAULT = ("STANDARD", 5)

TENSION_PAIRS = (
    ("CHINA", "UNITED STATES"),
    ("CHINA", "TAIWAN"),
    ("RUSSIA", "NATO"),
    ("RUSSIA", "UKRAINE"),
    ("IRAN", "ISRAEL"),
    ("INDIA", "PAKISTAN"),
    ("NORTH KOREA", "UNITED STATES"),
    ("NORTH KOREA", "SOUTH KOREA"),
)
TENSION_PAIR_BONUS = 15


def classify(name: str, classes: tuple, default: tuple[str, int]) -> tuple[str, int]:
    for label, points, members in classes:
        if name in members:
            return label, points
    return default


def _class_significance(names, classes, default) -> dict:
    items = []
    total = 0
    for name in names:
        label, points = classify(name, classes, default)
        total += points
        items.append({"name": name, "type": label, "score": points})
    return {"score": min(total, 100), "items": items}


def tension_pairs(actors: set[str]) -> list[tuple[str, str]]:
    """Known tension pairs with both sides among the detected actors."""
    return [pair for pair in TENSION_PAIRS if actors.issuperset(pair)]


@register_scorer("entity")
class EntitySignificanceScorer(BaseScorer):
    """Weighted significance of countries, organizations, technologies and weapons."""

    @property
    def name(self) -> str:
        return "entity"

    def score(self, context: ScoringContext) -> DimensionScore:
        return self.score_entities(context.entities)

    def score_entities(self, entities: EntityAnalysis) -> DimensionScore:
        countries = _class_significance(entities.countries, COUNTRY_CLASSES, COUNTRY_DEFAULT)
        pairs = tension_pairs(entities.actors)
        if pairs:
            countries["tension_pairs"] = pairs
            countries["score"] = min(countries["score"] + len(pairs) * TENSION_PAIR_BONUS, 100)

        # Weapon systems share the weapons bucket
        weapons = tuple(dict.fromkeys(entities.weapons + entities.weapon_systems))
        factors = {
            "countries": countries,
            "organizations": _class_significance(entities.organizations, ORGANIZATION_CLASSES, ORGANIZATION_DEFAULT),
            "technologies": _class_significance(entities.technologies, TECHNOLOGY_CLASSES, TECHNOLOGY_DEFAULT),
            "weapons": _class_significance(weapons, WEAPON_CLASSES, WEAPON_DEFAULT),
        }

        total = sum(factors[cls]["score"] * weight for cls, weight in CLASS_WEIGHTS.items())
        final = round(clamp(total), 1)
        logger.debug("Entity significance %.1f (%d entities)", final, entities.unique_count)

        return DimensionScore(
            score=final,
            details={
                "factors": factors,
                "total_entities": entities.unique_count,
                "density": entities.density,
                "density_band": entities.density_band,
                "significance": entities.significance.overall,
                "strategic_implications": strategic_implications(entities),
            },
        )
