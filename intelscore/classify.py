"""Intelligence categories and tags for an analyzed article."""

from __future__ import annotations

from typing import Iterable

from intelscore.models import EntityAnalysis, PreprocessedContent, ThreatAssessment
from intelscore.process.matching import matched

CATEGORIES = ("MILITARY", "TECHNOLOGY", "GEOPOLITICS", "NUCLEAR", "HEALTH", "CYBERSECURITY", "FINANCE")
DEFAULT_CATEGORY = "GENERAL"

MILITARY_TECH_MARKERS = ("MISSILE", "NUCLEAR", "MILITARY", "STEALTH", "DRONE", "RADAR")
TECH_MARKERS = ("CYBER", "ARTIFICIAL INTELLIGENCE", "QUANTUM", "COMPUTING", "MALWARE", "RANSOMWARE",
                "ZERO-DAY", "BOTNET", "DEEPFAKE", "BLOCKCHAIN")
NUCLEAR_MARKERS = ("NUCLEAR", "URANIUM", "PLUTONIUM", "ICBM", "SLBM", "HYDROGEN BOMB")

HEALTH_TERMS = ("outbreak", "pandemic", "epidemic", "vaccine", "virus", "pathogen", "quarantine", "disease")
CYBER_TERMS = ("cyber", "cyberattack", "cybersecurity", "hacking", "hackers", "malware", "ransomware")
FINANCE_TERMS = ("financial", "finance", "banking", "market crash", "currency", "economic sanctions")

# Primary threat categories that imply an intelligence category
THREAT_CATEGORY = {
    "NUCLEAR": "NUCLEAR",
    "MILITARY": "MILITARY",
    "CYBER": "CYBERSECURITY",
    "HEALTH": "HEALTH",
    "ECONOMIC": "FINANCE",
}

CONTEXTUAL_TAGS = (
    "DEPLOYMENT", "SANCTIONS", "TREATY", "ALLIANCE", "SUMMIT",
    "BREACH", "ATTACK", "DEFENSE", "STRATEGY", "OPERATION",
    "INTELLIGENCE", "SURVEILLANCE", "RECONNAISSANCE", "ANALYSIS",
)
MAX_TAGS = 15
MIN_TAG_LENGTH = 3


def _any_marker(names: Iterable[str], markers: tuple[str, ...]) -> bool:
    return any(marker in name for name in names for marker in markers)


def classify_categories(
    entities: EntityAnalysis,
    content: PreprocessedContent,
    threat: ThreatAssessment | None = None,
) -> tuple[str, ...]:
    """Categories in fixed order; ``GENERAL`` when nothing applies."""
    text = content.text
    weapons = entities.weapons + entities.weapon_systems
    found = set()

    if weapons or _any_marker(entities.technologies, MILITARY_TECH_MARKERS):
        found.add("MILITARY")
    if _any_marker(entities.technologies, TECH_MARKERS):
        found.add("TECHNOLOGY")
    if len(entities.countries) >= 2:
        found.add("GEOPOLITICS")
    if _any_marker(entities.technologies + weapons, NUCLEAR_MARKERS):
        found.add("NUCLEAR")
    if matched(text, HEALTH_TERMS):
        found.add("HEALTH")
    if matched(text, CYBER_TERMS):
        found.add("CYBERSECURITY")
    if matched(text, FINANCE_TERMS):
        found.add("FINANCE")
    if threat is not None and threat.primary_threat in THREAT_CATEGORY:
        found.add(THREAT_CATEGORY[threat.primary_threat])

    return tuple(c for c in CATEGORIES if c in found) or (DEFAULT_CATEGORY,)


def generate_tags(
    entities: EntityAnalysis,
    categories: Iterable[str],
    content: PreprocessedContent,
    status: Iterable[str] = (),
) -> tuple[str, ...]:
    """Top entities, categories and contextual keywords as sorted tags.

    Status tags (``INCOMPLETE``, ``ADVERTISEMENT``) come first so the cap
    never drops them.
    """
    candidates = [
        *status,
        *entities.countries[:3],
        *entities.organizations[:2],
        *entities.technologies[:3],
        *(entities.weapons + entities.weapon_systems)[:2],
        *categories,
        *matched(content.combined, CONTEXTUAL_TAGS),
    ]
    tags = [tag for tag in dict.fromkeys(candidates) if tag and len(tag) >= MIN_TAG_LENGTH]
    return tuple(sorted(tags[:MAX_TAGS]))
