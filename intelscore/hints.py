"""Validation of optional external analysis payloads (e.g. from an LLM service).

The engine never calls such a service itself. A caller may hand over a
payload it already has, and the analyzer uses it only on the fallback path.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from intelscore.classify import CATEGORIES, DEFAULT_CATEGORY
from intelscore.models import ENTITY_CLASSES, PRIORITY_LEVELS, ExternalAnalysis
from intelscore.score.base import clamp

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 25.0
DEFAULT_CONFIDENCE = 60.0
MAX_TAGS = 15
MAX_ENTITIES_PER_CLASS = 10

# Minimum score a priority should carry, and the threat levels consistent with it
PRIORITY_MIN_SCORE = {"CRITICAL": 80, "HIGH": 60, "MEDIUM": 40, "LOW": 0}
PRIORITY_THREATS = {
    "CRITICAL": ("CRITICAL", "HIGH"),
    "HIGH": ("CRITICAL", "HIGH", "MEDIUM"),
    "MEDIUM": ("HIGH", "MEDIUM", "LOW"),
    "LOW": ("MEDIUM", "LOW"),
}

_ENTITY_KEYS = {cls: (cls, "weaponSystems" if cls == "weapon_systems" else cls) for cls in ENTITY_CLASSES}


def _get(data: dict, *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _score(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return round(clamp(number), 1)


def _level(value: Any) -> str:
    level = str(value).upper() if isinstance(value, str) else ""
    return level if level in PRIORITY_LEVELS else "LOW"


def _strings(values: Any, limit: int) -> tuple[str, ...]:
    if not isinstance(values, (list, tuple)):
        return ()
    cleaned = [v.strip().upper() for v in values if isinstance(v, str) and len(v.strip()) > 1]
    return tuple(dict.fromkeys(cleaned))[:limit]


def _categories(values: Any) -> tuple[str, ...]:
    if not isinstance(values, (list, tuple)):
        return (DEFAULT_CATEGORY,)
    known = set(CATEGORIES) | {DEFAULT_CATEGORY}
    kept = [v.upper() for v in values if isinstance(v, str) and v.upper() in known]
    return tuple(dict.fromkeys(kept)) or (DEFAULT_CATEGORY,)


def _entities(values: Any) -> dict[str, tuple[str, ...]]:
    if not isinstance(values, dict):
        return {cls: () for cls in ENTITY_CLASSES}
    return {cls: _strings(_get(values, *keys), MAX_ENTITIES_PER_CLASS) for cls, keys in _ENTITY_KEYS.items()}


def cross_validate(hint: ExternalAnalysis) -> list[str]:
    """Inconsistencies between the hint's score, priority and threat level."""
    problems = []
    if hint.score < PRIORITY_MIN_SCORE[hint.priority]:
        problems.append(f"score {hint.score:.0f} is low for priority {hint.priority}")
    if hint.threat_level not in PRIORITY_THREATS[hint.priority]:
        problems.append(f"threat level {hint.threat_level} does not align with priority {hint.priority}")
    return problems


def parse_external_analysis(payload: dict | str | None) -> ExternalAnalysis | None:
    """Validate an external analysis payload into an ``ExternalAnalysis``.

    Accepts a dict or a JSON string with snake_case or camelCase keys.
    Returns None (with a warning) when the payload is not a JSON object.
    """
    if payload is None:
        return None
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring external analysis: invalid JSON (%s)", e)
            return None
    if not isinstance(payload, dict):
        logger.warning("Ignoring external analysis: expected an object, got %s", type(payload).__name__)
        return None

    hint = ExternalAnalysis(
        summary=str(_get(payload, "summary") or ""),
        score=_score(_get(payload, "score", "relevance_score", "relevanceScore"), DEFAULT_SCORE),
        confidence=_score(_get(payload, "confidence", "confidence_level", "confidenceLevel"), DEFAULT_CONFIDENCE),
        priority=_level(_get(payload, "priority")),
        threat_level=_level(_get(payload, "threat_level", "threatLevel", "threat_assessment", "threatAssessment")),
        categories=_categories(_get(payload, "categories")),
        tags=_strings(_get(payload, "tags"), MAX_TAGS),
        entities=_entities(_get(payload, "entities")),
        is_advertisement=bool(_get(payload, "is_advertisement", "isAdvertisement")),
    )

    for problem in cross_validate(hint):
        logger.warning("External analysis inconsistency: %s", problem)
    return hint
