"""Secondary signals blended into the composite score when enabled."""

from __future__ import annotations

import logging
import re
from datetime import timedelta

from intelscore.models import Article, ScoringContext
from intelscore.process.matching import matched
from intelscore.process.preprocess import normalize_text
from intelscore.score.base import clamp

logger = logging.getLogger(__name__)

SIGNALS = ("content_depth", "linguistic", "cross_reference", "operational", "strategic")

DETAIL_RE = re.compile(
    r"\d{1,2}/\d{1,2}/\d{4}|\d{1,2}:\d{2}|\bspecific\b|\baccording to\b|\breported\b|\bconfirmed\b|\bsources\b",
    re.IGNORECASE,
)
QUOTE_RE = re.compile(r"\"[^\"]+\"|“[^”]+”")
SENTENCE_RE = re.compile(r"[.!?]+")

LINGUISTIC_BASE = 50
LINGUISTIC_INDICATORS = (
    (10, ("breaking", "urgent", "immediate", "alert", "emergency", "critical")),
    (8, ("official", "confirmed", "verified", "authenticated", "disclosed")),
    (12, ("exclusive", "first reported", "obtained", "leaked", "revealed")),
    (-5, ("alleged", "rumored", "unconfirmed", "speculation", "possibly")),
)

CROSS_REFERENCE_DAYS = 7
CROSS_REFERENCE_EMPTY = 50.0
CROSS_REFERENCE_BASE = 30
CROSS_REFERENCE_PER_ENTITY = 5
CORROBORATION_THRESHOLD = 50
CORROBORATION_BONUS = 20
CORROBORATION_TERMS = (
    "china", "russia", "usa", "iran", "north korea", "ukraine", "taiwan",
    "nuclear", "missile", "cyber", "military", "intelligence",
)

OPERATIONAL_KEYWORDS = (
    "deployment", "operation", "exercise", "patrol", "mission", "task force",
    "readiness", "alert", "response", "capability", "threat", "security",
)
IMMEDIACY_KEYWORDS = ("now", "today", "immediate", "urgent", "emergency", "rapid", "breaking")
OPERATIONAL_ENTITIES = frozenset({"UNITED STATES", "CHINA", "RUSSIA", "NATO", "NUCLEAR WEAPON", "NUCLEAR REACTOR"})

STRATEGIC_KEYWORDS = (
    "strategy", "doctrine", "policy", "alliance", "treaty", "agreement",
    "balance", "power", "influence", "regional", "global", "international",
)
FUTURE_KEYWORDS = (
    "future", "plan", "develop", "program", "project", "initiative",
    "next", "upcoming", "long-term", "strategic",
)
MAJOR_POWERS = ("UNITED STATES", "CHINA", "RUSSIA")


def content_depth(article: Article) -> float:
    body = article.body
    words = len(body.split())
    sentences = len([s for s in SENTENCE_RE.split(body) if s.strip()])

    score = 0
    if words > 500:
        score += 30
    elif words > 300:
        score += 20
    elif words > 150:
        score += 10

    if sentences > 10:
        score += 20
    elif sentences > 5:
        score += 10

    if DETAIL_RE.search(body):
        score += 25
    if QUOTE_RE.search(body):
        score += 15
    if len(article.title) > 60:
        score += 10
    return min(score, 100)


def linguistic(text: str) -> float:
    score = LINGUISTIC_BASE
    for points, indicators in LINGUISTIC_INDICATORS:
        score += points * len(matched(text, indicators))
    return clamp(score)


def corroborating_terms(text: str) -> set[str]:
    return set(matched(text, CORROBORATION_TERMS))


def cross_reference(article: Article, text: str, window: tuple[Article, ...]) -> float:
    """Entity overlap with window articles published within a week of this one."""
    others = [
        other for other in window
        if other is not article and (article.id is None or other.id != article.id)
    ]
    if not others:
        return CROSS_REFERENCE_EMPTY

    limit = timedelta(days=CROSS_REFERENCE_DAYS)
    own = corroborating_terms(text)
    correlation = 0
    for other in others:
        if article.timestamp is not None and other.timestamp is not None:
            if abs(article.timestamp - other.timestamp) > limit:
                continue
        common = own & corroborating_terms(normalize_text(f"{other.title} {other.body}"))
        correlation += len(common) * CROSS_REFERENCE_PER_ENTITY

    if correlation > CORROBORATION_THRESHOLD:
        correlation += CORROBORATION_BONUS
    return min(correlation + CROSS_REFERENCE_BASE, 100)


def operational(text: str, names: set[str]) -> float:
    score = 8 * len(matched(text, OPERATIONAL_KEYWORDS)) + 10 * len(matched(text, IMMEDIACY_KEYWORDS))
    if names & OPERATIONAL_ENTITIES:
        score += 20
    return min(score, 100)


def strategic(text: str, countries: tuple[str, ...]) -> float:
    score = 6 * len(matched(text, STRATEGIC_KEYWORDS)) + 5 * len(matched(text, FUTURE_KEYWORDS))
    powers = sum(1 for power in MAJOR_POWERS if power in countries)
    if powers >= 2:
        score += 30
    elif powers == 1:
        score += 15
    return min(score, 100)


class SecondaryScorer:
    """Computes the five secondary signals for one article."""

    def __init__(self, config: dict | None = None):
        self.config = config or {}

    def score(self, context: ScoringContext) -> dict[str, float]:
        text = context.content.text
        entities = context.entities
        signals = {
            "content_depth": float(content_depth(context.article)),
            "linguistic": float(linguistic(text)),
            "cross_reference": float(cross_reference(context.article, text, context.window)),
            "operational": float(operational(text, set(entities.all_names()))),
            "strategic": float(strategic(text, entities.countries)),
        }
        logger.debug("Secondary signals for %s: %s", context.article.label, signals)
        return signals
