"""Temporal relevance: age decay, temporal language, urgency and cyclical events."""

from __future__ import annotations

import logging
import math
from datetime import datetime

from intelscore.models import Article, DimensionScore, PreprocessedContent, ScoringContext
from intelscore.process.matching import matched
from intelscore.score import register_scorer
from intelscore.score.base import BaseScorer, clamp

logger = logging.getLogger(__name__)

# (bucket, upper bound in hours, score at the start of the bucket)
AGE_BUCKETS = (
    ("BREAKING", 1, 100.0),
    ("RECENT", 6, 95.0),
    ("CURRENT", 24, 85.0),
    ("DAILY", 72, 70.0),
    ("WEEKLY", 168, 50.0),
)
HISTORICAL_FLOOR = 10.0
HISTORICAL_START = 30.0
HISTORICAL_DECAY_HOURS = 720.0
UNKNOWN_AGE_SCORE = 50.0

TEMPORAL_CATEGORIES = (
    ("IMMEDIATE", 1.3, ("breaking", "urgent", "immediate", "emergency", "alert", "now", "just in")),
    ("RECENT", 1.2, ("today", "this morning", "this afternoon", "tonight", "earlier today")),
    ("ONGOING", 1.15, ("ongoing", "continues", "developing", "evolving", "unfolding")),
    ("FUTURE", 1.1, ("will", "planned", "scheduled", "upcoming", "next week", "soon")),
    ("PAST", 0.9, ("yesterday", "last week", "previous", "earlier", "former")),
)

URGENCY_LEVELS = (
    ("CRITICAL", 1.4, ("attack", "invasion", "nuclear", "crisis", "emergency", "threat")),
    ("HIGH", 1.2, ("deployment", "escalation", "breach", "incident", "alert")),
    ("MEDIUM", 1.1, ("exercise", "test", "meeting", "announcement", "statement")),
)
TIME_SENSITIVE_URGENCY = 1.2

UN_GENERAL_ASSEMBLY_MONTHS, UN_GENERAL_ASSEMBLY_FACTOR = (9,), 1.1
BUDGET_QUARTERS, BUDGET_FACTOR = (1, 4), 1.05
EXERCISE_MONTHS, EXERCISE_FACTOR = (3, 4, 5, 9, 10), 1.1
SUMMIT_MENTIONS = (("nato summit", 1.2), ("g7", 1.15), ("g20", 1.15))
MAX_CYCLICAL_FACTOR = 1.2

SENSITIVITY_LEVELS = ("LOW", "MEDIUM", "HIGH", "CRITICAL")
BUCKET_SENSITIVITY = {"BREAKING": "HIGH", "RECENT": "MEDIUM"}
ACTION_WINDOWS = {
    "CRITICAL": (1, "Immediate action required"),
    "HIGH": (6, "Action required within 6 hours"),
    "MEDIUM": (24, "Action required within 24 hours"),
    "LOW": (72, "Monitor for developments"),
}


def age_hours(article: Article, now: datetime) -> float | None:
    """Hours since publication (or fetch); future timestamps count as age zero."""
    if article.timestamp is None:
        return None
    return max((now - article.timestamp).total_seconds() / 3600.0, 0.0)


def base_score(age: float | None) -> tuple[str, float]:
    """Age bucket and decayed base score.

    Inside a bucket the score decays exponentially from the bucket's base to
    the next bucket's base, so the curve is continuous and strictly falling.
    """
    if age is None:
        return "UNKNOWN", UNKNOWN_AGE_SCORE

    lower = 0.0
    for idx, (bucket, upper, start) in enumerate(AGE_BUCKETS):
        if age <= upper:
            end = AGE_BUCKETS[idx + 1][2] if idx + 1 < len(AGE_BUCKETS) else HISTORICAL_START
            fraction = (age - lower) / (upper - lower)
            return bucket, start * math.exp(-math.log(start / end) * fraction)
        lower = upper

    decay = math.exp(-(age - AGE_BUCKETS[-1][1]) / HISTORICAL_DECAY_HOURS)
    return "HISTORICAL", HISTORICAL_FLOOR + (HISTORICAL_START - HISTORICAL_FLOOR) * decay


def _max_category(text: str, categories) -> tuple[str | None, float | None, list[dict]]:
    hits = [
        {"category": name, "keyword": kw, "multiplier": mult}
        for name, mult, keywords in categories
        for kw in matched(text, keywords)
    ]
    if not hits:
        return None, None, hits
    best = max(hits, key=lambda h: h["multiplier"])
    return best["category"], best["multiplier"], hits


def cyclical_factor(when: datetime, text: str) -> tuple[float, list[str]]:
    """Small bump for months and quarters with recurring geopolitical events."""
    month = when.month
    quarter = (month - 1) // 3 + 1
    active = []
    factor = 1.0
    if month in UN_GENERAL_ASSEMBLY_MONTHS:
        factor = max(factor, UN_GENERAL_ASSEMBLY_FACTOR)
        active.append("UN_GENERAL_ASSEMBLY")
    if quarter in BUDGET_QUARTERS:
        factor = max(factor, BUDGET_FACTOR)
        active.append("BUDGET_CYCLE")
    if month in EXERCISE_MONTHS:
        factor = max(factor, EXERCISE_FACTOR)
        active.append("EXERCISE_SEASON")
    for mention, mult in SUMMIT_MENTIONS:
        if matched(text, (mention,)):
            factor = max(factor, mult)
            active.append(mention.upper().replace(" ", "_"))
    return min(factor, MAX_CYCLICAL_FACTOR), active


def time_sensitivity(bucket: str, time_sensitive: bool) -> str:
    level = BUCKET_SENSITIVITY.get(bucket, "LOW")
    if time_sensitive:
        idx = SENSITIVITY_LEVELS.index(level)
        level = SENSITIVITY_LEVELS[min(idx + 1, len(SENSITIVITY_LEVELS) - 1)]
    return level


@register_scorer("temporal")
class TemporalScorer(BaseScorer):
    """Freshness of an article relative to the reference time."""

    @property
    def name(self) -> str:
        return "temporal"

    def score(self, context: ScoringContext) -> DimensionScore:
        return self.score_article(context.article, context.content, context.now)

    def score_article(self, article: Article, content: PreprocessedContent, now: datetime) -> DimensionScore:
        text = content.text
        age = age_hours(article, now)
        bucket, base = base_score(age)

        content_category, content_mult, content_hits = _max_category(text, TEMPORAL_CATEGORIES)
        content_mult = content_mult or 1.0

        urgency_level, urgency, urgency_hits = _max_category(text, URGENCY_LEVELS)
        urgency = urgency or 1.0
        is_time_sensitive = urgency > TIME_SENSITIVE_URGENCY

        cyclical, cycles = cyclical_factor(article.timestamp or now, text)

        final = round(clamp(base * content_mult * urgency * cyclical), 1)
        sensitivity = time_sensitivity(bucket, is_time_sensitive)
        window_hours, window_description = ACTION_WINDOWS[sensitivity]

        logger.debug("Temporal score %.1f (bucket %s, age %s h)", final, bucket, age)

        return DimensionScore(
            score=final,
            details={
                "age_hours": round(age, 2) if age is not None else None,
                "bucket": bucket,
                "base_score": round(base, 2),
                "content_multiplier": content_mult,
                "content_category": content_category,
                "content_indicators": content_hits,
                "urgency_multiplier": urgency,
                "urgency_level": urgency_level or "STANDARD",
                "urgency_indicators": urgency_hits,
                "cyclical_factor": cyclical,
                "active_cycles": cycles,
                "is_time_sensitive": is_time_sensitive,
                "time_sensitivity": sensitivity,
                "action_window_hours": window_hours,
                "action_window": window_description,
            },
        )
