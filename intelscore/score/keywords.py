"""Keyword relevance scoring across six weighted tiers.

Repeated mentions of one keyword count logarithmically, and the tier score is
scaled by a keyword-density curve over those saturated counts that rewards
the 2-5% band and decays smoothly on either side. Repeating one keyword keeps
adding a little but never outruns a diverse article of the same length.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType

import numpy as np

from intelscore.models import DimensionScore, PreprocessedContent, ScoringContext
from intelscore.process.matching import count, matched
from intelscore.process.preprocess import normalize_text
from intelscore.score import register_scorer
from intelscore.score.base import BaseScorer, clamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordTier:
    weight: float
    context_multiplier: float
    keywords: tuple[str, ...]


KEYWORD_TIERS = MappingProxyType({
    "CRITICAL": KeywordTier(5.0, 1.5, (
        "nuclear", "weapon", "attack", "cyber", "breach", "classified", "military",
        "drone strike", "bioweapon", "chemical weapon", "terrorist", "assassination",
        "coup", "war", "invasion",
    )),
    "HIGH": KeywordTier(3.0, 1.3, (
        "sanctions", "deployment", "missile", "surveillance", "intelligence", "espionage",
        "hypersonic", "satellite", "radar", "stealth", "submarine", "aircraft carrier",
    )),
    "MEDIUM": KeywordTier(1.8, 1.1, (
        "diplomatic", "trade war", "alliance", "defense", "technology transfer", "embargo",
        "treaty", "summit", "negotiation", "partnership", "cooperation",
    )),
    "GEOPOLITICAL": KeywordTier(2.5, 1.4, (
        "china", "russia", "iran", "north korea", "taiwan", "ukraine", "syria", "israel",
        "pakistan", "india", "turkey", "saudi arabia", "venezuela", "myanmar",
    )),
    "TECHNOLOGY": KeywordTier(2.2, 1.2, (
        "ai", "artificial intelligence", "quantum", "hypersonic", "satellite", "blockchain",
        "neural", "machine learning", "deepfake", "autonomous", "drone", "robot",
    )),
    "HEALTH": KeywordTier(1.9, 1.0, (
        "outbreak", "pandemic", "bioweapon", "vaccine", "virus", "epidemic", "disease",
        "mutation", "pathogen", "laboratory", "biosafety", "quarantine",
    )),
})

DIVERSITY_BONUS_PER_KEYWORD = 2.0
MAX_DIVERSITY_BONUS = 20.0

# Density curve (keyword matches per 100 words)
OPTIMAL_DENSITY_LOW = 2.0
OPTIMAL_DENSITY_HIGH = 5.0
OPTIMAL_DENSITY_FACTOR = 1.2
SPARSE_DENSITY_FACTOR = 0.7
STUFFING_EXPONENT = 0.9

CONTEXT_ENHANCERS = MappingProxyType({
    "breaking": 2.5,
    "urgent": 2.3,
    "confirmed": 1.8,
    "exclusive": 1.6,
    "official": 1.5,
    "classified": 3.0,
    "intelligence": 1.7,
    "assessment": 1.4,
    "analysis": 1.3,
    "sources": 1.2,
})
ENHANCER_DECAY = 0.8
MAX_CONTEXT_MULTIPLIER = 3.0

NEGATION_PATTERNS = tuple(re.compile(p) for p in (
    r"\bNOT\s+\w+",
    r"\bNO\s+\w+",
    r"\bDENIES?\s+\w+",
    r"\bREJECTS?\b",
    r"\bDISMISSES?\b",
    r"\bCONTRADICTS?\b",
))
NEGATION_STEP = 0.1
MAX_NEGATION_PENALTY = 0.5

AMPLIFICATION_PATTERNS = tuple(re.compile(p) for p in (
    r"\bCONFIRMS?\b",
    r"\bREPORTS?\b",
    r"\bREVEALS?\b",
    r"\bINDICATES?\b",
    r"\bSUGGESTS?\b",
    r"\bSHOWS?\b",
))
AMPLIFICATION_STEP = 0.05
MAX_AMPLIFICATION_BONUS = 0.3

PROXIMITY_WINDOW = 10
CLUSTER_BONUS_FACTOR = 0.5
CLOSE_DISTANCE, CLOSE_DISTANCE_BONUS = 5, 5.0
NEAR_DISTANCE, NEAR_DISTANCE_BONUS = 10, 2.0
MAX_PROXIMITY_BONUS = 20.0

TIER_BONUS_FACTOR = 0.5


def saturated_count(n: int) -> float:
    """Weight of n mentions of one keyword: 1 + ln(n), so repetition saturates."""
    return 1.0 + float(np.log(n)) if n > 0 else 0.0


def density_factor(density: float) -> float:
    """Continuous multiplier over keyword density (percent of words).

    Rises linearly from 0.7 at zero density to 1.2 at the optimal band,
    stays flat across 2-5%, then decays as (5 / density) ** 0.9.
    """
    if density <= 0:
        return SPARSE_DENSITY_FACTOR
    if density < 1.0:
        return SPARSE_DENSITY_FACTOR + (1.0 - SPARSE_DENSITY_FACTOR) * density
    if density < OPTIMAL_DENSITY_LOW:
        return 1.0 + (OPTIMAL_DENSITY_FACTOR - 1.0) * (density - 1.0)
    if density <= OPTIMAL_DENSITY_HIGH:
        return OPTIMAL_DENSITY_FACTOR
    return OPTIMAL_DENSITY_FACTOR * (OPTIMAL_DENSITY_HIGH / density) ** STUFFING_EXPONENT


def context_multiplier(text: str) -> tuple[float, list[str]]:
    """Amplifying words with diminishing returns: 1 + sum((m - 1) * 0.8**i)."""
    found = matched(text, CONTEXT_ENHANCERS)
    multipliers = sorted((CONTEXT_ENHANCERS[word] for word in found), reverse=True)
    total = 1.0 + sum((m - 1.0) * ENHANCER_DECAY**i for i, m in enumerate(multipliers))
    return min(total, MAX_CONTEXT_MULTIPLIER), found


def _count_patterns(text: str, patterns: tuple[re.Pattern, ...]) -> int:
    return sum(len(p.findall(text)) for p in patterns)


def keyword_positions(words: tuple[str, ...], weights: dict[str, float]) -> list[tuple[int, str, float]]:
    """Start index of every keyword occurrence in the word sequence."""
    by_first: dict[str, list[tuple[tuple[str, ...], str]]] = {}
    for keyword in weights:
        parts = tuple(normalize_text(keyword).split())
        by_first.setdefault(parts[0], []).append((parts, keyword))

    positions = []
    for i, word in enumerate(words):
        for parts, keyword in by_first.get(word, ()):
            if words[i:i + len(parts)] == parts:
                positions.append((i, keyword, weights[keyword]))
    return positions


def proximity_bonus(positions: list[tuple[int, str, float]]) -> tuple[float, dict]:
    """Bonus for distinct keywords clustered within a short word window."""
    if len(positions) < 2:
        return 0.0, {"clusters": [], "average_distance": None}

    clusters: list[list[tuple[int, str, float]]] = [[positions[0]]]
    for entry in positions[1:]:
        if entry[0] - clusters[-1][-1][0] <= PROXIMITY_WINDOW:
            clusters[-1].append(entry)
        else:
            clusters.append([entry])

    bonus = 0.0
    summary = []
    for cluster in clusters:
        distinct = {keyword: weight for _, keyword, weight in cluster}
        if len(cluster) < 2:
            continue
        bonus += (len(distinct) - 1) * sum(distinct.values()) * CLUSTER_BONUS_FACTOR
        summary.append({"start": cluster[0][0], "size": len(cluster), "keywords": sorted(distinct)})

    average = float(np.mean(np.diff([p for p, _, _ in positions])))
    if 0 < average <= CLOSE_DISTANCE:
        bonus += CLOSE_DISTANCE_BONUS
    elif 0 < average <= NEAR_DISTANCE:
        bonus += NEAR_DISTANCE_BONUS

    return min(bonus, MAX_PROXIMITY_BONUS), {"clusters": summary, "average_distance": round(average, 2)}


@register_scorer("keyword")
class KeywordScorer(BaseScorer):
    """Tiered keyword relevance with density, context and proximity adjustments."""

    @property
    def name(self) -> str:
        return "keyword"

    def score(self, context: ScoringContext) -> DimensionScore:
        return self.score_content(context.content)

    def score_content(self, content: PreprocessedContent) -> DimensionScore:
        text = content.combined

        tier_hits: dict[str, dict[str, int]] = {}
        counts: dict[str, int] = {}
        weights: dict[str, float] = {}
        for tier_name, tier in KEYWORD_TIERS.items():
            hits = {kw: n for kw in tier.keywords if (n := count(text, kw))}
            if hits:
                tier_hits[tier_name] = hits
            for kw, n in hits.items():
                counts[kw] = n
                weights[kw] = max(weights.get(kw, 0.0), tier.weight)

        tier_scores = {
            name: sum(saturated_count(n) * KEYWORD_TIERS[name].weight for n in hits.values())
            for name, hits in tier_hits.items()
        }
        diversity_bonus = min(len(counts) * DIVERSITY_BONUS_PER_KEYWORD, MAX_DIVERSITY_BONUS)
        raw_base = sum(tier_scores.values()) + diversity_bonus

        total_matches = sum(counts.values())
        effective_matches = sum(saturated_count(n) for n in counts.values())
        density = total_matches / content.word_count * 100 if content.word_count else 0.0
        effective_density = effective_matches / content.word_count * 100 if content.word_count else 0.0
        dens_factor = density_factor(effective_density) if counts else 1.0
        base = min(raw_base * dens_factor, 100.0)

        ctx_mult, enhancers = context_multiplier(text)
        negations = _count_patterns(text, NEGATION_PATTERNS)
        amplifications = _count_patterns(text, AMPLIFICATION_PATTERNS)
        negation_penalty = min(negations * NEGATION_STEP, MAX_NEGATION_PENALTY)
        amplification_bonus = min(amplifications * AMPLIFICATION_STEP, MAX_AMPLIFICATION_BONUS)
        adjusted = min(base * ctx_mult * (1 - negation_penalty) * (1 + amplification_bonus), 100.0)

        proximity, proximity_detail = proximity_bonus(keyword_positions(content.words, weights))
        tier_bonus = sum(
            len(hits) * KEYWORD_TIERS[name].context_multiplier * TIER_BONUS_FACTOR
            for name, hits in tier_hits.items()
        )

        final = round(clamp(adjusted + proximity + tier_bonus), 1)
        logger.debug("Keyword score %.1f (%d keywords, density %.2f%%)", final, len(counts), density)

        return DimensionScore(
            score=final,
            details={
                "matches": tier_hits,
                "tier_scores": tier_scores,
                "unique_keywords": len(counts),
                "total_matches": total_matches,
                "diversity_bonus": diversity_bonus,
                "raw_base": raw_base,
                "density": round(density, 2),
                "effective_density": round(effective_density, 2),
                "density_factor": round(dens_factor, 4),
                "base": round(base, 2),
                "context_multiplier": round(ctx_mult, 4),
                "context_enhancers": enhancers,
                "negations": negations,
                "negation_penalty": negation_penalty,
                "amplifications": amplifications,
                "amplification_bonus": amplification_bonus,
                "adjusted": round(adjusted, 2),
                "proximity_bonus": round(proximity, 2),
                "proximity": proximity_detail,
                "tier_bonus": round(tier_bonus, 2),
            },
        )
