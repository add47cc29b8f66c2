"""Source credibility: tier matrix, domain category, bias, track record and content quality."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from urllib.parse import urlparse

from intelscore.models import Article, DimensionScore, PreprocessedContent, ScoringContext
from intelscore.process.matching import contains
from intelscore.process.preprocess import normalize_text
from intelscore.score import register_scorer
from intelscore.score.base import BaseScorer, clamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceTier:
    base_score: float
    reliability: str
    labels: tuple[str, ...]
    domains: tuple[str, ...]


SOURCE_TIERS = MappingProxyType({
    "TIER_1_PREMIUM": SourceTier(
        95, "HIGHEST",
        ("REUTERS", "BBC", "AP", "ASSOCIATED PRESS", "DEFENSE NEWS", "JANES", "MIT TECH REVIEW"),
        ("reuters.com", "bbc.com", "bbc.co.uk", "apnews.com", "defensenews.com", "janes.com",
         "technologyreview.com"),
    ),
    "TIER_2_RELIABLE": SourceTier(
        85, "HIGH",
        ("CNN", "BLOOMBERG", "WSJ", "WALL STREET JOURNAL", "FOREIGN POLICY", "BREAKING DEFENSE",
         "THE GUARDIAN"),
        ("cnn.com", "bloomberg.com", "wsj.com", "foreignpolicy.com", "breakingdefense.com",
         "theguardian.com"),
    ),
    "TIER_4_QUESTIONABLE": SourceTier(
        40, "LOW",
        ("UNKNOWN", "SOCIAL MEDIA", "BLOG", "BLOGS", "UNVERIFIED"),
        ("blogspot.com", "wordpress.com", "medium.com", "substack.com", "twitter.com", "x.com",
         "facebook.com", "t.me", "reddit.com"),
    ),
})
DEFAULT_TIER = "TIER_3_STANDARD"
DEFAULT_TIER_SCORE = 70.0
DEFAULT_BASE_CREDIBILITY = 70.0

# Checked in order. ".gov" is a suffix, "rand.org" a registered domain, "university" a substring.
DOMAIN_CATEGORIES = (
    ("GOVERNMENT", 1.1, "OFFICIAL", (".gov", ".mil", "state.gov", "defense.gov")),
    ("ACADEMIC", 1.05, "SCHOLARLY", (".edu", ".ac.uk", "university", "institute", "research")),
    ("THINK_TANK", 1.0, "ANALYTICAL", ("brookings.edu", "rand.org", "csis.org", "cfr.org", "chathamhouse.org")),
    ("SOCIAL_MEDIA", 0.6, "UNVERIFIED", ("twitter.com", "x.com", "facebook.com", "t.me", "telegram", "reddit.com")),
    ("COMMERCIAL", 0.9, "COMMERCIAL", (".com",)),
)

BIAS_INDICATORS = (
    ("STRONG", -20, ("propaganda", "state-controlled", "state-run", "partisan", "advocacy")),
    ("MODERATE", -10, ("editorial slant", "political leaning", "selective reporting")),
    ("MINIMAL", -2, ("slight leaning", "occasional bias")),
)

ACCURACY_CATEGORIES = (
    # (category, minimum base credibility, multiplier)
    ("EXCELLENT", 95, 1.15),
    ("GOOD", 85, 1.05),
    ("AVERAGE", 50, 1.0),
    ("POOR", float("-inf"), 0.85),
)

EXCLUSIVITY = (
    ("FIRST_REPORTER", 10, ("first to report", "breaking", "exclusive")),
    ("EXCLUSIVE_ACCESS", 8, ("exclusive interview", "exclusive access", "obtained by")),
    ("INVESTIGATIVE", 12, ("investigation", "months-long", "uncovered", "revealed")),
)

CONTENT_QUALITY = (
    ("HIGH", 5, ("multiple sources", "on-the-record", "document verification", "expert analysis",
                 "detailed investigation")),
    ("MEDIUM", 2, ("single source", "background quotes", "standard reporting", "basic verification")),
    ("LOW", -5, ("anonymous sources", "unverified claims", "speculation", "rumor", "rumour")),
)


def source_host(article: Article) -> str:
    """Source domain, falling back to the URL host, without a leading ``www.``."""
    host = article.source.domain or urlparse(article.url).hostname or ""
    host = host.lower().strip()
    return host[4:] if host.startswith("www.") else host


def host_matches(host: str, pattern: str) -> bool:
    if not host:
        return False
    if pattern.startswith("."):
        return host.endswith(pattern) or f"{pattern}." in host
    if "." in pattern:
        return host == pattern or host.endswith("." + pattern)
    return pattern in host


def base_tier(host: str, feed_label: str) -> dict:
    """First tier whose domain list or label list matches; standard tier otherwise."""
    label = normalize_text(feed_label)
    for name, tier in SOURCE_TIERS.items():
        domain = next((d for d in tier.domains if host_matches(host, d)), None)
        if domain:
            return {"tier": name, "score": tier.base_score, "reliability": tier.reliability,
                    "match_type": "DOMAIN", "matched": domain}
        if label:
            source = next((s for s in tier.labels if contains(label, s)), None)
            if source:
                return {"tier": name, "score": tier.base_score, "reliability": tier.reliability,
                        "match_type": "FEED_LABEL", "matched": source}
    return {"tier": DEFAULT_TIER, "score": DEFAULT_TIER_SCORE, "reliability": "MEDIUM",
            "match_type": "DEFAULT", "matched": host or feed_label or None}


def domain_category(host: str) -> dict:
    for category, modifier, reliability, patterns in DOMAIN_CATEGORIES:
        pattern = next((p for p in patterns if host_matches(host, p)), None)
        if pattern:
            return {"category": category, "modifier": modifier, "reliability": reliability, "matched": pattern}
    return {"category": "GENERAL", "modifier": 1.0, "reliability": "STANDARD", "matched": None}


def bias_level(impact: float) -> str:
    if impact <= -15:
        return "STRONG"
    if impact <= -8:
        return "MODERATE"
    if impact <= -2:
        return "MINIMAL"
    return "NONE"


def quality_level(impact: float) -> str:
    if impact >= 8:
        return "HIGH"
    if impact >= 2:
        return "MEDIUM"
    if impact <= -3:
        return "LOW"
    return "STANDARD"


def accuracy_category(base_credibility: float) -> tuple[str, float]:
    for category, floor, modifier in ACCURACY_CATEGORIES:
        if base_credibility >= floor:
            return category, modifier
    return "POOR", 0.85


@register_scorer("source")
class SourceCredibilityAssessor(BaseScorer):
    """Credibility of the article's source.

    The factors combine in a fixed order:
    ``(base * domain_modifier + bias) * track_record + exclusivity + content_quality``,
    clamped to [0, 100].
    """

    @property
    def name(self) -> str:
        return "source"

    def score(self, context: ScoringContext) -> DimensionScore:
        return self.assess(context.article, context.content)

    def assess(self, article: Article, content: PreprocessedContent) -> DimensionScore:
        host = source_host(article)
        feed_label = article.source.feed_label
        text = content.text

        base = base_tier(host, feed_label)
        domain = domain_category(host)

        searched = " ".join((text, normalize_text(feed_label), normalize_text(host)))
        bias_hits = [
            {"level": level, "indicator": ind, "impact": impact}
            for level, impact, indicators in BIAS_INDICATORS
            for ind in indicators
            if contains(searched, ind)
        ]
        bias_impact = sum(hit["impact"] for hit in bias_hits)

        provided = article.source.base_credibility
        provided = DEFAULT_BASE_CREDIBILITY if provided is None else float(provided)
        accuracy, track_modifier = accuracy_category(provided)
        exclusivity_hits = [
            {"type": kind, "indicator": ind, "bonus": bonus}
            for kind, bonus, indicators in EXCLUSIVITY
            for ind in indicators
            if contains(text, ind)
        ]
        exclusivity_bonus = max((hit["bonus"] for hit in exclusivity_hits), default=0)

        quality_hits = [
            {"level": level, "indicator": ind, "impact": impact}
            for level, impact, indicators in CONTENT_QUALITY
            for ind in indicators
            if contains(text, ind)
        ]
        quality_impact = sum(hit["impact"] for hit in quality_hits)

        after_domain = base["score"] * domain["modifier"]
        after_bias = after_domain + bias_impact
        after_track = after_bias * track_modifier
        raw = after_track + exclusivity_bonus + quality_impact
        final = round(clamp(raw), 1)

        confidence = 70
        drift = abs(raw - base["score"])
        if drift < 10:
            confidence += 20
        elif drift > 30:
            confidence -= 15
        confidence = clamp(confidence, 30, 95)

        bias = bias_level(bias_impact)
        quality = quality_level(quality_impact)

        strengths = []
        if base["tier"] == "TIER_1_PREMIUM":
            strengths.append("Premium tier source with highest credibility")
        if domain["category"] == "GOVERNMENT":
            strengths.append("Official government source")
        if accuracy == "EXCELLENT":
            strengths.append("Excellent accuracy track record")
        if exclusivity_bonus > 0:
            strengths.append("Exclusive or investigative reporting")

        weaknesses = []
        if bias == "STRONG":
            weaknesses.append("Strong bias indicators detected")
        if quality == "LOW":
            weaknesses.append("Low content quality indicators")
        if len(bias_hits) > 2:
            weaknesses.append("Multiple bias indicators present")

        if final >= 90:
            recommendations = ["Highly reliable source - suitable for high-priority intelligence"]
        elif final >= 75:
            recommendations = ["Reliable source - suitable for standard intelligence reporting"]
        elif final >= 60:
            recommendations = ["Moderate reliability - verify with additional sources"]
        else:
            recommendations = ["Low reliability - require multiple source confirmation"]
        if base["tier"] == "TIER_4_QUESTIONABLE":
            recommendations.append("Consider upgrading to higher-tier sources when possible")

        logger.debug("Source %s: %s -> %.1f", host or feed_label or "unknown", base["tier"], final)

        return DimensionScore(
            score=final,
            details={
                "tier": base["tier"],
                "reliability": base["reliability"],
                "match_type": base["match_type"],
                "matched_source": base["matched"],
                "domain_category": domain["category"],
                "domain_modifier": domain["modifier"],
                "bias_impact": bias_impact,
                "bias_level": bias,
                "bias_indicators": bias_hits,
                "accuracy_category": accuracy,
                "track_record_modifier": track_modifier,
                "exclusivity_bonus": exclusivity_bonus,
                "exclusivity_indicators": exclusivity_hits,
                "content_quality_impact": quality_impact,
                "content_quality_level": quality,
                "content_quality_indicators": quality_hits,
                "steps": {
                    "base": base["score"],
                    "after_domain": round(after_domain, 2),
                    "after_bias": round(after_bias, 2),
                    "after_track_record": round(after_track, 2),
                    "final": round(raw, 2),
                },
                "confidence": confidence,
                "strengths": strengths,
                "weaknesses": weaknesses,
                "recommendations": recommendations,
            },
        )
