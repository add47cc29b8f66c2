"""Threat assessment across seven threat categories.

The highest adjusted category becomes the primary threat. Its score is then
scaled by the escalation time frame, the region, the actors involved and the
confidence of the reporting language.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType

from intelscore.models import (
    DimensionScore,
    EntityAnalysis,
    PreprocessedContent,
    ScoringContext,
    ThreatAssessment,
)
from intelscore.process.matching import alternation_regex, matched
from intelscore.score import register_scorer
from intelscore.score.base import BaseScorer, clamp

logger = logging.getLogger(__name__)

KEYWORD_POINTS = 20
PATTERN_POINTS = 25


@dataclass(frozen=True)
class ThreatCategory:
    escalation_risk: float
    severity: str
    keywords: tuple[str, ...]
    # Each pattern is a word sequence that must appear in order within one sentence
    patterns: tuple[tuple[str, ...], ...]


THREAT_CATEGORIES = MappingProxyType({
    "NUCLEAR": ThreatCategory(1.0, "CRITICAL", (
        "NUCLEAR WEAPON", "NUCLEAR WARHEAD", "ICBM", "SLBM", "NUCLEAR STRIKE",
        "URANIUM ENRICHMENT", "PLUTONIUM", "NUCLEAR REACTOR", "NUCLEAR FACILITY",
        "NUCLEAR PROGRAM", "NUCLEAR TEST", "NUCLEAR THREAT", "NUCLEAR ARSENAL",
    ), (
        ("nuclear", "weapon"), ("nuclear", "strike"), ("nuclear", "threat"), ("nuclear", "test"),
        ("ballistic", "missile"), ("enriched", "uranium"), ("nuclear", "program"),
    )),
    "MILITARY": ThreatCategory(0.8, "HIGH", (
        "MILITARY DEPLOYMENT", "TROOP BUILDUP", "MOBILIZATION", "INVASION",
        "MILITARY EXERCISE", "NAVAL BLOCKADE", "AIR STRIKE", "MISSILE ATTACK",
        "MISSILE TEST", "MISSILE LAUNCH", "MILITARY READINESS", "COMBAT OPERATIONS",
        "ARMED CONFLICT", "WAR",
    ), (
        ("military", "deployment"), ("troop", "buildup"), ("missile", "attack"), ("air", "strike"),
        ("naval", "blockade"), ("combat", "operations"),
    )),
    "CYBER": ThreatCategory(0.7, "HIGH", (
        "CYBER ATTACK", "CYBERATTACK", "CYBER WARFARE", "MALWARE", "RANSOMWARE", "DATA BREACH",
        "HACKING", "BOTNET", "ZERO-DAY", "DDOS", "CYBER ESPIONAGE",
        "CRITICAL INFRASTRUCTURE", "POWER GRID", "FINANCIAL SYSTEM",
    ), (
        ("cyber", "attack"), ("cyber", "warfare"), ("data", "breach"), ("critical", "infrastructure"),
        ("power", "grid"), ("financial", "system"),
    )),
    "TERRORIST": ThreatCategory(0.9, "CRITICAL", (
        "TERRORIST ATTACK", "TERRORISM", "BOMB", "EXPLOSIVE", "SUICIDE BOMBER",
        "TERRORIST GROUP", "ISIS", "AL-QAEDA", "TALIBAN", "ASSASSINATION",
        "HOSTAGE", "KIDNAPPING", "CHEMICAL ATTACK", "BIOLOGICAL WEAPON",
    ), (
        ("terrorist", "attack"), ("suicide", "bomber"), ("chemical", "attack"), ("biological", "weapon"),
        ("terrorist", "group"),
    )),
    "ECONOMIC": ThreatCategory(0.6, "MEDIUM", (
        "ECONOMIC SANCTIONS", "TRADE WAR", "FINANCIAL WARFARE", "EMBARGO",
        "CURRENCY MANIPULATION", "SUPPLY CHAIN", "ENERGY CRISIS", "MARKET CRASH",
        "BANKING SYSTEM", "FINANCIAL INSTABILITY", "ECONOMIC COLLAPSE",
    ), (
        ("economic", "sanctions"), ("trade", "war"), ("financial", "warfare"), ("supply", "chain"),
        ("market", "crash"), ("economic", "collapse"),
    )),
    "DIPLOMATIC": ThreatCategory(0.4, "MEDIUM", (
        "DIPLOMATIC CRISIS", "AMBASSADOR EXPELLED", "EMBASSY CLOSED", "SANCTIONS",
        "INTERNATIONAL INCIDENT", "DIPLOMATIC TENSIONS", "WITHDRAWAL FROM TREATY",
        "CONDEMNATION", "PROTEST", "DIPLOMATIC RELATIONS",
    ), (
        ("diplomatic", "crisis"), ("ambassador", "expelled"), ("embassy", "closed"),
        ("diplomatic", "tensions"), ("international", "incident"),
    )),
    "HEALTH": ThreatCategory(0.5, "MEDIUM", (
        "PANDEMIC", "EPIDEMIC", "OUTBREAK", "BIOWEAPON", "BIOLOGICAL THREAT",
        "QUARANTINE", "PUBLIC HEALTH EMERGENCY", "INFECTIOUS DISEASE",
        "HEALTH CRISIS", "CONTAMINATION", "BIOLOGICAL WARFARE",
    ), (
        ("public", "health", "emergency"), ("biological", "threat"), ("biological", "warfare"),
        ("infectious", "disease"),
    )),
})

# (time frame, multiplier, words); the largest matching multiplier wins
ESCALATION_TIMEFRAMES = (
    ("IMMEDIATE", 1.5, ("imminent", "immediate", "urgent", "emergency", "alert", "breaking",
                        "minutes", "hours", "now", "today")),
    ("SHORT_TERM", 1.3, ("planned", "scheduled", "preparation", "mobilizing", "days", "this week",
                         "soon", "upcoming")),
    ("MEDIUM_TERM", 1.1, ("developing", "building", "increasing", "growing", "weeks", "next month",
                          "coming months")),
    ("LONG_TERM", 1.0, ("strategic", "long-term", "planning", "future", "months", "years")),
)
URGENCY_LABELS = {"IMMEDIATE": "URGENT", "SHORT_TERM": "HIGH", "MEDIUM_TERM": "MODERATE", "LONG_TERM": "LOW"}

GEOGRAPHIC_TIERS = (
    ("CRITICAL_REGION", 1.4, ("MIDDLE EAST", "KOREAN PENINSULA", "TAIWAN STRAIT", "UKRAINE", "SOUTH CHINA SEA")),
    ("HIGH_TENSION", 1.2, ("INDO-PACIFIC", "EASTERN EUROPE", "PERSIAN GULF", "KASHMIR")),
    ("MODERATE_TENSION", 1.1, ("BALKANS", "CENTRAL ASIA", "HORN OF AFRICA")),
)

# A region also counts when any of these canonical entities was detected
REGION_ENTITIES = MappingProxyType({
    "MIDDLE EAST": frozenset({"IRAN", "ISRAEL", "SAUDI ARABIA", "SYRIA", "IRAQ"}),
    "KOREAN PENINSULA": frozenset({"NORTH KOREA", "SOUTH KOREA"}),
    "TAIWAN STRAIT": frozenset({"TAIWAN", "CHINA", "TAIWAN STRAIT"}),
    "SOUTH CHINA SEA": frozenset({"CHINA", "PHILIPPINES", "VIETNAM", "SOUTH CHINA SEA"}),
    "UKRAINE": frozenset({"UKRAINE"}),
    "PERSIAN GULF": frozenset({"STRAIT OF HORMUZ"}),
})

THREAT_ACTORS = (
    ("TERRORIST_GROUP", 1.4, ("ISIS", "AL-QAEDA", "TALIBAN", "BOKO HARAM")),
    ("STATE_ACTOR", 1.3, ("CHINA", "RUSSIA", "IRAN", "NORTH KOREA", "PAKISTAN")),
    ("PROXY_FORCE", 1.2, ("HEZBOLLAH", "HOUTHIS", "IRANIAN PROXIES", "WAGNER GROUP")),
    ("NON_STATE", 1.1, ("CRIMINAL ORGANIZATIONS", "HACKTIVISTS", "SEPARATIST GROUPS")),
)
HIGH_THREAT_ACTOR_MULTIPLIER = 1.3

CONFIDENCE_LEVELS = (
    ("HIGH", 1.0, ("confirmed", "verified", "intelligence sources", "multiple sources")),
    ("MEDIUM", 0.9, ("reported", "sources say", "according to", "officials indicate")),
    ("LOW", 0.7, ("alleged", "rumored", "rumoured", "unconfirmed", "speculation", "claims")),
)
BASE_CONFIDENCE = 70
CONFIDENCE_STEP = 20

# At least this many nuclear term mentions plus an immediate time frame floor the score
NUCLEAR_TERMS = frozenset(THREAT_CATEGORIES["NUCLEAR"].keywords) | {
    "NUCLEAR", "ICBM", "URANIUM", "ENRICHMENT", "WARHEAD", "PLUTONIUM",
}
_NUCLEAR_TERMS_RE = alternation_regex(NUCLEAR_TERMS)
NUCLEAR_ESCALATION_TERMS = 2
NUCLEAR_ESCALATION_FLOOR = 80.0

LEVEL_THRESHOLDS = ((80, "CRITICAL"), (60, "HIGH"), (40, "MEDIUM"))

RECOMMENDATIONS = {
    "CRITICAL": (
        "Immediate escalation to senior leadership required",
        "Activate crisis response protocols",
        "Monitor for real-time developments",
    ),
    "HIGH": (
        "Escalate to relevant decision makers",
        "Increase monitoring frequency",
        "Prepare contingency responses",
    ),
    "MEDIUM": (
        "Continue monitoring situation",
        "Brief relevant stakeholders",
        "Track for escalation indicators",
    ),
    "LOW": (
        "Standard monitoring protocols",
        "Include in routine briefings",
    ),
}
EMERGENCY_TEAM_SCORE = 90


def _compile_pattern(words: tuple[str, ...]) -> re.Pattern:
    return re.compile(r".*".join(r"\b" + re.escape(w.upper()) + r"\w*" for w in words))


_PATTERNS = {
    name: tuple((" ".join(words), _compile_pattern(words)) for words in category.patterns)
    for name, category in THREAT_CATEGORIES.items()
}


def level_for(score: float) -> str:
    for floor, level in LEVEL_THRESHOLDS:
        if score >= floor:
            return level
    return "LOW"


def _best(text: str, tiers) -> tuple[str | None, float, list[dict]]:
    """Highest-multiplier tier with at least one matching word."""
    hits = [
        {"type": name, "indicator": word, "multiplier": mult}
        for name, mult, words in tiers
        for word in matched(text, words)
    ]
    if not hits:
        return None, 1.0, hits
    top = max(hits, key=lambda h: h["multiplier"])
    return top["type"], top["multiplier"], hits


@register_scorer("threat")
class ThreatAssessor(BaseScorer):
    """Classifies the dominant threat and its escalation level."""

    @property
    def name(self) -> str:
        return "threat"

    def score(self, context: ScoringContext) -> DimensionScore:
        assessment = self.assess(context.content, context.entities)
        return DimensionScore(
            score=assessment.score,
            details={"assessment": assessment, "level": assessment.level, **assessment.breakdown},
        )

    def assess(self, content: PreprocessedContent, entities: EntityAnalysis) -> ThreatAssessment:
        text = content.text

        detected = self.detect_categories(text, content.sentences)
        base, primary = 0.0, None
        for category in detected:
            # Strictly greater, so ties keep the earlier category
            if category["score"] > base:
                base, primary = category["score"], category["type"]

        time_frame, escalation, escalation_hits = _best(text, ESCALATION_TIMEFRAMES)
        time_frame = time_frame or "LONG_TERM"

        region_tier, geographic, regions = self.geographic_factor(text, entities)
        actor_tier, actor, actors = self.actor_factor(text, entities)
        confidence_multiplier, confidence, confidence_hits = self.confidence_factor(text)

        raw = base * escalation * geographic * actor * confidence_multiplier
        final = clamp(raw)

        # Non-overlapping, longest first: "NUCLEAR PROGRAM" is one mention, not two
        nuclear_terms = _NUCLEAR_TERMS_RE.findall(text)
        nuclear_floor = len(nuclear_terms) >= NUCLEAR_ESCALATION_TERMS and time_frame == "IMMEDIATE"
        if nuclear_floor:
            final = max(final, NUCLEAR_ESCALATION_FLOOR)
            primary = "NUCLEAR"

        final = round(final, 1)
        level = level_for(final)

        recommendations = list(RECOMMENDATIONS[level])
        if final > EMERGENCY_TEAM_SCORE:
            recommendations.append("Consider activating emergency response team")

        risk_factors = []
        if len(detected) > 2:
            risk_factors.append("Multiple threat categories detected")
        if time_frame == "IMMEDIATE":
            risk_factors.append("Immediate time frame - high urgency")
        if actor > HIGH_THREAT_ACTOR_MULTIPLIER:
            risk_factors.append("High-threat actor involvement")
        if primary == "NUCLEAR":
            risk_factors.append("Nuclear threat indicators")

        count = len(detected)
        analysis = f"{count} threat categor{'y' if count == 1 else 'ies'} detected"
        if primary:
            analysis += f", primary: {primary}"
        if time_frame != "LONG_TERM":
            analysis += f", timeframe: {time_frame}"
        if region_tier:
            analysis += f", region: {region_tier}"

        if primary:
            logger.debug("Threat %s %.1f (%s, %s)", primary, final, level, time_frame)

        return ThreatAssessment(
            score=final,
            level=level,
            primary_threat=primary,
            confidence=confidence,
            time_frame=time_frame,
            detected=tuple(detected),
            recommendations=tuple(recommendations),
            risk_factors=tuple(risk_factors),
            analysis=analysis,
            breakdown={
                "base_threat": base,
                "escalation_multiplier": escalation,
                "escalation_indicators": escalation_hits,
                "urgency": URGENCY_LABELS[time_frame],
                "geographic_multiplier": geographic,
                "region_tier": region_tier or "STANDARD",
                "regions": regions,
                "actor_multiplier": actor,
                "actor_type": actor_tier or "STANDARD",
                "actors": actors,
                "confidence_multiplier": confidence_multiplier,
                "confidence_indicators": confidence_hits,
                "nuclear_terms": nuclear_terms,
                "nuclear_escalation_floor": nuclear_floor,
                "raw_score": round(raw, 2),
            },
        )

    @staticmethod
    def detect_categories(text: str, sentences: tuple[str, ...]) -> list[dict]:
        """Every category with a keyword or pattern match, in category order."""
        detected = []
        for name, category in THREAT_CATEGORIES.items():
            keywords = matched(text, category.keywords)
            patterns = [
                label for label, regex in _PATTERNS[name]
                if any(regex.search(sentence) for sentence in sentences)
            ]
            raw = len(keywords) * KEYWORD_POINTS + len(patterns) * PATTERN_POINTS
            if raw:
                detected.append({
                    "type": name,
                    "severity": category.severity,
                    "escalation_risk": category.escalation_risk,
                    "score": min(raw * category.escalation_risk, 100.0),
                    "keywords": keywords,
                    "patterns": patterns,
                })
        return detected

    @staticmethod
    def geographic_factor(text: str, entities: EntityAnalysis) -> tuple[str | None, float, list[dict]]:
        names = set(entities.all_names())
        hits = []
        for tier, mult, regions in GEOGRAPHIC_TIERS:
            for region in regions:
                if matched(text, (region,)) or names & REGION_ENTITIES.get(region, frozenset()):
                    hits.append({"region": region, "type": tier, "multiplier": mult})
        if not hits:
            return None, 1.0, hits
        top = max(hits, key=lambda h: h["multiplier"])
        return top["type"], top["multiplier"], hits

    @staticmethod
    def actor_factor(text: str, entities: EntityAnalysis) -> tuple[str | None, float, list[dict]]:
        detected = entities.actors
        hits = [
            {"actor": name, "type": tier, "multiplier": mult}
            for tier, mult, actors in THREAT_ACTORS
            for name in actors
            if name in detected or matched(text, (name,))
        ]
        if not hits:
            return None, 1.0, hits
        top = max(hits, key=lambda h: h["multiplier"])
        return top["type"], top["multiplier"], hits

    @staticmethod
    def confidence_factor(text: str) -> tuple[float, float, list[dict]]:
        """Multiplier from the weakest matched language, and a 30..95 confidence."""
        hits = [
            {"level": level, "indicator": word, "multiplier": mult}
            for level, mult, words in CONFIDENCE_LEVELS
            for word in matched(text, words)
        ]
        multiplier = min((h["multiplier"] for h in hits), default=1.0)
        confidence = BASE_CONFIDENCE
        for hit in hits:
            if hit["level"] == "HIGH":
                confidence += CONFIDENCE_STEP
            elif hit["level"] == "LOW":
                confidence -= CONFIDENCE_STEP
        return multiplier, clamp(confidence, 30, 95), hits
