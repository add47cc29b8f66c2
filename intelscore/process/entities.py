"""Entity extraction: lexicon matching, alias resolution and relationship analysis."""

from __future__ import annotations

import logging
import re
from collections import Counter

from intelscore.config import get_max_entities_per_class
from intelscore.models import (
    ENTITY_CLASSES,
    Article,
    EntityAnalysis,
    PreprocessedContent,
    Relationship,
    Significance,
    TechnicalDesignations,
)
from intelscore.process import lexicon
from intelscore.process.matching import alternation_regex, contains
from intelscore.process.preprocess import normalize_text, strip_punctuation

logger = logging.getLogger(__name__)

# Applied to the upper-cased raw text, where punctuation is still present
WEAPON_DESIGNATION_RE = re.compile(r"\b[A-Z]{1,3}-\d{1,3}[A-Z]?\b")
MILITARY_UNIT_RE = re.compile(r"\b(DIVISION|BRIGADE|REGIMENT|BATTALION|SQUADRON|FLEET|ARMY|CORPS)S?\b")
COORDINATE_RE = re.compile(r"\b\d{1,3}(?:\.\d+)?°?\s*[NS],?\s*\d{1,3}(?:\.\d+)?°?\s*[EW]\b")
DATE_TIME_RE = re.compile(r"\b\d{1,2}/\d{1,2}/\d{4}\b|\b\d{1,2}:\d{2}\b")
MONETARY_RE = re.compile(r"\$?\d+(?:\.\d+)?\s*(?:BILLION|MILLION|THOUSAND|TRILLION)\b")
CASUALTY_RE = re.compile(r"\b\d+\s*(?:KILLED|WOUNDED|INJURED|CASUALTIES|DEATHS|VICTIMS)\b")
QUANTITY_RE = re.compile(r"\b\d+\s*(?:TROOPS|SOLDIERS|PERSONNEL|AIRCRAFT|SHIPS|MISSILES|TANKS)\b")
PERCENTAGE_RE = re.compile(r"\b\d+(?:\.\d+)?%")
DISTANCE_RE = re.compile(r"\b\d+(?:\.\d+)?\s*(?:KM|KILOMETERS|KILOMETRES|MILES|NAUTICAL MILES)\b")

TECHNICAL_LIMITS = {
    "weapon_designations": 10,
    "military_units": 5,
    "coordinates": 3,
    "timestamps": 5,
    "monetary": 3,
    "casualties": 3,
    "quantities": 5,
    "percentages": 5,
    "distances": 5,
}

DENSITY_BANDS = ((5.0, "VERY_HIGH"), (3.0, "HIGH"), (1.5, "MEDIUM"), (0.5, "LOW"))


class _ClassMatcher:
    """All terms of one entity class compiled into a longest-first alternation."""

    def __init__(self, rows: tuple[lexicon.LexiconEntry, ...]):
        self.canonical_of: dict[str, str] = {}
        self.rank = {entry.canonical: idx for idx, entry in enumerate(rows)}
        insensitive, sensitive = [], []
        for entry in rows:
            for term in entry.terms:
                norm = normalize_text(term)
                self.canonical_of.setdefault(norm, entry.canonical)
                (sensitive if norm in lexicon.CASE_SENSITIVE_TERMS else insensitive).append(norm)
        self.insensitive = alternation_regex(insensitive)
        self.sensitive = alternation_regex(sensitive) if sensitive else None

    def scan(self, upper: str, cased: str) -> Counter:
        hits: Counter = Counter()
        for match in self.insensitive.finditer(upper):
            hits[self.canonical_of[match.group(0)]] += 1
        if self.sensitive is not None:
            for match in self.sensitive.finditer(cased):
                hits[self.canonical_of[match.group(0)]] += 1
        return hits


_MATCHERS = {cls: _ClassMatcher(lexicon.entries(cls)) for cls in ENTITY_CLASSES}


def _unique(values, limit: int) -> tuple[str, ...]:
    return tuple(dict.fromkeys(v.strip() for v in values))[:limit]


def classify_density(density: float) -> str:
    for floor, band in DENSITY_BANDS:
        if density >= floor:
            return band
    return "VERY_LOW"


class EntityExtractor:
    """Detects lexicon entities in preprocessed content.

    Matching is word-bounded and case-insensitive over the normalized text,
    except for the short ambiguous terms in ``lexicon.CASE_SENSITIVE_TERMS``
    which must appear upper-case in the article. Each class is ordered by
    frequency, then title presence, then lexicon order, and capped.
    """

    def __init__(self, config: dict | None = None):
        self.config = config or {}
        self.max_per_class = get_max_entities_per_class(self.config)

    def extract(self, content: PreprocessedContent, article: Article) -> EntityAnalysis:
        cased_title = strip_punctuation(article.title)
        cased = f"{cased_title} {cased_title} {strip_punctuation(article.body)}"

        classes: dict[str, tuple[str, ...]] = {}
        frequencies: dict[str, int] = {}
        for cls in ENTITY_CLASSES:
            matcher = _MATCHERS[cls]
            hits = matcher.scan(content.combined, cased)
            in_title = matcher.scan(content.title, cased_title)
            ranked = sorted(hits, key=lambda name: (-hits[name], name not in in_title, matcher.rank[name]))
            classes[cls] = tuple(ranked[: self.max_per_class])
            for name in classes[cls]:
                frequencies[name] = max(frequencies.get(name, 0), hits[name])

        actors = set(classes["countries"]) | set(classes["organizations"])
        relationships = self.detect_relationships(classes["countries"], actors)
        all_names = {name for names in classes.values() for name in names}

        mentions = sum(frequencies.values())
        density = round(mentions / content.word_count * 100, 2) if content.word_count else 0.0

        analysis = EntityAnalysis(
            **classes,
            frequencies=frequencies,
            relationships=relationships,
            technical=self.extract_technical(content.raw),
            density=density,
            density_band=classify_density(density),
            distribution=self._distribution(classes, content.word_count),
            critical_combinations=self._critical_combinations(all_names, content.combined),
            escalation_indicators=tuple(
                ind for ind in lexicon.ESCALATION_INDICATORS if contains(content.combined, ind)
            ),
            significance=self._significance(all_names, relationships),
            location_profiles={
                name: {"type": lexicon.location_type(name), "value": lexicon.location_value(name)}
                for name in classes["locations"]
            },
        )
        logger.debug(
            "Extracted %d entities (%d relationships) from %s",
            analysis.unique_count, len(relationships), article.label,
        )
        return analysis

    @staticmethod
    def detect_relationships(countries: tuple[str, ...], actors: set[str]) -> tuple[Relationship, ...]:
        """Known adversarial/allied pairs, plus one multilateral entry for 3+ countries."""
        found = [
            Relationship("ADVERSARIAL", pair, "HIGH")
            for pair in lexicon.ADVERSARIAL_PAIRS
            if actors.issuperset(pair)
        ]
        found += [
            Relationship("ALLIED", pair, "MEDIUM")
            for pair in lexicon.ALLIED_PAIRS
            if actors.issuperset(pair)
        ]
        if len(countries) >= lexicon.MULTILATERAL_MIN_COUNTRIES:
            found.append(
                Relationship("MULTILATERAL", tuple(countries[: lexicon.MULTILATERAL_MAX_MEMBERS]), "HIGH")
            )
        return tuple(found)

    @staticmethod
    def extract_technical(raw: str) -> TechnicalDesignations:
        """Regex capture of designators and figures from upper-cased raw text."""
        patterns = {
            "weapon_designations": WEAPON_DESIGNATION_RE,
            "military_units": MILITARY_UNIT_RE,
            "coordinates": COORDINATE_RE,
            "timestamps": DATE_TIME_RE,
            "monetary": MONETARY_RE,
            "casualties": CASUALTY_RE,
            "quantities": QUANTITY_RE,
            "percentages": PERCENTAGE_RE,
            "distances": DISTANCE_RE,
        }
        found = {}
        for key, regex in patterns.items():
            group = 1 if regex.groups else 0
            values = (m.group(group) for m in regex.finditer(raw))
            found[key] = _unique(values, TECHNICAL_LIMITS[key])
        return TechnicalDesignations(**found)

    @staticmethod
    def _distribution(classes: dict[str, tuple[str, ...]], word_count: int) -> dict[str, dict[str, float]]:
        total = sum(len(names) for names in classes.values())
        return {
            cls: {
                "count": len(names),
                "density": round(len(names) / word_count * 100, 2) if word_count else 0.0,
                "share": round(len(names) / total * 100, 2) if total else 0.0,
            }
            for cls, names in classes.items()
        }

    @staticmethod
    def _critical_combinations(names: set[str], text: str) -> tuple[tuple[str, str], ...]:
        def present(term: str) -> bool:
            return term in names or contains(text, term)

        return tuple(pair for pair in lexicon.CRITICAL_COMBINATIONS if all(present(t) for t in pair))

    @staticmethod
    def _significance(names: set[str], relationships: tuple[Relationship, ...]) -> Significance:
        critical = sorted(names & lexicon.HIGH_VALUE_ENTITIES)
        factors = []
        if len(critical) >= 3:
            overall = "CRITICAL"
            factors.append("Multiple high-value entities detected")
        elif len(critical) == 2:
            overall = "HIGH"
            factors.append("High-value entities present")
        elif critical:
            overall = "MEDIUM"
            factors.append("Some high-value entities detected")
        else:
            overall = "LOW"

        adversarial = sum(1 for r in relationships if r.type == "ADVERSARIAL")
        if adversarial >= 2:
            escalation = "HIGH"
            factors.append("Multiple adversarial relationships")
        elif adversarial == 1:
            escalation = "MEDIUM"
            factors.append("Adversarial relationship detected")
        else:
            escalation = "LOW"

        return Significance(overall, escalation, tuple(factors), tuple(critical))


def strategic_implications(analysis: EntityAnalysis) -> str:
    """One-line summary of how much strategic weight the entities carry."""
    combos = len(analysis.critical_combinations)
    indicators = len(analysis.escalation_indicators)
    relationships = len(analysis.relationships)

    if combos >= 2 or indicators >= 3:
        return "High strategic implications with multiple risk factors"
    if relationships >= 2 or combos >= 1:
        return "Moderate strategic implications requiring monitoring"
    if relationships >= 1 or indicators >= 1:
        return "Limited strategic implications with some concerns"
    return "Minimal strategic implications identified"
