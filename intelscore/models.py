"""Core data models for the scoring engine."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from intelscore.errors import LexiconLookupFailure

PRIORITY_LEVELS = ("LOW", "MEDIUM", "HIGH", "CRITICAL")

ENTITY_CLASSES = (
    "countries",
    "organizations",
    "technologies",
    "weapons",
    "weapon_systems",
    "locations",
)


def ensure_utc(value: datetime | str | None) -> datetime | None:
    """Coerce a datetime or ISO-8601 string to an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Source:
    """Where an article came from."""

    domain: str = ""
    feed_label: str = ""
    base_credibility: float | None = None  # caller-supplied 0..100


@dataclass(frozen=True)
class Article:
    """A single news article handed to the engine. Never mutated."""

    title: str
    body: str = ""
    url: str = ""
    published_at: datetime | None = None
    fetched_at: datetime | None = None
    source: Source = field(default_factory=Source)
    id: str | int | None = None

    def __post_init__(self):
        object.__setattr__(self, "title", self.title or "")
        object.__setattr__(self, "body", self.body or "")
        object.__setattr__(self, "url", self.url or "")
        object.__setattr__(self, "published_at", ensure_utc(self.published_at))
        object.__setattr__(self, "fetched_at", ensure_utc(self.fetched_at))

    @property
    def timestamp(self) -> datetime | None:
        """Publication time, falling back to fetch time."""
        return self.published_at or self.fetched_at

    @property
    def label(self) -> str:
        """Short identifier for log lines."""
        if self.id is not None:
            return str(self.id)
        return self.url or self.title[:50]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Article:
        """Build an Article from a feed/storage record (snake or camel case)."""
        src = data.get("source") or {}
        if isinstance(src, str):
            src = {"feed_label": src}
        credibility = _first(src, "base_credibility", "baseCredibility", "credibilityScore")
        source = Source(
            domain=_first(src, "domain") or "",
            feed_label=_first(src, "feed_label", "feedLabel", "feedName", "name") or "",
            base_credibility=float(credibility) if credibility is not None else None,
        )
        return cls(
            title=_first(data, "title") or "",
            body=_first(data, "body", "content", "summary", "description") or "",
            url=_first(data, "url", "link") or "",
            published_at=ensure_utc(_first(data, "published_at", "publishedAt", "pubDate")),
            fetched_at=ensure_utc(_first(data, "fetched_at", "fetchedAt")),
            source=source,
            id=_first(data, "id"),
        )


def _first(data: dict, *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


@dataclass(frozen=True)
class PreprocessedContent:
    """Canonical analysis form of one article. Recomputed per analysis."""

    title: str  # upper-cased, punctuation stripped
    body: str
    combined: str  # title twice, then body
    words: tuple[str, ...]
    word_count: int
    sentences: tuple[str, ...]
    raw: str  # upper-cased title + body with punctuation kept

    @property
    def text(self) -> str:
        """Title and body once each."""
        return f"{self.title} {self.body}".strip()


@dataclass(frozen=True)
class Relationship:
    """A known relationship between detected entities."""

    type: str  # ADVERSARIAL, ALLIED, MULTILATERAL
    members: tuple[str, ...]
    significance: str = "MEDIUM"


@dataclass(frozen=True)
class Significance:
    overall: str = "LOW"
    escalation_risk: str = "LOW"
    factors: tuple[str, ...] = ()
    critical_entities: tuple[str, ...] = ()


@dataclass(frozen=True)
class TechnicalDesignations:
    """Regex-captured designators and figures, kept apart from entity classes."""

    weapon_designations: tuple[str, ...] = ()
    military_units: tuple[str, ...] = ()
    coordinates: tuple[str, ...] = ()
    timestamps: tuple[str, ...] = ()
    monetary: tuple[str, ...] = ()
    casualties: tuple[str, ...] = ()
    quantities: tuple[str, ...] = ()
    percentages: tuple[str, ...] = ()
    distances: tuple[str, ...] = ()


@dataclass(frozen=True)
class EntityAnalysis:
    """Canonical entities per class plus relationship and density analysis."""

    countries: tuple[str, ...] = ()
    organizations: tuple[str, ...] = ()
    technologies: tuple[str, ...] = ()
    weapons: tuple[str, ...] = ()
    weapon_systems: tuple[str, ...] = ()
    locations: tuple[str, ...] = ()
    frequencies: dict[str, int] = field(default_factory=dict)
    relationships: tuple[Relationship, ...] = ()
    technical: TechnicalDesignations = field(default_factory=TechnicalDesignations)
    density: float = 0.0
    density_band: str = "VERY_LOW"
    distribution: dict[str, dict[str, float]] = field(default_factory=dict)
    critical_combinations: tuple[tuple[str, str], ...] = ()
    escalation_indicators: tuple[str, ...] = ()
    significance: Significance = field(default_factory=Significance)
    location_profiles: dict[str, dict[str, str]] = field(default_factory=dict)

    def by_class(self, entity_class: str) -> tuple[str, ...]:
        if entity_class not in ENTITY_CLASSES:
            raise LexiconLookupFailure(entity_class)
        return getattr(self, entity_class)

    def all_names(self) -> list[str]:
        """Every reported name, in class order (may repeat across classes)."""
        return [name for cls in ENTITY_CLASSES for name in getattr(self, cls)]

    @property
    def unique_count(self) -> int:
        return len(set(self.all_names()))

    @property
    def total_mentions(self) -> int:
        return sum(self.frequencies.values())

    @property
    def actors(self) -> set[str]:
        """Countries and organizations, the parties of geopolitical relationships."""
        return set(self.countries) | set(self.organizations)


@dataclass(frozen=True)
class DimensionScore:
    """Output of one scoring dimension."""

    score: float
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ThreatAssessment:
    score: float = 0.0
    level: str = "LOW"
    primary_threat: str | None = None
    confidence: float = 0.0
    time_frame: str = "LONG_TERM"
    detected: tuple[dict[str, Any], ...] = ()
    recommendations: tuple[str, ...] = ()
    risk_factors: tuple[str, ...] = ()
    analysis: str = ""
    breakdown: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DuplicateVerdict:
    is_duplicate: bool = False
    duplicate_of_id: str | int | None = None
    similarity: float = 0.0
    is_significant_update: bool = False


@dataclass(frozen=True)
class ExternalAnalysis:
    """Validated hint from an optional external analysis service."""

    summary: str = ""
    score: float = 25.0
    confidence: float = 60.0
    priority: str = "LOW"
    threat_level: str = "LOW"
    categories: tuple[str, ...] = ("GENERAL",)
    tags: tuple[str, ...] = ()
    entities: dict[str, tuple[str, ...]] = field(default_factory=dict)
    is_advertisement: bool = False


@dataclass(frozen=True)
class ScoringContext:
    """Everything a scorer may look at for one article."""

    article: Article
    content: PreprocessedContent
    entities: EntityAnalysis
    now: datetime
    window: tuple[Article, ...] = ()


@dataclass(frozen=True)
class IntelligenceAssessment:
    """Final result for one article. A re-analysis produces a new instance."""

    article_id: str | int | None
    overall_score: float
    confidence: float
    priority: str
    priority_confidence: float
    categories: tuple[str, ...]
    tags: tuple[str, ...]
    entities: EntityAnalysis
    threat: ThreatAssessment
    duplicate: DuplicateVerdict
    breakdown: dict[str, Any] = field(default_factory=dict)
    dimensions: dict[str, DimensionScore] = field(default_factory=dict)
    is_advertisement: bool = False
    input_issues: tuple[str, ...] = ()
    recommended_action: str = "STANDARD_PROCESSING"
    is_fallback: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-serialisable form for the storage layer."""
        return dataclasses.asdict(self)
