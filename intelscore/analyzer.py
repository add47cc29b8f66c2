"""Analyzer orchestrator: wires preprocessing, extraction and every registered scorer."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Iterable, Sequence

from intelscore.classify import DEFAULT_CATEGORY, classify_categories, generate_tags
from intelscore.config import get_batch_settings, get_fallback_settings, secondary_enabled
from intelscore.errors import InvalidInput
from intelscore.models import (
    ENTITY_CLASSES,
    Article,
    DuplicateVerdict,
    EntityAnalysis,
    ExternalAnalysis,
    IntelligenceAssessment,
    ScoringContext,
    ThreatAssessment,
)
from intelscore.process.ads import is_advertisement
from intelscore.process.dedup import DuplicateDetector
from intelscore.process.entities import EntityExtractor
from intelscore.process.preprocess import preprocess
from intelscore.score import SCORERS
from intelscore.score.combiner import ScoreCombiner
from intelscore.score.secondary import SecondaryScorer

logger = logging.getLogger(__name__)

INPUT_ISSUE_PENALTY = 10.0
INCOMPLETE_TAG = "INCOMPLETE"
ADVERTISEMENT_TAG = "ADVERTISEMENT"
UNPROCESSED_TAG = "UNPROCESSED"


def validate_article(article: Article, strict: bool = False) -> list[str]:
    """List what is missing from an article.

    The analyzer tolerates incomplete input; ``strict=True`` turns any problem
    into an ``InvalidInput`` for callers that want to reject it up front.
    """
    problems = []
    if not article.title.strip():
        problems.append("missing title")
    if not article.url.strip():
        problems.append("missing url")
    if article.timestamp is None:
        problems.append("missing publication and fetch time")
    if strict and problems:
        raise InvalidInput(problems)
    return problems


class IntelligenceAnalyzer:
    """Scores articles into ``IntelligenceAssessment`` records.

    Configuration is read once here. ``analyze`` keeps no state between
    calls, so one instance can be shared by worker threads.
    """

    def __init__(self, config: dict | None = None):
        self.config = config or {}
        self.extractor = EntityExtractor(self.config)
        self.scorers = {name: cls(self.config) for name, cls in SCORERS.items()}
        self.secondary = SecondaryScorer(self.config) if secondary_enabled(self.config) else None
        self.detector = DuplicateDetector(self.config)
        self.combiner = ScoreCombiner(self.config)
        self.fallback_settings = get_fallback_settings(self.config)
        self.batch_settings = get_batch_settings(self.config)

    def analyze(
        self,
        article: Article,
        recent_window: Iterable[Article] = (),
        now: datetime | None = None,
        hint: ExternalAnalysis | None = None,
        context_multiplier: float = 1.0,
    ) -> IntelligenceAssessment:
        """Analyze one article. Never raises: failures yield a fallback assessment."""
        try:
            return self._analyze(article, tuple(recent_window), now or datetime.now(timezone.utc), context_multiplier)
        except Exception as e:
            logger.exception("Analysis failed for %s, returning fallback", article.label)
            return self.fallback(article, error=f"{type(e).__name__}: {e}", hint=hint)

    def _analyze(
        self,
        article: Article,
        window: tuple[Article, ...],
        now: datetime,
        context_multiplier: float,
    ) -> IntelligenceAssessment:
        issues = validate_article(article)
        if issues:
            logger.warning("Degraded input for %s: %s", article.label, ", ".join(issues))

        content = preprocess(article)
        entities = self.extractor.extract(content, article)
        context = ScoringContext(article=article, content=content, entities=entities, now=now, window=window)

        dimensions = {}
        for name, scorer in self.scorers.items():
            dimensions[name] = scorer.score(context)
            logger.debug("%s %s=%.1f", article.label, name, dimensions[name].score)

        threat: ThreatAssessment = dimensions["threat"].details["assessment"]
        relationship_count = dimensions["geopolitical"].details.get("relationship_count", 0)
        secondary = self.secondary.score(context) if self.secondary is not None else None

        duplicate = self.detector.check(article, window)
        advertisement = is_advertisement(article)

        combined = self.combiner.combine(
            dimensions,
            threat,
            secondary=secondary,
            relationship_count=relationship_count,
            entity_count=entities.unique_count,
            is_advertisement=advertisement,
            context_multiplier=context_multiplier,
            confidence_penalty=INPUT_ISSUE_PENALTY * len(issues),
        )

        categories = classify_categories(entities, content, threat)
        status = [tag for tag, flag in ((ADVERTISEMENT_TAG, advertisement), (INCOMPLETE_TAG, bool(issues))) if flag]
        tags = generate_tags(entities, categories, content, status=status)

        return IntelligenceAssessment(
            article_id=article.id,
            overall_score=combined.overall,
            confidence=combined.confidence,
            priority=combined.priority,
            priority_confidence=combined.priority_confidence,
            categories=categories,
            tags=tags,
            entities=entities,
            threat=threat,
            duplicate=duplicate,
            breakdown={
                **combined.breakdown,
                "secondary_enabled": secondary is not None,
                "is_actionable": combined.is_actionable,
                "requires_escalation": combined.requires_escalation,
            },
            dimensions=dimensions,
            is_advertisement=advertisement,
            input_issues=tuple(issues),
            recommended_action=combined.recommended_action,
        )

    def fallback(
        self,
        article: Article,
        error: str | None = None,
        hint: ExternalAnalysis | None = None,
    ) -> IntelligenceAssessment:
        """Fixed low-value assessment for an article that could not be analyzed."""
        score = self.fallback_settings["score"]
        confidence = self.fallback_settings["confidence"]
        categories: tuple[str, ...] = (DEFAULT_CATEGORY,)
        tags: tuple[str, ...] = (UNPROCESSED_TAG,)
        entities = EntityAnalysis()
        if hint is not None:
            categories = hint.categories or categories
            tags = tuple(sorted(dict.fromkeys((UNPROCESSED_TAG, *hint.tags))))
            entities = EntityAnalysis(**{cls: tuple(hint.entities.get(cls, ())) for cls in ENTITY_CLASSES})

        return IntelligenceAssessment(
            article_id=article.id,
            overall_score=score,
            confidence=confidence,
            priority="LOW",
            priority_confidence=confidence,
            categories=categories,
            tags=tags,
            entities=entities,
            threat=ThreatAssessment(),
            duplicate=DuplicateVerdict(),
            breakdown={"fallback": True, "hint_used": hint is not None},
            recommended_action="VERIFY_WITH_ADDITIONAL_SOURCES",
            is_fallback=True,
            error=error,
        )

    def analyze_batch(
        self,
        articles: Sequence[Article],
        recent_window: Iterable[Article] = (),
        now: datetime | None = None,
    ) -> list[IntelligenceAssessment]:
        """Analyze many articles against one frozen window; results keep input order."""
        window = tuple(recent_window)
        now = now or datetime.now(timezone.utc)
        workers = self.batch_settings["max_workers"]

        if workers > 1 and len(articles) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(lambda a: self.analyze(a, window, now), articles))
        else:
            results = [self.analyze(article, window, now) for article in articles]

        log_batch_summary(results)
        return results

    async def analyze_batch_async(
        self,
        articles: Sequence[Article],
        recent_window: Iterable[Article] = (),
        now: datetime | None = None,
    ) -> list[IntelligenceAssessment]:
        """Analyze articles in worker threads with bounded concurrency and per-article timeout."""
        window = tuple(recent_window)
        now = now or datetime.now(timezone.utc)
        semaphore = asyncio.Semaphore(self.batch_settings["max_concurrency"])
        timeout = self.batch_settings["timeout_seconds"]

        async def _one(article: Article) -> IntelligenceAssessment:
            async with semaphore:
                try:
                    return await asyncio.wait_for(
                        asyncio.to_thread(self.analyze, article, window, now), timeout=timeout,
                    )
                except asyncio.TimeoutError:
                    logger.warning("Analysis of %s timed out after %.1fs", article.label, timeout)
                    return self.fallback(article, error=f"TimeoutError: exceeded {timeout}s")

        results = await asyncio.gather(*[_one(article) for article in articles])
        log_batch_summary(results)
        return list(results)


def log_batch_summary(results: Sequence[IntelligenceAssessment]) -> None:
    if not results:
        return
    priorities = Counter(r.priority for r in results)
    logger.info(
        "Analyzed %d articles: %s; %d duplicates, %d fallbacks",
        len(results),
        ", ".join(f"{p}={priorities[p]}" for p in ("CRITICAL", "HIGH", "MEDIUM", "LOW") if priorities[p]),
        sum(1 for r in results if r.duplicate.is_duplicate),
        sum(1 for r in results if r.is_fallback),
    )
