"""Near-duplicate detection against a window of recent articles."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable

from intelscore.config import get_dedup_settings
from intelscore.models import Article, DuplicateVerdict
from intelscore.process.matching import matched
from intelscore.process.preprocess import normalize_text, strip_punctuation

logger = logging.getLogger(__name__)

UPDATE_INDICATORS = (
    "update", "updated", "breaking", "latest", "new details", "confirmed",
    "revised", "additional", "more", "further", "now",
)


def tokens(text: str) -> frozenset[str]:
    """Lower-cased word set with punctuation stripped."""
    return frozenset(strip_punctuation(text).lower().split())


def jaccard(a: frozenset[str], b: frozenset[str]) -> float:
    """Token-set overlap. Two empty texts are identical."""
    if not a and not b:
        return 1.0
    return len(a & b) / len(a | b)


def similarity(a: Article, b: Article, title_weight: float = 0.7) -> float:
    """Weighted title/body Jaccard similarity; symmetric, 1.0 for identical articles."""
    title_sim = jaccard(tokens(a.title), tokens(b.title))
    body_sim = jaccard(tokens(a.body), tokens(b.body))
    return title_weight * title_sim + (1.0 - title_weight) * body_sim


def is_significant_update(new: Article, previous: Article) -> bool:
    """Strictly newer and the title signals new information."""
    if new.timestamp is None or previous.timestamp is None:
        return False
    if new.timestamp <= previous.timestamp:
        return False
    return bool(matched(normalize_text(new.title), UPDATE_INDICATORS))


class DuplicateDetector:
    """Flags an article as a duplicate of the first window candidate above threshold."""

    def __init__(self, config: dict | None = None):
        settings = get_dedup_settings(config)
        self.threshold = settings["threshold"]
        self.window = timedelta(hours=settings["window_hours"])
        self.title_weight = settings["title_weight"]

    def similarity(self, a: Article, b: Article) -> float:
        return similarity(a, b, self.title_weight)

    def candidates(self, article: Article, window: Iterable[Article]) -> list[Article]:
        """Earlier window articles within the time window of ``article``.

        An article can only duplicate something published before it. When the
        timestamps tie or one is missing, window order decides: only entries
        ahead of ``article`` in the window count. Articles not in the window
        are compared against every tied or undated entry.
        """
        items = list(window)
        position = next(
            (i for i, other in enumerate(items) if self._same(article, other)), len(items),
        )
        result = []
        for index, other in enumerate(items):
            if self._same(article, other):
                continue
            if article.timestamp is not None and other.timestamp is not None:
                gap = article.timestamp - other.timestamp
                if abs(gap) >= self.window or gap < timedelta(0):
                    continue
                if gap == timedelta(0) and index > position:
                    continue
            elif index > position:
                continue
            result.append(other)
        return result

    @staticmethod
    def _same(article: Article, other: Article) -> bool:
        return other is article or (article.id is not None and other.id == article.id)

    def check(self, article: Article, window: Iterable[Article]) -> DuplicateVerdict:
        """First candidate above threshold wins; otherwise report the closest similarity."""
        best = 0.0
        for candidate in self.candidates(article, window):
            score = self.similarity(article, candidate)
            best = max(best, score)
            if score > self.threshold:
                update = is_significant_update(article, candidate)
                logger.info(
                    "%s duplicates %s (similarity=%.2f%s)",
                    article.label, candidate.label, score, ", significant update" if update else "",
                )
                return DuplicateVerdict(
                    is_duplicate=True,
                    duplicate_of_id=candidate.id,
                    similarity=round(score, 4),
                    is_significant_update=update,
                )
        return DuplicateVerdict(similarity=round(best, 4))

    def filter_duplicates(self, articles: list[Article]) -> list[Article]:
        """Keep the first article of every near-duplicate group, in input order.

        Significant updates are kept alongside the article they update.
        """
        kept: list[Article] = []
        for article in articles:
            verdict = self.check(article, kept)
            if not verdict.is_duplicate or verdict.is_significant_update:
                kept.append(article)

        removed = len(articles) - len(kept)
        if removed:
            logger.info(
                "Similarity dedup removed %d near-duplicates (threshold=%.2f)", removed, self.threshold,
            )
        return kept
