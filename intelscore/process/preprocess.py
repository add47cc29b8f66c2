"""Normalize raw article text into the canonical analysis form."""

from __future__ import annotations

import re

from intelscore.models import Article, PreprocessedContent

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_SENTENCE_END = re.compile(r"[.!?]+")


def collapse(text: str) -> str:
    """Collapse runs of whitespace and trim."""
    return _WHITESPACE.sub(" ", text or "").strip()


def normalize_text(text: str) -> str:
    """Upper-case, replace punctuation with spaces, collapse whitespace."""
    return collapse(_PUNCTUATION.sub(" ", (text or "").upper()))


def strip_punctuation(text: str) -> str:
    """Like normalize_text but keeps the original casing."""
    return collapse(_PUNCTUATION.sub(" ", text or ""))


def split_sentences(text: str) -> tuple[str, ...]:
    """Split raw text on sentence terminators and normalize each piece."""
    parts = (normalize_text(part) for part in _SENTENCE_END.split(text or ""))
    return tuple(part for part in parts if part)


def preprocess(article: Article) -> PreprocessedContent:
    """Build the canonical analysis form of an article.

    The title appears twice in ``combined`` so that title terms weigh double
    in every frequency-based signal. Empty input yields empty content.
    """
    title = normalize_text(article.title)
    body = normalize_text(article.body)
    combined = collapse(f"{title} {title} {body}")
    words = tuple(combined.split())

    # Title and body are separate sentences even without a terminator
    sentences = split_sentences(article.title) + split_sentences(article.body)

    return PreprocessedContent(
        title=title,
        body=body,
        combined=combined,
        words=words,
        word_count=len(words),
        sentences=sentences,
        raw=collapse(f"{article.title} {article.body}".upper()),
    )
