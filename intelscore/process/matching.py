"""Word-bounded phrase matching over normalized text."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable

from intelscore.process.preprocess import normalize_text


@lru_cache(maxsize=4096)
def phrase_regex(term: str) -> re.Pattern:
    """Compiled, word-bounded regex for one term in normalized form."""
    return re.compile(r"\b" + re.escape(normalize_text(term)) + r"\b")


def alternation_regex(terms: Iterable[str], flags: int = 0) -> re.Pattern:
    """One regex matching any of the terms, longest first so overlaps don't double count."""
    normalized = sorted({normalize_text(t) for t in terms if normalize_text(t)}, key=lambda t: (-len(t), t))
    return re.compile(r"\b(?:" + "|".join(re.escape(t) for t in normalized) + r")\b", flags)


def count(text: str, term: str) -> int:
    """Occurrences of term in normalized text."""
    return len(phrase_regex(term).findall(text))


def contains(text: str, term: str) -> bool:
    return phrase_regex(term).search(text) is not None


def matched(text: str, terms: Iterable[str]) -> list[str]:
    """Terms present in text, in the order given."""
    return [term for term in terms if contains(text, term)]
