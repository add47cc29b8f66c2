"""Exception types raised by the scoring engine."""

from __future__ import annotations


class IntelScoreError(Exception):
    """Base class for engine errors."""


class InvalidInput(IntelScoreError):
    """Article is missing fields the engine relies on (title, url, timestamps)."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("Invalid article: " + ", ".join(self.problems))


class LexiconLookupFailure(IntelScoreError, KeyError):
    """An unknown entity class was requested from the static lexicon."""

    def __init__(self, entity_class: str):
        self.entity_class = entity_class
        super().__init__(f"Unknown entity class: {entity_class}")

    def __str__(self) -> str:
        return self.args[0]
