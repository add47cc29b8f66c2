"""CLI entrypoint: python -m intelscore {analyze|summarize} ARTICLES.json."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

from intelscore.analyzer import IntelligenceAnalyzer
from intelscore.config import load_config, setup_logging
from intelscore.models import Article
from intelscore.reporting import filter_by_relevance, sort_by_priority, summarize

logger = logging.getLogger("intelscore")


def _read_articles(path: str) -> list[Article]:
    with open(path) as f:
        records = json.load(f)
    if isinstance(records, dict):
        records = [records]
    return [Article.from_dict(record) for record in records]


def cmd_analyze(config: dict, path: str) -> None:
    """Print one assessment per article, in input order."""
    articles = _read_articles(path)
    results = IntelligenceAnalyzer(config).analyze_batch(articles, recent_window=articles)
    print(json.dumps([r.to_dict() for r in results], indent=2, default=str))


def cmd_summarize(config: dict, path: str) -> None:
    """Print batch statistics and the relevant articles ranked by priority."""
    articles = _read_articles(path)
    results = IntelligenceAnalyzer(config).analyze_batch(articles, recent_window=articles)
    ranked = sort_by_priority(filter_by_relevance(results))
    print(json.dumps(summarize(results), indent=2))
    print()
    print(f"{'Priority':<10} {'Score':>6} {'Threat':<10} {'Article'}")
    print("-" * 70)
    for r in ranked:
        print(f"{r.priority:<10} {r.overall_score:>6.1f} {r.threat.level:<10} {r.article_id}")


COMMANDS = {
    "analyze": cmd_analyze,
    "summarize": cmd_summarize,
}


def main() -> None:
    if len(sys.argv) < 3 or sys.argv[1] not in COMMANDS:
        available = ", ".join(COMMANDS)
        print(f"Usage: python -m intelscore {{{available}}} ARTICLES.json")
        sys.exit(1)

    command, path = sys.argv[1], sys.argv[2]
    config_path = Path(os.environ.get("CONFIG_PATH", "config.yaml"))
    config = load_config(config_path) if config_path.exists() else {}
    setup_logging(config)
    COMMANDS[command](config, path)


if __name__ == "__main__":
    main()
