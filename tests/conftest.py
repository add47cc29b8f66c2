"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from intelscore.config import load_config
from intelscore.models import Article, Source

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


def make_article(
    title: str,
    body: str = "",
    url: str = "https://example.com/article",
    hours_ago: float | None = 1.0,
    domain: str = "",
    feed_label: str = "Test Feed",
    base_credibility: float | None = None,
    article_id: str | int | None = None,
) -> Article:
    return Article(
        title=title,
        body=body,
        url=url,
        published_at=NOW - timedelta(hours=hours_ago) if hours_ago is not None else None,
        source=Source(domain=domain, feed_label=feed_label, base_credibility=base_credibility),
        id=article_id,
    )


@pytest.fixture
def now():
    """Fixed reference time so temporal scores are reproducible."""
    return NOW


@pytest.fixture
def sample_config(tmp_path):
    """Config file with every section, loaded the way the CLI loads it."""
    config_text = """
scoring:
  weights:
    primary:
      keyword: 0.30
      entity: 0.25
      source: 0.20
      temporal: 0.10
      geopolitical: 0.08
      threat: 0.07
  blend:
    primary: 0.7
    secondary: 0.3
  secondary:
    enabled: true

entities:
  max_per_class: 15

dedup:
  threshold: 0.8
  window_hours: 24
  title_weight: 0.7

fallback:
  score: 25
  confidence: 40

batch:
  max_workers: 1
  max_concurrency: 4

logging:
  level: "${INTELSCORE_TEST_LOG_LEVEL}"
"""
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(config_text)
    return load_config(str(cfg_path))


@pytest.fixture
def missile_test_article():
    """Fresh wire report of an Iranian missile test in the Gulf."""
    return make_article(
        title="Breaking: Iran confirms new missile test near Strait of Hormuz",
        body=(
            "Iran conducted a ballistic missile test near the Strait of Hormuz early on Wednesday, "
            "officials confirmed. The launch comes amid concern over the Iranian nuclear program and "
            "uranium enrichment at Natanz. The United States said it was monitoring the situation "
            "and an aircraft carrier remains deployed in the Persian Gulf."
        ),
        url="https://www.reuters.com/world/middle-east/iran-missile-test",
        hours_ago=0.5,
        domain="reuters.com",
        feed_label="Reuters World",
        article_id="iran-1",
    )
