"""Advertisement detection by ad-network URL or promotional language."""

from __future__ import annotations

from intelscore.models import Article
from intelscore.process.matching import matched
from intelscore.process.preprocess import normalize_text

AD_URL_PATTERNS = (
    "doubleclick.net",
    "googleadservices.com",
    "googlesyndication.com",
    "amazon-adsystem.com",
    "facebook.com/tr",
    "adsystem.amazon",
)

PROMOTIONAL_PHRASES = (
    "sponsored", "advertisement", "promoted", "affiliate", "buy now",
    "limited time", "click here", "free trial", "subscribe now",
    "special offer", "deal of the day", "discount", "coupon",
)

MIN_PROMOTIONAL_PHRASES = 2


def ad_indicators(article: Article) -> list[str]:
    """Every advertisement signal found in the article."""
    url = article.url.lower()
    found = [pattern for pattern in AD_URL_PATTERNS if pattern in url]
    text = normalize_text(f"{article.title} {article.body}")
    found += [phrase.upper() for phrase in matched(text, PROMOTIONAL_PHRASES)]
    if "% OFF" in f"{article.title} {article.body}".upper():
        found.append("% OFF")
    return found


def is_advertisement(article: Article) -> bool:
    """An ad-network URL alone, or at least two promotional phrases."""
    url = article.url.lower()
    if any(pattern in url for pattern in AD_URL_PATTERNS):
        return True
    promotional = [i for i in ad_indicators(article) if i not in AD_URL_PATTERNS]
    return len(promotional) >= MIN_PROMOTIONAL_PHRASES
