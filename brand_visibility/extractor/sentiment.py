"""
Keyword sentiment for brand mentions.

Every sentence of an answer that names a tracked brand is labeled by counting
configured positive and negative words:

- more positive than negative words -> "positive"
- more negative than positive words -> "negative"
- otherwise -> "neutral"

A brand's label for the whole answer follows the same rule over its sentence
counts. Words match whole normalized words or phrases, so "unreliable" never
counts as "reliable".

Example:
    >>> sentiments = brand_sentiments(
    ...     "Chase is a trusted, leading bank. Amex can be expensive.",
    ...     ["Chase", "Amex"],
    ... )
    >>> sentiments["Chase"].positive, sentiments["Amex"].negative
    (1, 1)
"""

import logging
from typing import Any

from brand_visibility.config.schema import SentimentSettings
from brand_visibility.models import Brand, SentimentBreakdown, SentimentLabel, coerce_brands

from .brand_matcher import find_mentions
from .text_normalizer import normalize, split_sentences

logger = logging.getLogger(__name__)


def _normalized_words(words: list[str]) -> list[str]:
    """Normalize configured words the way answer text is normalized."""
    return [w for w in (normalize(word) for word in words) if w]


def _count_hits(padded_sentence: str, words: list[str]) -> int:
    """Count distinct words or phrases present as whole words."""
    return sum(1 for word in words if f" {word} " in padded_sentence)


def _label(normalized_sentence: str, positive: list[str], negative: list[str]) -> SentimentLabel:
    padded = f" {normalized_sentence} "
    positive_hits = _count_hits(padded, positive)
    negative_hits = _count_hits(padded, negative)
    if positive_hits > negative_hits:
        return "positive"
    if negative_hits > positive_hits:
        return "negative"
    return "neutral"


def classify_sentence(sentence: str, settings: SentimentSettings | None = None) -> SentimentLabel:
    """
    Label one sentence as positive, neutral or negative.

    Example:
        >>> classify_sentence("Chase is reliable and trusted.")
        'positive'
        >>> classify_sentence("Chase is unreliable.")
        'negative'
    """
    settings = settings or SentimentSettings()
    return _label(
        normalize(sentence),
        _normalized_words(settings.positive_words),
        _normalized_words(settings.negative_words),
    )


def sentiment_label(breakdown: SentimentBreakdown) -> SentimentLabel:
    """Label a brand's answer-level sentiment from its sentence counts."""
    if breakdown.positive > breakdown.negative:
        return "positive"
    if breakdown.negative > breakdown.positive:
        return "negative"
    return "neutral"


def brand_sentiments(
    text: str,
    brands: list[Brand] | Any,
    settings: SentimentSettings | None = None,
    fuzzy_threshold: float = 0.0,
    name_variations: bool = True,
) -> dict[str, SentimentBreakdown]:
    """
    Count sentiment of the sentences naming each brand.

    Args:
        text: Answer text with URLs removed (see text_normalizer.strip_urls)
        brands: Tracked brands in priority order
        settings: Word lists (defaults to SentimentSettings())
        fuzzy_threshold: Passed to find_mentions for each sentence
        name_variations: Passed to find_mentions for each sentence

    Returns:
        {brand_name: SentimentBreakdown} for brands named in at least one
        sentence. Empty dict for non-string text.
    """
    if not isinstance(text, str):
        return {}

    settings = settings or SentimentSettings()
    brand_list = coerce_brands(brands)
    positive = _normalized_words(settings.positive_words)
    negative = _normalized_words(settings.negative_words)

    sentiments: dict[str, SentimentBreakdown] = {}
    for sentence in split_sentences(text):
        normalized = normalize(sentence)
        mentions = find_mentions(normalized, brand_list, fuzzy_threshold, name_variations)
        if not mentions:
            continue

        label = _label(normalized, positive, negative)
        for mention in mentions:
            sentiments.setdefault(mention.brand_name, SentimentBreakdown()).add(label)

    logger.debug(
        "Scored brand sentiment",
        extra={"context": {"brands": len(sentiments)}},
    )
    return sentiments
