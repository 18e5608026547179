"""
Answer analysis orchestration for Brand Visibility.

This module ties together citation extraction, citation classification and
brand mention matching into a single pipeline, and feeds a batch of answers
into the metrics aggregator.

Pipeline per answer:
1. Extract citations from the raw text (markdown links and bare URLs)
2. Classify each citation as "brand" or "earned" by host ownership
3. Reduce links to their labels, drop bare URLs, normalize the text
4. Match brand mentions in the normalized text
5. Score keyword sentiment of the sentences naming each brand

Timed-out LLM calls arrive as None. They are counted as failed responses,
excluded from the metric denominators, and never abort the batch.

Example:
    >>> brands = [Brand(name="Y Combinator", is_owner=True, domain="ycombinator.com")]
    >>> result = analyze_response(
    ...     "Y Combinator is the best known accelerator (https://www.ycombinator.com).",
    ...     brands,
    ... )
    >>> [m.brand_name for m in result.mentions]
    ['Y Combinator']
    >>> result.citations[0].type
    'brand'
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from brand_visibility.config.schema import AnalysisConfig
from brand_visibility.metrics.aggregator import aggregate
from brand_visibility.models import (
    Brand,
    Citation,
    Mention,
    MetricsRecord,
    SentimentBreakdown,
    coerce_brands,
)

from .brand_matcher import find_mentions
from .citation_classifier import classify_citations, is_social_host
from .citation_extractor import extract_citations
from .sentiment import brand_sentiments, sentiment_label
from .text_normalizer import count_words, normalize, split_sentences, strip_urls

logger = logging.getLogger(__name__)


@dataclass
class ResponseAnalysis:
    """
    Everything extracted from one LLM answer.

    Attributes:
        mentions: Brand mentions sorted by position
        citations: Classified citations in order of appearance
        social_citation_count: Citations pointing at social/community platforms
        word_count: Words in the answer with URLs removed
        sentence_count: Sentences in the answer with URLs removed
        sentiments: Sentence sentiment counts per mentioned brand name
    """

    mentions: list[Mention] = field(default_factory=list)
    citations: list[Citation] = field(default_factory=list)
    social_citation_count: int = 0
    word_count: int = 0
    sentence_count: int = 0
    sentiments: dict[str, SentimentBreakdown] = field(default_factory=dict)

    @property
    def brand_citation_count(self) -> int:
        """Number of citations owned by a tracked brand."""
        return sum(1 for c in self.citations if c.type == "brand")

    @property
    def earned_citation_count(self) -> int:
        """Number of third-party citations."""
        return sum(1 for c in self.citations if c.type == "earned")

    @property
    def owner_mentioned(self) -> bool:
        """True if the owner brand is mentioned."""
        return any(m.is_owner for m in self.mentions)


@dataclass
class BatchAnalysis:
    """
    Analysis of a batch of LLM answers.

    Attributes:
        analyses: Per-answer results, None where the answer was missing
        records: Aggregate metrics, one per brand
        total_responses: Answers actually analyzed
        failed_responses: Missing answers (timeouts, errors, non-strings)
    """

    analyses: list[ResponseAnalysis | None]
    records: list[MetricsRecord]
    total_responses: int = 0
    failed_responses: int = 0

    @property
    def citations(self) -> list[Citation]:
        """All classified citations across the batch, in answer order."""
        return [c for a in self.analyses if a is not None for c in a.citations]


def analyze_response(
    raw_text: str,
    brands: list[Brand] | Any,
    config: AnalysisConfig | None = None,
) -> ResponseAnalysis:
    """
    Analyze a single LLM answer.

    Args:
        raw_text: Raw LLM answer (markdown allowed)
        brands: Tracked brands in priority order (Brand, dict or str items)
        config: Optional configuration for matching/classification settings.
            Brands are always taken from the brands argument.

    Returns:
        ResponseAnalysis. Empty for non-string input.
    """
    if not isinstance(raw_text, str):
        logger.debug(
            "Skipping non-string response",
            extra={"context": {"type": type(raw_text).__name__}},
        )
        return ResponseAnalysis()

    fuzzy_threshold = config.matching.fuzzy_threshold if config else 0.0
    name_variations = config.matching.name_variations if config else True
    sentiment_settings = config.sentiment if config else None
    infer_domains = config.citations.infer_domains_from_names if config else True

    brand_list = coerce_brands(brands)

    citations = classify_citations(extract_citations(raw_text), brand_list, infer_domains)

    # Brand names inside URLs are not mentions
    url_free = strip_urls(raw_text)
    mentions = find_mentions(normalize(url_free), brand_list, fuzzy_threshold, name_variations)

    sentiments: dict[str, SentimentBreakdown] = {}
    if sentiment_settings is None or sentiment_settings.enabled:
        scored = brand_sentiments(
            url_free, brand_list, sentiment_settings, fuzzy_threshold, name_variations
        )
        for mention in mentions:
            if mention.brand_name in scored:
                sentiments[mention.brand_name] = scored[mention.brand_name]
                mention.sentiment = sentiment_label(scored[mention.brand_name])

    return ResponseAnalysis(
        mentions=mentions,
        citations=citations,
        social_citation_count=sum(1 for c in citations if is_social_host(c.host)),
        word_count=count_words(url_free),
        sentence_count=len(split_sentences(url_free)),
        sentiments=sentiments,
    )


def analyze_responses(
    responses: list[str | None] | Any,
    brands: list[Brand] | Any,
    config: AnalysisConfig | None = None,
) -> BatchAnalysis:
    """
    Analyze a batch of LLM answers and aggregate per-brand metrics.

    Args:
        responses: Answers, one per prompt. None (or any non-string) marks a
            failed call.
        brands: Tracked brands in priority order
        config: Optional configuration (matching, citation, rounding settings)

    Returns:
        BatchAnalysis with per-answer results and one MetricsRecord per brand.
        A non-list input yields an empty batch with zeroed records.

    Example:
        >>> batch = analyze_responses(["Chase is popular.", None], ["Chase"])
        >>> batch.total_responses, batch.failed_responses
        (1, 1)
        >>> batch.records[0].visibility_score
        100.0
    """
    if not isinstance(responses, (list, tuple)):
        logger.debug("Responses is not a list, analyzing empty batch")
        responses = []

    brand_list = coerce_brands(brands)

    analyses: list[ResponseAnalysis | None] = []
    failed = 0
    for response in responses:
        if not isinstance(response, str):
            failed += 1
            analyses.append(None)
            continue
        analyses.append(analyze_response(response, brand_list, config))

    completed = [a for a in analyses if a is not None]

    records = aggregate(
        [a.mentions for a in completed],
        len(completed),
        brands=brand_list,
        citations_by_response=[a.citations for a in completed],
        sentiments_by_response=[a.sentiments for a in completed],
        settings=config.aggregation if config is not None else None,
    )

    logger.debug(
        "Analyzed response batch",
        extra={
            "context": {
                "total_responses": len(completed),
                "failed_responses": failed,
                "brands": len(brand_list),
            }
        },
    )

    return BatchAnalysis(
        analyses=analyses,
        records=records,
        total_responses=len(completed),
        failed_responses=failed,
    )
