"""
Extractor module for analyzing LLM answers.

This module turns raw LLM answers into brand mentions and classified
citations, and runs whole batches through the metrics aggregator.

Public API:
    - normalize: Normalize answer text for brand matching
    - find_mentions: Find brand mentions with longest-alias-first matching
    - create_brand_pattern: Create word-boundary regex for a brand alias
    - extract_citations: Extract markdown and bare URLs from raw text
    - classify / classify_citations: Label citations "brand" or "earned"
    - brand_sentiments: Keyword sentiment of the sentences naming each brand
    - analyze_response: Full pipeline for one answer
    - analyze_responses: Full pipeline plus aggregation for a batch
"""

from brand_visibility.extractor.brand_matcher import (
    brand_variations,
    create_brand_pattern,
    find_mentions,
)
from brand_visibility.extractor.citation_classifier import (
    classify,
    classify_citation,
    classify_citations,
    is_social_host,
)
from brand_visibility.extractor.citation_extractor import (
    clean_url,
    extract_citations,
    is_valid_url,
)
from brand_visibility.extractor.parser import (
    BatchAnalysis,
    ResponseAnalysis,
    analyze_response,
    analyze_responses,
)
from brand_visibility.extractor.sentiment import brand_sentiments, classify_sentence
from brand_visibility.extractor.text_normalizer import normalize, strip_urls, tokenize

__all__ = [
    "BatchAnalysis",
    "ResponseAnalysis",
    "analyze_response",
    "analyze_responses",
    "brand_sentiments",
    "brand_variations",
    "classify",
    "classify_citation",
    "classify_citations",
    "classify_sentence",
    "clean_url",
    "create_brand_pattern",
    "extract_citations",
    "find_mentions",
    "is_social_host",
    "is_valid_url",
    "normalize",
    "strip_urls",
    "tokenize",
]
