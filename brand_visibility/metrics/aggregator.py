"""
Aggregate visibility metrics for Brand Visibility.

This module turns per-answer brand mentions and citations into one
MetricsRecord per brand for a batch of answers.

Metrics (per brand, over total_responses answers):
- visibility_score: 100 * answers mentioning the brand / total, capped at 100
- average_position: mean first-mention position where the brand appears
- depth_of_mention: 100 * sum(1 / position) / total, so appearing first in
  every answer scores 100 and later positions score less
- citation_share: 100 * citations owned by the brand / all citations
- share_of_voice: 100 * occurrences of the brand / occurrences of all brands
- sentiment_score: mean over answers of 100 * (positive - negative) / sentences
  for the sentences naming the brand
- position_distribution: number of 1st, 2nd and 3rd place finishes

Every ratio goes through safe_ratio(), so empty batches and brands that are
never mentioned produce zeros instead of NaN or ZeroDivisionError.
Metrics are recomputed from scratch on every call.
"""

import logging
import math
from typing import Any

from brand_visibility.config.schema import AggregationSettings
from brand_visibility.models import (
    Brand,
    Citation,
    Mention,
    MetricsRecord,
    SentimentBreakdown,
    coerce_brands,
)

logger = logging.getLogger(__name__)

# Places tracked in MetricsRecord.position_distribution
TRACKED_POSITIONS = (1, 2, 3)


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Divide, returning default instead of raising or producing NaN/inf.

    Example:
        >>> safe_ratio(3, 4)
        0.75
        >>> safe_ratio(3, 0)
        0.0
        >>> safe_ratio(None, 4, default=-1.0)
        -1.0
    """
    if not isinstance(numerator, (int, float)) or not isinstance(denominator, (int, float)):
        return default
    if denominator == 0:
        return default
    result = numerator / denominator
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def _mention_fields(mention: Mention | dict | Any) -> tuple[str, int, bool] | None:
    """Return (brand_name, position, is_owner) for a Mention or mention dict."""
    if isinstance(mention, Mention):
        return mention.brand_name, mention.position, mention.is_owner
    if isinstance(mention, dict):
        name = mention.get("brand_name")
        position = mention.get("position")
        if isinstance(name, str) and isinstance(position, int) and position >= 1:
            return name, position, bool(mention.get("is_owner", False))
    return None


def _mention_count(mention: Mention | dict | Any) -> int:
    """Return occurrences carried by a mention, 1 when not recorded."""
    if isinstance(mention, Mention):
        count = mention.mention_count
    else:
        count = mention.get("mention_count", 1)
    if isinstance(count, int) and not isinstance(count, bool) and count >= 1:
        return count
    return 1


def _sentiment_counts(value: SentimentBreakdown | dict | Any) -> tuple[int, int, int] | None:
    """Return (positive, neutral, negative) for a SentimentBreakdown or dict."""
    if isinstance(value, SentimentBreakdown):
        return value.positive, value.neutral, value.negative
    if isinstance(value, dict):
        counts = tuple(value.get(label, 0) for label in ("positive", "neutral", "negative"))
        if all(isinstance(c, int) and c >= 0 for c in counts):
            return counts
    return None


def _first_positions(mentions: list[Mention] | None | Any) -> dict[str, int]:
    """Collapse one answer's mentions to {brand_name_lower: best position}."""
    if not isinstance(mentions, (list, tuple)):
        return {}

    positions: dict[str, int] = {}
    for mention in mentions:
        fields = _mention_fields(mention)
        if fields is None:
            continue
        name, position, _is_owner = fields
        key = name.lower()
        if key not in positions or position < positions[key]:
            positions[key] = position
    return positions


def _brands_from_mentions(mentions_by_response: list) -> list[Brand]:
    """Build a brand list in mention first-seen order when none is given."""
    brands: list[Brand] = []
    seen: set[str] = set()
    for mentions in mentions_by_response:
        if not isinstance(mentions, (list, tuple)):
            continue
        for mention in mentions:
            fields = _mention_fields(mention)
            if fields is None:
                continue
            name, _position, is_owner = fields
            if not name.strip() or name.lower() in seen:
                continue
            seen.add(name.lower())
            brands.append(Brand(name=name, is_owner=is_owner))
    return brands


def _citation_owner(citation: Citation | dict | Any) -> tuple[str, str | None] | None:
    """Return (type, owner_brand) for a classified Citation or citation dict."""
    if isinstance(citation, Citation):
        return citation.type, citation.owner_brand
    if isinstance(citation, dict) and citation.get("type") in ("brand", "earned"):
        return citation["type"], citation.get("owner_brand")
    return None


def _assign_visibility_ranks(records: list[MetricsRecord]) -> None:
    """
    Set visibility_rank on each record in place.

    Order: visibility descending, then average position ascending (brands
    never mentioned sort last), then input order.
    """
    ordered = sorted(
        enumerate(records),
        key=lambda item: (
            -item[1].visibility_score,
            item[1].average_position if item[1].average_position > 0 else math.inf,
            item[0],
        ),
    )
    for rank, (_index, record) in enumerate(ordered, start=1):
        record.visibility_rank = rank


def aggregate(
    mentions_by_response: list[list[Mention] | None] | Any,
    total_responses: int,
    brands: list[Brand] | Any = None,
    citations_by_response: list[list[Citation]] | None = None,
    settings: AggregationSettings | None = None,
    sentiments_by_response: list[dict[str, SentimentBreakdown] | None] | None = None,
) -> list[MetricsRecord]:
    """
    Compute per-brand metrics for a batch of answers.

    Args:
        mentions_by_response: One mention list per answer. None entries
            (timed-out calls) count as answers without mentions.
        total_responses: Denominator for percentage metrics. Values <= 0 or
            non-integers yield zeroed metrics.
        brands: Tracked brands. When given, one record per brand in this
            order, including brands never mentioned. Otherwise records follow
            mention first-seen order.
        citations_by_response: Classified citations per answer, for
            citation_count and citation_share
        settings: Rounding settings (defaults to AggregationSettings())
        sentiments_by_response: Sentence sentiment counts per answer, keyed by
            brand name, for sentiment_score and sentiment_breakdown

    Returns:
        MetricsRecords with visibility_rank assigned

    Example:
        >>> mentions = [[Mention("Chase", 1, 0)], [Mention("Chase", 2, 10)], None]
        >>> record = aggregate(mentions, 3, brands=["Chase"])[0]
        >>> record.visibility_score, record.average_position, record.depth_of_mention
        (67.0, 1.5, 50.0)
    """
    settings = settings or AggregationSettings()

    if not isinstance(mentions_by_response, (list, tuple)):
        mentions_by_response = []

    brand_list = (
        coerce_brands(brands) if brands is not None else _brands_from_mentions(mentions_by_response)
    )

    valid_total = (
        isinstance(total_responses, int)
        and not isinstance(total_responses, bool)
        and total_responses > 0
    )
    if not valid_total:
        logger.debug(
            "Invalid total_responses, returning zeroed metrics",
            extra={"context": {"total_responses": repr(total_responses)}},
        )
        records = [
            MetricsRecord(brand_name=b.name, is_owner=b.is_owner) for b in brand_list
        ]
        _assign_visibility_ranks(records)
        return records

    # brand key -> list of best positions (one per answer where present)
    positions_by_brand: dict[str, list[int]] = {b.name.lower(): [] for b in brand_list}
    mention_counts: dict[str, int] = {b.name.lower(): 0 for b in brand_list}

    for mentions in mentions_by_response:
        for key, position in _first_positions(mentions).items():
            if key in positions_by_brand:
                positions_by_brand[key].append(position)
        if isinstance(mentions, (list, tuple)):
            for mention in mentions:
                fields = _mention_fields(mention)
                if fields is not None and fields[0].lower() in mention_counts:
                    mention_counts[fields[0].lower()] += _mention_count(mention)
    all_mentions = sum(mention_counts.values())

    owned_citations: dict[str, int] = {b.name.lower(): 0 for b in brand_list}
    total_citations = 0
    if isinstance(citations_by_response, (list, tuple)):
        for citations in citations_by_response:
            if not isinstance(citations, (list, tuple)):
                continue
            for citation in citations:
                owner = _citation_owner(citation)
                if owner is None:
                    continue
                total_citations += 1
                citation_type, owner_brand = owner
                if citation_type == "brand" and owner_brand:
                    key = owner_brand.lower()
                    if key in owned_citations:
                        owned_citations[key] += 1

    # brand key -> per-answer sentiment scores and summed sentence counts
    sentiment_scores: dict[str, list[float]] = {b.name.lower(): [] for b in brand_list}
    sentiment_totals: dict[str, list[int]] = {b.name.lower(): [0, 0, 0] for b in brand_list}
    if isinstance(sentiments_by_response, (list, tuple)):
        for sentiments in sentiments_by_response:
            if not isinstance(sentiments, dict):
                continue
            for name, value in sentiments.items():
                counts = _sentiment_counts(value)
                key = name.lower() if isinstance(name, str) else None
                if counts is None or key not in sentiment_scores or sum(counts) == 0:
                    continue
                positive, neutral, negative = counts
                sentiment_scores[key].append(100.0 * safe_ratio(positive - negative, sum(counts)))
                totals = sentiment_totals[key]
                totals[0] += positive
                totals[1] += neutral
                totals[2] += negative

    records = []
    for brand in brand_list:
        key = brand.name.lower()
        positions = positions_by_brand[key]
        present = len(positions)

        visibility = min(100.0, 100.0 * safe_ratio(present, total_responses))
        average_position = safe_ratio(sum(positions), present)
        depth = min(100.0, 100.0 * safe_ratio(sum(1.0 / p for p in positions), total_responses))
        citation_share = 100.0 * safe_ratio(owned_citations[key], total_citations)
        share_of_voice = 100.0 * safe_ratio(mention_counts[key], all_mentions)
        scores = sentiment_scores[key]
        sentiment = safe_ratio(sum(scores), len(scores))
        positive, neutral, negative = sentiment_totals[key]

        distribution = {place: 0 for place in TRACKED_POSITIONS}
        for position in positions:
            if position in distribution:
                distribution[position] += 1

        records.append(
            MetricsRecord(
                brand_name=brand.name,
                is_owner=brand.is_owner,
                total_mentions=mention_counts[key],
                total_responses=total_responses,
                responses_with_brand=present,
                visibility_score=round(visibility, settings.visibility_decimals),
                average_position=round(average_position, settings.position_decimals),
                depth_of_mention=round(depth, settings.depth_decimals),
                citation_count=owned_citations[key],
                citation_share=round(citation_share, settings.depth_decimals),
                share_of_voice=round(share_of_voice, settings.depth_decimals),
                sentiment_score=round(sentiment, settings.depth_decimals),
                sentiment_breakdown={
                    "positive": positive,
                    "neutral": neutral,
                    "negative": negative,
                },
                position_distribution=distribution,
            )
        )

    _assign_visibility_ranks(records)
    return records


def rank_records(
    records: list[MetricsRecord],
    key: str = "visibility_score",
    ascending: bool = False,
) -> list[MetricsRecord]:
    """
    Return records sorted by a numeric MetricsRecord field.

    Ties keep input order. average_position treats 0.0 (never mentioned) as
    worst in either direction.

    Args:
        records: Records from aggregate()
        key: Field name, e.g. "visibility_score", "depth_of_mention"
        ascending: Sort lowest first

    Raises:
        ValueError: If key is not a numeric MetricsRecord field

    Example:
        >>> [r.brand_name for r in rank_records(records, "depth_of_mention")]
        ['Chase', 'Amex']
    """
    numeric_fields = {
        "total_mentions",
        "responses_with_brand",
        "visibility_score",
        "average_position",
        "depth_of_mention",
        "citation_count",
        "citation_share",
        "share_of_voice",
        "sentiment_score",
        "visibility_rank",
    }
    if key not in numeric_fields:
        raise ValueError(f"Cannot rank by {key!r}, expected one of {sorted(numeric_fields)}")

    if key == "average_position":
        present = [r for r in records if r.average_position > 0]
        absent = [r for r in records if r.average_position <= 0]
        return sorted(present, key=lambda r: r.average_position, reverse=not ascending) + absent

    return sorted(records, key=lambda r: getattr(r, key), reverse=not ascending)
