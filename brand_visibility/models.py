"""
Data model for Brand Visibility.

Models:
    Brand: Tracked brand (owner or competitor) with optional domain and aliases
    Mention: First occurrence of a brand in one LLM response, with its count
    SentimentBreakdown: Positive/neutral/negative sentence counts for a brand
    Citation: URL cited in one LLM response, with brand/earned classification
    PromptCandidate: Prompt text with its normalized content hash
    MetricsRecord: Per-brand aggregate metrics over a batch of responses

Brand is a frozen Pydantic model because it is built from configuration and
validated there. The rest are plain dataclasses derived per analysis call and
discarded afterwards.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from brand_visibility.utils.urls import normalize_host

logger = logging.getLogger(__name__)

CitationType = Literal["brand", "earned"]
CitationSource = Literal["markdown", "bare"]
SentimentLabel = Literal["positive", "neutral", "negative"]


class Brand(BaseModel):
    """
    A brand tracked in an analysis run.

    Attributes:
        name: Primary brand name (e.g., "JPMorgan Chase")
        is_owner: True for the brand being analyzed, False for competitors
        domain: Owned domain, normalized to a bare host ("ycombinator.com").
            Accepts full URLs ("https://www.ycombinator.com/") on input.
        aliases: Alternative names matched like the primary name ("YC")

    Example:
        >>> Brand(name="Y Combinator", domain="https://www.ycombinator.com/")
        Brand(name='Y Combinator', is_owner=False, domain='ycombinator.com', aliases=[])
    """

    model_config = ConfigDict(frozen=True)

    name: str
    is_owner: bool = False
    domain: str | None = None
    aliases: list[str] = []

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is non-empty and strip surrounding whitespace."""
        if not v or v.isspace():
            raise ValueError("Brand name cannot be empty")
        return v.strip()

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v: str | None) -> str | None:
        """Normalize domain to a bare lowercase host."""
        if v is None or not v.strip():
            return None
        host = normalize_host(v)
        if host is None:
            raise ValueError(f"Invalid brand domain: {v!r}")
        return host

    @field_validator("aliases")
    @classmethod
    def validate_aliases(cls, v: list[str]) -> list[str]:
        """Strip aliases, dropping empties and case-insensitive duplicates."""
        cleaned: list[str] = []
        seen: set[str] = set()
        for alias in v:
            if not alias or alias.isspace():
                continue
            alias = alias.strip()
            if alias.lower() in seen:
                continue
            seen.add(alias.lower())
            cleaned.append(alias)
        return cleaned

    def all_names(self) -> list[str]:
        """Return primary name followed by aliases, without repeats."""
        names = [self.name]
        for alias in self.aliases:
            if alias.lower() != self.name.lower():
                names.append(alias)
        return names


def coerce_brands(brands: Any) -> list[Brand]:
    """
    Turn a loosely typed brand list into validated Brand objects.

    Accepts Brand instances, dicts (validated with Brand.model_validate) and
    plain strings (competitor names). Invalid entries and repeated names are
    skipped with a warning instead of raising, so one bad entry never aborts
    an analysis.

    Args:
        brands: List of Brand | dict | str, or anything else

    Returns:
        Valid brands in input order (first occurrence of each name wins).
        Empty list for None or non-list input.

    Example:
        >>> [b.name for b in coerce_brands(["Chase", {"name": ""}, {"name": "Amex"}])]
        ['Chase', 'Amex']
    """
    if not isinstance(brands, (list, tuple)):
        return []

    result: list[Brand] = []
    seen: set[str] = set()

    for item in brands:
        if isinstance(item, Brand):
            brand = item
        else:
            try:
                if isinstance(item, str):
                    brand = Brand(name=item)
                else:
                    brand = Brand.model_validate(item)
            except ValidationError as e:
                logger.warning(
                    "Skipping invalid brand entry",
                    extra={"context": {"entry": repr(item), "errors": e.error_count()}},
                )
                continue

        key = brand.name.lower()
        if key in seen:
            logger.warning(
                "Skipping duplicate brand name",
                extra={"context": {"brand": brand.name}},
            )
            continue

        seen.add(key)
        result.append(brand)

    return result


@dataclass
class Mention:
    """
    First occurrence of a brand in a single normalized response.

    One Mention is produced per brand and response; mention_count records how
    many non-overlapping occurrences the response contains.

    Attributes:
        brand_name: Primary name of the matched brand
        position: 1-based rank among matched brands by first occurrence
        char_offset: Offset of the first occurrence in the normalized text
        is_owner: Copied from Brand.is_owner
        matched_text: Alias text as it appeared in the normalized text
        match_type: "exact" or "fuzzy"
        fuzzy_score: rapidfuzz ratio (0-100) for fuzzy matches, None if exact
        mention_count: Occurrences of the brand in the response (>= 1)
        sentiment: Overall tone of the sentences naming the brand
            ("positive", "neutral", "negative"), None when not analyzed
    """

    brand_name: str
    position: int
    char_offset: int
    is_owner: bool = False
    matched_text: str = ""
    match_type: str = "exact"
    fuzzy_score: float | None = None
    mention_count: int = 1
    sentiment: SentimentLabel | None = None

    def __post_init__(self):
        """Validate position, char_offset, match_type, mention_count and sentiment."""
        if self.position < 1:
            raise ValueError(f"position must be >= 1, got: {self.position}")
        if self.char_offset < 0:
            raise ValueError(f"char_offset must be >= 0, got: {self.char_offset}")
        if self.match_type not in ("exact", "fuzzy"):
            raise ValueError(
                f"match_type must be 'exact' or 'fuzzy', got: {self.match_type}"
            )
        if self.mention_count < 1:
            raise ValueError(f"mention_count must be >= 1, got: {self.mention_count}")
        if self.sentiment not in (None, "positive", "neutral", "negative"):
            raise ValueError(f"Invalid sentiment: {self.sentiment}")


@dataclass
class SentimentBreakdown:
    """Sentence-level sentiment counts for one brand."""

    positive: int = 0
    neutral: int = 0
    negative: int = 0

    @property
    def sentences(self) -> int:
        """Total sentences counted."""
        return self.positive + self.neutral + self.negative

    def add(self, label: str) -> None:
        """Count one sentence with the given label."""
        if label not in ("positive", "neutral", "negative"):
            raise ValueError(f"Invalid sentiment: {label}")
        setattr(self, label, getattr(self, label) + 1)


@dataclass
class Citation:
    """
    URL cited in a single LLM response.

    Attributes:
        url: URL exactly as found in the response
        cleaned_url: URL with trailing punctuation removed and scheme added
        type: "brand" (host owned by a tracked brand) or "earned"
        owner_brand: Name of the owning brand for "brand" citations
        label: Link text for markdown links, None for bare URLs
        source: "markdown" or "bare"
        host: Normalized host of cleaned_url ("www." stripped)
    """

    url: str
    cleaned_url: str
    type: CitationType = "earned"
    owner_brand: str | None = None
    label: str | None = None
    source: CitationSource = "bare"
    host: str | None = None

    def __post_init__(self):
        """Validate type and source."""
        if self.type not in ("brand", "earned"):
            raise ValueError(f"type must be 'brand' or 'earned', got: {self.type}")
        if self.source not in ("markdown", "bare"):
            raise ValueError(
                f"source must be 'markdown' or 'bare', got: {self.source}"
            )


@dataclass
class PromptCandidate:
    """Prompt text with the sha256 hex digest of its normalized form."""

    text: str
    normalized_hash: str


@dataclass
class MetricsRecord:
    """
    Aggregate metrics for one brand over a batch of responses.

    Attributes:
        brand_name: Primary brand name
        is_owner: True for the analyzed brand
        total_mentions: Occurrences across all responses (repeats included)
        total_responses: Responses in the batch (denominator for percentages)
        responses_with_brand: Responses mentioning the brand at least once
        visibility_score: % of responses mentioning the brand, capped at 100
        average_position: Mean first-mention position where present, 0.0 if never
        depth_of_mention: Position-weighted presence score (0-100)
        citation_count: Citations whose host is owned by this brand
        citation_share: % of all citations in the batch owned by this brand
        share_of_voice: % of all tracked-brand occurrences that are this brand
        sentiment_score: Mean per-response sentiment (-100 to 100), 0.0 if never
            mentioned
        sentiment_breakdown: Positive/neutral/negative sentence counts
        position_distribution: Counts of 1st, 2nd and 3rd place finishes
        visibility_rank: 1-based rank by visibility (ties by average position)
    """

    brand_name: str
    is_owner: bool = False
    total_mentions: int = 0
    total_responses: int = 0
    responses_with_brand: int = 0
    visibility_score: float = 0.0
    average_position: float = 0.0
    depth_of_mention: float = 0.0
    citation_count: int = 0
    citation_share: float = 0.0
    share_of_voice: float = 0.0
    sentiment_score: float = 0.0
    sentiment_breakdown: dict[str, int] = field(
        default_factory=lambda: {"positive": 0, "neutral": 0, "negative": 0}
    )
    position_distribution: dict[int, int] = field(
        default_factory=lambda: {1: 0, 2: 0, 3: 0}
    )
    visibility_rank: int = 0

    def __post_init__(self):
        """Validate visibility_score range."""
        if not 0.0 <= self.visibility_score <= 100.0:
            raise ValueError(
                f"visibility_score must be in range [0, 100], got: {self.visibility_score}"
            )
