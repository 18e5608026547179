"""
Configuration schema models for Brand Visibility.

This module defines Pydantic models for validating and parsing the
brands.config.yaml file. Every tuning parameter used by the analysis core
lives here with its default, so callers that skip the YAML file still get
the same behavior as the CLI.

Models:
    MatchingSettings: Brand mention matching (fuzzy threshold, name variations)
    CitationSettings: Citation classification (domain inference)
    SentimentSettings: Keyword sentiment of sentences naming a brand
    AggregationSettings: Rounding of aggregate metrics (including sentiment
        and share of voice)
    DedupSettings: Prompt deduplication thresholds
    AnalysisConfig: Root configuration model (validates entire YAML)
"""

from pydantic import BaseModel, field_validator

from brand_visibility.models import Brand


class MatchingSettings(BaseModel):
    """
    Brand mention matching settings.

    Attributes:
        fuzzy_threshold: Minimum rapidfuzz ratio (0-100) for fuzzy brand matches.
            0 disables fuzzy matching (default). 85-90 catches common typos.
        name_variations: Also match names with corporate suffixes and a
            leading "The" removed ("Stripe, Inc." as "Stripe")
    """

    fuzzy_threshold: float = 0.0
    name_variations: bool = True

    @field_validator("fuzzy_threshold")
    @classmethod
    def validate_fuzzy_threshold(cls, v: float) -> float:
        """Validate fuzzy_threshold is within [0, 100]."""
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"fuzzy_threshold must be in range [0, 100], got: {v}")
        return v


class CitationSettings(BaseModel):
    """
    Citation classification settings.

    Attributes:
        infer_domains_from_names: For brands without an explicit domain, treat
            hosts whose registrable label equals the compacted brand name or
            alias as owned ("chase.com" for "Chase"). Explicit domains always
            take precedence.
    """

    infer_domains_from_names: bool = True


DEFAULT_POSITIVE_WORDS = [
    "leading",
    "best",
    "excellent",
    "outstanding",
    "superior",
    "premium",
    "advanced",
    "innovative",
    "reliable",
    "trusted",
    "comprehensive",
    "strong",
    "well-regarded",
    "excel",
    "attractive",
    "competitive",
    "expert",
    "specialized",
    "dedicated",
]

DEFAULT_NEGATIVE_WORDS = [
    "poor",
    "bad",
    "worst",
    "inferior",
    "weak",
    "unreliable",
    "expensive",
    "limited",
    "outdated",
    "slow",
    "problematic",
    "issues",
    "concerns",
    "disappointing",
    "failing",
]


class SentimentSettings(BaseModel):
    """
    Keyword sentiment settings.

    Each sentence naming a brand is positive when it contains more positive
    than negative words, negative in the opposite case, neutral otherwise.

    Attributes:
        enabled: Score sentiment for mentioned brands (default: True)
        positive_words: Words or phrases marking a favorable sentence
        negative_words: Words or phrases marking an unfavorable sentence
    """

    enabled: bool = True
    positive_words: list[str] = DEFAULT_POSITIVE_WORDS
    negative_words: list[str] = DEFAULT_NEGATIVE_WORDS

    @field_validator("positive_words", "negative_words")
    @classmethod
    def validate_words(cls, v: list[str]) -> list[str]:
        """Lowercase and strip words, dropping empties and repeats."""
        words: list[str] = []
        for word in v:
            word = word.strip().lower()
            if word and word not in words:
                words.append(word)
        return words


class AggregationSettings(BaseModel):
    """
    Rounding settings for aggregate metrics.

    Attributes:
        visibility_decimals: Decimal places for visibility_score (0 = whole percent)
        position_decimals: Decimal places for average_position
        depth_decimals: Decimal places for depth_of_mention, citation_share,
            share_of_voice and sentiment_score
    """

    visibility_decimals: int = 0
    position_decimals: int = 2
    depth_decimals: int = 2

    @field_validator("visibility_decimals", "position_decimals", "depth_decimals")
    @classmethod
    def validate_decimals(cls, v: int) -> int:
        """Validate decimals are within [0, 6]."""
        if not 0 <= v <= 6:
            raise ValueError(f"Decimal places must be in range [0, 6], got: {v}")
        return v


class DedupSettings(BaseModel):
    """
    Prompt deduplication settings.

    Attributes:
        similarity_threshold: Reject a prompt whose similarity to any accepted
            prompt exceeds this value (0.0-1.0). Similarity is the larger of
            token Jaccard overlap and normalized edit similarity.
        lead_ngram_size: Number of opening words forming a prompt's lead phrase
        max_lead_phrase_reuse: Maximum accepted prompts sharing one lead phrase
    """

    similarity_threshold: float = 0.8
    lead_ngram_size: int = 3
    max_lead_phrase_reuse: int = 2

    @field_validator("similarity_threshold")
    @classmethod
    def validate_similarity_threshold(cls, v: float) -> float:
        """Validate similarity_threshold is within (0, 1]."""
        if not 0.0 < v <= 1.0:
            raise ValueError(
                f"similarity_threshold must be in range (0, 1], got: {v}"
            )
        return v

    @field_validator("lead_ngram_size", "max_lead_phrase_reuse")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate integer settings are at least 1."""
        if v < 1:
            raise ValueError(f"Value must be >= 1, got: {v}")
        return v


class AnalysisConfig(BaseModel):
    """
    Root configuration model for brands.config.yaml.

    Attributes:
        brands: Tracked brands in priority order (owner plus competitors).
            Names must be unique (case-insensitive); at most one owner.
        matching: Mention matching settings
        citations: Citation classification settings
        sentiment: Keyword sentiment settings
        aggregation: Metric rounding settings
        dedup: Prompt deduplication settings

    Example:
        brands:
          - name: Y Combinator
            is_owner: true
            domain: ycombinator.com
            aliases: [YC]
          - name: Techstars
            domain: techstars.com
        dedup:
          max_lead_phrase_reuse: 3
    """

    brands: list[Brand]
    matching: MatchingSettings = MatchingSettings()
    citations: CitationSettings = CitationSettings()
    sentiment: SentimentSettings = SentimentSettings()
    aggregation: AggregationSettings = AggregationSettings()
    dedup: DedupSettings = DedupSettings()

    @field_validator("brands")
    @classmethod
    def validate_brands(cls, v: list[Brand]) -> list[Brand]:
        """
        Validate brand list: non-empty, unique names, at most one owner.

        Brand order is preserved because it breaks position ties in matching.
        """
        if not v:
            raise ValueError("At least one brand is required")

        seen: set[str] = set()
        duplicates: list[str] = []
        for brand in v:
            key = brand.name.lower()
            if key in seen:
                duplicates.append(brand.name)
            seen.add(key)

        if duplicates:
            raise ValueError(f"Brand names must be unique, duplicates: {duplicates}")

        owners = [brand.name for brand in v if brand.is_owner]
        if len(owners) > 1:
            raise ValueError(f"At most one brand can be the owner, got: {owners}")

        return v

    @property
    def owner(self) -> Brand | None:
        """Return the owner brand, if one is configured."""
        return next((brand for brand in self.brands if brand.is_owner), None)
