"""
Tests for the data model.

Tests cover:
- Brand validation (name, domain normalization, alias cleanup)
- coerce_brands() with mixed and invalid entries
- Mention, Citation and MetricsRecord validation
- SentimentBreakdown counting
"""

import pytest
from pydantic import ValidationError

from brand_visibility.models import (
    Brand,
    Citation,
    Mention,
    MetricsRecord,
    SentimentBreakdown,
    coerce_brands,
)


class TestBrand:
    """Test suite for Brand."""

    def test_name_stripped(self):
        """Test surrounding whitespace is removed from the name."""
        assert Brand(name="  Chase ").name == "Chase"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name_rejected(self, name):
        """Test empty names are invalid."""
        with pytest.raises(ValidationError, match="Brand name cannot be empty"):
            Brand(name=name)

    @pytest.mark.parametrize(
        ("domain", "expected"),
        [
            ("https://www.YCombinator.com/", "ycombinator.com"),
            ("chase.com", "chase.com"),
            ("blog.chase.com:443/path", "blog.chase.com"),
            ("", None),
            (None, None),
        ],
    )
    def test_domain_normalized(self, domain, expected):
        """Test domains are reduced to bare lowercase hosts."""
        assert Brand(name="X", domain=domain).domain == expected

    def test_aliases_cleaned(self):
        """Test empty and repeated aliases are dropped."""
        brand = Brand(name="Y Combinator", aliases=[" YC ", "", "yc", "  ", "YCombinator"])

        assert brand.aliases == ["YC", "YCombinator"]

    def test_all_names_skips_alias_equal_to_name(self):
        """Test the primary name is not repeated."""
        brand = Brand(name="Chase", aliases=["chase", "Chase Bank"])

        assert brand.all_names() == ["Chase", "Chase Bank"]

    def test_frozen(self):
        """Test brands are immutable."""
        brand = Brand(name="Chase")

        with pytest.raises(ValidationError):
            brand.name = "Amex"


class TestCoerceBrands:
    """Test suite for coerce_brands()."""

    def test_mixed_entries(self):
        """Test Brand, dict and str entries are accepted in order."""
        brands = coerce_brands([Brand(name="Chase"), {"name": "Amex", "is_owner": True}, "Citi"])

        assert [b.name for b in brands] == ["Chase", "Amex", "Citi"]
        assert brands[1].is_owner is True

    def test_invalid_entries_skipped(self):
        """Test invalid entries are skipped instead of raising."""
        brands = coerce_brands([{"name": ""}, {"domain": "x.com"}, "  ", "Chase"])

        assert [b.name for b in brands] == ["Chase"]

    def test_duplicate_names_skipped(self):
        """Test the first occurrence of a name wins."""
        brands = coerce_brands([{"name": "Chase", "is_owner": True}, "chase"])

        assert len(brands) == 1
        assert brands[0].is_owner is True

    @pytest.mark.parametrize("value", [None, "Chase", 42, {"name": "Chase"}])
    def test_non_list_input(self, value):
        """Test non-list input yields []."""
        assert coerce_brands(value) == []


class TestMention:
    """Test suite for Mention."""

    def test_defaults(self):
        """Test exact match defaults."""
        mention = Mention(brand_name="Chase", position=1, char_offset=0)

        assert mention.match_type == "exact"
        assert mention.fuzzy_score is None
        assert mention.is_owner is False
        assert mention.mention_count == 1
        assert mention.sentiment is None

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"position": 0, "char_offset": 0}, "position must be >= 1"),
            ({"position": 1, "char_offset": -1}, "char_offset must be >= 0"),
            ({"position": 1, "char_offset": 0, "match_type": "regex"}, "match_type"),
            ({"position": 1, "char_offset": 0, "mention_count": 0}, "mention_count must be >= 1"),
            ({"position": 1, "char_offset": 0, "sentiment": "mixed"}, "Invalid sentiment"),
        ],
    )
    def test_validation(self, kwargs, message):
        """Test invalid fields raise ValueError."""
        with pytest.raises(ValueError, match=message):
            Mention(brand_name="Chase", **kwargs)


class TestSentimentBreakdown:
    """Test suite for SentimentBreakdown."""

    def test_add_and_sentences(self):
        """Test labels increment their counter and sentences totals them."""
        breakdown = SentimentBreakdown()

        for label in ("positive", "positive", "negative", "neutral"):
            breakdown.add(label)

        assert breakdown == SentimentBreakdown(positive=2, neutral=1, negative=1)
        assert breakdown.sentences == 4

    def test_invalid_label(self):
        """Test unknown labels are rejected."""
        with pytest.raises(ValueError, match="Invalid sentiment"):
            SentimentBreakdown().add("mixed")


class TestCitation:
    """Test suite for Citation."""

    def test_defaults(self):
        """Test new citations are unclassified bare URLs."""
        citation = Citation(url="https://a.com", cleaned_url="https://a.com")

        assert citation.type == "earned"
        assert citation.source == "bare"
        assert citation.owner_brand is None

    def test_invalid_type(self):
        """Test only brand and earned types are allowed."""
        with pytest.raises(ValueError, match="type must be"):
            Citation(url="a", cleaned_url="a", type="owned")

    def test_invalid_source(self):
        """Test only markdown and bare sources are allowed."""
        with pytest.raises(ValueError, match="source must be"):
            Citation(url="a", cleaned_url="a", source="html")


class TestMetricsRecord:
    """Test suite for MetricsRecord."""

    def test_defaults(self):
        """Test a new record is zeroed."""
        record = MetricsRecord(brand_name="Chase")

        assert record.visibility_score == 0.0
        assert record.share_of_voice == 0.0
        assert record.sentiment_score == 0.0
        assert record.sentiment_breakdown == {"positive": 0, "neutral": 0, "negative": 0}
        assert record.position_distribution == {1: 0, 2: 0, 3: 0}

    def test_distribution_not_shared(self):
        """Test each record gets its own distribution dict."""
        first = MetricsRecord(brand_name="Chase")
        second = MetricsRecord(brand_name="Amex")

        first.position_distribution[1] = 5

        assert second.position_distribution[1] == 0

    @pytest.mark.parametrize("score", [-0.1, 100.1])
    def test_visibility_range(self, score):
        """Test visibility outside [0, 100] is rejected."""
        with pytest.raises(ValueError, match="visibility_score must be in range"):
            MetricsRecord(brand_name="Chase", visibility_score=score)
