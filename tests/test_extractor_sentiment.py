"""
Tests for extractor.sentiment module.

Tests cover:
- Sentence labels from positive/negative word counts
- Whole-word matching ("unreliable" is not "reliable")
- Word lists taken from SentimentSettings
- Per-brand sentence counts and answer-level labels
"""

import pytest

from brand_visibility.config.schema import SentimentSettings
from brand_visibility.extractor.sentiment import (
    brand_sentiments,
    classify_sentence,
    sentiment_label,
)
from brand_visibility.models import SentimentBreakdown


class TestClassifySentence:
    """Test suite for classify_sentence()."""

    @pytest.mark.parametrize(
        ("sentence", "expected"),
        [
            ("Chase is reliable and trusted.", "positive"),
            ("Chase is expensive and slow.", "negative"),
            ("Chase is a bank.", "neutral"),
            ("Chase is trusted but expensive.", "neutral"),
            ("Chase is unreliable.", "negative"),
            ("Chase is **well-regarded**!", "positive"),
        ],
    )
    def test_default_words(self, sentence, expected):
        """Test labels with the built-in word lists."""
        assert classify_sentence(sentence) == expected

    def test_custom_words(self):
        """Test word lists come from settings and are case-insensitive."""
        settings = SentimentSettings(positive_words=["Speedy"], negative_words=["pricey"])

        assert classify_sentence("Amex is speedy.", settings) == "positive"
        assert classify_sentence("Amex is pricey.", settings) == "negative"
        assert classify_sentence("Amex is trusted.", settings) == "neutral"

    def test_phrases(self):
        """Test multi-word entries match as phrases."""
        settings = SentimentSettings(positive_words=["top pick"], negative_words=[])

        assert classify_sentence("Chase is a top pick.", settings) == "positive"
        assert classify_sentence("Chase picks the top one.", settings) == "neutral"


class TestSentimentLabel:
    """Test suite for sentiment_label()."""

    @pytest.mark.parametrize(
        ("breakdown", "expected"),
        [
            (SentimentBreakdown(positive=2, negative=1), "positive"),
            (SentimentBreakdown(positive=1, negative=2, neutral=5), "negative"),
            (SentimentBreakdown(positive=1, negative=1), "neutral"),
            (SentimentBreakdown(), "neutral"),
        ],
    )
    def test_label(self, breakdown, expected):
        """Test the answer-level label follows sentence counts."""
        assert sentiment_label(breakdown) == expected


class TestBrandSentiments:
    """Test suite for brand_sentiments()."""

    def test_counts_per_brand(self):
        """Test each brand collects the sentences naming it."""
        text = (
            "Chase is a trusted, leading bank. "
            "Amex can be expensive. "
            "Chase and Amex both issue cards."
        )

        sentiments = brand_sentiments(text, ["Chase", "Amex"])

        assert sentiments["Chase"] == SentimentBreakdown(positive=1, neutral=1)
        assert sentiments["Amex"] == SentimentBreakdown(negative=1, neutral=1)

    def test_unmentioned_brand_absent(self):
        """Test brands in no sentence are left out."""
        assert "Citi" not in brand_sentiments("Chase is strong.", ["Chase", "Citi"])

    def test_custom_settings(self):
        """Test settings word lists are used."""
        settings = SentimentSettings(positive_words=[], negative_words=["boring"])

        sentiments = brand_sentiments("Chase is boring.", ["Chase"], settings)

        assert sentiments["Chase"].negative == 1

    @pytest.mark.parametrize("value", [None, 42, ""])
    def test_malformed_text(self, value):
        """Test non-string or empty text yields no sentiments."""
        assert brand_sentiments(value, ["Chase"]) == {}
