"""
Tests for metrics.aggregator module.

Tests cover:
- Visibility capped at 100 (CRITICAL: never exceeds 100 even with bad inputs)
- Zero mentions and empty batches produce zeros, never NaN or exceptions
- None entries (timed-out calls) counted as answers without mentions
- Average position, depth of mention, position distribution
- Citation count and share
- Occurrence counts, share of voice and sentiment scores
- Visibility ranking and rank_records()
"""

import math

import pytest

from brand_visibility.config.schema import AggregationSettings
from brand_visibility.metrics.aggregator import aggregate, rank_records, safe_ratio
from brand_visibility.models import Brand, Citation, Mention, SentimentBreakdown


def mention(name: str, position: int) -> Mention:
    """Build a mention at a dummy offset."""
    return Mention(brand_name=name, position=position, char_offset=0)


class TestSafeRatio:
    """Test suite for safe_ratio()."""

    def test_plain_division(self):
        """Test normal ratios."""
        assert safe_ratio(1, 4) == 0.25

    @pytest.mark.parametrize(
        ("numerator", "denominator"),
        [(1, 0), (0, 0), (None, 2), (1, "2"), (math.inf, 1), (math.nan, 1)],
    )
    def test_returns_default(self, numerator, denominator):
        """Test invalid ratios return the default."""
        assert safe_ratio(numerator, denominator) == 0.0
        assert safe_ratio(numerator, denominator, default=-1.0) == -1.0


class TestAggregate:
    """Test suite for aggregate()."""

    def test_basic_metrics(self):
        """Test visibility, average position and depth together."""
        mentions = [[mention("Chase", 1)], [mention("Chase", 2)], None]

        record = aggregate(mentions, 3, brands=["Chase"])[0]

        assert record.brand_name == "Chase"
        assert record.total_responses == 3
        assert record.responses_with_brand == 2
        assert record.visibility_score == 67.0
        assert record.average_position == 1.5
        assert record.depth_of_mention == 50.0

    def test_visibility_capped_at_100(self):
        """Test CRITICAL invariant: more present answers than total still caps at 100."""
        mentions = [[mention("Chase", 1)]] * 3

        record = aggregate(mentions, 2, brands=["Chase"])[0]

        assert record.visibility_score == 100.0
        assert record.depth_of_mention == 100.0

    def test_visibility_exactly_100(self):
        """Test a brand in every answer scores exactly 100."""
        mentions = [[mention("Chase", 2)], [mention("Chase", 1)]]

        record = aggregate(mentions, 2, brands=["Chase"])[0]

        assert record.visibility_score == 100.0
        assert record.depth_of_mention == 75.0

    def test_never_mentioned_brand(self):
        """Test a tracked brand with no mentions gets zeros, not NaN."""
        records = aggregate([[mention("Chase", 1)]], 1, brands=["Chase", "Amex"])
        amex = records[1]

        assert amex.brand_name == "Amex"
        assert amex.visibility_score == 0.0
        assert amex.average_position == 0.0
        assert amex.depth_of_mention == 0.0
        assert amex.position_distribution == {1: 0, 2: 0, 3: 0}
        assert not math.isnan(amex.average_position)

    def test_depth_weights_positions(self):
        """Test depth sums 1/position over all answers."""
        mentions = [[mention("Chase", 1)], [mention("Chase", 2)], [mention("Chase", 4)], []]

        record = aggregate(mentions, 4, brands=["Chase"])[0]

        assert record.depth_of_mention == 43.75

    def test_position_distribution(self):
        """Test 1st, 2nd and 3rd place counts; later places are not tracked."""
        mentions = [[mention("Chase", 1)], [mention("Chase", 3)], [mention("Chase", 5)]]

        record = aggregate(mentions, 3, brands=["Chase"])[0]

        assert record.position_distribution == {1: 1, 2: 0, 3: 1}
        assert record.average_position == 3.0

    def test_repeated_mentions_use_best_position(self):
        """Test one answer counts once, at its best position."""
        mentions = [[mention("Chase", 3), mention("Chase", 1)]]

        record = aggregate(mentions, 1, brands=["Chase"])[0]

        assert record.responses_with_brand == 1
        assert record.total_mentions == 2
        assert record.average_position == 1.0

    def test_brand_names_case_insensitive(self):
        """Test mention names are matched to brands ignoring case."""
        record = aggregate([[mention("CHASE", 1)]], 1, brands=["Chase"])[0]

        assert record.visibility_score == 100.0

    def test_dict_mentions(self):
        """Test plain dict mentions are accepted and invalid ones skipped."""
        mentions = [
            [{"brand_name": "Chase", "position": 1}],
            [{"brand_name": "Chase", "position": 0}, {"position": 1}, "Chase"],
        ]

        record = aggregate(mentions, 2, brands=["Chase"])[0]

        assert record.responses_with_brand == 1

    def test_brands_inferred_from_mentions(self):
        """Test records follow mention first-seen order when no brands are given."""
        mentions = [
            [Mention("Amex", 1, 0, is_owner=True), mention("Chase", 2)],
            [mention("Chase", 1)],
        ]

        records = aggregate(mentions, 2)

        assert [r.brand_name for r in records] == ["Amex", "Chase"]
        assert records[0].is_owner is True

    @pytest.mark.parametrize("total", [0, -1, 2.5, "3", None, True])
    def test_invalid_total_gives_zeroed_records(self, total):
        """Test bad denominators never raise."""
        records = aggregate([[mention("Chase", 1)]], total, brands=["Chase", "Amex"])

        assert [r.visibility_score for r in records] == [0.0, 0.0]
        assert [r.visibility_rank for r in records] == [1, 2]

    def test_non_list_mentions(self):
        """Test malformed mentions input gives zero visibility."""
        records = aggregate(None, 5, brands=["Chase"])

        assert records[0].visibility_score == 0.0
        assert records[0].total_responses == 5

    def test_citation_share(self):
        """Test owned citation counts and share of all citations."""
        citations = [
            [
                Citation(url="a", cleaned_url="a", type="brand", owner_brand="Chase"),
                Citation(url="b", cleaned_url="b"),
            ],
            [
                {"type": "brand", "owner_brand": "Chase"},
                {"type": "brand", "owner_brand": "Amex"},
                {"type": "unknown"},
            ],
        ]

        chase, amex = aggregate(
            [[], []], 2, brands=["Chase", "Amex"], citations_by_response=citations
        )

        assert chase.citation_count == 2
        assert chase.citation_share == 50.0
        assert amex.citation_count == 1
        assert amex.citation_share == 25.0

    def test_no_citations(self):
        """Test citation share is zero without citations."""
        record = aggregate([[mention("Chase", 1)]], 1, brands=["Chase"])[0]

        assert record.citation_count == 0
        assert record.citation_share == 0.0

    def test_rounding_settings(self):
        """Test decimals come from AggregationSettings."""
        mentions = [[mention("Chase", 1)], [mention("Chase", 2)], [mention("Chase", 2)]]
        settings = AggregationSettings(visibility_decimals=1, position_decimals=1)

        record = aggregate(mentions + [[]], 4, brands=["Chase"], settings=settings)[0]

        assert record.visibility_score == 75.0
        assert record.average_position == 1.7

    def test_visibility_rank(self):
        """Test ranking by visibility, then by average position."""
        mentions = [
            [mention("Amex", 1), mention("Chase", 2)],
            [mention("Chase", 1), mention("Amex", 2)],
            [mention("Amex", 1)],
        ]

        chase, amex, citi = aggregate(mentions, 3, brands=["Chase", "Amex", "Citi"])

        assert amex.visibility_rank == 1
        assert chase.visibility_rank == 2
        assert citi.visibility_rank == 3

    def test_rank_tie_broken_by_position(self):
        """Test equal visibility ranks the better average position first."""
        mentions = [[mention("Amex", 1), mention("Chase", 2)]]

        chase, amex = aggregate(mentions, 1, brands=["Chase", "Amex"])

        assert amex.visibility_rank == 1
        assert chase.visibility_rank == 2

    def test_recomputed_each_call(self):
        """Test aggregation keeps no state between calls."""
        first = aggregate([[mention("Chase", 1)]], 1, brands=["Chase"])
        second = aggregate([[]], 1, brands=["Chase"])

        assert first[0].visibility_score == 100.0
        assert second[0].visibility_score == 0.0

    def test_brand_objects(self):
        """Test Brand instances keep their owner flag."""
        records = aggregate([[]], 1, brands=[Brand(name="Chase", is_owner=True)])

        assert records[0].is_owner is True

    def test_mention_counts_summed(self):
        """Test total_mentions sums occurrences, not answers."""
        mentions = [
            [Mention("Chase", 1, 0, mention_count=3)],
            [{"brand_name": "Chase", "position": 1, "mention_count": 2}],
            [{"brand_name": "Chase", "position": 1, "mention_count": "x"}],
        ]

        record = aggregate(mentions, 3, brands=["Chase"])[0]

        assert record.total_mentions == 6
        assert record.visibility_score == 100.0

    def test_share_of_voice(self):
        """Test share of voice is the brand's share of all occurrences."""
        mentions = [
            [Mention("Chase", 1, 0, mention_count=3), mention("Amex", 2)],
            [mention("Amex", 1)],
        ]

        chase, amex, citi = aggregate(mentions, 2, brands=["Chase", "Amex", "Citi"])

        assert chase.share_of_voice == 60.0
        assert amex.share_of_voice == 40.0
        assert citi.share_of_voice == 0.0

    def test_share_of_voice_without_mentions(self):
        """Test share of voice is zero when nobody is mentioned."""
        record = aggregate([[], None], 2, brands=["Chase"])[0]

        assert record.share_of_voice == 0.0

    def test_sentiment_score_is_mean_of_answers(self):
        """Test each answer scores 100 * (pos - neg) / sentences, then averaged."""
        sentiments = [
            {"Chase": SentimentBreakdown(positive=2, neutral=1, negative=1)},
            {"chase": {"positive": 0, "neutral": 0, "negative": 1}},
            None,
            {"Chase": {"positive": -1}, "Citi": SentimentBreakdown(positive=1)},
            {"Chase": SentimentBreakdown()},
        ]

        record = aggregate(
            [[], [], [], [], []], 5, brands=["Chase"], sentiments_by_response=sentiments
        )[0]

        assert record.sentiment_score == -37.5
        assert record.sentiment_breakdown == {"positive": 2, "neutral": 1, "negative": 2}

    def test_sentiment_defaults(self):
        """Test brands without scored sentences get zero sentiment."""
        record = aggregate([[mention("Chase", 1)]], 1, brands=["Chase"])[0]

        assert record.sentiment_score == 0.0
        assert record.sentiment_breakdown == {"positive": 0, "neutral": 0, "negative": 0}


class TestRankRecords:
    """Test suite for rank_records()."""

    @pytest.fixture
    def records(self):
        """Chase mentioned first twice, Amex second once, Citi never."""
        mentions = [
            [mention("Chase", 1), mention("Amex", 2)],
            [mention("Chase", 1)],
        ]
        return aggregate(mentions, 2, brands=["Citi", "Amex", "Chase"])

    def test_by_visibility(self, records):
        """Test default ranking is highest visibility first."""
        assert [r.brand_name for r in rank_records(records)] == ["Chase", "Amex", "Citi"]

    def test_ascending(self, records):
        """Test ascending order."""
        ranked = rank_records(records, "depth_of_mention", ascending=True)

        assert [r.brand_name for r in ranked] == ["Citi", "Amex", "Chase"]

    def test_average_position_absent_last(self, records):
        """Test brands never mentioned sort last by average position."""
        ascending = rank_records(records, "average_position", ascending=True)
        descending = rank_records(records, "average_position")

        assert [r.brand_name for r in ascending] == ["Chase", "Amex", "Citi"]
        assert [r.brand_name for r in descending] == ["Amex", "Chase", "Citi"]

    def test_does_not_mutate_input(self, records):
        """Test a new list is returned."""
        before = [r.brand_name for r in records]

        rank_records(records)

        assert [r.brand_name for r in records] == before

    def test_by_share_of_voice(self, records):
        """Test ranking by share of voice."""
        ranked = rank_records(records, "share_of_voice")

        assert [r.brand_name for r in ranked] == ["Chase", "Amex", "Citi"]
        assert ranked[0].share_of_voice == 66.67

    @pytest.mark.parametrize("key", ["brand_name", "position_distribution", "nope"])
    def test_invalid_key_raises(self, records, key):
        """Test non-numeric fields are rejected."""
        with pytest.raises(ValueError, match="Cannot rank by"):
            rank_records(records, key)
