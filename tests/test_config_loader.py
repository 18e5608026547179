"""
Tests for config.loader and config.schema modules.

This module tests configuration loading and validation:
- YAML loading and parsing
- Pydantic schema validation (all validators)
- Error handling for missing files, invalid YAML, empty files, bad roots
- The shipped example configuration
"""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from brand_visibility.config.loader import format_validation_error, load_config
from brand_visibility.config.schema import (
    AggregationSettings,
    AnalysisConfig,
    DedupSettings,
    MatchingSettings,
    SentimentSettings,
)
from brand_visibility.exceptions import (
    ConfigFileNotFoundError,
    ConfigurationError,
    ConfigValidationError,
)

EXAMPLE_CONFIG = Path(__file__).parent.parent / "examples" / "brands.config.yaml"

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def valid_config_dict():
    """Return a valid configuration dictionary for testing."""
    return {
        "brands": [
            {
                "name": "Y Combinator",
                "is_owner": True,
                "domain": "https://www.ycombinator.com/",
                "aliases": ["YC"],
            },
            {"name": "Techstars", "domain": "techstars.com"},
            {"name": "Antler"},
        ],
        "matching": {"fuzzy_threshold": 88},
        "dedup": {"max_lead_phrase_reuse": 3},
    }


@pytest.fixture
def write_config(tmp_path):
    """Return a helper that writes a YAML config and returns its path."""

    def _write(data) -> Path:
        config_file = tmp_path / "brands.config.yaml"
        with config_file.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return config_file

    return _write


# ============================================================================
# load_config
# ============================================================================


class TestLoadConfig:
    """Test suite for load_config()."""

    def test_load_valid_config(self, write_config, valid_config_dict):
        """Test a valid file loads with brands in order and settings applied."""
        config = load_config(write_config(valid_config_dict))

        assert isinstance(config, AnalysisConfig)
        assert [b.name for b in config.brands] == ["Y Combinator", "Techstars", "Antler"]
        assert config.owner.name == "Y Combinator"
        assert config.brands[0].domain == "ycombinator.com"
        assert config.matching.fuzzy_threshold == 88
        assert config.dedup.max_lead_phrase_reuse == 3

    def test_defaults_applied(self, write_config):
        """Test omitted sections fall back to defaults."""
        config = load_config(write_config({"brands": [{"name": "Chase"}]}))

        assert config.matching.fuzzy_threshold == 0.0
        assert config.matching.name_variations is True
        assert config.sentiment.enabled is True
        assert "trusted" in config.sentiment.positive_words
        assert "expensive" in config.sentiment.negative_words
        assert config.citations.infer_domains_from_names is True
        assert config.aggregation.visibility_decimals == 0
        assert config.dedup.similarity_threshold == 0.8
        assert config.dedup.lead_ngram_size == 3
        assert config.dedup.max_lead_phrase_reuse == 2
        assert config.owner is None

    def test_accepts_str_path(self, write_config, valid_config_dict):
        """Test string paths are accepted."""
        config = load_config(str(write_config(valid_config_dict)))

        assert len(config.brands) == 3

    def test_missing_file(self, tmp_path):
        """Test a missing file raises ConfigFileNotFoundError."""
        with pytest.raises(ConfigFileNotFoundError, match="Configuration file not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test YAML syntax errors raise ConfigValidationError."""
        config_file = tmp_path / "brands.config.yaml"
        config_file.write_text("brands: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigValidationError, match="Invalid YAML syntax"):
            load_config(config_file)

    @pytest.mark.parametrize("content", ["", "# only a comment\n"])
    def test_empty_file(self, tmp_path, content):
        """Test empty files are rejected."""
        config_file = tmp_path / "brands.config.yaml"
        config_file.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigValidationError, match="Configuration file is empty"):
            load_config(config_file)

    def test_root_must_be_mapping(self, write_config):
        """Test a YAML list at the root is rejected."""
        with pytest.raises(ConfigValidationError, match="root must be a mapping"):
            load_config(write_config(["Chase", "Amex"]))

    def test_schema_errors_listed(self, write_config):
        """Test validation failures name the offending field."""
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config({"brands": [{"name": "   "}]}))

        message = str(exc_info.value)
        assert "Configuration validation failed" in message
        assert "brands.0.name" in message
        assert "Brand name cannot be empty" in message

    def test_missing_brands(self, write_config):
        """Test the brands section is required."""
        with pytest.raises(ConfigValidationError, match="brands"):
            load_config(write_config({"matching": {"fuzzy_threshold": 0}}))

    def test_errors_share_base_class(self, tmp_path):
        """Test config errors can be caught as ConfigurationError."""
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "missing.yaml")

    def test_example_config_is_valid(self):
        """Test the shipped example configuration loads."""
        config = load_config(EXAMPLE_CONFIG)

        assert config.owner.name == "Y Combinator"
        assert config.owner.aliases == ["YC"]
        assert [b.domain for b in config.brands] == [
            "ycombinator.com",
            "techstars.com",
            "500.co",
            None,
        ]
        assert config.matching.name_variations is True
        assert config.sentiment.positive_words[0] == "leading"


# ============================================================================
# Schema validators
# ============================================================================


class TestAnalysisConfig:
    """Test suite for AnalysisConfig validators."""

    def test_brands_required_non_empty(self):
        """Test at least one brand is required."""
        with pytest.raises(ValidationError, match="At least one brand is required"):
            AnalysisConfig(brands=[])

    def test_duplicate_names_rejected(self):
        """Test brand names are unique ignoring case."""
        with pytest.raises(ValidationError, match="Brand names must be unique"):
            AnalysisConfig(brands=[{"name": "Chase"}, {"name": "chase"}])

    def test_single_owner(self):
        """Test only one brand may be the owner."""
        with pytest.raises(ValidationError, match="At most one brand can be the owner"):
            AnalysisConfig(
                brands=[{"name": "Chase", "is_owner": True}, {"name": "Amex", "is_owner": True}]
            )

    def test_invalid_domain(self):
        """Test unparseable domains are rejected."""
        with pytest.raises(ValidationError, match="Invalid brand domain"):
            AnalysisConfig(brands=[{"name": "Chase", "domain": "not a domain"}])


class TestSettings:
    """Test suite for settings validators."""

    @pytest.mark.parametrize("value", [-1, 100.5])
    def test_fuzzy_threshold_range(self, value):
        """Test fuzzy_threshold stays within [0, 100]."""
        with pytest.raises(ValidationError, match="fuzzy_threshold"):
            MatchingSettings(fuzzy_threshold=value)

    @pytest.mark.parametrize("value", [-1, 7])
    def test_decimals_range(self, value):
        """Test decimals stay within [0, 6]."""
        with pytest.raises(ValidationError, match="Decimal places"):
            AggregationSettings(depth_decimals=value)

    @pytest.mark.parametrize("value", [0.0, 1.5])
    def test_similarity_threshold_range(self, value):
        """Test similarity_threshold stays within (0, 1]."""
        with pytest.raises(ValidationError, match="similarity_threshold"):
            DedupSettings(similarity_threshold=value)

    @pytest.mark.parametrize("field", ["lead_ngram_size", "max_lead_phrase_reuse"])
    def test_positive_integers(self, field):
        """Test integer dedup settings are at least 1."""
        with pytest.raises(ValidationError, match="Value must be >= 1"):
            DedupSettings(**{field: 0})

    def test_sentiment_words_cleaned(self):
        """Test sentiment words are lowercased, stripped and deduplicated."""
        settings = SentimentSettings(positive_words=[" Great ", "great", "", "Top Pick"])

        assert settings.positive_words == ["great", "top pick"]

    def test_sentiment_can_be_disabled(self):
        """Test sentiment scoring can be switched off."""
        assert SentimentSettings(enabled=False).enabled is False


def test_format_validation_error():
    """Test validation errors render as loc: msg bullets."""
    try:
        AnalysisConfig(brands=[{"name": ""}])
    except ValidationError as e:
        formatted = format_validation_error(e)
    else:
        pytest.fail("ValidationError not raised")

    assert formatted.startswith("  - brands.0.name: ")
    assert "Brand name cannot be empty" in formatted
