"""Tests for onboarding.core.config module.

Tests the centralized configuration:
- ConfidenceThresholds: acceptance and review gates
- IngestionConfig: input and upload limits
- ProvisioningConfig: retry attempts and simulation settings
- CredentialWords / RegexPatterns
"""

import re

from onboarding.core.config import (
    API_KEY_ENV_VARS,
    ConfidenceThresholds,
    CredentialWords,
    IngestionConfig,
    LLMConfig,
    ProvisioningConfig,
    RegexPatterns,
)


# =============================================================================
# ConfidenceThresholds tests
# =============================================================================


class TestConfidenceThresholds:
    """Tests for ConfidenceThresholds configuration."""

    def test_values(self):
        assert ConfidenceThresholds.MIN_RECORD == 0.4
        assert ConfidenceThresholds.RECORD_REVIEW == 0.6
        assert ConfidenceThresholds.OVERALL_REVIEW == 0.7
        assert ConfidenceThresholds.HEURISTIC_RECORD == 0.5

    def test_heuristic_records_survive_but_need_review(self):
        """Fallback records are kept but always gated."""
        assert ConfidenceThresholds.MIN_RECORD < ConfidenceThresholds.HEURISTIC_RECORD
        assert ConfidenceThresholds.HEURISTIC_RECORD < ConfidenceThresholds.RECORD_REVIEW

    def test_failed_is_zero(self):
        assert ConfidenceThresholds.FAILED == 0.0


# =============================================================================
# IngestionConfig tests
# =============================================================================


class TestIngestionConfig:
    """Tests for IngestionConfig limits."""

    def test_input_limit(self):
        assert IngestionConfig.MAX_INPUT_CHARS == 8000

    def test_marker_fits_in_limit(self):
        assert len(IngestionConfig.TRUNCATION_MARKER) < IngestionConfig.MAX_INPUT_CHARS

    def test_file_limit_is_five_megabytes(self):
        assert IngestionConfig.MAX_FILE_BYTES == 5 * 1024 * 1024

    def test_plausible_class_size(self):
        assert IngestionConfig.MAX_PLAUSIBLE_RECORDS == 50


# =============================================================================
# ProvisioningConfig / LLMConfig tests
# =============================================================================


class TestProvisioningConfig:
    """Tests for ProvisioningConfig."""

    def test_attempts(self):
        assert ProvisioningConfig.AUTO_MAX_ATTEMPTS == 2
        assert ProvisioningConfig.MANUAL_MAX_ATTEMPTS == 1

    def test_simulation_delays_ordered(self):
        assert 0 < ProvisioningConfig.SIMULATED_MIN_DELAY <= ProvisioningConfig.SIMULATED_MAX_DELAY

    def test_failure_rate_is_probability(self):
        assert 0.0 <= ProvisioningConfig.SIMULATED_FAILURE_RATE <= 1.0


class TestLLMConfig:
    """Tests for LLMConfig."""

    def test_json_response_format(self):
        assert LLMConfig.RESPONSE_FORMAT == {"type": "json_object"}

    def test_low_temperature(self):
        assert LLMConfig.TEMPERATURE <= 0.3

    def test_every_provider_has_key_var(self):
        assert set(API_KEY_ENV_VARS) == {"github", "openrouter", "azure"}


# =============================================================================
# Word lists and patterns
# =============================================================================


class TestCredentialWords:
    """Tests for the password word lists."""

    def test_words_are_lowercase_letters(self):
        for word in CredentialWords.ADJECTIVES + CredentialWords.ANIMALS:
            assert word.isalpha() and word.islower()

    def test_linking_code_length(self):
        assert CredentialWords.LINKING_CODE_DIGITS == 6


class TestRegexPatterns:
    """Tests for RegexPatterns."""

    def test_all_patterns_compile(self):
        for name in ("FIRST_NAME", "LAST_INITIAL", "PASSWORD", "FIRST_LAST", "LAST_COMMA_FIRST", "SINGLE_NAME"):
            re.compile(getattr(RegexPatterns, name))

    def test_last_comma_first_accepts_middle_initial(self):
        match = re.match(RegexPatterns.LAST_COMMA_FIRST, "Allen, Roan C.")
        assert match.groups() == ("Allen", "Roan")
