"""Centralized configuration for the onboarding pipeline.

All magic numbers, thresholds, and configuration constants are documented here.
Each constant includes:
- What it controls
- Why this value was chosen
- What changing it affects
"""

import os
from typing import Final


# =============================================================================
# LLM Provider Configuration
# =============================================================================
#
# To switch providers, set the LLM_PROVIDER environment variable:
#   - "github" (default): GitHub Models inference endpoint (OpenAI-compatible)
#   - "openrouter": OpenRouter API gateway
#   - "azure": Azure OpenAI Service
#
# For Azure, also set:
#   - AZURE_API_KEY: Your Azure OpenAI API key
#   - AZURE_API_BASE: Your Azure endpoint (e.g., https://your-resource.openai.azure.com/)
#   - AZURE_API_VERSION: API version (e.g., 2024-02-15-preview)
#   - AZURE_DEPLOYMENT_GPT_4O_MINI: Deployment name (default: gpt-4o-mini)
#
# =============================================================================

LLM_PROVIDER: Final[str] = os.environ.get("LLM_PROVIDER", "github")
"""LLM provider to use. Set via LLM_PROVIDER env var.

Supported values:
- "github": GitHub Models (default)
- "openrouter": OpenRouter API gateway
- "azure": Azure OpenAI Service
"""

API_KEY_ENV_VARS: Final[dict[str, str]] = {
    "github": "GITHUB_TOKEN",
    "openrouter": "OPENROUTER_API_KEY",
    "azure": "AZURE_API_KEY",
}

API_KEY_ENV_VAR: Final[str] = API_KEY_ENV_VARS.get(LLM_PROVIDER, "GITHUB_TOKEN")
"""Environment variable name for the LLM API key (provider-dependent)."""

GITHUB_MODELS_BASE_URL: Final[str] = "https://models.github.ai/inference"
"""OpenAI-compatible endpoint for GitHub Models."""


def _get_model_name(base_model: str) -> str:
    """Convert a base model name to provider-specific format."""
    if LLM_PROVIDER == "azure":
        deployment_env = f"AZURE_DEPLOYMENT_{base_model.upper().replace('-', '_')}"
        return f"azure/{os.environ.get(deployment_env, base_model)}"
    elif LLM_PROVIDER == "openrouter":
        return f"openrouter/openai/{base_model}"
    else:
        # GitHub Models speaks the OpenAI protocol; litellm routes it via api_base
        return f"openai/{base_model}"


EXTRACTION_MODEL: Final[str] = _get_model_name("gpt-4o-mini")
"""Model used for name extraction.

Name extraction is a short, high-volume task; a small model is accurate
enough and keeps each paste cheap. Override with --model on the CLI.
"""


# Confidence Thresholds

class ConfidenceThresholds:
    """Thresholds for gating extracted records.

    Two kinds of threshold live here:
    - Acceptance: records below MIN_RECORD are dropped outright.
    - Review: results below RECORD_REVIEW / OVERALL_REVIEW are kept but the
      wizard asks the operator to confirm before moving to review.

    Used by: stages/ingestion_stage.py
    """

    MIN_RECORD: Final[float] = 0.4
    """Per-record confidence below which an extracted name is discarded."""

    RECORD_REVIEW: Final[float] = 0.6
    """Any surviving record below this triggers the confirmation gate."""

    OVERALL_REVIEW: Final[float] = 0.7
    """Overall extraction confidence below this triggers the confirmation gate."""

    HEURISTIC_RECORD: Final[float] = 0.5
    """Confidence assigned to records produced by the local fallback parser.

    Above MIN_RECORD so they survive, below RECORD_REVIEW so they always
    require confirmation.
    """

    FAILED: Final[float] = 0.0
    """Overall confidence reported when the extraction service could not be used."""


# Ingestion Limits

class IngestionConfig:
    """Limits applied before the extraction service is called."""

    MAX_INPUT_CHARS: Final[int] = 8000
    """Maximum characters sent to the extraction service.

    Roughly 2000 tokens, comfortably inside the request limits of the
    GitHub Models free tier. A class roster of 50 names is ~600 characters,
    so truncation only affects pasted documents with a lot of surrounding text.
    """

    TRUNCATION_MARKER: Final[str] = "\n[... input truncated ...]"
    """Appended to truncated payloads so the model knows the list may be cut."""

    MAX_PLAUSIBLE_RECORDS: Final[int] = 50
    """More records than this from one paste is more likely a mis-extraction
    (e.g. every word of a letter treated as a name) than a real class."""

    MAX_FILE_BYTES: Final[int] = 5 * 1024 * 1024
    """Uploaded files above 5 MB are rejected before reading.

    Used by: core/file_input.py
    """

    FILE_ENCODING: Final[str] = "utf-8"
    """Encoding used to decode uploads. Undecodable bytes are replaced."""


# Provisioning Configuration

class ProvisioningConfig:
    """Retry and simulation settings for account creation."""

    AUTO_MAX_ATTEMPTS: Final[int] = 2
    """Attempts per record during a batch run (one immediate retry)."""

    MANUAL_MAX_ATTEMPTS: Final[int] = 1
    """Attempts for a single operator-triggered retry."""

    SIMULATED_FAILURE_RATE: Final[float] = 0.05
    """Probability that a simulated account creation call fails."""

    SIMULATED_MIN_DELAY: Final[float] = 0.5
    """Minimum simulated latency in seconds."""

    SIMULATED_MAX_DELAY: Final[float] = 1.5
    """Maximum simulated latency in seconds."""


# LLM Call Configuration

class LLMConfig:
    """Default parameters for LLM API calls."""

    TEMPERATURE: Final[float] = 0.1
    """Low temperature keeps name splitting consistent between runs."""

    MAX_TOKENS: Final[int] = 2000
    """Completion budget. 50 students with confidences fit in ~1500 tokens."""

    RESPONSE_FORMAT: Final[dict[str, str]] = {"type": "json_object"}
    """Response format enforcing JSON output."""

    NUM_RETRIES: Final[int] = 2
    """Router-level retries for transient API failures."""

    TIMEOUT_SECONDS: Final[float] = 30.0
    """Per-request timeout."""


# Credential Generation

class CredentialWords:
    """Word lists for generated passwords (adjective + animal + 2 digits).

    Short, friendly words so young students can type them.
    Used by: core/credentials.py
    """

    ADJECTIVES: Final[tuple[str, ...]] = (
        "happy", "sunny", "bright", "smart", "kind", "brave", "cool", "nice",
    )

    ANIMALS: Final[tuple[str, ...]] = (
        "cat", "dog", "bird", "fish", "bear", "lion", "fox", "owl",
    )

    LINKING_CODE_DIGITS: Final[int] = 6
    """Length of the code shown on the link-existing-accounts screen."""

    USERNAME_SUFFIX_RANGE: Final[tuple[int, int]] = (100, 1000)
    """Suffix drawn (half-open range) when a username is already used in the roster."""


# Regex Patterns

class RegexPatterns:
    """Field validation and fallback parsing patterns."""

    FIRST_NAME: Final[str] = r"^[A-Za-z0-9-]+$"
    """Letters, digits and hyphens. Used by: core/validation.py"""

    LAST_INITIAL: Final[str] = r"^[A-Za-z]$"
    """Exactly one letter. Used by: core/validation.py"""

    PASSWORD: Final[str] = r"^[A-Za-z0-9]+$"
    """Letters and digits. Used by: core/validation.py"""

    FIRST_LAST: Final[str] = r"^([A-Za-z]+)\s+([A-Za-z]+)$"
    """Matches "Jane Doe". Used by: core/heuristic_parser.py"""

    LAST_COMMA_FIRST: Final[str] = r"^([A-Za-z]+),\s*([A-Za-z]+)(?:\s+[A-Za-z]\.?)?$"
    """Matches "Doe, Jane" and "Allen, Roan C.". Used by: core/heuristic_parser.py"""

    SINGLE_NAME: Final[str] = r"^([A-Za-z]+)$"
    """A bare first name. Used by: core/heuristic_parser.py"""
