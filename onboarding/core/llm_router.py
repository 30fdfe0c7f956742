"""LiteLLM Router configuration for retry, fallback, and cooldown.

The router is built explicitly with its credentials and handed to an
LLMClient; nothing here runs at import time.

Supports multiple LLM providers:
- GitHub Models (default): OpenAI-compatible endpoint, GITHUB_TOKEN
- OpenRouter: OPENROUTER_API_KEY
- Azure OpenAI: AZURE_API_KEY, AZURE_API_BASE, AZURE_API_VERSION
"""

import os

from litellm import Router

from onboarding.core.config import (
    LLM_PROVIDER,
    API_KEY_ENV_VAR,
    EXTRACTION_MODEL,
    GITHUB_MODELS_BASE_URL,
    LLMConfig,
)


def _build_github_model_list(api_key: str, model: str) -> list[dict]:
    """Build model list for GitHub Models (OpenAI protocol via api_base)."""
    return [
        {
            "model_name": model,
            "litellm_params": {
                "model": model,
                "api_key": api_key,
                "api_base": GITHUB_MODELS_BASE_URL,
            },
        },
    ]


def _build_openrouter_model_list(api_key: str, model: str) -> list[dict]:
    """Build model list for OpenRouter, with gpt-4o as the fallback target."""
    models = [model, "openrouter/openai/gpt-4o"]
    return [
        {
            "model_name": name,
            "litellm_params": {"model": name, "api_key": api_key},
        }
        for name in dict.fromkeys(models)
    ]


def _build_azure_model_list(api_key: str, model: str) -> list[dict]:
    """Build model list for Azure OpenAI.

    Azure requires AZURE_API_BASE and AZURE_API_VERSION in addition to the key.
    """
    return [
        {
            "model_name": model,
            "litellm_params": {
                "model": model,
                "api_key": api_key,
                "api_base": os.environ.get("AZURE_API_BASE", ""),
                "api_version": os.environ.get("AZURE_API_VERSION", "2024-02-15-preview"),
            },
        },
    ]


def _build_fallbacks(provider: str, model: str) -> list[dict]:
    """Only OpenRouter has a second model to fall back to."""
    if provider == "openrouter" and model != "openrouter/openai/gpt-4o":
        return [{model: ["openrouter/openai/gpt-4o"]}]
    return []


def build_router(
    api_key: str | None = None,
    provider: str = LLM_PROVIDER,
    model: str = EXTRACTION_MODEL,
) -> Router:
    """Build the LLM Router with retry and fallback configuration.

    Args:
        api_key: Credential for the provider. Defaults to the provider's
                 environment variable (see config.API_KEY_ENV_VARS).
        provider: "github", "openrouter" or "azure".
        model: Provider-qualified model name.

    The router handles:
    - Automatic retries with backoff for transient failures
    - Fallback to a secondary model where the provider offers one
    - Cooldown tracking for failed deployments
    """
    key = api_key if api_key is not None else os.environ.get(API_KEY_ENV_VAR, "")

    if provider == "azure":
        model_list = _build_azure_model_list(key, model)
    elif provider == "openrouter":
        model_list = _build_openrouter_model_list(key, model)
    else:
        model_list = _build_github_model_list(key, model)

    return Router(
        model_list=model_list,
        num_retries=LLMConfig.NUM_RETRIES,
        retry_after=2,
        timeout=LLMConfig.TIMEOUT_SECONDS,
        cooldown_time=30,
        allowed_fails=2,
        fallbacks=_build_fallbacks(provider, model),
    )
