"""Prompt templates for the extraction service."""

from onboarding.prompts.extraction_prompt import (
    EXTRACTION_SYSTEM_PROMPT,
    build_extraction_prompt,
)

__all__ = [
    "EXTRACTION_SYSTEM_PROMPT",
    "build_extraction_prompt",
]
