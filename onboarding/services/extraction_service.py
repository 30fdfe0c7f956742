"""Extraction service: free text in, structured student list out.

The ingestion stage depends only on the ExtractionService protocol, so a stub
can stand in for the LLM in tests. LLMExtractionService is the real
implementation; it is built around an injected LLMClient and turns every
failure into an ExtractionServiceError classified by status class.
"""

import logging
from typing import Protocol

from pydantic import ValidationError

from onboarding.core.config import EXTRACTION_MODEL
from onboarding.core.errors import (
    ExtractionServiceError,
    ServiceFailureKind,
    classify_status,
    find_status_code,
)
from onboarding.core.llm_client import LLMClient
from onboarding.prompts.extraction_prompt import EXTRACTION_SYSTEM_PROMPT, build_extraction_prompt
from onboarding.pydantic_models import ExtractionResponse

logger = logging.getLogger(__name__)


class ExtractionService(Protocol):
    """Contract of the external name-extraction service."""

    async def extract(self, text: str, truncated: bool = False) -> ExtractionResponse:
        """Extract students from ``text``.

        Raises:
            ExtractionServiceError: On transport failure or unusable response.
        """
        ...


class LLMExtractionService:
    """ExtractionService backed by an LLM through litellm."""

    def __init__(self, client: LLMClient, model: str = EXTRACTION_MODEL) -> None:
        self.client = client
        self.model = model

    async def extract(self, text: str, truncated: bool = False) -> ExtractionResponse:
        try:
            response = await self.client.complete(
                system_prompt=EXTRACTION_SYSTEM_PROMPT,
                user_prompt=build_extraction_prompt(text, truncated=truncated),
                model=self.model,
                operation="extraction",
            )
        except ValueError as e:
            raise ExtractionServiceError(ServiceFailureKind.PARSE, str(e)) from e
        except Exception as e:
            status = find_status_code(e)
            kind = classify_status(status)
            logger.warning(f"Extraction call failed ({kind.value}, status={status}): {e}")
            raise ExtractionServiceError(kind, str(e), status_code=status) from e

        try:
            return ExtractionResponse.model_validate(response.content)
        except ValidationError as e:
            logger.warning(f"Extraction response did not match schema: {e.error_count()} errors")
            raise ExtractionServiceError(
                ServiceFailureKind.PARSE,
                f"Invalid extraction response: {response.raw_content[:200]}",
            ) from e
