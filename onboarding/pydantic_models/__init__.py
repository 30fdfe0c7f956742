"""Pydantic models for the onboarding pipeline.

Modules:
- records: Record, the mutable student account entry shared by every stage
- extraction_models: extraction service contract and ExtractionResult
"""

from onboarding.pydantic_models.records import Record
from onboarding.pydantic_models.extraction_models import (
    ContentType,
    ResultSource,
    ExtractedStudent,
    ExtractionResponse,
    ExtractionResult,
)

__all__ = [
    "Record",
    "ContentType",
    "ResultSource",
    "ExtractedStudent",
    "ExtractionResponse",
    "ExtractionResult",
]
