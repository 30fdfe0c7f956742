"""Pydantic schemas for the extraction boundary.

- ExtractedStudent / ExtractionResponse: the JSON contract of the extraction
  service (camelCase on the wire, snake_case in Python).
- ExtractionResult: what the ingestion stage hands to the wizard.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from onboarding.pydantic_models.records import Record


class ContentType(str, Enum):
    """How the extraction service classified the pasted text."""

    STUDENT_LIST = "student_list"
    MIXED_CONTENT = "mixed_content"
    UNLIKELY_STUDENT_CONTENT = "unlikely_student_content"

    def __str__(self) -> str:
        return self.value


class ResultSource(str, Enum):
    """Which extractor produced an ExtractionResult."""

    SERVICE = "service"
    HEURISTIC = "heuristic"
    NONE = "none"


class ExtractedStudent(BaseModel):
    """One student as returned by the extraction service."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName", description="Given name")
    last_name: str = Field(default="", alias="lastName", description="Family name, may be empty")
    confidence: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="0.0 to 1.0, how sure the service is this is a student name",
    )

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("confidence", mode="before")
    @classmethod
    def _none_to_default(cls, value):
        # A null confidence means the service did not score the entry
        return 1.0 if value is None else value


class ExtractionResponse(BaseModel):
    """Full extraction service response."""

    model_config = ConfigDict(populate_by_name=True)

    students: list[ExtractedStudent] = Field(default_factory=list)
    content_type: ContentType = Field(
        default=ContentType.STUDENT_LIST,
        alias="contentType",
        description="Classification of the input text",
    )
    confidence: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="0.0 to 1.0, overall confidence in the extraction",
    )
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class ExtractionResult(BaseModel):
    """Outcome of one ingestion attempt.

    Produced once, never modified. The wizard reads ``needs_validation`` to
    decide whether the operator must confirm before the records reach review.

    Attributes:
        records: Candidate records, already carrying ids and credentials.
        errors: Problems that prevented records from being produced.
        warnings: Things the operator should know (truncation, fallback, ...).
        content_type: Classification of the input.
        confidence: Overall confidence, 0.0 when the service was not used.
        needs_validation: True when the confirmation gate must be shown.
        source: Which extractor produced the records.
        truncated: Whether the input was cut before extraction.
    """

    model_config = ConfigDict(frozen=True)

    records: list[Record] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    content_type: ContentType = ContentType.STUDENT_LIST
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    needs_validation: bool = True
    source: ResultSource = ResultSource.NONE
    truncated: bool = False

    @property
    def has_records(self) -> bool:
        return len(self.records) > 0

    @property
    def failed(self) -> bool:
        """True when nothing usable came out of this attempt."""
        return not self.records and bool(self.errors)
