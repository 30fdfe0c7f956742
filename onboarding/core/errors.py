"""Structured error types for the onboarding pipeline.

Two layers live here:
- Records (OnboardingError, StageErrors) that describe something that went
  wrong without interrupting the flow. The wizard never stops on these.
- Exceptions raised at component boundaries (extraction service, file input,
  account service). Callers inside the package catch them and turn them into
  records, warnings or per-record error states.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for onboarding errors."""
    WARNING = "warning"   # Non-fatal, flow continued (fallback parsing, dropped rows)
    ERROR = "error"       # Fatal for this item, flow continued
    CRITICAL = "critical" # Stage could not produce anything


class ErrorCategory(Enum):
    """Categories of onboarding errors."""
    LLM_API = "llm_api"                     # Transport/status errors from the extraction service
    LLM_PARSE = "llm_parse"                 # Unparseable or schema-invalid service response
    PAYLOAD_TOO_LARGE = "payload_too_large" # Service rejected the request size (HTTP 413)
    FILE_INPUT = "file_input"               # Upload too large or unreadable
    VALIDATION = "validation"               # Field-level record validation
    PROVISIONING = "provisioning"           # Account creation failure
    UNKNOWN = "unknown"                     # Unclassified errors


@dataclass
class OnboardingError:
    """Structured onboarding error with context."""

    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    stage: str                     # Wizard stage where the error occurred
    entity_name: str | None = None # Student display name, file name, ...
    original_error: Exception | None = None
    retry_count: int = 0
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.severity.value.upper()}] {self.category.value}: {self.message}"]
        if self.entity_name:
            parts.append(f"entity={self.entity_name}")
        if self.stage:
            parts.append(f"stage={self.stage}")
        if self.retry_count > 0:
            parts.append(f"retries={self.retry_count}")
        return " | ".join(parts)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "stage": self.stage,
            "entity_name": self.entity_name,
            "retry_count": self.retry_count,
            "context": self.context,
        }


@dataclass
class StageErrors:
    """Aggregate errors across a wizard session."""

    errors: list[OnboardingError] = field(default_factory=list)
    warnings: list[OnboardingError] = field(default_factory=list)
    failed_entities: list[str] = field(default_factory=list)

    def add(self, error: OnboardingError):
        """Add an error or warning."""
        if error.severity == ErrorSeverity.WARNING:
            self.warnings.append(error)
        else:
            self.errors.append(error)
            if error.entity_name and error.entity_name not in self.failed_entities:
                self.failed_entities.append(error.entity_name)

    def clear(self):
        self.errors.clear()
        self.warnings.clear()
        self.failed_entities.clear()

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def summary(self) -> dict:
        """Get summary statistics."""
        by_category: dict[str, int] = {}
        for error in self.errors:
            cat = error.category.value
            by_category[cat] = by_category.get(cat, 0) + 1

        return {
            "total_errors": self.error_count,
            "total_warnings": self.warning_count,
            "failed_entities": len(self.failed_entities),
            "errors_by_category": by_category,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "failed_entities": self.failed_entities,
            "summary": self.summary(),
        }


# Boundary exceptions

class ServiceFailureKind(str, Enum):
    """Status class of an extraction service failure.

    Each kind maps to its own operator-facing message (see USER_MESSAGES).
    """

    PAYLOAD_TOO_LARGE = "payload_too_large"
    CLIENT = "client"
    OTHER = "other"
    PARSE = "parse"


USER_MESSAGES: dict[ServiceFailureKind, str] = {
    ServiceFailureKind.PAYLOAD_TOO_LARGE: (
        "The text is too large for the AI service. Try pasting a shorter list."
    ),
    ServiceFailureKind.CLIENT: (
        "The AI service rejected the request. Please check your API key or try again."
    ),
    ServiceFailureKind.OTHER: (
        "The AI service is unavailable right now. Please try again in a moment."
    ),
    ServiceFailureKind.PARSE: (
        "The AI service returned a response that could not be read."
    ),
}


class ExtractionServiceError(Exception):
    """The extraction service could not produce a usable response."""

    def __init__(
        self,
        kind: ServiceFailureKind,
        detail: str = "",
        status_code: int | None = None,
    ):
        self.kind = kind
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail or USER_MESSAGES[kind])

    @property
    def user_message(self) -> str:
        """Operator-facing message for this failure."""
        return USER_MESSAGES[self.kind]

    @property
    def category(self) -> ErrorCategory:
        if self.kind == ServiceFailureKind.PAYLOAD_TOO_LARGE:
            return ErrorCategory.PAYLOAD_TOO_LARGE
        if self.kind == ServiceFailureKind.PARSE:
            return ErrorCategory.LLM_PARSE
        return ErrorCategory.LLM_API


def classify_status(status_code: int | None) -> ServiceFailureKind:
    """Map an HTTP status code to a failure kind.

    413 is payload too large, any other 4xx is a client error, and
    everything else (5xx, no status at all: timeouts, DNS, refused
    connections) is OTHER.
    """
    if status_code == 413:
        return ServiceFailureKind.PAYLOAD_TOO_LARGE
    if status_code is not None and 400 <= status_code < 500:
        return ServiceFailureKind.CLIENT
    return ServiceFailureKind.OTHER


def find_status_code(exc: BaseException) -> int | None:
    """Return the HTTP status attached to an exception or anything it wraps."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        status = getattr(current, "status_code", None)
        if isinstance(status, int):
            return status
        response = getattr(current, "response", None)
        status = getattr(response, "status_code", None)
        if isinstance(status, int):
            return status
        current = current.__cause__ or current.__context__
    return None


class FileInputError(Exception):
    """An uploaded file was rejected before extraction."""

    def __init__(self, message: str, filename: str | None = None, size: int | None = None):
        self.filename = filename
        self.size = size
        super().__init__(message)


class AccountCreationError(Exception):
    """The account backend failed to create one account."""


class ProvisioningAlreadyStarted(RuntimeError):
    """A batch run was requested while another one is in progress."""


class WizardTransitionError(RuntimeError):
    """The caller asked the wizard for a transition its current step forbids."""

    def __init__(self, action: str, step: str):
        self.action = action
        self.step = step
        super().__init__(f"Cannot {action} from step '{step}'")


# Factory functions for common error types

def llm_api_error(
    error: ExtractionServiceError,
    stage: str,
) -> OnboardingError:
    """Create an extraction service error record (warning: fallback follows)."""
    return OnboardingError(
        category=error.category,
        severity=ErrorSeverity.WARNING,
        message=error.user_message,
        stage=stage,
        original_error=error,
        context={"status_code": error.status_code, "detail": error.detail[:500]},
    )


def file_input_error(
    error: FileInputError,
    stage: str,
) -> OnboardingError:
    """Create a file input error."""
    return OnboardingError(
        category=ErrorCategory.FILE_INPUT,
        severity=ErrorSeverity.ERROR,
        message=str(error),
        stage=stage,
        entity_name=error.filename,
        original_error=error,
        context={"size": error.size} if error.size is not None else {},
    )


def validation_error(
    message: str,
    stage: str,
    entity_name: str | None = None,
    field_name: str | None = None,
) -> OnboardingError:
    """Create a validation error."""
    return OnboardingError(
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.WARNING,
        message=message,
        stage=stage,
        entity_name=entity_name,
        context={"field": field_name} if field_name else {},
    )


def provisioning_error(
    message: str,
    stage: str,
    entity_name: str | None = None,
    retry_count: int = 0,
    original: Exception | None = None,
) -> OnboardingError:
    """Create a provisioning error (one record failed after its attempts)."""
    return OnboardingError(
        category=ErrorCategory.PROVISIONING,
        severity=ErrorSeverity.ERROR,
        message=message,
        stage=stage,
        entity_name=entity_name,
        original_error=original,
        retry_count=retry_count,
    )
