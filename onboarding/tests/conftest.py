"""Pytest configuration and shared fixtures.

Provides reusable test fixtures for:
- Stub extraction services (canned responses or failures)
- Stub account backends (always succeed, scripted failures)
- Seeded credential generator
- Sample records and extraction responses
"""

import asyncio
from collections import defaultdict

import pytest
from unittest.mock import MagicMock

from onboarding.core import AccountCreationError, CredentialGenerator, PipelineLogger, reset_logger
from onboarding.pydantic_models import ContentType, ExtractedStudent, ExtractionResponse, Record


@pytest.fixture(autouse=True)
def _fresh_logger():
    """Every test starts with a new process-wide logger."""
    reset_logger()
    yield
    reset_logger()


# =============================================================================
# Extraction service stubs
# =============================================================================


class StubExtractionService:
    """Returns a canned response (or raises) and records every call."""

    def __init__(self, response: ExtractionResponse | None = None, error: Exception | None = None):
        self.response = response or ExtractionResponse()
        self.error = error
        self.calls: list[tuple[str, bool]] = []

    async def extract(self, text: str, truncated: bool = False) -> ExtractionResponse:
        self.calls.append((text, truncated))
        if self.error is not None:
            raise self.error
        return self.response


def build_response(
    names: list[tuple[str, str]] | list[tuple[str, str, float]],
    confidence: float = 0.95,
    content_type: ContentType = ContentType.STUDENT_LIST,
    warnings: list[str] | None = None,
) -> ExtractionResponse:
    """ExtractionResponse from (first, last[, confidence]) tuples."""
    students = []
    for entry in names:
        first, last = entry[0], entry[1]
        record_confidence = entry[2] if len(entry) > 2 else 1.0
        students.append(ExtractedStudent(first_name=first, last_name=last, confidence=record_confidence))
    return ExtractionResponse(
        students=students,
        content_type=content_type,
        confidence=confidence,
        warnings=warnings or [],
    )


@pytest.fixture
def make_response():
    """Factory for ExtractionResponse objects."""
    return build_response


@pytest.fixture
def stub_service():
    """Factory for StubExtractionService."""
    return StubExtractionService


# =============================================================================
# Account backend stubs
# =============================================================================


class RecordingAccountService:
    """Account backend that fails a scripted number of times per record.

    Args:
        failures: Map of first name -> number of calls that fail before
                  success. Use a large number for "always fails".
    """

    def __init__(self, failures: dict[str, int] | None = None):
        self.failures = dict(failures or {})
        self.calls: list[str] = []
        self.created: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._seen: dict[str, int] = defaultdict(int)

    async def create(self, record: Record) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.calls.append(record.first_name)
            self._seen[record.id] += 1
            if self._seen[record.id] <= self.failures.get(record.first_name, 0):
                raise AccountCreationError("Account creation failed")
            self.created.append(record.id)
        finally:
            self.in_flight -= 1


@pytest.fixture
def account_service():
    """Backend that always succeeds."""
    return RecordingAccountService()


@pytest.fixture
def flaky_account_service():
    """Factory for backends with scripted failures."""
    return RecordingAccountService


class GatedAccountService:
    """Blocks every create() until the gate opens."""

    def __init__(self):
        self.gate = asyncio.Event()
        self.calls = 0

    async def create(self, record: Record) -> None:
        self.calls += 1
        await self.gate.wait()


@pytest.fixture
def gated_account_service():
    """Factory for backends that hold each call until ``gate.set()``."""
    return GatedAccountService


# =============================================================================
# Credentials, logger, records
# =============================================================================


@pytest.fixture
def credentials():
    """Seeded credential generator (reproducible ids and passwords)."""
    return CredentialGenerator(seed=42)


@pytest.fixture
def mock_logger():
    """PipelineLogger stand-in that records calls."""
    return MagicMock(spec=PipelineLogger)


@pytest.fixture
def make_record(credentials):
    """Factory for valid records with generated ids."""
    def _make(first_name: str = "Jane", last_initial: str = "D", password: str = "sunnyfox07", **kwargs):
        return Record(
            id=credentials.generate_id(),
            first_name=first_name,
            last_initial=last_initial,
            password=password,
            username=CredentialGenerator.generate_username(first_name, last_initial),
            **kwargs,
        )
    return _make


@pytest.fixture
def sample_roster(make_record):
    """Three valid records."""
    return [
        make_record("Jane", "D"),
        make_record("John", "S"),
        make_record("Anna-Lee", "K", password="brightowl12"),
    ]
