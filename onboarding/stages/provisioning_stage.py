"""Provisioning stage: create one account per record, strictly in order.

Records are processed one at a time in roster order so that the observed
progress ("N of M done") only ever goes up. Each record moves
pending → creating → completed | error. Failures are routine: a record gets
one immediate retry during the batch, then stays in ``error`` until the
operator retries it. Nothing here aborts the batch.

Both retry paths (automatic and manual) go through the same RetryPolicy, so
there is exactly one implementation of "attempt N times".

Observers register with ``add_listener`` and receive a frozen StatusUpdate
after every transition. Transitions happen between awaits, so a snapshot
taken at any time shows each record in exactly one status.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

from onboarding.core import (
    ProvisioningAlreadyStarted,
    ProvisioningConfig,
    provisioning_error,
)
from onboarding.pydantic_models import Record
from onboarding.services import AccountCreationService
from onboarding.stages.stage_base import StageRunner


class CreationStatus(str, Enum):
    """Per-record provisioning status."""

    PENDING = "pending"
    CREATING = "creating"
    COMPLETED = "completed"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class BatchStatus(str, Enum):
    """Status of the batch as a whole.

    COMPLETED means every record has been attempted, not that all succeeded.
    """

    PENDING = "pending"
    CREATING = "creating"
    COMPLETED = "completed"


TERMINAL_STATUSES = frozenset({CreationStatus.COMPLETED, CreationStatus.ERROR})


@dataclass
class RecordStatus:
    """Mutable provisioning state of one record. Owned by the orchestrator."""
    record: Record
    status: CreationStatus = CreationStatus.PENDING
    error: str | None = None
    attempts: int = 0


@dataclass(frozen=True)
class StatusUpdate:
    """Immutable view of one record's status plus batch counts at that moment."""
    index: int
    record_id: str
    display_name: str
    status: CreationStatus
    error: str | None
    attempts: int
    completed_count: int
    error_count: int
    total: int

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


@dataclass(frozen=True)
class ProvisioningSummary:
    """Aggregate counts after a run."""
    completed_count: int
    error_count: int
    total: int

    @property
    def all_succeeded(self) -> bool:
        return self.total > 0 and self.completed_count == self.total


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of running a RetryPolicy."""
    succeeded: bool
    attempts: int
    error: Exception | None = None


@dataclass(frozen=True)
class RetryPolicy:
    """Run an async operation up to ``max_attempts`` times, back to back.

    Attributes:
        max_attempts: Total attempts (1 = no retry).
    """

    max_attempts: int

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    async def execute(
        self,
        per_attempt: Callable[[], Awaitable[None]],
        on_failure: Callable[[int, Exception], None] | None = None,
    ) -> AttemptOutcome:
        """Call ``per_attempt`` until it succeeds or attempts run out.

        Args:
            per_attempt: Zero-argument coroutine function; raising means failure.
            on_failure: Called with (attempt_number, exception) after each failure.
        """
        last_error: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                await per_attempt()
            except Exception as e:
                last_error = e
                if on_failure:
                    on_failure(attempt, e)
                continue
            return AttemptOutcome(succeeded=True, attempts=attempt)
        return AttemptOutcome(succeeded=False, attempts=self.max_attempts, error=last_error)


StatusListener = Callable[[StatusUpdate], None]


class ProvisioningOrchestrator(StageRunner):
    """Drives account creation for a roster and tracks per-record status."""

    name = "provisioning"

    def __init__(
        self,
        service: AccountCreationService,
        auto_policy: RetryPolicy | None = None,
        manual_policy: RetryPolicy | None = None,
        **kwargs,
    ):
        """Initialize the orchestrator.

        Args:
            service: Account backend, called once per attempt.
            auto_policy: Policy for batch runs and retry_failed_only.
            manual_policy: Policy for retry_one.
            **kwargs: logger / errors, passed to StageRunner.
        """
        super().__init__(**kwargs)
        self.service = service
        self.auto_policy = auto_policy or RetryPolicy(ProvisioningConfig.AUTO_MAX_ATTEMPTS)
        self.manual_policy = manual_policy or RetryPolicy(ProvisioningConfig.MANUAL_MAX_ATTEMPTS)
        self.batch_status = BatchStatus.PENDING
        self._statuses: list[RecordStatus] = []
        self._listeners: list[StatusListener] = []
        self._running = False

    # Observation

    def add_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StatusListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _view(self, index: int) -> StatusUpdate:
        entry = self._statuses[index]
        completed, errors = self._counts()
        return StatusUpdate(
            index=index,
            record_id=entry.record.id,
            display_name=entry.record.display_name,
            status=entry.status,
            error=entry.error,
            attempts=entry.attempts,
            completed_count=completed,
            error_count=errors,
            total=len(self._statuses),
        )

    def _emit(self, index: int) -> None:
        update = self._view(index)
        for listener in list(self._listeners):
            listener(update)

    def _counts(self) -> tuple[int, int]:
        completed = sum(1 for s in self._statuses if s.status == CreationStatus.COMPLETED)
        errors = sum(1 for s in self._statuses if s.status == CreationStatus.ERROR)
        return completed, errors

    def snapshot(self) -> list[StatusUpdate]:
        """Consistent view of every record's status."""
        return [self._view(i) for i in range(len(self._statuses))]

    def summary(self) -> ProvisioningSummary:
        completed, errors = self._counts()
        return ProvisioningSummary(completed, errors, len(self._statuses))

    @property
    def progress(self) -> float:
        """Fraction of records that reached a terminal status."""
        if not self._statuses:
            return 0.0
        completed, errors = self._counts()
        return (completed + errors) / len(self._statuses)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def downloads_ready(self) -> bool:
        """Credential sheets can be offered once the batch has finished."""
        return self.batch_status == BatchStatus.COMPLETED

    def completed_records(self) -> list[Record]:
        return [s.record for s in self._statuses if s.status == CreationStatus.COMPLETED]

    def failed_indexes(self) -> list[int]:
        return [i for i, s in enumerate(self._statuses) if s.status == CreationStatus.ERROR]

    # Runs

    async def provision_all(self, records: list[Record]) -> ProvisioningSummary:
        """Attempt every record in order with the automatic retry policy.

        Raises:
            ProvisioningAlreadyStarted: If a run is already in progress.
        """
        self._begin()
        self._statuses = [RecordStatus(record=r) for r in records]
        return await self._run_batch(range(len(self._statuses)))

    async def provision_added(self, records: list[Record]) -> ProvisioningSummary:
        """Attempt only the records this orchestrator has never seen.

        Earlier statuses are kept, so records created by a previous batch are
        not sent to the backend again and the summary covers both batches.

        Raises:
            ProvisioningAlreadyStarted: If a run is already in progress.
        """
        self._begin()
        first_new = len(self._statuses)
        self._statuses.extend(RecordStatus(record=r) for r in self.untracked(records))
        return await self._run_batch(range(first_new, len(self._statuses)))

    def untracked(self, records: list[Record]) -> list[Record]:
        """Records (by id) that no batch of this orchestrator has attempted."""
        seen = {s.record.id for s in self._statuses}
        return [r for r in records if r.id not in seen]

    async def _run_batch(self, indexes: range) -> ProvisioningSummary:
        self.batch_status = BatchStatus.CREATING
        self.start(total=len(indexes))
        try:
            for index in indexes:
                await self._attempt(index, self.auto_policy)
            self.batch_status = BatchStatus.COMPLETED
        finally:
            self._finish()

        summary = self.summary()
        self.logger.stage_result(
            f"{summary.completed_count} of {summary.total} accounts created",
            errors=summary.error_count,
        )
        return summary

    async def retry_failed_only(self) -> ProvisioningSummary:
        """Re-run every record currently in ``error``; completed ones are untouched."""
        failed = self.failed_indexes()
        self._begin()
        self.start(total=len(failed))
        try:
            for index in failed:
                await self._attempt(index, self.auto_policy)
        finally:
            self._finish()
        return self.summary()

    async def retry_one(self, index: int) -> StatusUpdate:
        """Single manual attempt for one failed record.

        Raises:
            IndexError: If ``index`` is out of range (negative indexes included).
            ValueError: If the record is not in ``error``.
            ProvisioningAlreadyStarted: If a run is in progress.
        """
        if not 0 <= index < len(self._statuses):
            raise IndexError(f"No record at index {index}")
        entry = self._statuses[index]
        if entry.status != CreationStatus.ERROR:
            raise ValueError(f"Record {index} is {entry.status.value}, only failed records can be retried")
        self._begin()
        try:
            await self._attempt(index, self.manual_policy)
        finally:
            self._finish()
        return self._view(index)

    def _begin(self) -> None:
        if self._running:
            raise ProvisioningAlreadyStarted("A provisioning run is already in progress")
        self._running = True

    def _finish(self) -> None:
        self._running = False
        self.end()

    async def _attempt(self, index: int, policy: RetryPolicy) -> None:
        """creating → (policy) → completed | error, emitting each transition."""
        entry = self._statuses[index]
        entry.status = CreationStatus.CREATING
        entry.error = None
        self._emit(index)

        async def per_attempt() -> None:
            entry.attempts += 1
            await self.service.create(entry.record)

        def on_failure(attempt: int, exc: Exception) -> None:
            self.log(
                f"Attempt {attempt}/{policy.max_attempts} failed",
                level="debug",
                record=entry.record.display_name,
                error=str(exc),
            )

        outcome = await policy.execute(per_attempt, on_failure)

        if outcome.succeeded:
            entry.status = CreationStatus.COMPLETED
        else:
            entry.status = CreationStatus.ERROR
            entry.error = str(outcome.error) or type(outcome.error).__name__
            self.record(provisioning_error(
                entry.error,
                self.name,
                entity_name=entry.record.display_name,
                retry_count=outcome.attempts - 1,
                original=outcome.error,
            ))
        self._emit(index)
        self.logger.tick(f"{entry.record.display_name} {entry.status.value}")

    def to_dict(self) -> dict:
        """Export status for JSON output."""
        summary = self.summary()
        return {
            "batch_status": self.batch_status.value,
            "completed_count": summary.completed_count,
            "error_count": summary.error_count,
            "total": summary.total,
            "records": [
                {
                    "id": s.record.id,
                    "name": s.record.display_name,
                    "username": s.record.username,
                    "status": s.status.value,
                    "error": s.error,
                    "attempts": s.attempts,
                }
                for s in self._statuses
            ],
        }
