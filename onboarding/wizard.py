"""Wizard controller: the add-students flow as an explicit state machine.

Steps and transitions::

    account_type ──► input ──► review ──► provisioning
         │             ▲         │
         └► link_existing        └─ (last record removed) ─► input

``back`` walks the arrows in reverse. ``request_close`` is available from
every step and asks for confirmation unless nothing has been entered yet.

All data lives in one WizardState. The review stage edits its roster list in
place and the provisioning run reads the same records, so there is never a
second copy to reconcile.

Illegal requests (advancing from the wrong step, accepting a result that is
not pending) raise WizardTransitionError: they are caller bugs. User-level
problems (no names found, invalid fields, failed accounts) are reported
through the state, never raised.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable

from onboarding.core import (
    CredentialGenerator,
    PipelineLogger,
    StageErrors,
    WizardTransitionError,
    get_logger,
)
from onboarding.core.validation import FieldError
from onboarding.pydantic_models import ExtractionResult, Record
from onboarding.services import AccountCreationService, ExtractionService
from onboarding.stages import (
    IngestionPipeline,
    ProvisioningOrchestrator,
    ProvisioningSummary,
    ReviewStage,
    StatusUpdate,
    WizardState,
    WizardStep,
)

_BACK = {
    WizardStep.INPUT: WizardStep.ACCOUNT_TYPE,
    WizardStep.LINK_EXISTING: WizardStep.ACCOUNT_TYPE,
    WizardStep.REVIEW: WizardStep.INPUT,
    WizardStep.PROVISIONING: WizardStep.REVIEW,
}


class WizardController:
    """Drives one add-students session."""

    def __init__(
        self,
        extraction_service: ExtractionService,
        account_service: AccountCreationService,
        credentials: CredentialGenerator | None = None,
        use_fallback: bool = True,
        logger: PipelineLogger | None = None,
        on_status: Callable[[StatusUpdate], None] | None = None,
        on_close: Callable[[], None] | None = None,
    ):
        """Initialize the wizard.

        Args:
            extraction_service: Service used to turn input text into names.
            account_service: Backend that creates one account per call.
            credentials: Generator for ids, passwords and linking codes.
            use_fallback: Use the heuristic parser when extraction fails.
            logger: Session logger. Defaults to the process-wide one.
            on_status: Called with every provisioning StatusUpdate.
            on_close: Called after the wizard has been discarded.
        """
        self.logger = logger or get_logger()
        self.state = WizardState()
        self.credentials = credentials or CredentialGenerator()
        self.account_service = account_service
        self.on_status = on_status
        self.on_close = on_close

        self.ingestion = IngestionPipeline(
            extraction_service,
            credentials=self.credentials,
            use_fallback=use_fallback,
            logger=self.logger,
            errors=self.state.errors,
        )
        self.review = ReviewStage(
            self.state.roster,
            credentials=self.credentials,
            logger=self.logger,
            errors=self.state.errors,
        )

        self.orchestrator: ProvisioningOrchestrator | None = None
        self._provisioning_task: asyncio.Task | None = None
        self._task_commit: int | None = None
        # Runs whose wizard was closed keep going; hold a reference until done
        self._detached: set[asyncio.Task] = set()

    @property
    def step(self) -> WizardStep:
        return self.state.step

    @property
    def roster(self) -> list[Record]:
        return self.state.roster

    def _require(self, action: str, *steps: WizardStep) -> None:
        if self.state.step not in steps:
            raise WizardTransitionError(action, self.state.step.value)

    def _go(self, step: WizardStep) -> None:
        self.logger.debug(f"[wizard] {self.state.step.value} -> {step.value}")
        self.state.step = step

    # Account type

    def select_create_new(self) -> None:
        self._require("select create new", WizardStep.ACCOUNT_TYPE)
        self._go(WizardStep.INPUT)

    def select_link_existing(self) -> str:
        """Enter the link-existing branch and return a fresh linking code."""
        self._require("select link existing", WizardStep.ACCOUNT_TYPE)
        self.state.linking_code = self.credentials.generate_linking_code()
        self._go(WizardStep.LINK_EXISTING)
        return self.state.linking_code

    # Input

    def set_input_text(self, text: str) -> None:
        self._require("edit input", WizardStep.INPUT)
        self.state.input_text = text

    def stage_file(self, path: str | Path) -> None:
        self._require("stage file", WizardStep.INPUT)
        self.state.staged_file = str(path)

    def clear_staged_file(self) -> None:
        self._require("clear file", WizardStep.INPUT)
        self.state.staged_file = None

    async def submit_text(self, text: str | None = None) -> ExtractionResult:
        """Extract from ``text`` (or the text already entered)."""
        self._require("submit text", WizardStep.INPUT)
        if text is not None:
            self.state.input_text = text
        result = await self.ingestion.extract(self.state.input_text)
        return self._handle_result(result)

    async def submit_file(self, path: str | Path | None = None) -> ExtractionResult:
        """Extract from ``path`` (or the staged file)."""
        self._require("submit file", WizardStep.INPUT)
        if path is not None:
            self.state.staged_file = str(path)
        if self.state.staged_file is None:
            raise WizardTransitionError("submit file without a file", self.state.step.value)
        result = await self.ingestion.extract_file(self.state.staged_file)
        return self._handle_result(result)

    def _handle_result(self, result: ExtractionResult) -> ExtractionResult:
        """Commit, hold for confirmation, or stay at input."""
        self.state.last_result = result
        if not result.has_records:
            self.state.pending_result = None
            self.logger.warning("[wizard] No records to review", errors=len(result.errors))
        elif result.needs_validation:
            self.state.pending_result = result
            self.logger.info("[wizard] Waiting for confirmation", records=len(result.records))
        else:
            self._commit(result.records)
        return result

    def accept_pending(self) -> None:
        """Operator confirmed a gated result: commit it and go to review."""
        self._require("accept result", WizardStep.INPUT)
        if self.state.pending_result is None:
            raise WizardTransitionError("accept without a pending result", self.state.step.value)
        self._commit(self.state.pending_result.records)

    def reject_pending(self) -> None:
        self._require("reject result", WizardStep.INPUT)
        self.state.pending_result = None

    def _commit(self, records: list[Record]) -> None:
        # Replace contents, not the list: the review stage holds this object
        self.state.roster[:] = records
        self.state.pending_result = None
        self.state.show_validation = False
        self.state.roster_commit += 1
        self.orchestrator = None
        self._provisioning_task = None
        self._task_commit = None
        self.logger.milestone(f"{len(records)} records ready for review")
        self._go(WizardStep.REVIEW)

    # Review

    def add_record(self) -> Record:
        self._require("add record", WizardStep.REVIEW)
        return self.review.add_record()

    def update_record(
        self,
        record_id: str,
        first_name: str | None = None,
        last_initial: str | None = None,
        password: str | None = None,
    ) -> Record:
        self._require("edit record", WizardStep.REVIEW)
        return self.review.update_record(record_id, first_name, last_initial, password)

    def regenerate_password(self, record_id: str) -> str:
        self._require("regenerate password", WizardStep.REVIEW)
        return self.review.regenerate_password(record_id)

    def remove_record(self, record_id: str) -> Record:
        """Remove a record. Removing the last one goes back to input."""
        self._require("remove record", WizardStep.REVIEW)
        removed = self.review.remove_record(record_id)
        if not self.state.roster:
            self.state.show_validation = False
            self._go(WizardStep.INPUT)
        return removed

    def field_errors(self) -> list[dict[str, FieldError]]:
        """Per-record field errors, only once the operator tried to advance."""
        if not self.state.show_validation:
            return [{} for _ in self.state.roster]
        return self.review.field_errors()

    def validation_messages(self) -> list[str]:
        if not self.state.show_validation:
            return []
        return self.review.messages()

    def advance(self) -> bool:
        """Review → provisioning if the roster is valid.

        Returns:
            True if the wizard moved on; False if it stayed and now shows
            validation errors.
        """
        self._require("advance", WizardStep.REVIEW)
        if not self.review.can_proceed:
            self.state.show_validation = True
            self.logger.warning("[wizard] Roster has invalid fields", problems=len(self.review.messages()))
            return False
        self.state.show_validation = False
        self._go(WizardStep.PROVISIONING)
        return True

    # Provisioning

    def start_provisioning(self) -> asyncio.Task:
        """Start the run for the current roster, or return the one already started.

        Repeated calls return the same task while it runs, and after it
        finishes as long as review added nothing. Records added in review after
        a finished run go out in a follow-up batch on the same orchestrator;
        records already attempted are never sent again.

        Must be called with a running event loop.
        """
        self._require("start provisioning", WizardStep.PROVISIONING)
        task = self._provisioning_task
        if task is not None and self._task_commit == self.state.roster_commit:
            if not task.done():
                return task
            added = self.orchestrator.untracked(self.state.roster)
            if not added:
                return task
            self.logger.info("[wizard] Provisioning records added in review", records=len(added))
            self._provisioning_task = asyncio.create_task(
                self.orchestrator.provision_added(list(self.state.roster))
            )
            return self._provisioning_task

        self.orchestrator = ProvisioningOrchestrator(
            self.account_service,
            logger=self.logger,
            errors=self.state.errors,
        )
        self.orchestrator.add_listener(self._forward_status)
        self._provisioning_task = asyncio.create_task(
            self.orchestrator.provision_all(list(self.state.roster))
        )
        self._task_commit = self.state.roster_commit
        return self._provisioning_task

    async def run_provisioning(self) -> ProvisioningSummary:
        return await self.start_provisioning()

    async def retry_failed(self) -> ProvisioningSummary:
        self._require("retry failed records", WizardStep.PROVISIONING)
        return await self._active_orchestrator("retry failed records").retry_failed_only()

    async def retry_one(self, index: int) -> StatusUpdate:
        self._require("retry record", WizardStep.PROVISIONING)
        return await self._active_orchestrator("retry record").retry_one(index)

    def _active_orchestrator(self, action: str) -> ProvisioningOrchestrator:
        if self.orchestrator is None:
            raise WizardTransitionError(f"{action} before provisioning started", self.state.step.value)
        return self.orchestrator

    def _forward_status(self, update: StatusUpdate) -> None:
        if self.on_status:
            self.on_status(update)

    # Navigation and close

    def back(self) -> None:
        """Go one step back. Not allowed while accounts are being created."""
        step = self.state.step
        if step not in _BACK:
            raise WizardTransitionError("go back", step.value)
        if step == WizardStep.PROVISIONING and self.orchestrator and self.orchestrator.is_running:
            raise WizardTransitionError("go back while provisioning", step.value)
        if step == WizardStep.LINK_EXISTING:
            self.state.linking_code = None
        if step == WizardStep.INPUT:
            self.state.pending_result = None
        self._go(_BACK[step])

    def request_close(self) -> bool:
        """Ask to close the wizard.

        Returns:
            True if the wizard closed immediately; False if a discard
            confirmation is now showing.
        """
        if not self.state.needs_close_confirmation:
            self._close()
            return True
        self.state.confirming_close = True
        return False

    def confirm_close(self) -> None:
        self._close()

    def cancel_close(self) -> None:
        self.state.confirming_close = False

    def _close(self) -> None:
        """Discard the session. A running batch keeps going but is no longer observed."""
        if self.orchestrator is not None:
            self.orchestrator.remove_listener(self._forward_status)
            # Anything the old orchestrator still records stays out of the next session
            self.orchestrator.errors = StageErrors()
        task = self._provisioning_task
        if task is not None and not task.done():
            self._detached.add(task)
            task.add_done_callback(self._detached.discard)
            self.logger.info("[wizard] Closed during provisioning; run continues unobserved")

        self.orchestrator = None
        self._provisioning_task = None
        self._task_commit = None
        self.state.reset()
        if self.on_close:
            self.on_close()

    def to_dict(self) -> dict:
        """Session snapshot for JSON output."""
        return {
            "step": self.state.step.value,
            "roster": [r.model_dump() for r in self.state.roster],
            "linking_code": self.state.linking_code,
            "provisioning": self.orchestrator.to_dict() if self.orchestrator else None,
            "errors": self.state.errors.to_dict(),
        }
