"""Base classes for wizard stages.

- **WizardState** (mutable): the single authoritative copy of everything the
  wizard holds: current step, the roster, the text the operator typed, a
  pending extraction result waiting for confirmation. Stages receive the
  roster list by reference; they never copy it.
- **StageRunner**: base class giving each stage a name, the session logger
  and a shared error log.

"Unsaved work" is a derived property of WizardState rather than a flag each
stage has to remember to set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from onboarding.core import PipelineLogger, StageErrors, OnboardingError, get_logger
from onboarding.pydantic_models import ExtractionResult, Record


class WizardStep(str, Enum):
    """Steps of the add-students wizard."""

    ACCOUNT_TYPE = "account_type"
    INPUT = "input"
    REVIEW = "review"
    PROVISIONING = "provisioning"
    LINK_EXISTING = "link_existing"

    def __str__(self) -> str:
        return self.value


@dataclass
class WizardState:
    """Mutable state of one wizard session.

    Field ownership:
    - step, roster_commit: written only by the wizard controller
    - roster: owned by the wizard; edited in place by the review stage,
      read by the provisioning stage
    - input_text, staged_file, pending_result: written by the input step
    - show_validation: set when review tried to advance with invalid records
    - errors: accumulated by every stage
    """

    step: WizardStep = WizardStep.ACCOUNT_TYPE
    roster: list[Record] = field(default_factory=list)
    input_text: str = ""
    staged_file: str | None = None
    pending_result: ExtractionResult | None = None
    last_result: ExtractionResult | None = None
    show_validation: bool = False
    linking_code: str | None = None
    confirming_close: bool = False
    roster_commit: int = 0  # Bumped every time a new roster is committed to review
    errors: StageErrors = field(default_factory=StageErrors)

    @property
    def has_unsaved_input(self) -> bool:
        """True if anything the operator entered would be lost on close."""
        return (
            bool(self.input_text.strip())
            or self.staged_file is not None
            or self.pending_result is not None
            or bool(self.roster)
        )

    @property
    def is_pristine(self) -> bool:
        """Still on the first screen with nothing entered."""
        return self.step == WizardStep.ACCOUNT_TYPE and not self.has_unsaved_input

    @property
    def needs_close_confirmation(self) -> bool:
        return not self.is_pristine

    def reset(self) -> None:
        """Discard everything and return to the first screen.

        The roster list object is cleared in place so stale references held
        elsewhere see the discard too.
        """
        self.step = WizardStep.ACCOUNT_TYPE
        self.roster.clear()
        self.input_text = ""
        self.staged_file = None
        self.pending_result = None
        self.last_result = None
        self.show_validation = False
        self.linking_code = None
        self.confirming_close = False
        self.errors.clear()


class StageRunner:
    """Base class for wizard stages.

    Each stage:
    - Has a name for logging
    - Shares the session logger and error log
    - Handles its own failures; nothing escapes to the wizard as an exception
      except programming errors
    """

    name: str = "unnamed"

    def __init__(self, logger: PipelineLogger | None = None, errors: StageErrors | None = None):
        self.logger = logger or get_logger()
        self.errors = errors if errors is not None else StageErrors()

    def log(self, message: str, level: str = "info", **data):
        """Log a message with stage context."""
        if level == "debug":
            self.logger.debug(f"[{self.name}] {message}", **data)
        elif level == "warning":
            self.logger.warning(f"[{self.name}] {message}", **data)
        elif level == "error":
            self.logger.error(f"[{self.name}] {message}", **data)
        else:
            self.logger.info(f"[{self.name}] {message}", **data)

    def record(self, error: OnboardingError) -> None:
        """Add to the shared error log and echo it to the logger."""
        self.errors.add(error)
        level = "warning" if error.severity.value == "warning" else "error"
        self.log(error.message, level=level)

    def start(self, total: int = 0):
        self.logger.start_stage(self.name, total)

    def end(self):
        self.logger.end_stage()
