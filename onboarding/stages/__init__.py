"""Wizard stages: ingestion, review and provisioning."""

from onboarding.stages.stage_base import StageRunner, WizardState, WizardStep
from onboarding.stages.ingestion_stage import (
    FALLBACK_WARNING,
    NO_RECORDS_MESSAGE,
    IngestionPipeline,
    gate_reasons,
    truncate_input,
)
from onboarding.stages.review_stage import ReviewStage
from onboarding.stages.provisioning_stage import (
    AttemptOutcome,
    BatchStatus,
    CreationStatus,
    ProvisioningOrchestrator,
    ProvisioningSummary,
    RecordStatus,
    RetryPolicy,
    StatusUpdate,
)

__all__ = [
    # Base
    "StageRunner",
    "WizardState",
    "WizardStep",
    # Ingestion
    "IngestionPipeline",
    "truncate_input",
    "gate_reasons",
    "NO_RECORDS_MESSAGE",
    "FALLBACK_WARNING",
    # Review
    "ReviewStage",
    # Provisioning
    "ProvisioningOrchestrator",
    "RetryPolicy",
    "AttemptOutcome",
    "CreationStatus",
    "BatchStatus",
    "RecordStatus",
    "StatusUpdate",
    "ProvisioningSummary",
]
