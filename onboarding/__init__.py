"""Student Roster Bulk Onboarding.

Turns an unstructured class list (pasted text or an uploaded file) into
reviewed student accounts: AI extraction with confidence gating, a local
fallback parser, operator review, and sequential account creation with
per-record retry.

Architecture:
    core/             - config, errors, logging, validation, credentials, LLM client
    prompts/          - extraction prompt
    pydantic_models/  - records and extraction results
    services/         - extraction service and account backend boundaries
    stages/           - ingestion, review and provisioning stages
    export/           - printable credential sheets
    wizard.py         - the add-students state machine

Usage:
    from onboarding import WizardController

    wizard = WizardController(extraction_service, account_service)
    wizard.select_create_new()
    await wizard.submit_text("Jane Doe\\nJohn Smith")
    if wizard.advance():
        summary = await wizard.run_provisioning()

CLI:
    onboard class_list.txt --sheets
"""

from onboarding.wizard import WizardController
from onboarding.pydantic_models import (
    Record,
    ContentType,
    ResultSource,
    ExtractedStudent,
    ExtractionResponse,
    ExtractionResult,
)
from onboarding.stages import (
    IngestionPipeline,
    ReviewStage,
    ProvisioningOrchestrator,
    RetryPolicy,
    StatusUpdate,
    ProvisioningSummary,
    CreationStatus,
    WizardState,
    WizardStep,
)
from onboarding.services import (
    ExtractionService,
    LLMExtractionService,
    AccountCreationService,
    SimulatedAccountService,
)

__all__ = [
    # Main entry point
    "WizardController",
    # Models
    "Record",
    "ContentType",
    "ResultSource",
    "ExtractedStudent",
    "ExtractionResponse",
    "ExtractionResult",
    # Stages
    "IngestionPipeline",
    "ReviewStage",
    "ProvisioningOrchestrator",
    "RetryPolicy",
    "StatusUpdate",
    "ProvisioningSummary",
    "CreationStatus",
    "WizardState",
    "WizardStep",
    # Services
    "ExtractionService",
    "LLMExtractionService",
    "AccountCreationService",
    "SimulatedAccountService",
]
