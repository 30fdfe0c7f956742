"""External collaborators: the extraction service and the account backend."""

from onboarding.services.extraction_service import ExtractionService, LLMExtractionService
from onboarding.services.account_service import AccountCreationService, SimulatedAccountService

__all__ = [
    "ExtractionService",
    "LLMExtractionService",
    "AccountCreationService",
    "SimulatedAccountService",
]
