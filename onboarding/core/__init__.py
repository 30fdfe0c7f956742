"""Core utilities for the onboarding pipeline."""

from onboarding.core.config import (
    LLM_PROVIDER,
    API_KEY_ENV_VAR,
    API_KEY_ENV_VARS,
    EXTRACTION_MODEL,
    ConfidenceThresholds,
    IngestionConfig,
    ProvisioningConfig,
    LLMConfig,
    CredentialWords,
    RegexPatterns,
)
from onboarding.core.llm_client import LLMClient, LLMResponse, parse_json_object
from onboarding.core.llm_router import build_router
from onboarding.core.cost_tracker import CostTracker, CallUsage
from onboarding.core.pipeline_logger import PipelineLogger, get_logger, reset_logger
from onboarding.core.errors import (
    ErrorSeverity,
    ErrorCategory,
    OnboardingError,
    StageErrors,
    ServiceFailureKind,
    ExtractionServiceError,
    FileInputError,
    AccountCreationError,
    ProvisioningAlreadyStarted,
    WizardTransitionError,
    classify_status,
    find_status_code,
    llm_api_error,
    file_input_error,
    validation_error,
    provisioning_error,
)
from onboarding.core.credentials import CredentialGenerator
from onboarding.core.validation import (
    validate,
    is_valid,
    is_roster_valid,
    roster_errors,
    error_messages,
    sanitize_first_name,
    sanitize_last_initial,
    sanitize_password,
)
from onboarding.core.heuristic_parser import (
    HeuristicParse,
    capitalize_first_name,
    ParsedName,
    heuristic_extract,
    parse_csv,
    parse_line,
    parse_lines,
)
from onboarding.core.file_input import check_size, decode_upload, read_upload

__all__ = [
    # Configuration
    "LLM_PROVIDER",
    "API_KEY_ENV_VAR",
    "API_KEY_ENV_VARS",
    "EXTRACTION_MODEL",
    "ConfidenceThresholds",
    "IngestionConfig",
    "ProvisioningConfig",
    "LLMConfig",
    "CredentialWords",
    "RegexPatterns",
    # LLM
    "LLMClient",
    "LLMResponse",
    "parse_json_object",
    "build_router",
    "CostTracker",
    "CallUsage",
    # Logging
    "PipelineLogger",
    "get_logger",
    "reset_logger",
    # Errors
    "ErrorSeverity",
    "ErrorCategory",
    "OnboardingError",
    "StageErrors",
    "ServiceFailureKind",
    "ExtractionServiceError",
    "FileInputError",
    "AccountCreationError",
    "ProvisioningAlreadyStarted",
    "WizardTransitionError",
    "classify_status",
    "find_status_code",
    "llm_api_error",
    "file_input_error",
    "validation_error",
    "provisioning_error",
    # Credentials
    "CredentialGenerator",
    # Validation
    "validate",
    "is_valid",
    "is_roster_valid",
    "roster_errors",
    "error_messages",
    "sanitize_first_name",
    "sanitize_last_initial",
    "sanitize_password",
    # Fallback parsing
    "HeuristicParse",
    "capitalize_first_name",
    "ParsedName",
    "heuristic_extract",
    "parse_csv",
    "parse_line",
    "parse_lines",
    # File input
    "check_size",
    "decode_upload",
    "read_upload",
]
