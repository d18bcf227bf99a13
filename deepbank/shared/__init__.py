"""Shared utilities for DeepBank Terminal."""

from deepbank.shared.backend import BackendClient, BackendError, RemoteResult, Session
from deepbank.shared.loading import LoadingConfig, LoadingCoordinator, LoadingState
from deepbank.shared.logging import (
    ContextAdapter,
    LoggingConfig,
    LogLevel,
    format_error_for_user,
    get_logger,
    get_user_friendly_error,
    sanitize_dict,
    sanitize_message,
    setup_logging,
)
from deepbank.shared.network import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
)
from deepbank.shared.notifications import (
    Notification,
    NotificationCenter,
    Remediation,
    Severity,
)
from deepbank.shared.validation import (
    AmountPolicy,
    AmountValidator,
    IbanValidator,
    OperatingHours,
    ValidationErrorKind,
    ValidationResult,
)
from deepbank.shared.wizard import (
    BusinessRuleRejection,
    SubmissionError,
    SubmissionErrorKind,
    SubmissionReceipt,
    SubmissionState,
    WizardController,
    WizardStep,
)

__all__ = [
    "BackendClient",
    "BackendError",
    "RemoteResult",
    "Session",
    "LoadingConfig",
    "LoadingCoordinator",
    "LoadingState",
    "ContextAdapter",
    "LoggingConfig",
    "LogLevel",
    "format_error_for_user",
    "get_logger",
    "get_user_friendly_error",
    "sanitize_dict",
    "sanitize_message",
    "setup_logging",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "RetryConfig",
    "TimeoutConfig",
    "Notification",
    "NotificationCenter",
    "Remediation",
    "Severity",
    "AmountPolicy",
    "AmountValidator",
    "IbanValidator",
    "OperatingHours",
    "ValidationErrorKind",
    "ValidationResult",
    "BusinessRuleRejection",
    "SubmissionError",
    "SubmissionErrorKind",
    "SubmissionReceipt",
    "SubmissionState",
    "WizardController",
    "WizardStep",
]
