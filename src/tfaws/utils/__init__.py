"""Utility modules for logging, AWS client management, errors and retries."""

from tfaws.utils.aws_client import ClientRegistry, AWSCredentials
from tfaws.utils.retry import RetryStrategy, with_retry, wait_for_status
from tfaws.utils.errors import (
    ErrorCategory,
    ErrorSeverity,
    ErrorContext,
    ProviderError,
    ConfigurationError,
    NotFoundError,
    TaggingError,
    SweepError,
    StateError,
    DependencyError,
    ValidationError,
    ErrorHandler,
    error_handler,
    error_code,
    is_error_code,
    error_message_contains,
)
from tfaws.utils.logging import get_logger, setup_logging, LogContext

__all__ = [
    # AWS Client
    'ClientRegistry',
    'AWSCredentials',

    # Retry
    'RetryStrategy',
    'with_retry',
    'wait_for_status',

    # Errors
    'ErrorCategory',
    'ErrorSeverity',
    'ErrorContext',
    'ProviderError',
    'ConfigurationError',
    'NotFoundError',
    'TaggingError',
    'SweepError',
    'StateError',
    'DependencyError',
    'ValidationError',
    'ErrorHandler',
    'error_handler',
    'error_code',
    'is_error_code',
    'error_message_contains',

    # Logging
    'get_logger',
    'setup_logging',
    'LogContext',
]
