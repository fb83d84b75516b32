"""Error types and AWS error classification."""

from typing import Optional, Dict, Any, List, Iterable
from enum import Enum
from dataclasses import dataclass
from botocore.exceptions import (
    ClientError,
    EndpointConnectionError,
    NoCredentialsError,
    PartialCredentialsError,
)
from tfaws.utils.logging import get_logger

logger = get_logger(__name__)


class ErrorCategory(Enum):
    """Categories of errors raised by the provider."""
    CONFIGURATION = "configuration"
    AWS = "aws"
    NETWORK = "network"
    STATE = "state"
    DEPENDENCY = "dependency"
    NOT_FOUND = "not_found"
    TAGGING = "tagging"
    SWEEP = "sweep"
    CREDENTIAL = "credential"
    PERMISSION = "permission"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ErrorContext:
    """Context information for an error."""
    resource_id: Optional[str] = None
    resource_type: Optional[str] = None
    operation: Optional[str] = None
    region: Optional[str] = None
    aws_service: Optional[str] = None
    request_id: Optional[str] = None
    additional_info: Optional[Dict[str, Any]] = None


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[ErrorContext] = None,
        cause: Optional[BaseException] = None,
        suggestions: Optional[List[str]] = None
    ):
        """Initialize provider error.

        Args:
            message: Human-readable error message
            category: Error category
            severity: Error severity
            context: Additional context about the error
            cause: Original exception that caused this error
            suggestions: List of suggested fixes
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.cause = cause
        self.suggestions = suggestions or []

    def to_user_message(self) -> str:
        """Format the error for display to a user."""
        lines = [f"{self.severity.value.upper()}: {self.message}"]

        if self.context.resource_id:
            lines.append(f"   Resource: {self.context.resource_id}")
        if self.context.region:
            lines.append(f"   Region: {self.context.region}")
        if self.context.operation:
            lines.append(f"   Operation: {self.context.operation}")

        if self.suggestions:
            lines.append("\nSuggested fixes:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"   {i}. {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            'message': self.message,
            'category': self.category.value,
            'severity': self.severity.value,
            'context': {
                'resource_id': self.context.resource_id,
                'resource_type': self.context.resource_type,
                'operation': self.context.operation,
                'region': self.context.region,
                'aws_service': self.context.aws_service,
                'request_id': self.context.request_id,
                'additional_info': self.context.additional_info
            },
            'cause': str(self.cause) if self.cause else None,
            'suggestions': self.suggestions
        }


class ConfigurationError(ProviderError):
    """Error in configuration file or settings."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.CRITICAL,
            **kwargs
        )


class NotFoundError(ProviderError):
    """The remote object does not exist (or no longer exists)."""

    def __init__(self, message: str = "couldn't find resource", **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.WARNING,
            **kwargs
        )


class TaggingError(ProviderError):
    """A tag or untag call failed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.TAGGING,
            severity=ErrorSeverity.ERROR,
            **kwargs
        )


class SweepError(ProviderError):
    """A sweeper failed to list or delete resources.

    ``errors`` holds the individual failures when several deletes failed.
    """

    def __init__(self, message: str, errors: Optional[Iterable[BaseException]] = None, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.SWEEP,
            severity=ErrorSeverity.ERROR,
            **kwargs
        )
        self.errors = list(errors or [])


class StateError(ProviderError):
    """Error related to resource state."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.STATE,
            severity=ErrorSeverity.CRITICAL,
            **kwargs
        )


class DependencyError(ProviderError):
    """Error related to resource dependencies."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.DEPENDENCY,
            severity=ErrorSeverity.ERROR,
            **kwargs
        )


class ValidationError(ProviderError):
    """Resource arguments failed validation."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.ERROR,
            **kwargs
        )


def error_code(error: BaseException) -> Optional[str]:
    """Return the AWS error code of a ClientError, or None."""
    if isinstance(error, ClientError):
        return error.response.get('Error', {}).get('Code')
    return None


def error_message(error: BaseException) -> str:
    """Return the AWS error message of a ClientError, else str(error)."""
    if isinstance(error, ClientError):
        return error.response.get('Error', {}).get('Message', str(error))
    return str(error)


def is_error_code(error: BaseException, *codes: str) -> bool:
    """Check whether error is a ClientError with one of the given codes."""
    return error_code(error) in codes


def error_message_contains(error: BaseException, code: str, text: str) -> bool:
    """Check for a ClientError with the given code whose message contains text."""
    return error_code(error) == code and text in error_message(error)


class ErrorHandler:
    """Converts botocore exceptions into categorized provider errors."""

    AWS_ERROR_MAPPING = {
        'InvalidClientTokenId': {
            'category': ErrorCategory.CREDENTIAL,
            'message': 'AWS credentials are invalid or expired',
            'suggestions': [
                'Verify credentials using: aws sts get-caller-identity',
                'Update credentials if they have expired'
            ]
        },
        'ExpiredToken': {
            'category': ErrorCategory.CREDENTIAL,
            'message': 'AWS session token has expired',
            'suggestions': ['Refresh your AWS session credentials']
        },
        'AccessDenied': {
            'category': ErrorCategory.PERMISSION,
            'message': 'Access denied - insufficient permissions',
            'suggestions': [
                'Check IAM policies attached to your user/role',
                'Review service control policies (SCPs) if using AWS Organizations'
            ]
        },
        'AccessDeniedException': {
            'category': ErrorCategory.PERMISSION,
            'message': 'Access denied - insufficient permissions',
            'suggestions': ['Check IAM policies attached to your user/role']
        },
        'ResourceNotFoundException': {
            'category': ErrorCategory.NOT_FOUND,
            'message': 'Resource not found',
            'suggestions': [
                'Verify the resource exists in the specified region',
                'Check if the resource was deleted outside of this tool'
            ]
        },
        'ValidationException': {
            'category': ErrorCategory.VALIDATION,
            'message': 'Invalid parameter or configuration',
            'suggestions': ['Check AWS documentation for parameter requirements']
        },
        'ServiceUnavailable': {
            'category': ErrorCategory.NETWORK,
            'message': 'AWS service temporarily unavailable',
            'suggestions': ['Wait a few moments and retry']
        }
    }

    def handle_exception(
        self,
        error: BaseException,
        context: Optional[ErrorContext] = None
    ) -> ProviderError:
        """Convert an exception to a ProviderError.

        Args:
            error: The exception to handle
            context: Additional context about where the error occurred

        Returns:
            ProviderError with categorization and suggestions
        """
        context = context or ErrorContext()

        if isinstance(error, ProviderError):
            return error

        if isinstance(error, ClientError):
            return self._handle_aws_error(error, context)

        if isinstance(error, (NoCredentialsError, PartialCredentialsError)):
            return ProviderError(
                message=f'Credential error: {error}',
                category=ErrorCategory.CREDENTIAL,
                severity=ErrorSeverity.CRITICAL,
                context=context,
                cause=error,
                suggestions=[
                    'Configure AWS credentials using: aws configure',
                    'Specify a profile with --profile flag'
                ]
            )

        if isinstance(error, (EndpointConnectionError, ConnectionError, TimeoutError)):
            return ProviderError(
                message=f'Network error: {error}',
                category=ErrorCategory.NETWORK,
                context=context,
                cause=error,
                suggestions=['Check that the service is available in this region']
            )

        return ProviderError(
            message=str(error),
            category=ErrorCategory.UNKNOWN,
            context=context,
            cause=error
        )

    def _handle_aws_error(self, error: ClientError, context: ErrorContext) -> ProviderError:
        code = error_code(error) or 'Unknown'
        message = error_message(error)
        context.request_id = error.response.get('ResponseMetadata', {}).get('RequestId')

        error_info = self.AWS_ERROR_MAPPING.get(code)
        if error_info:
            if error_info['category'] == ErrorCategory.NOT_FOUND:
                return NotFoundError(
                    f"{error_info['message']}: {message}",
                    context=context,
                    cause=error,
                    suggestions=error_info['suggestions']
                )
            return ProviderError(
                message=f"{error_info['message']}: {message}",
                category=error_info['category'],
                context=context,
                cause=error,
                suggestions=error_info['suggestions']
            )

        return ProviderError(
            message=f"AWS Error ({code}): {message}",
            category=ErrorCategory.AWS,
            context=context,
            cause=error,
            suggestions=[f'AWS Request ID: {context.request_id}']
        )

    def log_error(self, error: ProviderError) -> None:
        """Log an error at a level matching its severity."""
        log_message = error.to_user_message()

        if error.severity in (ErrorSeverity.CRITICAL, ErrorSeverity.ERROR):
            logger.error(log_message)
        elif error.severity == ErrorSeverity.WARNING:
            logger.warning(log_message)
        else:
            logger.info(log_message)

        logger.debug(f"Error details: {error.to_dict()}")


error_handler = ErrorHandler()
