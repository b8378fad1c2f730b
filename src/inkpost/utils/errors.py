"""Centralized error handling module."""

from enum import Enum
from typing import Any, Dict, Optional

from inkpost.utils.logging import get_logger

_logger = None


def _get_logger():
    """Get logger with lazy initialisation."""
    global _logger
    if _logger is None:
        _logger = get_logger(__name__)
    return _logger


## Error Categories


class ErrorCategory(Enum):
    """Categories of errors for better handling."""

    NETWORK = "network"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    FILE_SYSTEM = "file_system"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


## Custom Exceptions


class InkpostError(Exception):
    """Base exception for all inkpost errors."""

    category = ErrorCategory.UNKNOWN
    user_message = "An error occurred"

    def __init__(
        self, message: str | None = None, details: Dict[str, Any] | None = None
    ):
        """Initialise InkpostError with optional message and details."""
        self.message = message or self.user_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error details to a dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "category": self.category.value,
            "message": self.message,
            "details": self.details,
        }


## Network Errors


class NetworkError(InkpostError):
    """Base exception for network-related errors."""

    category = ErrorCategory.NETWORK
    user_message = "A network error occurred"


class DeliveryError(NetworkError):
    """Exception for SMTP relay rejections and transport failures."""

    user_message = "Failed to send email"


class WorkerError(NetworkError):
    """Exception for non-success responses from the remote worker."""

    user_message = "The remote worker rejected the request"


## Authentication Errors


class AuthenticationError(InkpostError):
    """Base exception for authentication-related errors."""

    category = ErrorCategory.AUTHENTICATION
    user_message = "An authentication error occurred"


class MissingCredentialsError(AuthenticationError):
    """Exception for missing SMTP or worker credentials."""

    user_message = "Credentials not configured"


## Validation Errors


class ValidationError(InkpostError):
    """Base exception for validation-related errors."""

    category = ErrorCategory.VALIDATION
    user_message = "Invalid input"


class InvalidEmailAddressError(ValidationError):
    """Exception for invalid email addresses."""

    user_message = "Invalid email address"


class InvalidScheduleError(ValidationError):
    """Exception for a schedule that does not resolve to an instant."""

    user_message = "Invalid or incomplete schedule"


## File System Errors


class FileSystemError(InkpostError):
    """Base exception for file system-related errors."""

    category = ErrorCategory.FILE_SYSTEM
    user_message = "A file system error occurred"


class AttachmentNotFoundError(FileSystemError):
    """Exception when an attachment or inline image cannot be read."""

    user_message = "Attachment not found"


class EditorError(FileSystemError):
    """Exception when no external editor could be run."""

    user_message = "No suitable editor found"


## Configuration Errors


class ConfigurationError(InkpostError):
    """Base exception for configuration-related errors."""

    category = ErrorCategory.CONFIGURATION
    user_message = "A configuration error occurred"


class MissingConfigError(ConfigurationError):
    """Exception for missing configuration settings."""

    user_message = "Missing configuration settings"


class InvalidConfigError(ConfigurationError):
    """Exception for invalid configuration settings."""

    user_message = "Invalid configuration settings"


## Error Handler


class ErrorHandler:
    """Centralized error handling and logging."""

    @staticmethod
    def handle(
        error: Exception, context: str = "", log_traceback: bool = True
    ) -> Dict[str, Any]:
        """Handle errors with logging and user-friendly message."""
        if isinstance(error, InkpostError):
            _get_logger().error(f"{context}: {error.message}", extra=error.details)
            if log_traceback:
                _get_logger().exception(error)
            return error.to_dict()
        else:
            _get_logger().error(f"{context}: {str(error)}")
            if log_traceback:
                _get_logger().exception(error)
            return {
                "error_type": "UnknownError",
                "category": ErrorCategory.UNKNOWN.value,
                "message": str(error),
                "details": {"context": context},
            }


## Utility Functions


def format_error_message(error: Optional[Exception]) -> str:
    """Format an error message for display."""
    if isinstance(error, InkpostError):
        return error.message
    else:
        return "An unexpected error occurred - check logs for details."
