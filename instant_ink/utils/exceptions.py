"""
Custom exceptions for instant-ink.

Only transport failures, whole-document structural failures and broken
configuration surface as exceptions. Missing individual fields in a status
document are absorbed by the extractor and reported as zero.
"""
import re
from datetime import datetime
from typing import Optional, Dict, Any


class InstantInkError(Exception):
    """
    Base exception for all instant-ink errors.

    Attributes:
        message: User-friendly error message
        error_code: Machine-readable error code
        details: Additional context as dictionary
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize InstantInkError.

        Args:
            message: User-friendly error message
            error_code: Machine-readable error code (default: derived from class name)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.details = details or {}
        self.timestamp = datetime.now()
        super().__init__(message)

    def _generate_error_code(self) -> str:
        """Convert the class name from CamelCase to UPPER_SNAKE_CASE."""
        name = self.__class__.__name__
        if name.endswith('Error'):
            name = name[:-5]
        s1 = re.sub('(.)([A-Z][a-z]+)', r'\1_\2', name)
        return re.sub('([a-z0-9])([A-Z])', r'\1_\2', s1).upper()

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary format.

        Returns:
            Dictionary with error information
        """
        return {
            "status": "error",
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat()
        }


class PrinterNetworkError(InstantInkError):
    """The status document could not be fetched from the printer."""

    def __init__(self, printer_url: str, reason: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize PrinterNetworkError.

        Args:
            printer_url: Status document URL that was requested
            reason: Transport failure reason
            details: Additional context
        """
        error_details = {"printer_url": printer_url, "reason": reason}
        if details:
            error_details.update(details)

        super().__init__(
            message=f"Network error: {reason}",
            error_code="NETWORK_ERROR",
            details=error_details
        )
        self.printer_url = printer_url
        self.reason = reason


class ParsingError(InstantInkError):
    """The status document does not match the consumable schema."""

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"XML parsing error: {reason}",
            error_code="PARSING_ERROR",
            details={"reason": reason, **(details or {})}
        )
        self.reason = reason


class ConfigurationError(InstantInkError):
    """Persisted configuration is malformed or cannot be written."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Configuration error: {message}",
            error_code="CONFIGURATION_ERROR",
            details=details
        )
