"""Structured exception hierarchy for consistent error handling.

Every error raised by the allocation engine, the tax vault lifecycle and the
API layer derives from :class:`PayvaultError`, which carries a machine-readable
error code, a severity used for alerting, structured context and the original
cause.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for monitoring and alerting
- **PayvaultError**: Base exception with rich context and fingerprinting
- **Specialized exceptions**: validation, not found, auth and persistence
  failures

The API boundary maps each specialized exception to an HTTP status code; the
domain layer never catches these itself.
"""

import hashlib
import traceback
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for the Payvault application."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """Authentication failed or user is not authorized for this action."""

    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    """A write to the underlying store failed."""


class Severity(Enum):
    """Severity levels used to decide logging level and alerting."""

    LOW = "LOW"
    """Expected errors caused by user input."""

    MEDIUM = "MEDIUM"
    """Errors that affect a single operation but not data integrity."""

    HIGH = "HIGH"
    """Errors impacting critical functionality or data integrity."""

    CRITICAL = "CRITICAL"
    """Errors requiring immediate attention."""


class PayvaultError(Exception):
    """Base exception class for all Payvault application exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        # Exclude this frame
        self.stack_trace = traceback.format_stack()[:-1]
        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Generate a fingerprint for error grouping.

        The hash combines the exception type, the error code and the last
        application frames, so the same failure raised from the same place
        groups together in monitoring.

        Returns:
            str: A 16 character hex digest
        """
        max_frames = 5
        relevant_frames = self.stack_trace[-max_frames:]

        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"
        for frame in relevant_frames:
            if "site-packages" not in frame and "src/" in frame:
                lines = frame.strip().split("\n")
                if lines:
                    fingerprint_data += f":{lines[0]}"

        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Whether this error is part of normal operation (LOW or MEDIUM)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    @property
    def should_alert(self) -> bool:
        """Whether this error should trigger alerts (HIGH or CRITICAL)."""
        return self.severity in (Severity.HIGH, Severity.CRITICAL)

    def __str__(self) -> str:
        """Return the error code and message."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return a detailed representation of the exception."""
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ValidationError(PayvaultError):
    """Raised for out-of-range percentages and malformed or missing amounts."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.VALIDATION_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class NotFoundError(PayvaultError):
    """Raised when an operation targets a user or tax vault that doesn't exist."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.NOT_FOUND,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class UnauthorizedError(PayvaultError):
    """Raised when a bearer credential is missing or cannot be verified."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.UNAUTHORIZED,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)


class PersistenceError(PayvaultError):
    """Raised when a write to the goal or user store fails.

    For allocations the context carries ``applied_goal_ids``: the goals whose
    increments were durably applied before the failure. Re-invoking the
    allocation double-counts those goals.
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.PERSISTENCE_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)
