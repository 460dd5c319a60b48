"""Domain exceptions for the event push service.

Defines domain-level exceptions independent of infrastructure concerns.
The presentation layer maps them to HTTP responses in exception handlers;
the change listener catches them per change so one bad document never
stops the stream.
"""

from typing import Any


class EventPushException(Exception):
    """Base exception for all event push errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(EventPushException):
    """Raised when input validation fails (e.g. missing title or bad timestamp)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(EventPushException):
    """Raised when a requested resource (e.g. an event document) is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'event').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class DeliveryException(EventPushException):
    """Raised when the push transport rejects or fails to deliver a message."""

    def __init__(
        self,
        target: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize with delivery target and failure reason.

        Args:
            target: Topic name, or 'device' for token sends (tokens are not logged).
            reason: Transport error description.
            status_code: HTTP status from the transport, when there was a response.
        """
        details: dict[str, Any] = {"target": target, "reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            f"Notification delivery failed: {reason}",
            "DELIVERY_FAILED",
            details,
        )


class StreamException(EventPushException):
    """Raised when the change subscription itself fails (not a single change)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "STREAM_ERROR")


class ConfigurationException(EventPushException):
    """Raised at startup when required configuration or credentials are missing."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIGURATION_ERROR")


class ServiceUnavailableException(EventPushException):
    """Raised when an operation needs Firestore/FCM but they are not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="Notification service is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
