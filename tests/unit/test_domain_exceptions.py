"""Tests for domain exceptions (error_code, message, details)."""

from eventpush.domain.exceptions import (
    ConfigurationException,
    DeliveryException,
    EventPushException,
    ResourceNotFoundException,
    ServiceUnavailableException,
    StreamException,
    ValidationException,
)


def test_base_exception_default_error_code() -> None:
    """EventPushException uses the class name when no error_code is given."""
    exc = EventPushException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "EventPushException"
    assert exc.details == {}


def test_to_dict() -> None:
    exc = EventPushException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {
        "error": "CUSTOM",
        "message": "Oops",
        "details": {"key": "value"},
    }


def test_validation_exception_field() -> None:
    exc = ValidationException("Timestamp is missing", field="dateTime")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "dateTime"}
    assert ValidationException("bad").details == {}


def test_resource_not_found() -> None:
    exc = ResourceNotFoundException("event", "E1")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.message == "event not found: E1"
    assert exc.details == {"resource_type": "event", "resource_id": "E1"}


def test_delivery_exception_status_optional() -> None:
    """DeliveryException only carries status_code when the transport answered."""
    with_status = DeliveryException("all_users", "quota exceeded", status_code=429)
    without = DeliveryException("device", "timed out")
    assert with_status.error_code == "DELIVERY_FAILED"
    assert with_status.details["status_code"] == 429
    assert "status_code" not in without.details
    assert without.message == "Notification delivery failed: timed out"


def test_infrastructure_error_codes() -> None:
    assert StreamException("reset").error_code == "STREAM_ERROR"
    assert ConfigurationException("no key").error_code == "CONFIGURATION_ERROR"
    assert ServiceUnavailableException().error_code == "SERVICE_UNAVAILABLE"
