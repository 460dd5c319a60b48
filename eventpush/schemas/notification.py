"""Notification API schemas.

Limits follow what FCM accepts: data values must be scalars and are sent as
strings.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_TITLE_LENGTH = 200
MAX_BODY_LENGTH = 1000
MAX_DATA_KEYS = 20
MAX_DATA_KEY_LENGTH = 100
MAX_DATA_VALUE_LENGTH = 500
MAX_TOKEN_LENGTH = 500


def _required_text(value: str, name: str, max_length: int) -> str:
    if len(value) > max_length:
        raise ValueError(f"{name} must not exceed {max_length} characters")
    value = value.strip()
    if not value:
        raise ValueError(f"{name} is required and must be a non-empty string")
    return value


def validate_data(data: dict[str, Any]) -> dict[str, Any]:
    """Reject payloads FCM would not carry: too many keys, long keys or values, non-scalars."""
    if len(data) > MAX_DATA_KEYS:
        raise ValueError(f"data must not have more than {MAX_DATA_KEYS} keys")
    for key, value in data.items():
        if len(key) > MAX_DATA_KEY_LENGTH:
            raise ValueError(
                f"All data keys must be strings under {MAX_DATA_KEY_LENGTH} characters"
            )
        if not isinstance(value, (str, int, float, bool)):
            raise ValueError(
                f'data values must be string, number, or boolean (got "{type(value).__name__}" for key "{key}")'
            )
        if len(str(value)) > MAX_DATA_VALUE_LENGTH:
            raise ValueError(
                f'data value for "{key}" exceeds {MAX_DATA_VALUE_LENGTH} characters'
            )
    return data


class NotificationRequest(BaseModel):
    """Body for POST /notifications/send-to-all."""

    title: str
    body: str
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title")
    @classmethod
    def title_valid(cls, v: str) -> str:
        return _required_text(v, "title", MAX_TITLE_LENGTH)

    @field_validator("body")
    @classmethod
    def body_valid(cls, v: str) -> str:
        return _required_text(v, "body", MAX_BODY_LENGTH)

    @field_validator("data")
    @classmethod
    def data_valid(cls, v: dict[str, Any]) -> dict[str, Any]:
        return validate_data(v)


class DeviceNotificationRequest(NotificationRequest):
    """Body for POST /notifications/send-to-device."""

    token: str

    @field_validator("token")
    @classmethod
    def token_valid(cls, v: str) -> str:
        if len(v) > MAX_TOKEN_LENGTH:
            raise ValueError("token is too long")
        v = v.strip()
        if not v:
            raise ValueError("token is required and must be a non-empty string")
        return v


class SendTestRequest(BaseModel):
    """Body for POST /notifications/send-test; both fields have defaults."""

    title: str = "Test Notification"
    body: str = "This is a test notification"

    @field_validator("title")
    @classmethod
    def title_valid(cls, v: str) -> str:
        return _required_text(v, "title", MAX_TITLE_LENGTH)

    @field_validator("body")
    @classmethod
    def body_valid(cls, v: str) -> str:
        return _required_text(v, "body", MAX_BODY_LENGTH)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SendResponse(_CamelModel):
    """Result of a successful send (``{"success": true, "messageId": ...}``)."""

    success: bool = True
    message_id: str


class NotificationStatsResponse(_CamelModel):
    total_sent: int
    total_errors: int
    recent_logs: list[dict[str, Any]]
    recent_errors: list[dict[str, Any]]


class StatsResponse(_CamelModel):
    """Response for GET /notifications/stats."""

    success: bool = True
    stats: NotificationStatsResponse
