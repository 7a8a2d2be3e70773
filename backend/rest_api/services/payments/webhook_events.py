"""
Paystack webhook events.

A closed set of handled events plus one UnhandledEvent variant. Handlers
dispatch with isinstance, so every handled kind is listed here.

Usage:
    event = parse_webhook_event(payload)
    if isinstance(event, ChargeSuccessEvent):
        ...
"""

from datetime import datetime
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from shared.config.constants import WebhookEventType


class WebhookPayloadError(ValueError):
    """The body is JSON but not a usable webhook event."""


class ChargeCustomer(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    customer_code: str | None = None


class ChargeData(BaseModel):
    """`data` of a charge.* event."""

    model_config = ConfigDict(extra="ignore")

    reference: str = Field(min_length=1)
    amount: int
    status: str | None = None
    channel: str | None = None
    currency: str | None = None
    paid_at: datetime | None = None
    customer: ChargeCustomer | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_object_or_none(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @property
    def customer_email(self) -> str | None:
        return self.customer.email if self.customer else None


class ChargeSuccessEvent(BaseModel):
    event: Literal["charge.success"]
    data: ChargeData


class ChargeFailedEvent(BaseModel):
    event: Literal["charge.failed"]
    data: ChargeData


class UnhandledEvent(BaseModel):
    """Any other event: acknowledged without action."""

    model_config = ConfigDict(extra="allow")

    event: str


HandledEvent = Union[ChargeSuccessEvent, ChargeFailedEvent]
WebhookEvent = Union[ChargeSuccessEvent, ChargeFailedEvent, UnhandledEvent]

_handled_adapter: TypeAdapter[HandledEvent] = TypeAdapter(
    Union[ChargeSuccessEvent, ChargeFailedEvent]
)

HANDLED_EVENT_TYPES = frozenset({WebhookEventType.CHARGE_SUCCESS, WebhookEventType.CHARGE_FAILED})


def parse_webhook_event(payload: Any) -> WebhookEvent:
    """
    Turn a decoded JSON body into a webhook event.

    Raises:
        WebhookPayloadError: not an object, no event name, or a handled
            event whose data is malformed
    """
    if not isinstance(payload, dict):
        raise WebhookPayloadError("Webhook body is not a JSON object")

    event_type = payload.get("event")
    if not isinstance(event_type, str) or not event_type:
        raise WebhookPayloadError("Webhook body has no event name")

    if event_type not in HANDLED_EVENT_TYPES:
        return UnhandledEvent(event=event_type)

    try:
        return _handled_adapter.validate_python(payload)
    except ValueError as e:
        raise WebhookPayloadError(f"Malformed {event_type} payload: {e}") from e
