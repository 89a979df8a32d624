"""Wire contracts for durable broker messages.

Payloads travel as camelCase JSON objects. Each model knows its own
idempotency key (``message_id``) so consumers can deduplicate redeliveries.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from shared.errors import MalformedMessageError

M = TypeVar("M", bound="BrokerMessage")


class EmailType(Enum):
    ORDER_CONFIRMATION = "ORDER_CONFIRMATION"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    ORDER_CANCELLED = "ORDER_CANCELLED"
    REFUND_CONFIRMATION = "REFUND_CONFIRMATION"
    DELIVERY_UPDATE = "DELIVERY_UPDATE"


class BrokerMessage(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
        frozen=True,
    )

    @property
    def message_id(self) -> str:
        raise NotImplementedError

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class RollbackRequest(BrokerMessage):
    """Ask the Inventory Ledger to release every reservation of an order."""

    order_id: str = Field(alias="orderId", min_length=1)
    product_id: str = Field(alias="productId", min_length=1)
    amount: int = Field(gt=0)
    reason: str = Field(min_length=1)
    event_id: str = Field(alias="eventId", min_length=1)
    timestamp: datetime

    @property
    def message_id(self) -> str:
        return self.event_id


class RefundRequest(BrokerMessage):
    """Ask the Payment Ledger to refund (or void) the payment of an order."""

    order_id: str = Field(alias="orderId", min_length=1)
    reason: str = Field(min_length=1)
    event_id: str = Field(alias="eventId", min_length=1)
    timestamp: datetime
    user_id: str = Field(alias="userId", min_length=1)

    @property
    def message_id(self) -> str:
        return self.event_id


class StockSync(BrokerMessage):
    """Latest catalogue and stock state of one product."""

    product_id: str = Field(alias="productId", min_length=1)
    name: str
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    published: bool
    image_url: str | None = Field(default=None, alias="imageUrl")
    timestamp: datetime

    @property
    def message_id(self) -> str:
        return f"stock-sync:{self.product_id}:{self.timestamp.isoformat()}"


class EmailNotification(BrokerMessage):
    event_id: str = Field(alias="eventId", min_length=1)
    type: EmailType
    order_id: str = Field(alias="orderId", min_length=1)
    user_id: str = Field(alias="userId", min_length=1)
    recipient: str = Field(min_length=3)
    details: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime

    @property
    def message_id(self) -> str:
        return self.event_id


def event_id(kind: str, order_id: str, discriminator: str) -> str:
    """Deterministic id so a republished compensation is deduplicated downstream."""
    return f"evt-{kind}-{order_id}-{discriminator}".lower()


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_message(message_cls: type[M], payload: Any) -> M:
    """Validate ``payload`` against ``message_cls`` or raise ``MalformedMessageError``."""
    if not isinstance(payload, dict):
        raise MalformedMessageError(
            f"{message_cls.__name__} payload must be an object, got {type(payload).__name__}"
        )
    try:
        return message_cls.model_validate(payload)
    except SchemaError as exc:
        raise MalformedMessageError(
            f"Invalid {message_cls.__name__}: {exc.error_count()} error(s)",
            errors=exc.errors(include_url=False),
        ) from exc
