"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean aggregates. The two webhook payloads mirror what the
Payment Ledger and the Delivery Dispatcher push.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str
    city: str
    state: str | None = None
    postal_code: str
    country: str


class ShippingSchema(BaseModel):
    recipient_name: str = Field(min_length=1, max_length=255)
    recipient_email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    address: AddressSchema

    def flatten(self) -> dict:
        return {
            "recipient_name": self.recipient_name,
            "recipient_email": self.recipient_email,
            **self.address.model_dump(),
        }


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    user_id: str = Field(min_length=1)
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    shipping: ShippingSchema

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "user-1",
                    "product_id": "42",
                    "quantity": 2,
                    "shipping": {
                        "recipient_name": "Jane Doe",
                        "recipient_email": "jane@example.com",
                        "address": {
                            "street": "123 Main St",
                            "city": "Springfield",
                            "state": "IL",
                            "postal_code": "62701",
                            "country": "US",
                        },
                    },
                }
            ]
        }
    }


class CancelOrderRequest(BaseModel):
    user_id: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Webhook Schemas
# ---------------------------------------------------------------------------
class PaymentWebhook(BaseModel):
    type: str = Field(min_length=1)
    order_id: str = Field(min_length=1)
    payment_id: str | None = None
    amount: float | None = None
    paid_at: datetime | None = None


class DeliveryWebhook(BaseModel):
    shipment_id: str = Field(min_length=1)
    status: str = Field(min_length=1)
    timestamp: datetime | None = None


class WebhookAck(BaseModel):
    received: bool = True


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderResponse(BaseModel):
    order_id: str
    user_id: str
    product_id: str
    quantity: int
    unit_price: float
    total_amount: float
    status: str
    reason: str | None = None
    warehouse_id: str | None = None
    reservation_id: str | None = None
    payment_id: str | None = None
    payment_reference: str | None = None
    payment_status: str | None = None
    shipment_id: str | None = None
    actual_delivery: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def of(cls, order) -> "OrderResponse":
        return cls(
            order_id=str(order.id),
            user_id=str(order.user_id),
            product_id=str(order.product_id),
            quantity=order.quantity,
            unit_price=order.unit_price,
            total_amount=order.total_amount,
            status=order.status,
            reason=order.reason,
            warehouse_id=str(order.warehouse_id) if order.warehouse_id else None,
            reservation_id=str(order.reservation_id) if order.reservation_id else None,
            payment_id=str(order.payment_id) if order.payment_id else None,
            payment_reference=order.payment_reference,
            payment_status=order.payment_status,
            shipment_id=order.shipment_id,
            actual_delivery=order.actual_delivery,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
