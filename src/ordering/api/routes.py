"""FastAPI routes for the Ordering domain — orders and the inbound saga webhooks."""

from fastapi import APIRouter

from ordering.api.schemas import (
    CancelOrderRequest,
    CreateOrderRequest,
    DeliveryWebhook,
    OrderResponse,
    PaymentWebhook,
    WebhookAck,
)
from ordering.order.orchestrator import OrderOrchestrator

# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
# The orchestrator makes blocking calls into other contexts, so these run as
# sync routes in the threadpool.
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
def create_order(body: CreateOrderRequest) -> OrderResponse:
    order = OrderOrchestrator().create_order(
        product_id=body.product_id,
        quantity=body.quantity,
        shipping=body.shipping.flatten(),
        user_id=body.user_id,
    )
    return OrderResponse.of(order)


@order_router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: str) -> OrderResponse:
    return OrderResponse.of(OrderOrchestrator().get_order(order_id))


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(order_id: str, body: CancelOrderRequest) -> OrderResponse:
    return OrderResponse.of(OrderOrchestrator().cancel_order(order_id, body.user_id))


# ---------------------------------------------------------------------------
# Webhook receivers
# ---------------------------------------------------------------------------
# Unknown orders and ignored statuses are acknowledged. Errors propagate as
# non-2xx so the sender's retry loop redelivers.
@order_router.post("/webhooks/payment", response_model=WebhookAck)
def payment_webhook(body: PaymentWebhook) -> WebhookAck:
    OrderOrchestrator().handle_payment_webhook(
        event_type=body.type,
        order_id=body.order_id,
        payment_id=body.payment_id,
        amount=body.amount,
        paid_at=body.paid_at,
    )
    return WebhookAck()


@order_router.post("/webhooks/delivery", response_model=WebhookAck)
def delivery_webhook(body: DeliveryWebhook) -> WebhookAck:
    OrderOrchestrator().handle_delivery_webhook(
        shipment_id=body.shipment_id,
        status=body.status,
        timestamp=body.timestamp,
    )
    return WebhookAck()
