"""Fulfillment FastAPI application.

Multi-domain web server hosting every context of the fulfillment saga.
Each request is wrapped in the correct domain context based on URL prefix.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000
"""

import asyncio
from contextlib import asynccontextmanager

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → memory stores, no retry delays
#   - "production" → PostgreSQL and the Redis broker
from delivery.domain import delivery  # noqa: E402
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from inventory.domain import inventory  # noqa: E402
from notifications.domain import notifications  # noqa: E402
from ordering.domain import ordering  # noqa: E402
from payments.domain import payments  # noqa: E402
from shared.api import register_error_handlers
from shared.logging import configure_logging
from webhooks.domain import webhooks  # noqa: E402

configure_logging()

for _domain in (inventory, payments, delivery, webhooks, ordering, notifications):
    _domain.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_ROUTE_DOMAIN_MAP = {
    "/warehouses": inventory,
    "/inventory": inventory,
    "/accounts": payments,
    "/payments": payments,
    "/deliveries": delivery,
    "/webhooks": webhooks,
    "/orders": ordering,
    "/notifications": notifications,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path.startswith(prefix):
            return domain
    return None


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------
RELAY_INTERVAL_SECONDS = 1.0


def _relay_routes():
    """Cross-domain streams for the single-process deployment."""
    from inventory.stock.rollback_consumer import InventoryRollbackConsumer
    from notifications.notification.email_consumers import EMAIL_CONSUMERS
    from ordering.listing.listing import StockSyncConsumer
    from payments.payment.refund_consumer import PaymentRefundConsumer
    from shared.messaging.relay import Route
    from shared.messaging.streams import INVENTORY_ROLLBACK, PAYMENT_REFUND, STOCK_SYNC, email_stream

    routes = [
        Route(INVENTORY_ROLLBACK, ordering, inventory, InventoryRollbackConsumer),
        Route(PAYMENT_REFUND, ordering, payments, PaymentRefundConsumer),
        Route(STOCK_SYNC, inventory, ordering, StockSyncConsumer),
    ]
    routes += [
        Route(email_stream(email_type.value), ordering, notifications, consumer)
        for email_type, consumer in EMAIL_CONSUMERS.items()
    ]
    return routes


def _uses_inline_brokers() -> bool:
    return all(
        domain.config["brokers"]["default"]["provider"] == "inline"
        for domain in (inventory, payments, ordering, notifications)
    )


async def _relay_forever(routes) -> None:
    from shared.messaging.relay import drain

    while True:
        await asyncio.to_thread(drain, routes)
        await asyncio.sleep(RELAY_INTERVAL_SECONDS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Registration failures are logged and never block startup
    from ordering.order.callbacks import register_callbacks

    with ordering.domain_context():
        register_callbacks()

    # With Redis, the Engines in server.py consume the streams instead
    relay_task = asyncio.create_task(_relay_forever(_relay_routes())) if _uses_inline_brokers() else None
    yield
    if relay_task is not None:
        relay_task.cancel()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Fulfillment API",
    description="Order fulfillment saga — inventory, payments, delivery, webhooks and orders",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
        return response
    # No domain match: health check and docs pass through
    return await call_next(request)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from delivery.api import delivery_router  # noqa: E402
from inventory.api import inventory_router, warehouse_router  # noqa: E402
from notifications.api import notification_router  # noqa: E402
from ordering.api import order_router  # noqa: E402
from payments.api import account_router, payment_router  # noqa: E402
from webhooks.api import webhook_router  # noqa: E402

app.include_router(warehouse_router)
app.include_router(inventory_router)
app.include_router(account_router)
app.include_router(payment_router)
app.include_router(delivery_router)
app.include_router(webhook_router)
app.include_router(order_router)
app.include_router(notification_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                domain.name: {"name": domain.name}
                for domain in (inventory, payments, delivery, webhooks, ordering, notifications)
            },
        }
    )
