"""Registers the orchestrator's webhook receivers with the Webhook Registry."""

from protean.utils.globals import current_domain
from webhooks.client import get_webhook_client
from webhooks.registration.registration import PAYMENT_EVENT, SHIPMENT_STATUS_UPDATE

from ordering.domain import logger

PAYMENT_CALLBACK_PATH = "/orders/webhooks/payment"
DELIVERY_CALLBACK_PATH = "/orders/webhooks/delivery"


def callback_urls(base_url: str | None = None) -> dict[str, str]:
    if base_url is None:
        base_url = current_domain.config.get("custom", {}).get("callback_base_url", "http://localhost:8000")
    base_url = base_url.rstrip("/")
    return {
        PAYMENT_EVENT: f"{base_url}{PAYMENT_CALLBACK_PATH}",
        SHIPMENT_STATUS_UPDATE: f"{base_url}{DELIVERY_CALLBACK_PATH}",
    }


def register_callbacks(base_url: str | None = None) -> dict[str, bool]:
    """Register both receivers. A failed registration is logged, not raised."""
    client = get_webhook_client()
    results = {}
    for event, url in callback_urls(base_url).items():
        results[event] = client.register(event, url)
        if results[event]:
            logger.info("webhook_callback_registered", webhook_event=event, callback_url=url)
        else:
            logger.warning("webhook_callback_registration_failed", webhook_event=event, callback_url=url)
    return results
