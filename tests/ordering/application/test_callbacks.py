"""Application tests for registering the orchestrator's webhook receivers."""

import pytest
from ordering.order.callbacks import DELIVERY_CALLBACK_PATH, PAYMENT_CALLBACK_PATH, callback_urls, register_callbacks
from webhooks.client import reset_webhook_client, set_webhook_client
from webhooks.client.fake_adapter import RecordingWebhookClient


@pytest.fixture()
def webhook_client():
    client = RecordingWebhookClient()
    set_webhook_client(client)
    yield client
    reset_webhook_client()


class TestCallbackUrls:
    def test_joins_base_url(self):
        urls = callback_urls("https://shop.example.com/")
        assert urls == {
            "PAYMENT_EVENT": "https://shop.example.com/orders/webhooks/payment",
            "SHIPMENT_STATUS_UPDATE": "https://shop.example.com/orders/webhooks/delivery",
        }

    def test_defaults_to_configured_base(self):
        urls = callback_urls()
        assert urls["PAYMENT_EVENT"].endswith(PAYMENT_CALLBACK_PATH)
        assert urls["SHIPMENT_STATUS_UPDATE"].endswith(DELIVERY_CALLBACK_PATH)


class TestRegisterCallbacks:
    def test_registers_both_receivers(self, webhook_client):
        results = register_callbacks("https://shop.example.com")

        assert results == {"PAYMENT_EVENT": True, "SHIPMENT_STATUS_UPDATE": True}
        assert webhook_client.registrations["PAYMENT_EVENT"] == "https://shop.example.com/orders/webhooks/payment"

    def test_failure_is_reported_not_raised(self, webhook_client):
        webhook_client.configure(should_succeed=False)

        results = register_callbacks("https://shop.example.com")

        assert results == {"PAYMENT_EVENT": False, "SHIPMENT_STATUS_UPDATE": False}
        assert webhook_client.registrations == {}
