"""Fixtures for end-to-end saga tests.

Every context runs in-process on its own memory stores and inline broker.
The relay carries broker messages between contexts, and webhook pushes are
handed to the orchestrator's receivers by a recording transport instead of
going over HTTP.
"""

from contextlib import ExitStack
from urllib.parse import urlsplit

import pytest
from delivery.domain import delivery
from delivery.shipment.dispatcher import DeliveryDispatcher, shipment_for_order
from inventory.domain import inventory
from inventory.stock.ledger import InventoryLedger
from inventory.stock.product import RegisterProduct
from inventory.stock.rollback_consumer import InventoryRollbackConsumer
from inventory.stock.stock import Inventory
from inventory.warehouse.management import CreateWarehouse
from notifications.channel import set_email_channel
from notifications.channel.fake_email import FakeEmailAdapter
from notifications.domain import notifications
from notifications.notification.email_consumers import EMAIL_CONSUMERS
from ordering.api.schemas import DeliveryWebhook, PaymentWebhook
from ordering.domain import ordering
from ordering.listing.listing import StockSyncConsumer
from ordering.order.callbacks import DELIVERY_CALLBACK_PATH, PAYMENT_CALLBACK_PATH, register_callbacks
from ordering.order.orchestrator import OrderOrchestrator
from payments.account.transfers import AccountLedger
from payments.domain import payments
from payments.payment.ledger import PaymentLedger, payment_for_order
from payments.payment.refund_consumer import PaymentRefundConsumer
from protean import current_domain
from protean.exceptions import ValidationError
from protean.integrations.pytest import DomainFixture
from shared.errors import FulfillmentError
from shared.messaging.relay import Route, drain
from shared.messaging.streams import INVENTORY_ROLLBACK, PAYMENT_REFUND, STOCK_SYNC, email_stream
from webhooks.domain import webhooks
from webhooks.transport import WebhookDeliveryError, WebhookTransport, set_transport
from webhooks.transport.fake_adapter import FakeTransport


@pytest.fixture(scope="session")
def saga_beds():
    beds = [DomainFixture(domain) for domain in (inventory, payments, delivery, webhooks, notifications, ordering)]
    for bed in beds:
        bed.setup()
    yield beds
    for bed in beds:
        bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(saga_beds):
    """Push every domain, ordering last, and reset all of them afterwards."""
    with ExitStack() as stack:
        for bed in saga_beds:
            stack.enter_context(bed.domain_context())
        yield


def relay_routes(compensation_order=("rollback", "refund")):
    compensations = {
        "rollback": Route(INVENTORY_ROLLBACK, ordering, inventory, InventoryRollbackConsumer),
        "refund": Route(PAYMENT_REFUND, ordering, payments, PaymentRefundConsumer),
    }
    routes = [compensations[name] for name in compensation_order]
    routes.append(Route(STOCK_SYNC, inventory, ordering, StockSyncConsumer))
    routes += [
        Route(email_stream(email_type.value), ordering, notifications, consumer)
        for email_type, consumer in EMAIL_CONSUMERS.items()
    ]
    return routes


def _receive_payment(body: PaymentWebhook) -> None:
    OrderOrchestrator().handle_payment_webhook(
        event_type=body.type,
        order_id=body.order_id,
        payment_id=body.payment_id,
        amount=body.amount,
        paid_at=body.paid_at,
    )


def _receive_delivery(body: DeliveryWebhook) -> None:
    OrderOrchestrator().handle_delivery_webhook(body.shipment_id, body.status, body.timestamp)


class OrderingReceiverTransport(WebhookTransport):
    """Hands each push to the orchestrator's receiver for the URL's path.

    Every attempt goes through a ``FakeTransport`` first, so failures can
    be injected and retries counted.
    """

    receivers = {
        PAYMENT_CALLBACK_PATH: (PaymentWebhook, _receive_payment),
        DELIVERY_CALLBACK_PATH: (DeliveryWebhook, _receive_delivery),
    }

    def __init__(self):
        self.recorder = FakeTransport()

    def configure(self, failures=0):
        self.recorder.configure(failures=failures)

    def calls_for(self, event):
        return [call for call in self.recorder.calls if call["event"] == event]

    def post(self, url, event, payload, timeout):
        status = self.recorder.post(url, event, payload, timeout)
        schema, receive = self.receivers.get(urlsplit(url).path, (None, None))
        if schema is None:
            raise WebhookDeliveryError(f"{url} answered 404", url=url, status_code=404)
        try:
            with ordering.domain_context():
                receive(schema.model_validate(payload))
        except (FulfillmentError, ValidationError) as exc:
            raise WebhookDeliveryError(f"{url} answered 500: {exc}", url=url, status_code=500) from exc
        return status


class SagaDriver:
    """Drives each context the way its own callers would."""

    SHIPPING = {
        "recipient_name": "Jane Doe",
        "recipient_email": "jane@example.com",
        "street": "123 Main St",
        "city": "Springfield",
        "state": "IL",
        "postal_code": "62701",
        "country": "US",
    }

    def __init__(self, transport, email_channel):
        self.transport = transport
        self.email_channel = email_channel
        self.routes = relay_routes()
        self.customer_account_id = None

    # -- setup ----------------------------------------------------------
    def stock_catalogue(self, quantity=10):
        with inventory.domain_context():
            current_domain.process(
                RegisterProduct(product_id="42", name="Trail Running Shoe", price=50.0, published=True),
                asynchronous=False,
            )
            current_domain.process(
                CreateWarehouse(
                    warehouse_id="wh-1",
                    name="Main Warehouse",
                    address={"street": "1 Dock Rd", "city": "Newark", "postal_code": "07101", "country": "US"},
                ),
                asynchronous=False,
            )
            InventoryLedger().receive_stock("wh-1", "42", quantity)

    def open_accounts(self, balance=500.0):
        with payments.domain_context():
            AccountLedger().open_merchant_account("Fulfillment Store", "93242", account_id="acct-merchant")
            self.customer_account_id = AccountLedger().open_account("Jane Doe", balance)

    def open_customer(self, balance):
        with payments.domain_context():
            return AccountLedger().open_account("Another Customer", balance)

    def register_callbacks(self, base_url="http://ordering.test"):
        with ordering.domain_context():
            return register_callbacks(base_url)

    # -- actions --------------------------------------------------------
    def place(self, quantity=2, user_id="user-1"):
        with ordering.domain_context():
            return OrderOrchestrator().create_order("42", quantity, dict(self.SHIPPING), user_id)

    def cancel(self, order, user_id="user-1"):
        with ordering.domain_context():
            return OrderOrchestrator().cancel_order(order.id, user_id)

    def pay(self, order, account_id=None):
        with payments.domain_context():
            return PaymentLedger().confirm_payment(order.payment_reference, account_id or self.customer_account_id)

    def advance_shipment(self, order, steps=1):
        shipment_id = self.order(order.id).shipment_id
        with delivery.domain_context():
            for _step in range(steps):
                DeliveryDispatcher().advance_shipment(shipment_id)

    def lose_shipment(self, order):
        shipment_id = self.order(order.id).shipment_id
        with delivery.domain_context():
            DeliveryDispatcher().report_lost(shipment_id)

    @staticmethod
    def routes_for(compensation_order):
        return relay_routes(compensation_order)

    def drain(self, routes=None):
        return drain(routes or self.routes)

    # -- queries --------------------------------------------------------
    def order(self, order_id):
        with ordering.domain_context():
            return OrderOrchestrator().get_order(order_id)

    def stock(self):
        with inventory.domain_context():
            return current_domain.repository_for(Inventory).get("wh-1:42").quantity

    def payment(self, order):
        with payments.domain_context():
            return payment_for_order(order.id)

    def balance(self, account_id=None):
        with payments.domain_context():
            return AccountLedger().balance_of(account_id or self.customer_account_id)

    def shipment(self, order):
        with delivery.domain_context():
            return shipment_for_order(order.id)

    @staticmethod
    def published(domain, stream):
        return [payload for _, payload in domain.brokers["default"]._messages[stream]]

    def email_subjects(self):
        return [email["subject"] for email in self.email_channel.sent_to("jane@example.com")]


@pytest.fixture()
def transport():
    receiver = OrderingReceiverTransport()
    set_transport(receiver)
    return receiver


@pytest.fixture()
def email_channel():
    channel = FakeEmailAdapter()
    set_email_channel(channel)
    return channel


@pytest.fixture()
def saga(transport, email_channel):
    """Catalogue stocked, accounts open, callbacks registered, listing synced."""
    driver = SagaDriver(transport, email_channel)
    driver.stock_catalogue()
    driver.open_accounts()
    driver.register_callbacks()
    driver.drain()
    return driver
