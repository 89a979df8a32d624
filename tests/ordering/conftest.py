import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


@pytest.fixture()
def inventory_client():
    from ordering.clients import set_inventory_client
    from ordering.clients.fake_adapter import FakeInventory

    fake = FakeInventory()
    fake.configure(stock={("wh-1", "42"): 10})
    set_inventory_client(fake)
    return fake


@pytest.fixture()
def payments_client():
    from ordering.clients import set_payments_client
    from ordering.clients.fake_adapter import FakePayments

    fake = FakePayments()
    set_payments_client(fake)
    return fake


@pytest.fixture()
def delivery_client():
    from ordering.clients import set_delivery_client
    from ordering.clients.fake_adapter import FakeDelivery

    fake = FakeDelivery()
    set_delivery_client(fake)
    return fake


@pytest.fixture()
def listing():
    """Product 42 at $50.00, as the Inventory Ledger would announce it."""
    from ordering.listing.listing import ProductListing, StockSyncConsumer
    from protean import current_domain
    from shared.messaging.messages import StockSync, utcnow

    StockSyncConsumer()(
        StockSync(
            product_id="42",
            name="Trail Running Shoe",
            price=50.0,
            stock=10,
            published=True,
            timestamp=utcnow(),
        ).to_payload()
    )
    return current_domain.repository_for(ProductListing).get("42")


@pytest.fixture()
def published():
    """Payloads the ordering broker holds for a stream."""
    from protean import current_domain

    def _published(stream):
        return [payload for _, payload in current_domain.brokers["default"]._messages[stream]]

    return _published


@pytest.fixture()
def shipping():
    return {
        "recipient_name": "Jane Doe",
        "recipient_email": "jane@example.com",
        "street": "123 Main St",
        "city": "Springfield",
        "state": "IL",
        "postal_code": "62701",
        "country": "US",
    }
