import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def delivery_bed():
    from delivery.domain import delivery

    bed = DomainFixture(delivery)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(delivery_bed):
    with delivery_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def webhook_client():
    """Capture SHIPMENT_STATUS_UPDATE pushes instead of calling the registry."""
    from webhooks.client import set_webhook_client
    from webhooks.client.fake_adapter import RecordingWebhookClient

    client = RecordingWebhookClient()
    set_webhook_client(client)
    return client
