import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def webhooks_bed():
    from webhooks.domain import webhooks

    bed = DomainFixture(webhooks)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(webhooks_bed):
    with webhooks_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def transport():
    from webhooks.transport import set_transport
    from webhooks.transport.fake_adapter import FakeTransport

    fake = FakeTransport()
    set_transport(fake)
    return fake
