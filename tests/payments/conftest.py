import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def payments_bed():
    from payments.domain import payments

    bed = DomainFixture(payments)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(payments_bed):
    with payments_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def webhook_client():
    """Capture PAYMENT_EVENT pushes instead of calling the registry."""
    from webhooks.client import set_webhook_client
    from webhooks.client.fake_adapter import RecordingWebhookClient

    client = RecordingWebhookClient()
    set_webhook_client(client)
    return client


@pytest.fixture()
def merchant_account_id():
    from payments.account.transfers import AccountLedger

    return AccountLedger().open_merchant_account("Fulfillment Store", "93242", account_id="acct-merchant")


@pytest.fixture()
def customer_account_id():
    from payments.account.transfers import AccountLedger

    return AccountLedger().open_account("Jane Doe", opening_balance=500.0, account_id="acct-jane")
