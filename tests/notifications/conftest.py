import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def notifications_bed():
    from notifications.domain import notifications

    bed = DomainFixture(notifications)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(notifications_bed):
    with notifications_bed.domain_context():
        yield


@pytest.fixture()
def email_channel():
    from notifications.channel import reset_email_channel, set_email_channel
    from notifications.channel.fake_email import FakeEmailAdapter

    channel = FakeEmailAdapter()
    set_email_channel(channel)
    yield channel
    reset_email_channel()


@pytest.fixture()
def make_email():
    """Builds an ``email.<TYPE>`` payload as the orchestrator publishes it."""
    from shared.messaging.messages import EmailNotification, EmailType, utcnow

    def _make(email_type=EmailType.ORDER_CONFIRMATION, event_id=None, **details):
        return EmailNotification(
            event_id=event_id or f"evt-email-ord-1-{email_type.value.lower()}-once",
            type=email_type,
            order_id="ord-1",
            user_id="user-1",
            recipient="jane@example.com",
            details={"recipient_name": "Jane Doe", "quantity": 2, "total_amount": 100.0, **details},
            timestamp=utcnow(),
        ).to_payload()

    return _make
