import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def relay_beds():
    from notifications.domain import notifications
    from ordering.domain import ordering

    beds = [DomainFixture(notifications), DomainFixture(ordering)]
    for bed in beds:
        bed.setup()
    yield beds
    for bed in beds:
        bed.teardown()


@pytest.fixture()
def domains(relay_beds):
    """Both domains pushed, ordering current; data reset afterwards."""
    notifications_bed, ordering_bed = relay_beds
    with notifications_bed.domain_context(), ordering_bed.domain_context():
        yield ordering_bed.domain, notifications_bed.domain
