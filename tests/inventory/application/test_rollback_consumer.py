"""Application tests for the inventory rollback consumer."""

from inventory.inbox import ProcessedMessage
from inventory.stock.ledger import InventoryLedger, reservations_for
from inventory.stock.product import RegisterProduct
from inventory.stock.rollback_consumer import InventoryRollbackConsumer
from inventory.stock.stock import Inventory
from inventory.warehouse.management import CreateWarehouse
from protean import current_domain
from shared.messaging.messages import RollbackRequest, utcnow
from shared.messaging.streams import INVENTORY_ROLLBACK, dead_letter_stream


def _request(**overrides):
    defaults = {
        "order_id": "ord-1",
        "product_id": "42",
        "amount": 4,
        "reason": "PAYMENT_FAILED",
        "event_id": "evt-rollback-ord-1-payment_failed",
        "timestamp": utcnow(),
    }
    defaults.update(overrides)
    return RollbackRequest(**defaults).to_payload()


def _quantity():
    return current_domain.repository_for(Inventory).get("wh-1:42").quantity


def _setup_reserved(quantity=4):
    current_domain.process(
        RegisterProduct(product_id="42", name="Trail Running Shoe", price=50.0),
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
    ledger = InventoryLedger()
    ledger.receive_stock("wh-1", "42", 10)
    ledger.reserve("ord-1", "wh-1", "42", quantity)


def _dead_letters():
    broker = current_domain.brokers["default"]
    return [payload for _, payload in broker._messages[dead_letter_stream(INVENTORY_ROLLBACK)]]


class TestRollbackRequest:
    def test_releases_the_orders_holds(self):
        _setup_reserved()
        InventoryRollbackConsumer()(_request())

        assert _quantity() == 10
        assert reservations_for("ord-1") == []

    def test_records_processed_marker(self):
        _setup_reserved()
        InventoryRollbackConsumer()(_request())

        marker = current_domain.repository_for(ProcessedMessage).get(
            "InventoryRollbackConsumer:evt-rollback-ord-1-payment_failed"
        )
        assert marker.message_id == "evt-rollback-ord-1-payment_failed"

    def test_redelivery_credits_once(self):
        _setup_reserved()
        payload = _request()
        InventoryRollbackConsumer()(payload)
        InventoryRollbackConsumer()(payload)

        assert _quantity() == 10

    def test_duplicate_is_reported_as_skipped(self):
        _setup_reserved()
        payload = _request()
        assert InventoryRollbackConsumer().consume(payload) is True
        assert InventoryRollbackConsumer().consume(payload) is False

    def test_second_request_with_new_event_id_is_noop(self):
        _setup_reserved()
        InventoryRollbackConsumer()(_request())
        InventoryRollbackConsumer()(_request(event_id="evt-rollback-ord-1-user_cancelled", reason="USER_CANCELLED"))

        assert _quantity() == 10

    def test_no_reservations_is_success(self):
        _setup_reserved()
        assert InventoryRollbackConsumer().consume(_request(order_id="ord-unknown")) is True
        assert _quantity() == 6


class TestMalformedRollbackRequest:
    def test_missing_order_id_is_dead_lettered(self):
        payload = _request()
        del payload["orderId"]

        InventoryRollbackConsumer()(payload)

        dead = _dead_letters()
        assert len(dead) == 1
        assert dead[0]["consumer"] == "InventoryRollbackConsumer"
        assert dead[0]["error_type"] == "MalformedMessageError"
        assert dead[0]["payload"] == payload

    def test_non_object_payload_is_dead_lettered(self):
        InventoryRollbackConsumer()("not-a-dict")

        dead = _dead_letters()
        assert dead[0]["payload"] == {"raw": "'not-a-dict'"}

    def test_malformed_message_changes_nothing(self):
        _setup_reserved()
        payload = _request()
        payload["amount"] = 0
        InventoryRollbackConsumer()(payload)

        assert _quantity() == 6
