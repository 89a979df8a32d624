"""Configurable fakes for the orchestrator's ports.

Each fake records its calls and can be told to reject or time out, so
orchestrator tests run without the other contexts.
"""

from uuid import uuid4

from shared.errors import InsufficientStockError, RemoteTimeoutError

from ordering.clients.port import (
    DeliveryPort,
    InventoryPort,
    PaymentInstruction,
    PaymentsPort,
    ShipmentTicket,
)


class FakeInventory(InventoryPort):
    def __init__(self) -> None:
        self.stock: dict[tuple[str, str], int] = {}
        self.reservations: dict[str, dict] = {}
        self.committed: set[str] = set()
        self.timeout: bool = False
        self.commit_timeouts: int = 0
        self.calls: list[dict] = []

    def configure(
        self,
        stock: dict[tuple[str, str], int] | None = None,
        timeout: bool = False,
        commit_timeouts: int = 0,
    ) -> None:
        """``stock`` maps ``(warehouse_id, product_id)`` to quantity.

        ``commit_timeouts`` is how many of the next commits time out.
        """
        if stock is not None:
            self.stock = dict(stock)
        self.timeout = timeout
        self.commit_timeouts = commit_timeouts

    def find_warehouses(self, product_id: str, quantity: int) -> list[str]:
        self.calls.append({"method": "find_warehouses", "product_id": product_id, "quantity": quantity})
        matching = [(qty, wh) for (wh, pid), qty in self.stock.items() if pid == product_id and qty >= quantity]
        return [wh for _, wh in sorted(matching, reverse=True)]

    def reserve(self, order_id: str, warehouse_id: str, product_id: str, quantity: int) -> str:
        self.calls.append(
            {
                "method": "reserve",
                "order_id": order_id,
                "warehouse_id": warehouse_id,
                "product_id": product_id,
                "quantity": quantity,
            }
        )
        if self.timeout:
            raise RemoteTimeoutError("Inventory did not answer in time", operation="reserve")
        available = self.stock.get((warehouse_id, product_id), 0)
        if available < quantity:
            raise InsufficientStockError(f"{warehouse_id} holds {available} of {product_id}")
        self.stock[(warehouse_id, product_id)] = available - quantity
        reservation_id = f"res-{uuid4().hex[:8]}"
        self.reservations[reservation_id] = {"order_id": order_id, "warehouse_id": warehouse_id, "quantity": quantity}
        return reservation_id

    def commit(self, reservation_id: str) -> bool:
        self.calls.append({"method": "commit", "reservation_id": reservation_id})
        if self.commit_timeouts:
            self.commit_timeouts -= 1
            raise RemoteTimeoutError("Inventory did not answer in time", operation="commit")
        if reservation_id not in self.reservations or reservation_id in self.committed:
            return False
        self.committed.add(reservation_id)
        return True


class FakePayments(PaymentsPort):
    def __init__(self) -> None:
        self.timeout: bool = False
        self.calls: list[dict] = []

    def configure(self, timeout: bool = False) -> None:
        self.timeout = timeout

    def request_instruction(self, order_id: str, amount: float) -> PaymentInstruction:
        self.calls.append({"method": "request_instruction", "order_id": order_id, "amount": amount})
        if self.timeout:
            raise RemoteTimeoutError("Payments did not answer in time", operation="request_instruction")
        return PaymentInstruction(
            payment_id=f"pay-{order_id}",
            biller_code="93242",
            reference=f"BP-{order_id}",
            amount=amount,
        )


class FakeDelivery(DeliveryPort):
    def __init__(self) -> None:
        self.timeout: bool = False
        self.shipments: dict[str, ShipmentTicket] = {}
        self.calls: list[dict] = []

    def configure(self, timeout: bool = False) -> None:
        self.timeout = timeout

    def request_shipment(
        self,
        order_id: str,
        warehouse_id: str,
        product_id: str,
        quantity: int,
        recipient_name: str,
        recipient_email: str,
        address: str,
    ) -> ShipmentTicket:
        self.calls.append({"method": "request_shipment", "order_id": order_id, "warehouse_id": warehouse_id})
        if self.timeout:
            raise RemoteTimeoutError("Delivery did not answer in time", operation="request_shipment")
        if order_id not in self.shipments:
            code = uuid4().hex[:8].upper()
            self.shipments[order_id] = ShipmentTicket(
                shipment_id=f"SHIP-{code}",
                tracking_number=f"TRK-{code}",
                carrier="DeliveryCo Express",
                status="SHIPMENT_CREATED",
            )
        return self.shipments[order_id]
