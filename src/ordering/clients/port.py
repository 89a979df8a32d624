"""Ports to the contexts the orchestrator drives synchronously.

The orchestrator never touches another context's aggregates. It reserves
and commits stock, requests payment instructions and requests shipments
through these interfaces. Adapters raise the shared error taxonomy:
``InsufficientStockError`` for a business rejection, ``RemoteTimeoutError``
when the call ran out of time, ``TransientInfraError`` when the other side
could not be reached.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PaymentInstruction:
    """What the customer needs to pay an order."""

    payment_id: str
    biller_code: str
    reference: str
    amount: float
    expires_at: datetime | None = None


@dataclass(frozen=True)
class ShipmentTicket:
    shipment_id: str
    tracking_number: str
    carrier: str
    status: str
    estimated_delivery: datetime | None = None


class InventoryPort(ABC):
    @abstractmethod
    def find_warehouses(self, product_id: str, quantity: int) -> list[str]:
        """Warehouses able to cover ``quantity`` alone, fullest first."""
        ...

    @abstractmethod
    def reserve(self, order_id: str, warehouse_id: str, product_id: str, quantity: int) -> str:
        """Debit one warehouse and return the reservation id."""
        ...

    @abstractmethod
    def commit(self, reservation_id: str) -> bool:
        ...


class PaymentsPort(ABC):
    @abstractmethod
    def request_instruction(self, order_id: str, amount: float) -> PaymentInstruction:
        ...


class DeliveryPort(ABC):
    @abstractmethod
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
        """Idempotent per order."""
        ...
