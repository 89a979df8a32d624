"""In-process adapters: call the other context inside its own domain context.

Always called outside any Unit of Work, since Units of Work nest per thread
and must not span domains.
"""

from delivery.domain import delivery
from delivery.shipment.dispatcher import DeliveryDispatcher
from inventory.domain import inventory
from inventory.stock.ledger import InventoryLedger
from payments.domain import payments
from payments.payment.ledger import PaymentLedger

from ordering.clients.port import (
    DeliveryPort,
    InventoryPort,
    PaymentInstruction,
    PaymentsPort,
    ShipmentTicket,
)


class LocalInventory(InventoryPort):
    def find_warehouses(self, product_id: str, quantity: int) -> list[str]:
        with inventory.domain_context():
            return InventoryLedger().find_warehouses(product_id, quantity)

    def reserve(self, order_id: str, warehouse_id: str, product_id: str, quantity: int) -> str:
        with inventory.domain_context():
            return InventoryLedger().reserve(order_id, warehouse_id, product_id, quantity)

    def commit(self, reservation_id: str) -> bool:
        with inventory.domain_context():
            return InventoryLedger().commit(reservation_id)


class LocalPayments(PaymentsPort):
    def request_instruction(self, order_id: str, amount: float) -> PaymentInstruction:
        with payments.domain_context():
            instruction = PaymentLedger().issue_instruction(order_id, amount)
        return PaymentInstruction(
            payment_id=instruction.payment_id,
            biller_code=instruction.biller_code,
            reference=instruction.reference,
            amount=instruction.amount,
            expires_at=instruction.expires_at,
        )


class LocalDelivery(DeliveryPort):
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
        with delivery.domain_context():
            shipment = DeliveryDispatcher().create_shipment(
                order_id=order_id,
                warehouse_id=warehouse_id,
                product_id=product_id,
                quantity=quantity,
                recipient_name=recipient_name,
                recipient_email=recipient_email,
                address=address,
            )
            return ShipmentTicket(
                shipment_id=str(shipment.id),
                tracking_number=shipment.tracking_number,
                carrier=shipment.carrier,
                status=shipment.status,
                estimated_delivery=shipment.estimated_delivery,
            )
