"""HTTP adapters for contexts deployed as separate services.

Every call carries the orchestrator's remote timeout. A timeout becomes
``RemoteTimeoutError`` and the saga compensates exactly as for a rejection.
"""

from datetime import datetime

import httpx
from protean.exceptions import ValidationError
from shared.errors import InsufficientStockError, RemoteTimeoutError, TransientInfraError

from ordering.clients.port import (
    DeliveryPort,
    InventoryPort,
    PaymentInstruction,
    PaymentsPort,
    ShipmentTicket,
)


class _HttpClient:
    def __init__(self, base_url: str, timeout: float, client: httpx.Client | None = None) -> None:
        self.timeout = timeout
        self._client = client or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)

    def call(self, method: str, path: str, operation: str, **kwargs) -> dict:
        try:
            response = self._client.request(method, path, timeout=self.timeout, **kwargs)
        except httpx.TimeoutException as exc:
            raise RemoteTimeoutError(
                f"{operation} exceeded {self.timeout}s",
                operation=operation,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransientInfraError(f"{operation} failed: {exc}", operation=operation) from exc

        if response.status_code == 409 and operation == "reserve":
            raise InsufficientStockError(response.json().get("error", "Insufficient stock"))
        if response.status_code in (400, 404, 422):
            raise ValidationError({operation: [response.text]})
        if not response.is_success:
            raise TransientInfraError(
                f"{operation} answered {response.status_code}",
                operation=operation,
                status_code=response.status_code,
            )
        return response.json()


def _parse_datetime(value):
    return datetime.fromisoformat(value) if value else None


class HttpInventory(InventoryPort):
    def __init__(self, base_url: str, timeout: float, client: httpx.Client | None = None) -> None:
        self.http = _HttpClient(base_url, timeout, client)

    def find_warehouses(self, product_id: str, quantity: int) -> list[str]:
        body = self.http.call(
            "GET",
            f"/inventory/stock/{product_id}",
            "find_warehouses",
            params={"quantity": quantity},
        )
        return list(body["warehouses"])

    def reserve(self, order_id: str, warehouse_id: str, product_id: str, quantity: int) -> str:
        body = self.http.call(
            "POST",
            "/inventory/reservations",
            "reserve",
            json={
                "order_id": order_id,
                "warehouse_id": warehouse_id,
                "product_id": product_id,
                "quantity": quantity,
            },
        )
        return body["reservation_id"]

    def commit(self, reservation_id: str) -> bool:
        body = self.http.call("POST", f"/inventory/reservations/{reservation_id}/commit", "commit")
        return bool(body["committed"])


class HttpPayments(PaymentsPort):
    def __init__(self, base_url: str, timeout: float, client: httpx.Client | None = None) -> None:
        self.http = _HttpClient(base_url, timeout, client)

    def request_instruction(self, order_id: str, amount: float) -> PaymentInstruction:
        body = self.http.call(
            "POST",
            "/payments/instructions",
            "request_instruction",
            json={"order_id": order_id, "amount": amount},
        )
        return PaymentInstruction(
            payment_id=body["payment_id"],
            biller_code=body["biller_code"],
            reference=body["reference"],
            amount=body["amount"],
            expires_at=_parse_datetime(body.get("expires_at")),
        )


class HttpDelivery(DeliveryPort):
    def __init__(self, base_url: str, timeout: float, client: httpx.Client | None = None) -> None:
        self.http = _HttpClient(base_url, timeout, client)

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
        body = self.http.call(
            "POST",
            "/deliveries",
            "request_shipment",
            json={
                "order_id": order_id,
                "warehouse_id": warehouse_id,
                "product_id": product_id,
                "quantity": quantity,
                "recipient_name": recipient_name,
                "recipient_email": recipient_email,
                "address": address,
            },
        )
        return ShipmentTicket(
            shipment_id=body["shipment_id"],
            tracking_number=body["tracking_number"],
            carrier=body["carrier"],
            status=body["status"],
            estimated_delivery=_parse_datetime(body.get("estimated_delivery")),
        )
