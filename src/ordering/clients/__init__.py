"""Client factories for the orchestrator's ports.

Provides get_*/set_*/reset_* accessors per port:
- Local adapters (default) call the other contexts in-process
- Http adapters talk to separately deployed services
- Fakes for tests
"""

from ordering.clients.port import DeliveryPort, InventoryPort, PaymentsPort

_inventory: InventoryPort | None = None
_payments: PaymentsPort | None = None
_delivery: DeliveryPort | None = None


def get_inventory_client() -> InventoryPort:
    """Return the current inventory client. Defaults to LocalInventory."""
    global _inventory
    if _inventory is None:
        from ordering.clients.local_adapter import LocalInventory

        _inventory = LocalInventory()
    return _inventory


def set_inventory_client(client: InventoryPort) -> None:
    global _inventory
    _inventory = client


def get_payments_client() -> PaymentsPort:
    """Return the current payments client. Defaults to LocalPayments."""
    global _payments
    if _payments is None:
        from ordering.clients.local_adapter import LocalPayments

        _payments = LocalPayments()
    return _payments


def set_payments_client(client: PaymentsPort) -> None:
    global _payments
    _payments = client


def get_delivery_client() -> DeliveryPort:
    """Return the current delivery client. Defaults to LocalDelivery."""
    global _delivery
    if _delivery is None:
        from ordering.clients.local_adapter import LocalDelivery

        _delivery = LocalDelivery()
    return _delivery


def set_delivery_client(client: DeliveryPort) -> None:
    global _delivery
    _delivery = client


def use_http_clients(inventory_url: str, payments_url: str, delivery_url: str, timeout: float) -> None:
    """Point every port at separately deployed services."""
    from ordering.clients.http_adapter import HttpDelivery, HttpInventory, HttpPayments

    set_inventory_client(HttpInventory(inventory_url, timeout))
    set_payments_client(HttpPayments(payments_url, timeout))
    set_delivery_client(HttpDelivery(delivery_url, timeout))


def reset_clients() -> None:
    """Reset every port to its default adapter."""
    global _inventory, _payments, _delivery
    _inventory = None
    _payments = None
    _delivery = None
