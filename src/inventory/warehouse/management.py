"""Warehouse management — commands and handler."""

from protean import handle
from protean.fields import Dict, Identifier, String
from protean.utils.globals import current_domain

from inventory.domain import inventory
from inventory.warehouse.warehouse import Warehouse


@inventory.command(part_of="Warehouse")
class CreateWarehouse:
    """Create a new warehouse."""

    warehouse_id = Identifier()  # Optional; generated when omitted
    name = String(required=True, max_length=255)
    address = Dict(required=True)


@inventory.command(part_of="Warehouse")
class DeactivateWarehouse:
    """Deactivate a warehouse."""

    warehouse_id = Identifier(required=True)


@inventory.command_handler(part_of=Warehouse)
class WarehouseManagementHandler:
    @handle(CreateWarehouse)
    def create_warehouse(self, command):
        warehouse = Warehouse.create(
            name=command.name,
            address=command.address,
            warehouse_id=command.warehouse_id,
        )
        current_domain.repository_for(Warehouse).add(warehouse)
        return str(warehouse.id)

    @handle(DeactivateWarehouse)
    def deactivate_warehouse(self, command):
        repo = current_domain.repository_for(Warehouse)
        warehouse = repo.get(command.warehouse_id)
        warehouse.deactivate()
        repo.add(warehouse)
