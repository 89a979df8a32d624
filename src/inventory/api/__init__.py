from inventory.api.routes import inventory_router, warehouse_router

__all__ = ["inventory_router", "warehouse_router"]
