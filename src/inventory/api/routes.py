"""FastAPI routes for the Inventory domain — warehouses, products and the ledger RPC surface."""

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from inventory.api.schemas import (
    CommitResponse,
    CreateWarehouseRequest,
    ProductIdResponse,
    ReceiveStockRequest,
    RegisterProductRequest,
    ReservationIdResponse,
    ReserveRequest,
    RollbackResponse,
    StockCheckResponse,
    StockLevelResponse,
    WarehouseIdResponse,
)
from inventory.stock.ledger import InventoryLedger
from inventory.stock.product import RegisterProduct
from inventory.warehouse.management import CreateWarehouse, DeactivateWarehouse

# ---------------------------------------------------------------------------
# Warehouse Router
# ---------------------------------------------------------------------------
warehouse_router = APIRouter(prefix="/warehouses", tags=["warehouses"])


@warehouse_router.post("", status_code=201, response_model=WarehouseIdResponse)
async def create_warehouse(body: CreateWarehouseRequest) -> WarehouseIdResponse:
    command = CreateWarehouse(
        warehouse_id=body.warehouse_id,
        name=body.name,
        address=body.address.model_dump(),
    )
    result = current_domain.process(command, asynchronous=False)
    return WarehouseIdResponse(warehouse_id=result)


@warehouse_router.put("/{warehouse_id}/deactivate", response_model=WarehouseIdResponse)
async def deactivate_warehouse(warehouse_id: str) -> WarehouseIdResponse:
    current_domain.process(DeactivateWarehouse(warehouse_id=warehouse_id), asynchronous=False)
    return WarehouseIdResponse(warehouse_id=warehouse_id)


# ---------------------------------------------------------------------------
# Inventory Router
# ---------------------------------------------------------------------------
# Ledger operations retry with blocking backoff, so they run as sync routes
# in the threadpool.
inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])


@inventory_router.post("/products", status_code=201, response_model=ProductIdResponse)
async def register_product(body: RegisterProductRequest) -> ProductIdResponse:
    command = RegisterProduct(
        product_id=body.product_id,
        name=body.name,
        price=body.price,
        published=body.published,
        image_url=body.image_url,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@inventory_router.post("/stock", response_model=StockLevelResponse)
def receive_stock(body: ReceiveStockRequest) -> StockLevelResponse:
    quantity = InventoryLedger().receive_stock(body.warehouse_id, body.product_id, body.quantity)
    return StockLevelResponse(
        warehouse_id=body.warehouse_id,
        product_id=body.product_id,
        quantity=quantity,
    )


@inventory_router.get("/stock/{product_id}", response_model=StockCheckResponse)
def check_stock(product_id: str, quantity: int = Query(default=1, ge=1)) -> StockCheckResponse:
    warehouses = InventoryLedger().find_warehouses(product_id, quantity)
    return StockCheckResponse(
        product_id=product_id,
        quantity=quantity,
        available=bool(warehouses),
        warehouses=warehouses,
    )


@inventory_router.post("/reservations", status_code=201, response_model=ReservationIdResponse)
def reserve(body: ReserveRequest) -> ReservationIdResponse:
    reservation_id = InventoryLedger().reserve(
        order_id=body.order_id,
        warehouse_id=body.warehouse_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    return ReservationIdResponse(reservation_id=reservation_id)


@inventory_router.post("/reservations/{reservation_id}/commit", response_model=CommitResponse)
def commit(reservation_id: str) -> CommitResponse:
    committed = InventoryLedger().commit(reservation_id)
    return CommitResponse(reservation_id=reservation_id, committed=committed)


@inventory_router.post("/orders/{order_id}/rollback", response_model=RollbackResponse)
def rollback(order_id: str) -> RollbackResponse:
    released = InventoryLedger().rollback(order_id)
    return RollbackResponse(order_id=order_id, released=released)
