"""Pydantic request/response schemas for the Inventory API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str
    city: str
    state: str | None = None
    postal_code: str
    country: str


# ---------------------------------------------------------------------------
# Warehouse & Product Request Schemas
# ---------------------------------------------------------------------------
class CreateWarehouseRequest(BaseModel):
    warehouse_id: str | None = None
    name: str = Field(min_length=1, max_length=255)
    address: AddressSchema


class RegisterProductRequest(BaseModel):
    product_id: str
    name: str = Field(min_length=1, max_length=255)
    price: float = Field(ge=0)
    published: bool = True
    image_url: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "42",
                    "name": "Trail Running Shoe",
                    "price": 50.0,
                    "published": True,
                    "image_url": "https://cdn.example.com/p/42.jpg",
                }
            ]
        }
    }


class ReceiveStockRequest(BaseModel):
    warehouse_id: str
    product_id: str
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Ledger Request Schemas
# ---------------------------------------------------------------------------
class ReserveRequest(BaseModel):
    order_id: str
    warehouse_id: str
    product_id: str
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class WarehouseIdResponse(BaseModel):
    warehouse_id: str


class ProductIdResponse(BaseModel):
    product_id: str


class StockLevelResponse(BaseModel):
    warehouse_id: str
    product_id: str
    quantity: int


class StockCheckResponse(BaseModel):
    product_id: str
    quantity: int
    available: bool
    warehouses: list[str]


class ReservationIdResponse(BaseModel):
    reservation_id: str


class CommitResponse(BaseModel):
    reservation_id: str
    committed: bool


class RollbackResponse(BaseModel):
    order_id: str
    released: int
