"""Pydantic request/response schemas for the Delivery API (external contracts)."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreateShipmentRequest(BaseModel):
    order_id: str = Field(min_length=1)
    warehouse_id: str = Field(min_length=1)
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    recipient_name: str = Field(min_length=1, max_length=255)
    recipient_email: str = Field(min_length=3, max_length=255)
    address: str = Field(min_length=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "order_id": "ord-001",
                    "warehouse_id": "wh-sydney",
                    "product_id": "42",
                    "quantity": 2,
                    "recipient_name": "Jane Doe",
                    "recipient_email": "jane@example.com",
                    "address": "1 George St, Sydney NSW 2000",
                }
            ]
        }
    }


class UpdateShipmentStatusRequest(BaseModel):
    status: str


class ShipmentResponse(BaseModel):
    shipment_id: str
    order_id: str
    tracking_number: str
    carrier: str
    status: str
    progress: int
    estimated_delivery: datetime | None = None
    actual_delivery: datetime | None = None


class SimulationTickResponse(BaseModel):
    changes: list[dict]
