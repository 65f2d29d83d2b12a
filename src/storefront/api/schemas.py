"""Pydantic request/response schemas for the Orders API.

These are external contracts, separate from the internal Protean commands
and from the dict views returned by ``OrderQueryService``.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    cart_id: str
    total: float = Field(ge=0)

    model_config = {
        "json_schema_extra": {
            "examples": [{"cart_id": "5b0c3a0e-0d5c-4f0e-9d6f-0c1f7a3f5e21", "total": 27.0}]
        }
    }


class ItemStatusRequest(BaseModel):
    order_id: str
    cart_id: str | None = None
    status: str = "Cancelled"


# ---------------------------------------------------------------------------
# Order views
# ---------------------------------------------------------------------------
class OrderLineSchema(BaseModel):
    id: str
    product_id: str
    name: str | None = None
    sku: str | None = None
    brand: str | None = None
    quantity: int
    unit_price: float
    taxable: bool
    status: str
    total_price: float
    total_tax: float
    price_with_tax: float


class OrderSchema(BaseModel):
    id: str
    user_id: str
    cart_id: str
    created_at: datetime | None = None
    placed_total: float
    total: float
    total_tax: float
    total_with_tax: float
    state: str
    products: list[OrderLineSchema]


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
class PlacedOrderRef(BaseModel):
    id: str


class PlaceOrderResponse(BaseModel):
    success: bool = True
    message: str
    order: PlacedOrderRef


class OrderResponse(BaseModel):
    order: OrderSchema


class OrderListResponse(BaseModel):
    orders: list[OrderSchema]
    total_pages: int
    current_page: int
    count: int


class OrderSearchResponse(BaseModel):
    orders: list[OrderSchema]


class StatusResponse(BaseModel):
    success: bool = True
    message: str | None = None


class ItemStatusResponse(StatusResponse):
    order_cancelled: bool = False
