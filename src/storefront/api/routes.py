"""FastAPI routes for orders.

Caller identity arrives pre-authenticated in the ``X-User-Id`` and
``X-User-Role`` headers; the routes only translate HTTP into commands and
queries.
"""

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    ItemStatusRequest,
    ItemStatusResponse,
    OrderListResponse,
    OrderResponse,
    OrderSearchResponse,
    PlacedOrderRef,
    PlaceOrderRequest,
    PlaceOrderResponse,
    StatusResponse,
)
from storefront.cart.cart import LineItemStatus
from storefront.order.cancellation import CancelOrder
from storefront.order.item_status import UpdateItemStatus
from storefront.order.placement import PlaceOrder
from storefront.order.queries import OrderQueryService
from storefront.shared.identity import Requester


def current_requester(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Requester:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return Requester.of(x_user_id, x_user_role)
    except ValidationError:
        raise HTTPException(status_code=401, detail="Unauthorized") from None


order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/add", response_model=PlaceOrderResponse)
async def place_order(body: PlaceOrderRequest, requester: Requester = Depends(current_requester)):
    command = PlaceOrder(
        cart_id=body.cart_id,
        total=body.total,
        user_id=requester.user_id,
        role=requester.role.value,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return PlaceOrderResponse(
        message="Your order has been placed successfully!",
        order=PlacedOrderRef(id=order_id),
    )


@order_router.get("/search", response_model=OrderSearchResponse)
async def search_orders(
    search: str = Query(default=""),
    requester: Requester = Depends(current_requester),
):
    return OrderQueryService().search(search, requester)


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(default=1),
    limit: int | None = Query(default=None),
    requester: Requester = Depends(current_requester),
):
    return OrderQueryService().list(requester, page=page, page_size=limit)


@order_router.get("/me", response_model=OrderListResponse)
async def list_my_orders(
    page: int = Query(default=1),
    limit: int | None = Query(default=None),
    requester: Requester = Depends(current_requester),
):
    return OrderQueryService().list(requester, owner_id=requester.user_id, page=page, page_size=limit)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, requester: Requester = Depends(current_requester)):
    return {"order": OrderQueryService().get(order_id, requester)}


@order_router.delete("/cancel/{order_id}", response_model=StatusResponse)
async def cancel_order(order_id: str, requester: Requester = Depends(current_requester)):
    command = CancelOrder(order_id=order_id, user_id=requester.user_id, role=requester.role.value)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.put("/status/item/{item_id}", response_model=ItemStatusResponse)
async def update_item_status(
    item_id: str,
    body: ItemStatusRequest,
    requester: Requester = Depends(current_requester),
):
    command = UpdateItemStatus(
        order_id=body.order_id,
        item_id=item_id,
        cart_id=body.cart_id,
        status=body.status,
        user_id=requester.user_id,
        role=requester.role.value,
    )
    result = current_domain.process(command, asynchronous=False)

    if result.order_cancelled:
        prefix = "Order" if requester.is_admin or requester.is_merchant else "Your order"
        message = f"{prefix} has been cancelled successfully"
    elif result.status == LineItemStatus.CANCELLED.value:
        message = "Item has been cancelled successfully!"
    else:
        message = "Item status has been updated successfully!"

    return ItemStatusResponse(message=message, order_cancelled=result.order_cancelled)
