"""FastAPI endpoints for orders: buyer history and admin fulfilment."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.dependencies import get_current_principal, require_admin
from storefront.errors import Unauthorized
from storefront.identity import Principal
from storefront.orders.api.schemas import OrderResponse, OrderStatusResponse, UpdateOrderStatusRequest
from storefront.orders.order import Order
from storefront.orders.status import UpdateOrderStatus

order_router = APIRouter(prefix="/orders", tags=["orders"])
admin_order_router = APIRouter(
    prefix="/admin/orders",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@order_router.get("", response_model=list[OrderResponse])
async def list_my_orders(principal: Principal = Depends(get_current_principal)) -> list[OrderResponse]:
    orders = current_domain.repository_for(Order).find_by_buyer(principal.id)
    return [OrderResponse.from_order(order) for order in orders]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, principal: Principal = Depends(get_current_principal)) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    if str(order.buyer_id) != principal.id and not principal.is_admin:
        raise Unauthorized("This order belongs to another buyer")
    return OrderResponse.from_order(order)


@admin_order_router.get("", response_model=list[OrderResponse])
async def list_all_orders() -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in current_domain.repository_for(Order).list_all()]


@admin_order_router.put("/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderStatusResponse:
    command = UpdateOrderStatus(order_id=order_id, status=body.status)
    status = current_domain.process(command, asynchronous=False)
    return OrderStatusResponse(order_id=order_id, status=status)
