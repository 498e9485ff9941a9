"""FastAPI endpoints for the Cart.

Carts opened by a signed-in buyer are bound to that buyer; guest carts are
reachable by anyone holding the cart id.
"""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.dependencies import get_optional_principal
from storefront.cart.api.schemas import (
    AddToCartRequest,
    CartResponse,
    RestoreCartRequest,
    UpdateQuantityRequest,
)
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.management import ClearCart, CreateCart, RestoreCart
from storefront.identity import Principal

cart_router = APIRouter(prefix="/carts", tags=["cart"])


def _buyer_id(principal: Principal | None) -> str | None:
    return principal.id if principal else None


def _load(cart_id: str, principal: Principal | None) -> Cart:
    return current_domain.repository_for(Cart).get_for_buyer(cart_id, _buyer_id(principal))


@cart_router.post("", status_code=201, response_model=CartResponse)
async def create_cart(principal: Principal | None = Depends(get_optional_principal)) -> CartResponse:
    cart_id = current_domain.process(CreateCart(buyer_id=_buyer_id(principal)), asynchronous=False)
    return CartResponse.from_cart(_load(cart_id, principal))


@cart_router.post("/restore", status_code=201, response_model=CartResponse)
async def restore_cart(
    body: RestoreCartRequest,
    principal: Principal | None = Depends(get_optional_principal),
) -> CartResponse:
    command = RestoreCart(buyer_id=_buyer_id(principal), snapshot=json.dumps(body.snapshot))
    cart_id = current_domain.process(command, asynchronous=False)
    return CartResponse.from_cart(_load(cart_id, principal))


@cart_router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str, principal: Principal | None = Depends(get_optional_principal)) -> CartResponse:
    return CartResponse.from_cart(_load(cart_id, principal))


@cart_router.get("/{cart_id}/snapshot")
async def get_cart_snapshot(
    cart_id: str,
    principal: Principal | None = Depends(get_optional_principal),
) -> list[dict]:
    return _load(cart_id, principal).to_snapshot()


@cart_router.post("/{cart_id}/items", response_model=CartResponse)
async def add_item(
    cart_id: str,
    body: AddToCartRequest,
    principal: Principal | None = Depends(get_optional_principal),
) -> CartResponse:
    command = AddToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        quantity=body.quantity,
        buyer_id=_buyer_id(principal),
    )
    result = current_domain.process(command, asynchronous=False)

    notice = None
    if result["clamped"]:
        notice = f"Only {result['line_quantity']} of {result['requested']} requested could be added"
    return CartResponse.from_cart(_load(cart_id, principal), notice=notice)


@cart_router.put("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def update_item_quantity(
    cart_id: str,
    product_id: str,
    body: UpdateQuantityRequest,
    principal: Principal | None = Depends(get_optional_principal),
) -> CartResponse:
    command = UpdateCartQuantity(
        cart_id=cart_id,
        product_id=product_id,
        new_quantity=body.quantity,
        buyer_id=_buyer_id(principal),
    )
    current_domain.process(command, asynchronous=False)
    return CartResponse.from_cart(_load(cart_id, principal))


@cart_router.delete("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def remove_item(
    cart_id: str,
    product_id: str,
    principal: Principal | None = Depends(get_optional_principal),
) -> CartResponse:
    command = RemoveFromCart(cart_id=cart_id, product_id=product_id, buyer_id=_buyer_id(principal))
    current_domain.process(command, asynchronous=False)
    return CartResponse.from_cart(_load(cart_id, principal))


@cart_router.delete("/{cart_id}/items", response_model=CartResponse)
async def clear_cart(cart_id: str, principal: Principal | None = Depends(get_optional_principal)) -> CartResponse:
    current_domain.process(ClearCart(cart_id=cart_id, buyer_id=_buyer_id(principal)), asynchronous=False)
    return CartResponse.from_cart(_load(cart_id, principal))
