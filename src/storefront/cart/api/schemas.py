"""Pydantic request/response schemas for the Cart API."""

from typing import Any

from pydantic import BaseModel, Field

from storefront.cart.totals import compute_totals, default_pricing, to_money


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"product_id": "prod-whey-isolate", "quantity": 2},
            ]
        }
    }


class UpdateQuantityRequest(BaseModel):
    quantity: int


class RestoreCartRequest(BaseModel):
    snapshot: list[dict[str, Any]]


class CartLineResponse(BaseModel):
    product_id: str
    title: str | None = None
    quantity: int
    unit_price: float
    available_quantity: int
    image_url: str | None = None
    line_total: str


class CartResponse(BaseModel):
    cart_id: str
    buyer_id: str | None = None
    lines: list[CartLineResponse]
    item_count: int
    subtotal: str
    shipping: str
    tax: str
    total: str
    notice: str | None = None

    @classmethod
    def from_cart(cls, cart, notice: str | None = None) -> "CartResponse":
        totals = compute_totals(cart.subtotal(), default_pricing())
        return cls(
            cart_id=str(cart.id),
            buyer_id=str(cart.buyer_id) if cart.buyer_id else None,
            lines=[
                CartLineResponse(
                    product_id=str(line.product_id),
                    title=line.title,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    available_quantity=line.available_quantity,
                    image_url=line.image_url,
                    line_total=str(to_money(line.line_total())),
                )
                for line in cart.ordered_lines()
            ],
            item_count=cart.total_item_count(),
            notice=notice,
            **totals.as_dict(),
        )
