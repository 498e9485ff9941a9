"""Pydantic request/response schemas for the Orders API."""

from pydantic import BaseModel


class OrderLineResponse(BaseModel):
    product_id: str
    title: str | None = None
    quantity: int
    unit_price: float


class ShippingAddressResponse(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class OrderResponse(BaseModel):
    id: str
    buyer_id: str
    status: str
    checkout_session_id: str
    payment_reference: str | None = None
    lines: list[OrderLineResponse]
    item_count: int
    subtotal: float
    shipping: float
    tax: float
    total: float
    shipping_address: ShippingAddressResponse | None = None
    created_at: str | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        address = None
        if order.shipping_address:
            address = ShippingAddressResponse(
                name=order.shipping_address.name,
                email=order.shipping_address.email,
                phone=order.shipping_address.phone,
                line1=order.shipping_address.line1,
                line2=order.shipping_address.line2,
                city=order.shipping_address.city,
                state=order.shipping_address.state,
                postal_code=order.shipping_address.postal_code,
                country=order.shipping_address.country,
            )
        return cls(
            id=str(order.id),
            buyer_id=str(order.buyer_id),
            status=order.status,
            checkout_session_id=order.checkout_session_id,
            payment_reference=order.payment_reference,
            lines=[
                OrderLineResponse(
                    product_id=str(line.product_id),
                    title=line.title,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in order.lines
            ],
            item_count=order.item_count(),
            subtotal=order.subtotal,
            shipping=order.shipping,
            tax=order.tax,
            total=order.total,
            shipping_address=address,
            created_at=order.created_at.isoformat() if order.created_at else None,
        )


class UpdateOrderStatusRequest(BaseModel):
    status: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"status": "processing"},
            ]
        }
    }


class OrderStatusResponse(BaseModel):
    order_id: str
    status: str
