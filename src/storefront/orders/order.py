"""Order aggregate: write-once record of a paid checkout.

Orders are only ever created by the payment completion handler, already in
the ``paid`` state. Afterwards the only change allowed is moving the status
along the fulfilment lifecycle:

    pending → paid | cancelled
    paid → processing | cancelled
    processing → shipped | cancelled
    shipped → delivered
    delivered, cancelled: terminal
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.orders.events import OrderPlaced, OrderStatusChanged


class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, from the payment gateway or the checkout form."""

    name = String(max_length=255)
    email = String(max_length=255)
    phone = String(max_length=50)
    line1 = String(max_length=255)
    line2 = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(max_length=100)


@storefront.entity(part_of="Order")
class OrderLine:
    product_id = Identifier(required=True)
    title = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)


@storefront.aggregate
class Order:
    buyer_id = Identifier(required=True)
    checkout_session_id = String(required=True, unique=True, max_length=255)
    lines = HasMany(OrderLine)
    subtotal = Float(default=0.0)
    shipping = Float(default=0.0)
    tax = Float(default=0.0)
    total = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    shipping_address = ValueObject(ShippingAddress)
    payment_reference = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def placed_orders_must_have_lines(self):
        if self.status != OrderStatus.PENDING.value and not self.lines:
            raise ValidationError({"lines": ["An order must contain at least one line"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place_paid(
        cls,
        buyer_id,
        checkout_session_id,
        lines,
        subtotal,
        shipping,
        tax,
        total,
        payment_reference=None,
        shipping_address=None,
    ):
        """Record a paid order.

        ``lines`` is a list of dicts with product_id, quantity, unit_price and
        optionally title.
        """
        if not lines:
            raise ValidationError({"lines": ["An order must contain at least one line"]})

        now = datetime.now(UTC)
        order = cls(
            buyer_id=buyer_id,
            checkout_session_id=checkout_session_id,
            subtotal=float(subtotal),
            shipping=float(shipping),
            tax=float(tax),
            total=float(total),
            status=OrderStatus.PENDING.value,
            payment_reference=payment_reference,
            shipping_address=ShippingAddress(**shipping_address) if shipping_address else None,
            created_at=now,
            updated_at=now,
        )
        order.add_lines(
            [
                OrderLine(
                    product_id=line["product_id"],
                    title=line.get("title"),
                    quantity=line["quantity"],
                    unit_price=float(line["unit_price"]),
                )
                for line in lines
            ]
        )
        # Payment is already captured when the order is written
        order.status = OrderStatus.PAID.value

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                buyer_id=str(buyer_id),
                checkout_session_id=checkout_session_id,
                payment_reference=payment_reference,
                items=json.dumps(
                    [
                        {
                            "product_id": str(line["product_id"]),
                            "quantity": line["quantity"],
                            "unit_price": str(line["unit_price"]),
                        }
                        for line in lines
                    ]
                ),
                item_count=sum(line["quantity"] for line in lines),
                total=float(total),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def transition_to(self, new_status):
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status '{new_status}'"]}) from None

        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )

    def is_terminal(self):
        return not _VALID_TRANSITIONS[OrderStatus(self.status)]

    def item_count(self):
        return sum(line.quantity for line in self.lines)

    def total_amount(self):
        return Decimal(str(self.total))
