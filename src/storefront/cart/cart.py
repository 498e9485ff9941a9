"""Cart aggregate with a stock guard on every mutation.

Each line keeps a denormalized snapshot of its product taken at add time.
The snapshot price is honoured until checkout and the snapshot stock figure
bounds the line quantity; checkout re-validates both against the catalogue,
so a stale snapshot can never over-commit stock.

A mutation that violates the guard raises before touching any state, so a
rejected call leaves the cart exactly as it was.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartRestored,
)
from storefront.domain import storefront
from storefront.errors import InsufficientStock


def _product_fields(product) -> dict:
    """Normalize a Product, a ``Product.snapshot()`` dict or a client snapshot dict."""
    if hasattr(product, "snapshot"):
        product = product.snapshot()

    available = product.get("available_quantity", product.get("quantity", 0))
    return {
        "id": str(product.get("id") or product.get("product_id") or ""),
        "title": product.get("title") or "",
        "description": product.get("description") or "",
        "price": float(product.get("price") or 0),
        "available_quantity": max(int(available or 0), 0),
        "category": product.get("category"),
        "tags": list(product.get("tags") or []),
        "image_url": product.get("image_url", product.get("imageUrl")),
    }


@storefront.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    title = String(max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    available_quantity = Integer(required=True, min_value=0)
    category = String(max_length=100)
    image_url = String(max_length=500)
    details = Text()  # JSON: description and tags at add time
    position = Integer(required=True, min_value=0)
    added_at = DateTime()

    def refresh_snapshot(self, fields):
        self.title = fields["title"]
        self.unit_price = fields["price"]
        self.available_quantity = fields["available_quantity"]
        self.category = fields["category"]
        self.image_url = fields["image_url"]
        self.details = json.dumps({"description": fields["description"], "tags": fields["tags"]})

    def line_total(self):
        return Decimal(str(self.unit_price)) * self.quantity

    def product_snapshot(self):
        details = json.loads(self.details) if self.details else {}
        return {
            "id": str(self.product_id),
            "title": self.title,
            "description": details.get("description", ""),
            "price": self.unit_price,
            "available_quantity": self.available_quantity,
            "category": self.category,
            "tags": details.get("tags", []),
            "image_url": self.image_url,
        }


@storefront.aggregate
class Cart:
    buyer_id = Identifier()  # Nullable for guest carts
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def at_most_one_line_per_product(self):
        product_ids = [str(line.product_id) for line in self.lines]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"lines": ["A cart can hold only one line per product"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, buyer_id=None):
        now = datetime.now(UTC)
        return cls(buyer_id=buyer_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def line_for(self, product_id):
        return next((line for line in self.lines if str(line.product_id) == str(product_id)), None)

    def ordered_lines(self):
        """Lines in insertion order."""
        return sorted(self.lines, key=lambda line: line.position)

    def is_empty(self):
        return not self.lines

    def total_item_count(self):
        """Sum of line quantities, not the number of distinct lines."""
        return sum(line.quantity for line in self.lines)

    def subtotal(self):
        """Sum of quantity times snapshot price, as a Decimal."""
        return sum((line.line_total() for line in self.lines), Decimal("0"))

    def belongs_to(self, buyer_id):
        return self.buyer_id is None or str(self.buyer_id) == str(buyer_id)

    def _next_position(self):
        return max((line.position for line in self.lines), default=-1) + 1

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, product, quantity):
        """Add ``quantity`` of ``product``, merging into an existing line.

        A new line is clamped to the product's available stock; a product
        with no stock is rejected. A merge that would exceed the available
        stock is rejected in full. Returns the resulting line quantity.
        """
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        fields = _product_fields(product)
        product_id = fields["id"]
        available = fields["available_quantity"]
        existing = self.line_for(product_id)
        now = datetime.now(UTC)

        if existing is not None:
            merged = existing.quantity + quantity
            if merged > available:
                raise InsufficientStock(product_id, merged, available, title=fields["title"])
            existing.quantity = merged
            existing.available_quantity = available
            line_quantity = merged
        else:
            if available == 0:
                raise InsufficientStock(product_id, quantity, available, title=fields["title"])
            line_quantity = min(quantity, available)
            line = CartLine(
                product_id=product_id,
                quantity=line_quantity,
                unit_price=fields["price"],
                available_quantity=available,
                position=self._next_position(),
                added_at=now,
            )
            line.refresh_snapshot(fields)
            self.add_lines(line)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=product_id,
                requested_quantity=quantity,
                line_quantity=line_quantity,
            )
        )
        return line_quantity

    def remove_item(self, product_id):
        """Delete the line for ``product_id``. A missing line is a no-op."""
        line = self.line_for(product_id)
        if line is None:
            return

        self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
            )
        )

    def update_quantity(self, product_id, new_quantity):
        """Replace a line's quantity; zero or less removes the line."""
        line = self.line_for(product_id)
        if line is None:
            return

        if new_quantity <= 0:
            self.remove_item(product_id)
            return

        if new_quantity > line.available_quantity:
            raise InsufficientStock(product_id, new_quantity, line.available_quantity, title=line.title)

        previous_quantity = line.quantity
        line.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def clear(self):
        removed = len(self.lines)
        for line in list(self.lines):
            self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), lines_removed=removed))

    # -------------------------------------------------------------------
    # Client snapshot
    # -------------------------------------------------------------------
    def to_snapshot(self):
        """Serialize to the client-side shape ``[{productId, quantity, product}]``."""
        snapshot = []
        for line in self.ordered_lines():
            product = line.product_snapshot()
            snapshot.append(
                {
                    "productId": product["id"],
                    "quantity": line.quantity,
                    "product": {
                        "id": product["id"],
                        "title": product["title"],
                        "description": product["description"],
                        "price": product["price"],
                        "imageUrl": product["image_url"],
                        "category": product["category"],
                        "tags": product["tags"],
                        "quantity": product["available_quantity"],
                    },
                }
            )
        return snapshot

    @classmethod
    def from_snapshot(cls, buyer_id, payload):
        """Rebuild a cart from a client snapshot, re-applying the stock guard.

        Entries with a non-positive quantity or no stock are dropped, quantities
        are clamped to the snapshot stock, and repeated products are merged.
        """
        if isinstance(payload, str | bytes):
            try:
                payload = json.loads(payload)
            except ValueError:
                raise ValidationError({"snapshot": ["Cart snapshot is not valid JSON"]}) from None
        if not isinstance(payload, list):
            raise ValidationError({"snapshot": ["Cart snapshot must be a list of lines"]})

        cart = cls.create(buyer_id=buyer_id)
        now = datetime.now(UTC)

        for entry in payload:
            if not isinstance(entry, dict) or not isinstance(entry.get("product"), dict):
                raise ValidationError({"snapshot": ["Each cart line needs a product"]})

            fields = _product_fields({**entry["product"], "id": entry.get("productId") or entry["product"].get("id")})
            try:
                quantity = int(entry.get("quantity") or 0)
            except (TypeError, ValueError):
                raise ValidationError({"snapshot": ["Line quantities must be integers"]}) from None

            if not fields["id"] or quantity <= 0 or fields["available_quantity"] == 0:
                continue

            existing = cart.line_for(fields["id"])
            if existing is not None:
                existing.quantity = min(existing.quantity + quantity, fields["available_quantity"])
                existing.available_quantity = fields["available_quantity"]
                continue

            line = CartLine(
                product_id=fields["id"],
                quantity=min(quantity, fields["available_quantity"]),
                unit_price=fields["price"],
                available_quantity=fields["available_quantity"],
                position=cart._next_position(),
                added_at=now,
            )
            line.refresh_snapshot(fields)
            cart.add_lines(line)

        cart.raise_(CartRestored(cart_id=str(cart.id), line_count=len(cart.lines)))
        return cart
