"""Product aggregate: catalogue entry and stock ledger in one.

A product's ``available_quantity`` is the authoritative stock figure. Carts
copy a snapshot of it at add time; checkout re-reads it, and paid orders
withdraw from it through ``ProductRepository.decrement_stock``.
"""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String, Text

from storefront.catalogue.events import ProductCreated, ProductUpdated, StockWithdrawn
from storefront.domain import storefront


def _encode_tags(tags):
    if tags is None:
        return json.dumps([])
    if isinstance(tags, str):
        tags = tags.split(",")
    return json.dumps([str(tag).strip() for tag in tags if str(tag).strip()])


@storefront.aggregate
class Product:
    title = String(required=True, max_length=255)
    description = Text(required=True)
    price = Float(required=True, min_value=0.01)
    available_quantity = Integer(required=True, min_value=0, default=0)
    category = String(required=True, max_length=100)
    tags = Text()  # JSON array of tag strings
    image_url = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def title_must_not_be_blank(self):
        if self.title is not None and not self.title.strip():
            raise ValidationError({"title": ["Title cannot be blank"]})

    @invariant.post
    def category_must_not_be_blank(self):
        if self.category is not None and not self.category.strip():
            raise ValidationError({"category": ["Category cannot be blank"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        title,
        description,
        price,
        category,
        available_quantity=0,
        tags=None,
        image_url=None,
        product_id=None,
    ):
        now = datetime.now(UTC)
        kwargs = dict(
            title=title,
            description=description,
            price=price,
            category=category,
            available_quantity=available_quantity,
            tags=_encode_tags(tags),
            image_url=image_url,
            created_at=now,
            updated_at=now,
        )
        if product_id is not None:
            kwargs["id"] = product_id

        product = cls(**kwargs)
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                title=product.title,
                category=product.category,
                price=product.price,
                available_quantity=product.available_quantity,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Admin edits
    # -------------------------------------------------------------------
    def update_details(
        self,
        title=None,
        description=None,
        price=None,
        category=None,
        available_quantity=None,
        tags=None,
        image_url=None,
    ):
        """Apply a partial edit. Only the arguments that are not None change."""
        if title is not None:
            self.title = title
        if description is not None:
            self.description = description
        if price is not None:
            self.price = price
        if category is not None:
            self.category = category
        if available_quantity is not None:
            self.available_quantity = available_quantity
        if tags is not None:
            self.tags = _encode_tags(tags)
        if image_url is not None:
            self.image_url = image_url

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductUpdated(
                product_id=str(self.id),
                title=self.title,
                price=self.price,
                available_quantity=self.available_quantity,
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def withdraw_stock(self, quantity):
        """Take ``quantity`` units out of stock, never going below zero.

        Returns the number of units that could not be covered.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity to withdraw must be at least 1"]})

        previous = self.available_quantity
        remaining = max(previous - quantity, 0)
        shortfall = max(quantity - previous, 0)

        self.available_quantity = remaining
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockWithdrawn(
                product_id=str(self.id),
                requested=quantity,
                previous_quantity=previous,
                remaining_quantity=remaining,
                shortfall=shortfall,
            )
        )
        return shortfall

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    def tag_list(self):
        if not self.tags:
            return []
        return json.loads(self.tags)

    def in_stock(self):
        return self.available_quantity > 0

    def snapshot(self):
        """The denormalized copy of this product that a cart line keeps."""
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "available_quantity": self.available_quantity,
            "category": self.category,
            "tags": self.tag_list(),
            "image_url": self.image_url,
        }
