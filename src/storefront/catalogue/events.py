"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A new product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    category = String(required=True, max_length=100)
    price = Float(required=True)
    available_quantity = Integer(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductUpdated:
    """A product's descriptive fields, price or stock were edited by an admin."""

    __version__ = 1

    product_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    price = Float(required=True)
    available_quantity = Integer(required=True)
    updated_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockWithdrawn:
    """Units of a product were taken out of stock by a paid order."""

    __version__ = 1

    product_id = Identifier(required=True)
    requested = Integer(required=True)
    previous_quantity = Integer(required=True)
    remaining_quantity = Integer(required=True)
    shortfall = Integer(required=True)
