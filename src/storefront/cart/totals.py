"""Derived cart totals.

Totals are never stored; they are recomputed from the subtotal on every read
so they cannot go stale across mutations.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from storefront.config import settings

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce a float, int, str or Decimal to a Decimal rounded half-up to cents."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricingContext:
    tax_rate: Decimal = Decimal("0.08")
    free_shipping_threshold: Decimal = Decimal("100.00")
    flat_shipping_cost: Decimal = Decimal("5.99")

    @classmethod
    def from_settings(cls, config) -> "PricingContext":
        return cls(
            tax_rate=Decimal(str(config.tax_rate)),
            free_shipping_threshold=Decimal(str(config.free_shipping_threshold)),
            flat_shipping_cost=Decimal(str(config.flat_shipping_cost)),
        )


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal

    def as_dict(self) -> dict[str, str]:
        return {
            "subtotal": str(self.subtotal),
            "shipping": str(self.shipping),
            "tax": str(self.tax),
            "total": str(self.total),
        }


def compute_totals(subtotal, pricing: PricingContext | None = None) -> Totals:
    """Shipping, tax and grand total for ``subtotal``.

    Shipping is free for an empty cart and for subtotals strictly above the
    free-shipping threshold; otherwise the flat cost applies. Tax is charged
    on the subtotal only.
    """
    pricing = pricing or PricingContext()
    subtotal = to_money(subtotal)

    if subtotal == 0 or subtotal > pricing.free_shipping_threshold:
        shipping = to_money(0)
    else:
        shipping = to_money(pricing.flat_shipping_cost)

    tax = to_money(subtotal * pricing.tax_rate)
    total = to_money(subtotal + shipping + tax)
    return Totals(subtotal=subtotal, shipping=shipping, tax=tax, total=total)


def default_pricing() -> PricingContext:
    """The process-wide pricing rules from settings."""
    return PricingContext.from_settings(settings)
