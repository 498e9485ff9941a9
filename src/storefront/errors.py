"""Storefront error taxonomy.

Field-level validation failures use Protean's ``ValidationError`` like the
rest of the domain model; the classes here cover the conditions that need
their own handling at the edges (stock conflicts, auth, upstream outages and
forged webhooks).
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    pass


class InsufficientStock(StorefrontError):
    """Raised when a requested quantity exceeds the known availability of a product.

    Cart mutations that raise this leave the cart untouched; callers surface it
    to the buyer as a notice rather than a failure.
    """

    def __init__(self, product_id: str, requested: int, available: int, title: str | None = None):
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        self.title = title
        label = title or self.product_id
        super().__init__(f"Not enough stock for {label}: {requested} requested, only {available} available")

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "title": self.title,
            "requested": self.requested,
            "available": self.available,
        }


class Unauthenticated(StorefrontError):
    """Raised when a request carries no valid session."""

    def __init__(self, reason: str = "Authentication required"):
        super().__init__(reason)


class Unauthorized(StorefrontError):
    """Raised when the signed-in principal lacks the privilege for an action."""

    def __init__(self, reason: str = "You are not allowed to perform this action"):
        super().__init__(reason)


class UpstreamServiceError(StorefrontError):
    """Raised when an external service (payment gateway, auth provider) fails or times out."""

    def __init__(self, service: str, reason: str):
        self.service = service
        self.reason = reason
        super().__init__(f"{service} is unavailable: {reason}")


class SignatureVerificationFailed(StorefrontError):
    """Raised when a payment callback does not carry a valid signature."""

    def __init__(self, reason: str = "Invalid webhook signature"):
        super().__init__(reason)
