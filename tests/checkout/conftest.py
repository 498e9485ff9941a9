import pytest
from protean.utils.globals import current_domain
from storefront.cart.items import AddToCart
from storefront.cart.management import CreateCart
from storefront.identity import Principal


@pytest.fixture()
def buyer():
    return Principal(id="buyer-1", email="buyer@example.com", name="Buyer")


@pytest.fixture()
def filled_cart(make_product, buyer):
    """A buyer's cart holding 2 x 20.00 and 1 x 9.99. Returns (cart_id, [product, product])."""
    shaker = make_product(title="Gym Shaker Bottle", price=20.0, available_quantity=5, category="Accessories")
    vitamin = make_product(title="Vitamin D3 + K2", price=9.99, available_quantity=3, category="Vitamins")

    cart_id = current_domain.process(CreateCart(buyer_id=buyer.id), asynchronous=False)
    for product, quantity in ((shaker, 2), (vitamin, 1)):
        current_domain.process(
            AddToCart(cart_id=cart_id, product_id=product.id, quantity=quantity, buyer_id=buyer.id),
            asynchronous=False,
        )
    return cart_id, [shaker, vitamin]


@pytest.fixture()
def contact():
    """A complete checkout form."""
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+1 217 555 0100",
        "line1": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "postal_code": "62701",
        "country": "US",
    }
