"""Shared BDD fixtures and step definitions for the Cart."""

import pytest
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart
from storefront.cart.management import CreateCart
from storefront.errors import InsufficientStock


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def outcome():
    """Container for the last command result or captured stock error."""
    return {"result": None, "exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a product with {stock:d} units in stock"), target_fixture="product")
def product_in_stock(make_product, stock):
    return make_product(available_quantity=stock)


@given("an empty cart", target_fixture="cart_id")
def empty_cart():
    return current_domain.process(CreateCart(), asynchronous=False)


@given(parsers.cfparse("a cart holding {quantity:d} units of the product"), target_fixture="cart_id")
def cart_holding(product, quantity):
    cart_id = current_domain.process(CreateCart(), asynchronous=False)
    current_domain.process(
        AddToCart(cart_id=cart_id, product_id=product.id, quantity=quantity),
        asynchronous=False,
    )
    return cart_id


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart holds {quantity:d} units of the product"))
def cart_holds(cart_id, product, quantity):
    cart = current_domain.repository_for(Cart).get(cart_id)
    assert cart.line_for(product.id).quantity == quantity


@then("the cart is empty")
def cart_is_empty(cart_id):
    assert current_domain.repository_for(Cart).get(cart_id).is_empty()


@then("the request is rejected for insufficient stock")
def rejected_for_stock(outcome):
    assert isinstance(outcome["exc"], InsufficientStock)
