"""Application tests for order persistence and admin status changes."""

from decimal import Decimal

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from storefront.orders.order import Order
from storefront.orders.status import UpdateOrderStatus


def _store_order(buyer_id="buyer-1", session_id="cs_test_1"):
    order = Order.place_paid(
        buyer_id=buyer_id,
        checkout_session_id=session_id,
        lines=[{"product_id": "p1", "quantity": 1, "unit_price": Decimal("10.00")}],
        subtotal=Decimal("10.00"),
        shipping=Decimal("5.99"),
        tax=Decimal("0.80"),
        total=Decimal("16.79"),
    )
    current_domain.repository_for(Order).add(order)
    return str(order.id)


class TestOrderRepository:
    def test_find_by_session(self):
        order_id = _store_order(session_id="cs_abc")
        found = current_domain.repository_for(Order).find_by_session("cs_abc")
        assert str(found.id) == order_id

    def test_find_by_unknown_session(self):
        assert current_domain.repository_for(Order).find_by_session("cs_nope") is None

    def test_session_id_is_unique(self):
        _store_order(session_id="cs_abc")
        with pytest.raises(ValidationError):
            _store_order(session_id="cs_abc")

    def test_find_by_buyer(self):
        _store_order(buyer_id="buyer-1", session_id="cs_1")
        _store_order(buyer_id="buyer-2", session_id="cs_2")
        _store_order(buyer_id="buyer-1", session_id="cs_3")

        orders = current_domain.repository_for(Order).find_by_buyer("buyer-1")
        assert {o.checkout_session_id for o in orders} == {"cs_1", "cs_3"}


class TestUpdateOrderStatus:
    def test_advance_status(self):
        order_id = _store_order()

        status = current_domain.process(UpdateOrderStatus(order_id=order_id, status="processing"), asynchronous=False)

        assert status == "processing"
        assert current_domain.repository_for(Order).get(order_id).status == "processing"

    def test_illegal_transition_is_rejected(self):
        order_id = _store_order()

        with pytest.raises(ValidationError):
            current_domain.process(UpdateOrderStatus(order_id=order_id, status="delivered"), asynchronous=False)
        assert current_domain.repository_for(Order).get(order_id).status == "paid"

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValidationError):
            UpdateOrderStatus(order_id="any", status="lost")
