"""Unit tests for Order state transitions and line item amounts."""

from decimal import Decimal

import pytest

from order_kernel.models.order import LineItem, Order, OrderState


def _order(state: OrderState = OrderState.CART) -> Order:
    return Order(number="R-TEST", state=state)


class TestAdvanceTo:

    def test_forward(self):
        order = _order()
        order.advance_to(OrderState.PAYMENT)
        assert order.state == OrderState.PAYMENT
        assert order.completed_at is None

    def test_complete_sets_completed_at_once(self):
        order = _order(OrderState.CONFIRM)
        order.complete()
        stamp = order.completed_at
        assert order.is_completed
        assert stamp is not None

        order.advance_to(OrderState.COMPLETE)
        assert order.completed_at == stamp

    def test_backwards_rejected(self):
        order = _order(OrderState.COMPLETE)
        with pytest.raises(ValueError):
            order.advance_to(OrderState.CART)
        assert order.state == OrderState.COMPLETE


def test_line_item_amount():
    assert LineItem(quantity=3, price=Decimal("2.50")).amount == Decimal("7.50")
