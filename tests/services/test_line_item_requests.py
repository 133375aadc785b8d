"""
Tests for the line item request entry points.

Covers:
- destroy(): 204 / 403 / 404 / 400 statuses, missing id, rollback on failure,
  shop context passed through to the service
- index(): 403 without a user, 200 with the user's bought items
"""

from decimal import Decimal
from http import HTTPStatus

import pytest

from order_kernel.exceptions import InvalidCalculatorConfigError, MissingLineItemIdError
from order_kernel.models.order import Order
from order_kernel.selectors.line_item_selector import LineItemSelector
from order_kernel.services.line_item_requests import LineItemRequests, RequestResult


@pytest.fixture
def requests(session, vat_settings) -> LineItemRequests:
    return LineItemRequests(session, vat_settings)


class TestDestroy:

    def test_no_content_on_success(self, session, requests, shop_order, customer):
        line_item_id = shop_order.line_items[0].id

        result = requests.destroy(line_item_id, customer.id)

        assert result == RequestResult(status=HTTPStatus.NO_CONTENT)
        assert result.is_success
        assert LineItemSelector(session).find(line_item_id) is None

    def test_committed(self, session, requests, shop_order, customer):
        requests.destroy(shop_order.line_items[0].id, customer.id)
        session.rollback()

        order = session.get(Order, shop_order.id)
        assert len(order.line_items) == 1
        assert order.adjustment_total == Decimal("8.00")

    def test_string_id_accepted(self, requests, shop_order, customer):
        result = requests.destroy(str(shop_order.line_items[0].id), customer.id)
        assert result.status == HTTPStatus.NO_CONTENT

    def test_forbidden(self, session, requests, shop_order, create_user):
        line_item_id = shop_order.line_items[0].id
        session.commit()

        result = requests.destroy(line_item_id, create_user().id)

        assert result.status == HTTPStatus.FORBIDDEN
        assert not result.is_success
        assert LineItemSelector(session).exists(line_item_id)

    def test_anonymous_forbidden(self, requests, shop_order):
        result = requests.destroy(shop_order.line_items[0].id, None)
        assert result.status == HTTPStatus.FORBIDDEN

    def test_not_found(self, requests, missing_id, customer):
        assert requests.destroy(missing_id, customer.id).status == HTTPStatus.NOT_FOUND

    def test_bad_request_for_malformed_id(self, requests, customer):
        assert requests.destroy("not-a-uuid", customer.id).status == HTTPStatus.BAD_REQUEST

    @pytest.mark.parametrize("line_item_id", [None, ""])
    def test_missing_id_raises(self, requests, customer, line_item_id):
        with pytest.raises(MissingLineItemIdError) as exc_info:
            requests.destroy(line_item_id, customer.id)
        assert exc_info.value.code == "MISSING_LINE_ITEM_ID"

    def test_failed_recalculation_undoes_removal(self, session, requests, shop_order, customer):
        shop_order.payment.payment_method.calculator_preferences = {"amount": "NaN"}
        session.commit()
        line_item_id = shop_order.line_items[0].id

        with pytest.raises(InvalidCalculatorConfigError):
            requests.destroy(line_item_id, customer.id)

        assert LineItemSelector(session).exists(line_item_id)
        order = session.get(Order, shop_order.id)
        assert len(order.line_items) == 2
        assert order.adjustment_total == Decimal("16.00")

    def test_log_context_bound(self, requests, shop_order, customer, captured_logs):
        line_item_id = shop_order.line_items[0].id
        requests.destroy(line_item_id, customer.id)

        [record] = [r for r in captured_logs() if r["message"] == "line_item_destroyed"]
        assert record["user_id"] == str(customer.id)
        assert record["line_item_id"] == str(line_item_id)
        assert "correlation_id" in record


    def test_shop_context_passed_through(
        self, requests, shop_order, customer, shop, order_cycle, captured_logs
    ):
        result = requests.destroy(
            shop_order.line_items[0].id,
            customer.id,
            current_order_cycle_id=order_cycle.id,
            current_distributor_id=shop.id,
        )

        assert result.status == HTTPStatus.NO_CONTENT
        [record] = [r for r in captured_logs() if r["message"] == "line_item_destroyed"]
        assert record["current_order_cycle_id"] == str(order_cycle.id)
        assert record["current_distributor_id"] == str(shop.id)


class TestIndex:

    def test_forbidden_without_user(self, requests, shop, order_cycle):
        assert requests.index(None, order_cycle.id, shop.id).status == HTTPStatus.FORBIDDEN

    def test_lists_bought_items(self, requests, shop_order, customer, shop, order_cycle):
        result = requests.index(customer.id, order_cycle.id, shop.id)

        assert result.status == HTTPStatus.OK
        assert [item["id"] for item in result.body] == [
            str(li.id) for li in shop_order.line_items
        ]
        assert result.body[0]["quantity"] == 1
        assert Decimal(result.body[0]["price"]) == Decimal("10.00")

    def test_empty_for_other_shop(self, requests, shop_order, customer, order_cycle, create_enterprise):
        other = create_enterprise("Other shop")
        result = requests.index(customer.id, order_cycle.id, other.id)
        assert result.status == HTTPStatus.OK
        assert result.body == []
