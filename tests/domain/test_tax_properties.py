"""
Property-based tests for fee and tax arithmetic.

Properties:
- net + included_tax == gross for every rate and amount
- |included_tax| <= |gross| and shares its sign
- plan.adjustment_total == sum of planned amounts
- a per-item fee with no matching line items plans exactly zero
"""

from decimal import Decimal
from uuid import uuid4

from hypothesis import given, settings
from hypothesis import strategies as st

from order_kernel.domain.dtos import (
    CalculatorSpec,
    DistributorData,
    EnterpriseFeeData,
    ExchangeData,
    FeeMethodData,
    LineItemData,
    OrderSnapshot,
    RecalculationSettings,
)
from order_kernel.domain.ledger import plan_adjustments
from order_kernel.domain.tax import decompose

amounts = st.decimals(
    min_value=Decimal("-10000"),
    max_value=Decimal("10000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
rates = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("1"),
    places=4,
    allow_nan=False,
    allow_infinity=False,
)
quantities = st.lists(st.integers(min_value=1, max_value=20), min_size=0, max_size=8)


@given(gross=amounts, rate=rates, inclusive=st.booleans())
def test_decomposition_preserves_gross(gross, rate, inclusive):
    result = decompose(gross, rate, inclusive)
    assert result.net + result.included_tax == gross


@given(gross=amounts, rate=rates)
def test_included_tax_bounded_by_gross(gross, rate):
    tax = decompose(gross, rate, inclusive=True).included_tax
    assert abs(tax) <= abs(gross)
    assert tax == 0 or (tax > 0) == (gross > 0)


def _snapshot(qtys, fee_variant_matches: bool) -> OrderSnapshot:
    variant = uuid4()
    items = tuple(
        LineItemData(
            id=uuid4(),
            variant_id=variant if fee_variant_matches else uuid4(),
            quantity=q,
            price=Decimal("2.00"),
        )
        for q in qtys
    )
    fee = EnterpriseFeeData(
        id=uuid4(), name="Fee", calculator=CalculatorSpec("per_item", {"amount": "0.75"})
    )
    exchange = ExchangeData(
        id=uuid4(), receiver_id=uuid4(), incoming=True, variant_ids=frozenset({variant}), fees=(fee,)
    )
    return OrderSnapshot(
        id=uuid4(),
        line_items=items,
        distributor=DistributorData(id=uuid4(), charges_sales_tax=True),
        shipping_method=FeeMethodData(
            id=uuid4(), name="Delivery", calculator=CalculatorSpec("per_item", {"amount": "3"})
        ),
        payment_method=FeeMethodData(
            id=uuid4(), name="Card", calculator=CalculatorSpec("per_order", {"amount": "5"})
        ),
        exchanges=(exchange,),
    )


@settings(max_examples=50)
@given(qtys=quantities, matches=st.booleans())
def test_adjustment_total_is_sum_of_adjustments(qtys, matches):
    plan = plan_adjustments(
        _snapshot(qtys, matches),
        RecalculationSettings(shipment_inc_vat=True, shipping_tax_rate=Decimal("0.25")),
    )
    assert plan.adjustment_total == sum((a.amount for a in plan.adjustments), Decimal("0"))
    assert plan.order_total == plan.item_total + plan.adjustment_total


@settings(max_examples=50)
@given(qtys=quantities)
def test_unmatched_fee_is_zero(qtys):
    plan = plan_adjustments(_snapshot(qtys, fee_variant_matches=False), RecalculationSettings())
    assert [f.amount for f in plan.enterprise_fees] == [Decimal("0")]
