"""
Calculators -- Fee amount strategies.

Responsibility:
    Turns a calculator kind plus preferences into an amount for a target.
    Targets form an explicit tagged union:

        LineItemTarget  -- one line item; priced on its own.
        OrderTarget     -- an order's current line items (or the subset an
                           exchange applies to); priced as a whole.
        OtherTarget     -- anything else.  line_items_for() passes it through
                           unchanged as a one-element item set; compute()
                           refuses it because no money semantics apply.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Calculators are immutable and side-effect free; the same target and
      preferences always produce the same amount.
    - Preferences are parsed on construction, so reading them
      (e.g. preferred_amount) never triggers a computation.
    - Amounts are returned unrounded; the ledger rounds once.

Failure modes:
    - UnknownCalculatorError for an unregistered kind.
    - InvalidCalculatorConfigError for a missing or non-numeric preference.
    - UnsupportedCalculationTargetError when compute() is given an OtherTarget.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar, Mapping, Union
from uuid import UUID

from order_kernel.domain.dtos import CalculatorSpec, LineItemData
from order_kernel.exceptions import (
    InvalidCalculatorConfigError,
    UnknownCalculatorError,
    UnsupportedCalculationTargetError,
)

ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LineItemTarget:
    line_item: LineItemData


@dataclass(frozen=True)
class OrderTarget:
    line_items: tuple[LineItemData, ...]
    order_id: UUID | None = None


@dataclass(frozen=True)
class OtherTarget:
    value: Any


CalculationTarget = Union[LineItemTarget, OrderTarget, OtherTarget]


def line_items_for(target: CalculationTarget) -> list[Any]:
    """
    Resolve the item set a calculator operates on.

    A line item resolves to itself, an order to its full line-item sequence.
    Any other value is returned unmodified as the sole element.
    """
    if isinstance(target, LineItemTarget):
        return [target.line_item]
    if isinstance(target, OrderTarget):
        return list(target.line_items)
    # TODO: decide whether unsupported targets should be rejected here too;
    # compute() already refuses them.
    return [target.value]


# ---------------------------------------------------------------------------
# Preference parsing
# ---------------------------------------------------------------------------


def _decimal_preference(
    calculator: str,
    preferences: Mapping[str, Any],
    name: str,
    default: Decimal | None = None,
) -> Decimal:
    raw = preferences.get(name)
    if raw is None:
        if default is None:
            raise InvalidCalculatorConfigError(calculator, name, raw)
        return default
    if isinstance(raw, float) or isinstance(raw, bool):
        raise InvalidCalculatorConfigError(calculator, name, raw)
    try:
        value = Decimal(str(raw))
    except InvalidOperation as e:
        raise InvalidCalculatorConfigError(calculator, name, raw) from e
    if not value.is_finite():
        raise InvalidCalculatorConfigError(calculator, name, raw)
    return value


def _int_preference(
    calculator: str,
    preferences: Mapping[str, Any],
    name: str,
    default: int,
) -> int:
    raw = preferences.get(name)
    if raw is None:
        return default
    try:
        value = int(str(raw))
    except ValueError as e:
        raise InvalidCalculatorConfigError(calculator, name, raw) from e
    if value < 0:
        raise InvalidCalculatorConfigError(calculator, name, raw)
    return value


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class Calculator:
    """Base calculator.  Subclasses set ``kind`` and implement ``_compute``."""

    kind: ClassVar[str] = ""

    def __init__(self, preferences: Mapping[str, Any] | None = None):
        self._parse(preferences or {})

    def _parse(self, preferences: Mapping[str, Any]) -> None:
        raise NotImplementedError

    @property
    def preferences(self) -> dict[str, Decimal | int]:
        raise NotImplementedError

    def compute(self, target: CalculationTarget) -> Decimal:
        if isinstance(target, OtherTarget):
            raise UnsupportedCalculationTargetError(self.kind, type(target.value).__name__)
        return self._compute(line_items_for(target))

    def _compute(self, line_items: list[LineItemData]) -> Decimal:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.preferences!r})"


class PerItemCalculator(Calculator):
    """Fixed amount for every unit across the resolved line items."""

    kind = "per_item"

    def _parse(self, preferences: Mapping[str, Any]) -> None:
        self.preferred_amount = _decimal_preference(self.kind, preferences, "amount")

    @property
    def preferences(self) -> dict[str, Decimal | int]:
        return {"amount": self.preferred_amount}

    def _compute(self, line_items: list[LineItemData]) -> Decimal:
        quantity = sum(li.quantity for li in line_items)
        return self.preferred_amount * quantity


class PerOrderCalculator(Calculator):
    """Fixed amount once per order, regardless of how many items it holds."""

    kind = "per_order"

    def _parse(self, preferences: Mapping[str, Any]) -> None:
        self.preferred_amount = _decimal_preference(self.kind, preferences, "amount")

    @property
    def preferences(self) -> dict[str, Decimal | int]:
        return {"amount": self.preferred_amount}

    def _compute(self, line_items: list[LineItemData]) -> Decimal:
        return self.preferred_amount


class FlatCalculator(Calculator):
    """Fixed amount regardless of the target's contents."""

    kind = "flat"

    def _parse(self, preferences: Mapping[str, Any]) -> None:
        self.preferred_amount = _decimal_preference(
            self.kind, preferences, "amount", default=ZERO
        )

    @property
    def preferences(self) -> dict[str, Decimal | int]:
        return {"amount": self.preferred_amount}

    def _compute(self, line_items: list[LineItemData]) -> Decimal:
        return self.preferred_amount


class PercentageCalculator(Calculator):
    """Percentage of the resolved line items' subtotal."""

    kind = "percentage"

    def _parse(self, preferences: Mapping[str, Any]) -> None:
        self.preferred_percent = _decimal_preference(self.kind, preferences, "percent")

    @property
    def preferences(self) -> dict[str, Decimal | int]:
        return {"percent": self.preferred_percent}

    def _compute(self, line_items: list[LineItemData]) -> Decimal:
        subtotal = sum((li.amount for li in line_items), ZERO)
        return subtotal * self.preferred_percent / Decimal("100")


class FlexiRateCalculator(Calculator):
    """
    First unit at one price, following units at another, up to max_items.

    max_items == 0 means no cap.
    """

    kind = "flexi_rate"

    def _parse(self, preferences: Mapping[str, Any]) -> None:
        self.preferred_first_item = _decimal_preference(self.kind, preferences, "first_item")
        self.preferred_additional_item = _decimal_preference(
            self.kind, preferences, "additional_item", default=ZERO
        )
        self.preferred_max_items = _int_preference(self.kind, preferences, "max_items", 0)

    @property
    def preferences(self) -> dict[str, Decimal | int]:
        return {
            "first_item": self.preferred_first_item,
            "additional_item": self.preferred_additional_item,
            "max_items": self.preferred_max_items,
        }

    def _compute(self, line_items: list[LineItemData]) -> Decimal:
        quantity = sum(li.quantity for li in line_items)
        if self.preferred_max_items:
            quantity = min(quantity, self.preferred_max_items)
        if quantity <= 0:
            return ZERO
        return self.preferred_first_item + self.preferred_additional_item * (quantity - 1)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class CalculatorRegistry:
    """Registry of calculator classes by kind."""

    _calculators: ClassVar[dict[str, type[Calculator]]] = {}

    @classmethod
    def register(cls, calculator_cls: type[Calculator]) -> type[Calculator]:
        kind = calculator_cls.kind
        if not kind:
            raise ValueError(f"{calculator_cls.__name__} does not declare a kind")
        if kind in cls._calculators and cls._calculators[kind] is not calculator_cls:
            raise ValueError(
                f"Calculator already registered for {kind}: "
                f"{cls._calculators[kind].__name__}"
            )
        cls._calculators[kind] = calculator_cls
        return calculator_cls

    @classmethod
    def get(cls, kind: str) -> type[Calculator]:
        try:
            return cls._calculators[kind]
        except KeyError:
            raise UnknownCalculatorError(kind) from None

    @classmethod
    def kinds(cls) -> list[str]:
        return sorted(cls._calculators)


for _calculator_cls in (
    PerItemCalculator,
    PerOrderCalculator,
    FlatCalculator,
    PercentageCalculator,
    FlexiRateCalculator,
):
    CalculatorRegistry.register(_calculator_cls)


def build_calculator(spec: CalculatorSpec) -> Calculator:
    """Instantiate the calculator a spec names, validating its preferences."""
    return CalculatorRegistry.get(spec.kind)(spec.preferences)


def compute(spec: CalculatorSpec, target: CalculationTarget) -> Decimal:
    """Compute the amount ``spec`` charges for ``target``."""
    return build_calculator(spec).compute(target)
