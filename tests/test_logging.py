"""
Tests for order_kernel.logging_config.

Covers:
- JSON payloads for amounts, ids and ledger enums
- exc_* fields for kernel exceptions, and none for foreign ones
- LogContext binding, nesting and field validation
- Handler setup under the order_kernel namespace
"""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from order_config.validator import ConfigValidationError
from order_kernel.domain.deletion_policy import DenialReason
from order_kernel.exceptions import InvalidTaxRateError, LineItemDeletionForbiddenError
from order_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)
from order_kernel.models.adjustment import AdjustmentState, OriginatorType


@pytest.fixture
def stream():
    """Route order_kernel records into a buffer for the duration of a test."""
    reset_logging()
    buffer = StringIO()
    handler = logging.StreamHandler(buffer)
    configure_logging(handler=handler, level=logging.DEBUG)
    yield buffer
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _records(buffer: StringIO) -> list[dict]:
    return [json.loads(line) for line in buffer.getvalue().splitlines() if line]


def _log_exception(exc: Exception) -> dict:
    record = logging.LogRecord("order_kernel.test", logging.ERROR, __file__, 1, "failed", (), None)
    try:
        raise exc
    except Exception as e:
        record.exc_info = (type(e), e, e.__traceback__)
    return json.loads(StructuredFormatter().format(record))


class TestPayload:

    def test_ledger_values_serialized(self, stream):
        adjustment_id = uuid4()
        get_logger("services.adjustment_ledger").info(
            "ledger_applied",
            extra={
                "adjustment_id": adjustment_id,
                "adjustment_total": Decimal("16.00"),
                "originator_type": OriginatorType.SHIPPING_METHOD,
                "state": AdjustmentState.CANCELED,
            },
        )

        [record] = _records(stream)
        assert record["logger"] == "order_kernel.services.adjustment_ledger"
        assert record["adjustment_id"] == str(adjustment_id)
        assert record["adjustment_total"] == "16.00"
        assert record["originator_type"] == "shipping_method"
        assert record["state"] == "canceled"

    def test_context_before_extras(self, stream):
        with LogContext.bind(order_id="ord-1"):
            get_logger("test").info("order_recalculated", extra={"order_id": "other"})

        [record] = _records(stream)
        assert record["order_id"] == "ord-1"

    def test_below_level_dropped(self, stream):
        logging.getLogger("order_kernel").setLevel(logging.INFO)
        get_logger("test").debug("ledger_applied")
        assert _records(stream) == []


class TestExceptionFields:

    def test_denial_reason(self):
        record = _log_exception(
            LineItemDeletionForbiddenError("li-1", DenialReason.NOT_OWNER.value)
        )
        assert record["exc_code"] == "LINE_ITEM_DELETION_FORBIDDEN"
        assert record["exc_line_item_id"] == "li-1"
        assert record["exc_reason"] == "not_owner"
        assert "traceback" in record

    def test_tax_rate(self):
        record = _log_exception(InvalidTaxRateError("-0.25"))
        assert record["exc_code"] == "INVALID_TAX_RATE"
        assert record["exc_rate"] == "-0.25"

    def test_config_errors_listed(self):
        record = _log_exception(ConfigValidationError(["currency: bad", "version: bad"]))
        assert record["exc_code"] == "CONFIG_VALIDATION_FAILED"
        assert record["exc_errors"] == ["currency: bad", "version: bad"]

    def test_foreign_exception_has_no_code(self):
        record = _log_exception(KeyError("amount"))
        assert record["exc_type"] == "KeyError"
        assert "exc_code" not in record


class TestLogContext:

    def test_bind_nests_and_restores(self):
        with LogContext.bind(correlation_id="req-1", user_id="u"):
            with LogContext.bind(order_id=uuid4()):
                assert set(LogContext.get_all()) == {"correlation_id", "user_id", "order_id"}
            assert LogContext.get_all() == {"correlation_id": "req-1", "user_id": "u"}
        assert LogContext.get_all() == {}

    def test_none_leaves_field_alone(self):
        LogContext.set(user_id="u")
        with LogContext.bind(user_id=None, line_item_id="li"):
            assert LogContext.get_all() == {"user_id": "u", "line_item_id": "li"}

    def test_restored_after_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(order_id="ord"):
                raise RuntimeError
        assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="shipment_id"):
            LogContext.set(shipment_id="s")

    def test_get_all_is_a_copy(self):
        LogContext.set(order_id="ord")
        LogContext.get_all()["order_id"] = "changed"
        assert LogContext.get_all() == {"order_id": "ord"}


class TestConfigureLogging:

    def test_first_handler_wins(self, stream):
        extra_handler = logging.StreamHandler(StringIO())
        configure_logging(handler=extra_handler)
        assert extra_handler not in logging.getLogger("order_kernel").handlers

    def test_not_propagated(self, stream):
        assert logging.getLogger("order_kernel").propagate is False

    def test_level_by_name(self):
        reset_logging()
        configure_logging(level="WARNING", stream=StringIO())
        assert logging.getLogger("order_kernel").level == logging.WARNING
        reset_logging()
        configure_logging(level=logging.DEBUG)
