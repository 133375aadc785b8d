"""
Structured JSON logging for the order kernel.

Every record is written as one JSON object:

    {"ts": ..., "level": ..., "logger": "order_kernel.services.line_item",
     "message": "line_item_destroyed", "correlation_id": ..., "user_id": ...,
     "order_id": ..., "line_item_id": ..., <extra fields>}

The request-scoped fields come from LogContext, bound by the request entry
points and the recalculation orchestrator.  Anything passed as ``extra``
is copied in after them.  Kernel exceptions logged with exc_info add their
``code`` and context attributes as ``exc_*`` fields, so a denial reason or
a rejected tax rate can be filtered on without parsing messages.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator
from uuid import UUID

from order_kernel.exceptions import OrderKernelError

_LOGGER_PREFIX = "order_kernel"


# ---------------------------------------------------------------------------
# Request-scoped context
# ---------------------------------------------------------------------------


class LogContext:
    """
    Request-scoped fields copied onto every record.

    Values are held as one immutable snapshot per context, so bind() can
    restore the previous snapshot wholesale on exit.
    """

    FIELDS: tuple[str, ...] = ("correlation_id", "user_id", "order_id", "line_item_id")

    _current: ContextVar[dict[str, str]] = ContextVar("order_log_context", default={})

    @classmethod
    def _merged(cls, values: dict[str, Any]) -> dict[str, str]:
        unknown = set(values) - set(cls.FIELDS)
        if unknown:
            raise ValueError(f"Unknown log context field(s): {', '.join(sorted(unknown))}")
        merged = dict(cls._current.get())
        merged.update({k: str(v) for k, v in values.items() if v is not None})
        return merged

    @classmethod
    def set(cls, **values: Any) -> None:
        """Set fields for the rest of this context.  None leaves a field as is."""
        cls._current.set(cls._merged(values))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(cls._current.get())

    @classmethod
    def clear(cls) -> None:
        cls._current.set({})

    @classmethod
    @contextmanager
    def bind(cls, **values: Any) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a with-block, then restore."""
        token = cls._current.set(cls._merged(values))
        try:
            yield cls
        finally:
            cls._current.reset(token)


# ---------------------------------------------------------------------------
# JSON formatting
# ---------------------------------------------------------------------------

_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _jsonable(value: Any) -> Any:
    """Fallback encoder for amounts, ids, enums and timestamps."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    if isinstance(exc, OrderKernelError):
        fields["exc_code"] = exc.code
        for name, value in vars(exc).items():
            if not name.startswith("_"):
                fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in payload
        )

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_jsonable)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the order_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the order_kernel logger.

    Only the first call takes effect until reset_logging() is called.
    Records do not propagate to the root logger.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.setLevel(level)
    kernel_logger.propagate = False

    handler = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    kernel_logger.addHandler(handler)


def reset_logging() -> None:
    """Remove the kernel's handlers and allow configure_logging() again."""
    global _configured
    with _lock:
        _configured = False
    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.handlers.clear()
    kernel_logger.setLevel(logging.WARNING)
