"""Database layer - engine, base classes and types."""

from order_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from order_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from order_kernel.db.types import ZERO, round_money, to_decimal

__all__ = [
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "session_scope",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "ZERO",
    "round_money",
    "to_decimal",
]
