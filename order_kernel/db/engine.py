"""
Module: order_kernel.db.engine
Responsibility: SQLAlchemy engine initialization, session factory management,
    and transactional scope utilities.  This is the single point of database
    connection configuration for the order kernel.
Architecture position: Kernel > DB.  May import from db/base.py.
    MUST NOT import from services/, selectors/, domain/, or outer layers
    (except create_tables, which imports models so metadata is populated).

Invariants enforced:
    - PostgreSQL sessions run at READ COMMITTED with explicit row-level
      locking (FOR UPDATE) on orders during recalculation.
    - SQLite (tests, local tooling) shares one connection through a
      StaticPool so an in-memory database survives across sessions.

Failure modes:
    - RuntimeError if get_engine/get_session called before
      init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from order_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

# Module-level engine and session factory
_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Initialize the SQLAlchemy engine from a database URL.

    Postconditions: Module-level _engine and _SessionFactory are initialized.
        All subsequent get_engine/get_session calls use this engine.

    Args:
        database_url: PostgreSQL or SQLite connection URL.
        echo: If True, log all SQL statements.
        pool_size: Number of connections to keep in the pool (PostgreSQL).
        max_overflow: Max connections beyond pool_size (PostgreSQL).
        pool_pre_ping: If True, test connections before use.
        pool_timeout: Seconds to wait for a pooled connection.
        pool_recycle: Seconds after which a connection is recycled.

    Returns:
        SQLAlchemy Engine instance.
    """
    global _engine, _SessionFactory

    dialect = make_url(database_url).get_backend_name()

    if dialect == "sqlite":
        _engine = create_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        _engine = create_engine(
            database_url,
            echo=echo,
            poolclass=QueuePool,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            isolation_level="READ COMMITTED",
        )

    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={"dialect": dialect, "echo": echo},
    )

    return _engine


def get_engine() -> Engine:
    """
    Get the current engine instance.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session() -> Session:
    """
    Get a new session instance.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Postconditions: On normal exit, session is committed and closed.
        On exception, session is rolled back and closed.  The exception
        is re-raised to the caller.

    Usage:
        with session_scope() as session:
            session.add(entity)
    """
    session = get_session()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """
    Create all tables defined in the models.

    Preconditions: Engine must be initialized via init_engine_from_url().
    """
    from order_kernel.db.base import Base
    import order_kernel.models  # noqa: F401

    Base.metadata.create_all(get_engine())


def drop_tables() -> None:
    """
    Drop all tables. Use with caution - primarily for testing.
    """
    from order_kernel.db.base import Base
    import order_kernel.models  # noqa: F401

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """
    Reset the engine and session factory.

    Useful for test cleanup.
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
        _engine = None

    _SessionFactory = None


def _atexit_dispose():
    """Dispose the engine on process exit to release all pooled connections."""
    if _engine is not None:
        _engine.dispose()


atexit.register(_atexit_dispose)
