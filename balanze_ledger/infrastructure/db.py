"""SQLAlchemy engine for the ledger database named by ``LEDGER_DB_URL``."""

import os
from typing import Optional

import dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from balanze_ledger.application.ports.database import DatabaseEnginePort


def _get_env_var(name: str) -> str:
    """Return ``name`` from the environment after loading ``.env``.

    Raises:
        RuntimeError: If the variable is unset or empty.
    """
    dotenv.load_dotenv()
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing environment variable: {name}")
    return value


def _create_engine(db_url: str) -> Engine:
    return create_engine(
        db_url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=5,
        pool_pre_ping=True,
        future=True,
    )


_ledger_engine: Optional[Engine] = None


def get_ledger_engine() -> Engine:
    """Return the process-wide ledger engine, creating it on first use."""
    global _ledger_engine
    if _ledger_engine is None:
        _ledger_engine = _create_engine(_get_env_var("LEDGER_DB_URL"))
    return _ledger_engine


class SqlAlchemyDatabaseEngineAdapter(DatabaseEnginePort):
    """Hands the shared ledger engine to ``SqlAlchemyLedgerStore``."""

    def get_ledger_engine(self) -> Engine:
        return get_ledger_engine()


__all__ = [
    "get_ledger_engine",
    "SqlAlchemyDatabaseEngineAdapter",
]
