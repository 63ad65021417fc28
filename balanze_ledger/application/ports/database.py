"""Database port for the ledger store.

Infrastructure implementations provide the SQLAlchemy engine; application
code depends only on this protocol.
"""

from typing import Protocol

from sqlalchemy.engine import Engine


class DatabaseEnginePort(Protocol):
    """Port exposing the ledger database engine."""

    def get_ledger_engine(self) -> Engine:
        """Get the engine for the ledger database.

        Returns:
            Engine: SQLAlchemy engine connected to the ledger backend.
        """


__all__ = ["DatabaseEnginePort"]
