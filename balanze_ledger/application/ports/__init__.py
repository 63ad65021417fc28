"""Application ports package."""

from .database import DatabaseEnginePort
from .filter_state_store import FilterStateStorePort
from .ledger_store import LedgerStorePort

__all__ = [
    "DatabaseEnginePort",
    "FilterStateStorePort",
    "LedgerStorePort",
]
