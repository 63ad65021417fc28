"""Composition root for wiring infrastructure adapters."""

from typing import Optional

from balanze_ledger.application.ports.database import DatabaseEnginePort
from balanze_ledger.application.ports.filter_state_store import (
    FilterStateStorePort,
)
from balanze_ledger.application.ports.ledger_store import LedgerStorePort
from balanze_ledger.application.use_cases.create_account import (
    CreateAccountUseCase,
)
from balanze_ledger.application.use_cases.delete_account import (
    DeleteAccountUseCase,
)
from balanze_ledger.application.use_cases.get_account_statement import (
    GetAccountStatementUseCase,
)
from balanze_ledger.application.use_cases.get_accounts_view import (
    GetAccountsViewUseCase,
)
from balanze_ledger.application.use_cases.manage_dps import DPSLifecycleManager
from balanze_ledger.application.use_cases.reconcile_accounts import (
    ReconcileAccountsUseCase,
)
from balanze_ledger.application.use_cases.reorder_accounts import (
    ReorderAccountsUseCase,
)
from balanze_ledger.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from balanze_ledger.infrastructure.filter_state_store import (
    JsonFilterStateStore,
)
from balanze_ledger.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)
from balanze_ledger.infrastructure.memory_ledger_store import (
    InMemoryLedgerStore,
)
from balanze_ledger.infrastructure.settings import LedgerSettings
from balanze_ledger.infrastructure.sqlalchemy_ledger_store import (
    SqlAlchemyLedgerStore,
)


_memory_store: Optional[InMemoryLedgerStore] = None


def build_database_adapter() -> DatabaseEnginePort:
    """Return the database adapter instance."""
    return SqlAlchemyDatabaseEngineAdapter()


def build_ledger_store(
    settings: LedgerSettings | None = None,
    db_port: DatabaseEnginePort | None = None,
) -> LedgerStorePort:
    """Return the configured ledger store.

    The memory backend is shared for the lifetime of the process; the
    SQLAlchemy backend creates its tables on first use.
    """
    global _memory_store
    resolved = settings or LedgerSettings.from_env()
    if resolved.backend == "memory":
        if _memory_store is None:
            _memory_store = InMemoryLedgerStore()
        return _memory_store
    store = SqlAlchemyLedgerStore(
        db_port or build_database_adapter(),
        logger=get_app_logger(),
    )
    store.ensure_schema()
    return store


def build_filter_state_store(
    settings: LedgerSettings | None = None,
) -> FilterStateStorePort:
    """Return the JSON filter-state store."""
    resolved = settings or LedgerSettings.from_env()
    return JsonFilterStateStore(resolved.state_dir, logger=get_app_logger())


def build_dps_manager(
    store: LedgerStorePort,
    settings: LedgerSettings | None = None,
) -> DPSLifecycleManager:
    """Return the DPS lifecycle manager bound to ``store``."""
    resolved = settings or LedgerSettings.from_env()
    return DPSLifecycleManager(
        store,
        logger=get_app_logger(),
        usage_logger=get_usage_logger(),
        reject_on_drift=resolved.reject_on_drift,
    )


def build_create_account_use_case(
    store: LedgerStorePort,
    dps_manager: DPSLifecycleManager | None = None,
) -> CreateAccountUseCase:
    return CreateAccountUseCase(store, dps_manager=dps_manager)


def build_delete_account_use_case(
    store: LedgerStorePort,
) -> DeleteAccountUseCase:
    return DeleteAccountUseCase(store)


def build_accounts_view_use_case(
    store: LedgerStorePort,
) -> GetAccountsViewUseCase:
    return GetAccountsViewUseCase(store)


def build_account_statement_use_case(
    store: LedgerStorePort,
) -> GetAccountStatementUseCase:
    return GetAccountStatementUseCase(store)


def build_reorder_accounts_use_case(
    store: LedgerStorePort,
) -> ReorderAccountsUseCase:
    return ReorderAccountsUseCase(store)


def build_reconcile_accounts_use_case(
    store: LedgerStorePort,
) -> ReconcileAccountsUseCase:
    return ReconcileAccountsUseCase(store)


__all__ = [
    "build_database_adapter",
    "build_ledger_store",
    "build_filter_state_store",
    "build_dps_manager",
    "build_create_account_use_case",
    "build_delete_account_use_case",
    "build_accounts_view_use_case",
    "build_account_statement_use_case",
    "build_reorder_accounts_use_case",
    "build_reconcile_accounts_use_case",
]
