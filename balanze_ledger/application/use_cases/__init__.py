"""Application use cases package."""

from .create_account import CreateAccountUseCase
from .delete_account import DeleteAccountResult, DeleteAccountUseCase
from .get_account_statement import AccountStatement, GetAccountStatementUseCase
from .get_accounts_view import GetAccountsViewUseCase
from .manage_dps import DPSLifecycleManager
from .reconcile_accounts import (
    BalanceMismatch,
    ReconcileAccountsUseCase,
    ReconciliationReport,
)
from .reorder_accounts import ReorderAccountsUseCase

__all__ = [
    "CreateAccountUseCase",
    "DeleteAccountResult",
    "DeleteAccountUseCase",
    "AccountStatement",
    "GetAccountStatementUseCase",
    "GetAccountsViewUseCase",
    "DPSLifecycleManager",
    "BalanceMismatch",
    "ReconcileAccountsUseCase",
    "ReconciliationReport",
    "ReorderAccountsUseCase",
]
