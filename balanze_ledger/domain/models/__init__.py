"""Domain models package."""

from .accounts import Account, NewAccount
from .dps import (
    DPSConfig,
    DPSDeletionResult,
    DPSDeletionSnapshot,
    DPSDestination,
    DPSState,
    DPSTransferResult,
    SagaStep,
    StepOutcome,
    StepStatus,
)
from .transactions import NewTransaction, StatementLine, Transaction
from .view import (
    AccountsView,
    CurrencyGroup,
    FilterState,
    PositionSwap,
    SortState,
    TransactionFilter,
)

__all__ = [
    "Account",
    "NewAccount",
    "Transaction",
    "NewTransaction",
    "StatementLine",
    "DPSConfig",
    "DPSDeletionResult",
    "DPSDeletionSnapshot",
    "DPSDestination",
    "DPSState",
    "DPSTransferResult",
    "SagaStep",
    "StepOutcome",
    "StepStatus",
    "AccountsView",
    "CurrencyGroup",
    "FilterState",
    "PositionSwap",
    "SortState",
    "TransactionFilter",
]
