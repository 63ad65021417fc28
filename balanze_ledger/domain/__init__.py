"""Domain package for ledger rules and core models."""

from .errors import (
    AccountNotFoundError,
    DPSBalanceDriftError,
    DPSBusyError,
    DPSConfirmationRequiredError,
    DPSDeletionError,
    DPSLinkError,
    LedgerError,
    LedgerValidationError,
)
from .models import (
    Account,
    DPSConfig,
    DPSDestination,
    FilterState,
    NewAccount,
    NewTransaction,
    SortState,
    Transaction,
)

__all__ = [
    "AccountNotFoundError",
    "DPSBalanceDriftError",
    "DPSBusyError",
    "DPSConfirmationRequiredError",
    "DPSDeletionError",
    "DPSLinkError",
    "LedgerError",
    "LedgerValidationError",
    "Account",
    "DPSConfig",
    "DPSDestination",
    "FilterState",
    "NewAccount",
    "NewTransaction",
    "SortState",
    "Transaction",
]
