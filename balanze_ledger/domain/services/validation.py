"""Boundary validation for ledger inputs.

Everything here runs before a store call. Calculations assume their inputs
already passed these checks.
"""

from decimal import Decimal
import re

from balanze_ledger.domain.constants import (
    ACCOUNT_TYPES,
    DPS_AMOUNT_TYPES,
    DPS_TYPES,
    TRANSACTION_TYPES,
)
from balanze_ledger.domain.errors import LedgerValidationError
from balanze_ledger.domain.models import (
    DPSConfig,
    NewAccount,
    NewTransaction,
)


_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def validate_currency(currency: str) -> str:
    """Return the currency code or raise for malformed codes."""
    if not isinstance(currency, str) or not _CURRENCY_PATTERN.match(currency):
        raise LedgerValidationError(f"Invalid currency code: {currency!r}")
    return currency


def validate_account_type(account_type: str) -> str:
    if account_type not in ACCOUNT_TYPES:
        raise LedgerValidationError(f"Unknown account type: {account_type!r}")
    return account_type


def validate_transaction_type(transaction_type: str) -> str:
    if transaction_type not in TRANSACTION_TYPES:
        raise LedgerValidationError(
            f"Unknown transaction type: {transaction_type!r}"
        )
    return transaction_type


def validate_amount(amount, *, field_name: str = "amount") -> Decimal:
    """Reject non-Decimal, non-finite or negative amounts."""
    if not isinstance(amount, Decimal) or not amount.is_finite():
        raise LedgerValidationError(
            f"{field_name} must be a finite Decimal, got {amount!r}"
        )
    if amount < 0:
        raise LedgerValidationError(f"{field_name} must not be negative")
    return amount


def validate_new_account(new_account: NewAccount) -> NewAccount:
    if not new_account.name or not new_account.name.strip():
        raise LedgerValidationError("Account name is required")
    validate_account_type(new_account.type)
    validate_currency(new_account.currency)
    if not isinstance(new_account.initial_balance, Decimal):
        raise LedgerValidationError("initial_balance must be a Decimal")
    return new_account


def validate_new_transaction(
    new_transaction: NewTransaction,
) -> NewTransaction:
    validate_transaction_type(new_transaction.type)
    validate_amount(new_transaction.amount)
    if not new_transaction.account_id:
        raise LedgerValidationError("Transaction account_id is required")
    return new_transaction


def validate_dps_config(config: DPSConfig) -> DPSConfig:
    """Check a DPS plan before it touches the store.

    Monthly plans and fixed-amount plans need a positive fixed amount.

    Raises:
        LedgerValidationError: If the plan is incomplete or malformed.
    """
    if config.dps_type not in DPS_TYPES:
        raise LedgerValidationError(f"Unknown DPS type: {config.dps_type!r}")
    if config.amount_type not in DPS_AMOUNT_TYPES:
        raise LedgerValidationError(
            f"Unknown DPS amount type: {config.amount_type!r}"
        )
    if config.requires_fixed_amount():
        amount = config.fixed_amount
        if not isinstance(amount, Decimal) or not amount.is_finite():
            raise LedgerValidationError(
                "A fixed DPS amount is required for monthly or fixed plans"
            )
        if amount <= 0:
            raise LedgerValidationError(
                "The fixed DPS amount must be positive"
            )
    validate_amount(config.initial_balance, field_name="initial_balance")
    return config


__all__ = [
    "validate_currency",
    "validate_account_type",
    "validate_transaction_type",
    "validate_amount",
    "validate_new_account",
    "validate_new_transaction",
    "validate_dps_config",
]
