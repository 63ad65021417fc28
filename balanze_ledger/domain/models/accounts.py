"""Domain models for ledger accounts."""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Account:
    """Account record as returned by the ledger store.

    Attributes:
        id: Opaque unique identifier.
        name: Display name.
        type: Account type (cash, bank, card, savings, ...).
        currency: Three-letter currency code.
        initial_balance: Opening balance.
        calculated_balance: Cached balance; recomputed by the ledger.
        is_active: Whether the account is active.
        position: Manual ordering index, not unique.
        has_dps: Whether a DPS savings plan is enabled.
        dps_type: monthly or flexible when DPS is enabled.
        dps_amount_type: fixed or custom when DPS is enabled.
        dps_fixed_amount: Recurring deposit amount for fixed plans.
        dps_savings_account_id: Linked DPS savings sub-account.
        description: Optional free text.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    id: str
    name: str
    type: str
    currency: str
    initial_balance: Decimal = Decimal("0")
    calculated_balance: Decimal = Decimal("0")
    is_active: bool = True
    position: int | None = 0
    has_dps: bool = False
    dps_type: str | None = None
    dps_amount_type: str | None = None
    dps_fixed_amount: Decimal | None = None
    dps_savings_account_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def sort_position(self) -> int:
        """Position with missing values treated as 0."""
        return self.position or 0

    def with_balance(self, balance: Decimal) -> "Account":
        """Return a copy carrying a recomputed calculated balance."""
        return replace(self, calculated_balance=balance)


@dataclass(frozen=True)
class NewAccount:
    """Fields accepted when creating an account."""

    name: str
    type: str
    currency: str
    initial_balance: Decimal = Decimal("0")
    is_active: bool = True
    position: int = 0
    description: str | None = None


__all__ = ["Account", "NewAccount"]
