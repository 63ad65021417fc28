"""Domain models for ledger transactions."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from balanze_ledger.domain.constants import INCOME


@dataclass(frozen=True)
class Transaction:
    """Income or expense entry owned by one account."""

    id: str
    account_id: str
    type: str
    amount: Decimal
    date: datetime
    created_at: datetime
    category: str = ""
    description: str = ""
    updated_at: datetime | None = None
    tags: frozenset[str] = field(default_factory=frozenset)

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign it contributes to the account balance."""
        return self.amount if self.type == INCOME else -self.amount


@dataclass(frozen=True)
class NewTransaction:
    """Fields accepted when creating a transaction."""

    account_id: str
    type: str
    amount: Decimal
    date: datetime
    category: str = ""
    description: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class StatementLine:
    """Transaction with the account balance right after it."""

    transaction: Transaction
    balance_after: Decimal


__all__ = ["Transaction", "NewTransaction", "StatementLine"]
