"""Value objects describing how accounts and transactions are displayed."""

from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Mapping

from balanze_ledger.domain.constants import (
    ALL,
    ASCENDING,
    DESCENDING,
    FILTER_STATE_VERSION,
    STATUS_ACTIVE,
    STATUS_VALUES,
)
from balanze_ledger.domain.models.accounts import Account


@dataclass(frozen=True)
class FilterState:
    """Per-view account filter settings.

    Attributes:
        search: Free-text search term.
        currency: Currency code, empty for all currencies.
        type: Account type or ``all``.
        status: ``active`` or ``all``.
        version: Schema version of the serialized form.
    """

    search: str = ""
    currency: str = ""
    type: str = ALL
    status: str = STATUS_ACTIVE
    version: int = FILTER_STATE_VERSION

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> "FilterState":
        """Merge a stored mapping with defaults.

        Missing or malformed fields fall back to their default values.
        """
        if not isinstance(raw, Mapping):
            return cls()
        defaults = cls()
        status = raw.get("status")
        return cls(
            search=_str_or(raw.get("search"), defaults.search),
            currency=_str_or(raw.get("currency"), defaults.currency),
            type=_str_or(raw.get("type"), defaults.type) or defaults.type,
            status=status if status in STATUS_VALUES else defaults.status,
            version=FILTER_STATE_VERSION,
        )


def _str_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


@dataclass(frozen=True)
class SortState:
    """Explicit sort key and direction; ``key=None`` keeps manual order."""

    key: str | None = None
    direction: str = ASCENDING

    @property
    def descending(self) -> bool:
        return self.direction == DESCENDING


@dataclass(frozen=True)
class TransactionFilter:
    """Filters applied to an account statement."""

    type: str = ALL
    category: str = ALL
    search: str = ""
    start_date: date | None = None
    end_date: date | None = None


@dataclass(frozen=True)
class CurrencyGroup:
    """Accounts sharing a currency with their balance subtotal."""

    currency: str
    accounts: tuple[Account, ...]
    subtotal: Decimal


@dataclass(frozen=True)
class AccountsView:
    """Displayed accounts in order, plus currency groups when enabled."""

    accounts: tuple[Account, ...]
    groups: tuple[CurrencyGroup, ...] | None = None


@dataclass(frozen=True)
class PositionSwap:
    """Exchange of position values between two displayed accounts."""

    account_id: str
    account_position: int
    neighbour_id: str
    neighbour_position: int

    def updates(self) -> dict[str, int]:
        """Return the new position for each of the two accounts."""
        return {
            self.account_id: self.neighbour_position,
            self.neighbour_id: self.account_position,
        }


__all__ = [
    "FilterState",
    "SortState",
    "TransactionFilter",
    "CurrencyGroup",
    "AccountsView",
    "PositionSwap",
]
