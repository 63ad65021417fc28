"""Pure filter, sort and grouping rules for account and statement views.

Functions take immutable records plus view state and return new ordered
sequences. Orderings are total so repeated runs give identical output.
"""

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from balanze_ledger.domain.constants import (
    ALL,
    ASCENDING,
    DESCENDING,
    SORT_KEYS,
)
from balanze_ledger.domain.errors import LedgerValidationError
from balanze_ledger.domain.models import (
    Account,
    AccountsView,
    CurrencyGroup,
    FilterState,
    SortState,
    Transaction,
    TransactionFilter,
)
from balanze_ledger.domain.policies import dps_savings_account_ids
from balanze_ledger.domain.services.search import (
    ACCOUNT_SEARCH_CONFIG,
    TRANSACTION_SEARCH_CONFIG,
    SearchConfig,
    search_records,
)
from balanze_ledger.utils.time_utils import to_timestamp


def filter_accounts(
    accounts: Sequence[Account],
    filter_state: FilterState,
    selected_currencies: Iterable[str] = (),
    search_config: SearchConfig = ACCOUNT_SEARCH_CONFIG,
) -> list[Account]:
    """Apply the account filters in order.

    DPS savings accounts are always excluded, then currencies outside a
    non-empty allow-list, then the currency, type and status filters. A
    search term replaces the result with the ranked matches of that subset.

    Args:
        accounts: Every account of the user.
        filter_state: Current view filters.
        selected_currencies: Currencies enabled in the user's settings.
        search_config: Fields used for free-text search.

    Returns:
        list[Account]: Accounts to display, unsorted unless searched.
    """
    savings_ids = dps_savings_account_ids(accounts)
    allowed = frozenset(selected_currencies)
    filtered = [
        account
        for account in accounts
        if account.id not in savings_ids
        and (not allowed or account.currency in allowed)
        and _matches_filters(account, filter_state)
    ]
    if filter_state.search.strip():
        filtered = search_records(filtered, filter_state.search, search_config)
    return filtered


def _matches_filters(account: Account, filter_state: FilterState) -> bool:
    if filter_state.currency and account.currency != filter_state.currency:
        return False
    if filter_state.type != ALL and account.type != filter_state.type:
        return False
    if filter_state.status != ALL and not account.is_active:
        return False
    return True


def toggle_sort(current: SortState | None, key: str) -> SortState:
    """Return the sort state after a click on ``key``.

    The same key flips the direction; another key starts ascending.
    """
    if key not in SORT_KEYS:
        raise LedgerValidationError(f"Unknown sort key: {key!r}")
    if current is not None and current.key == key:
        direction = DESCENDING if current.direction == ASCENDING else ASCENDING
        return SortState(key=key, direction=direction)
    return SortState(key=key, direction=ASCENDING)


def sort_accounts(
    accounts: Sequence[Account],
    sort_state: SortState | None = None,
    transaction_counts: Mapping[str, int] | None = None,
) -> list[Account]:
    """Order accounts for display.

    Without an explicit key: ascending position, newest first on equal
    positions. With a key: ascending or descending on that key; ties are
    broken by position and id so the descending order is the exact reverse.

    Args:
        accounts: Accounts to order.
        sort_state: Optional explicit key and direction.
        transaction_counts: Transactions per account id, for the
            ``transactions`` key.

    Returns:
        list[Account]: Ordered copy of ``accounts``.
    """
    if sort_state is None or sort_state.key is None:
        return sorted(accounts, key=_position_key)
    if sort_state.key not in SORT_KEYS:
        raise LedgerValidationError(f"Unknown sort key: {sort_state.key!r}")
    counts = transaction_counts or {}
    return sorted(
        accounts,
        key=lambda account: (
            _sort_value(account, sort_state.key, counts),
            account.sort_position,
            account.id,
        ),
        reverse=sort_state.descending,
    )


def _position_key(account: Account):
    return (
        account.sort_position,
        -to_timestamp(account.created_at),
        account.id,
    )


def _sort_value(account: Account, key: str, counts: Mapping[str, int]):
    if key == "name":
        return account.name.lower()
    if key == "type":
        return account.type.lower()
    if key == "currency":
        return account.currency.lower()
    if key == "balance":
        return account.calculated_balance
    if key == "transactions":
        return counts.get(account.id, 0)
    return 1 if account.has_dps else 0


def group_by_currency(accounts: Sequence[Account]) -> list[CurrencyGroup]:
    """Group already-sorted accounts by currency, alphabetically.

    Each group keeps the incoming order and sums ``calculated_balance``.
    """
    members: dict[str, list[Account]] = {}
    for account in accounts:
        members.setdefault(account.currency, []).append(account)
    return [
        CurrencyGroup(
            currency=currency,
            accounts=tuple(members[currency]),
            subtotal=sum(
                (account.calculated_balance for account in members[currency]),
                Decimal("0"),
            ),
        )
        for currency in sorted(members)
    ]


def count_transactions(transactions: Iterable[Transaction]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for transaction in transactions:
        account_id = transaction.account_id
        counts[account_id] = counts.get(account_id, 0) + 1
    return counts


def build_accounts_view(
    accounts: Sequence[Account],
    filter_state: FilterState,
    sort_state: SortState | None = None,
    *,
    selected_currencies: Iterable[str] = (),
    transaction_counts: Mapping[str, int] | None = None,
) -> AccountsView:
    """Filter, search, sort and group accounts for display."""
    filtered = filter_accounts(accounts, filter_state, selected_currencies)
    ordered = sort_accounts(filtered, sort_state, transaction_counts)
    groups = None
    if not filter_state.currency:
        groups = tuple(group_by_currency(ordered))
    return AccountsView(accounts=tuple(ordered), groups=groups)


def filter_transactions(
    transactions: Sequence[Transaction],
    transaction_filter: TransactionFilter,
    search_config: SearchConfig = TRANSACTION_SEARCH_CONFIG,
) -> list[Transaction]:
    """Apply statement filters: type, category, date range, then search."""
    selected = [
        transaction
        for transaction in transactions
        if _matches_transaction(transaction, transaction_filter)
    ]
    if transaction_filter.search.strip():
        selected = search_records(
            selected,
            transaction_filter.search,
            search_config,
        )
    return selected


def _matches_transaction(
    transaction: Transaction,
    transaction_filter: TransactionFilter,
) -> bool:
    wanted_type = transaction_filter.type
    if wanted_type != ALL and transaction.type != wanted_type:
        return False
    if (
        transaction_filter.category != ALL
        and transaction.category != transaction_filter.category
    ):
        return False
    day = transaction.date.date()
    if transaction_filter.start_date and day < transaction_filter.start_date:
        return False
    if transaction_filter.end_date and day > transaction_filter.end_date:
        return False
    return True


__all__ = [
    "filter_accounts",
    "toggle_sort",
    "sort_accounts",
    "group_by_currency",
    "count_transactions",
    "build_accounts_view",
    "filter_transactions",
]
