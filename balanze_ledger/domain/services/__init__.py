"""Domain services package."""

from .account_view import (
    build_accounts_view,
    count_transactions,
    filter_accounts,
    filter_transactions,
    group_by_currency,
    sort_accounts,
    toggle_sort,
)
from .ledger import (
    apply_balances,
    build_statement,
    current_balance,
    find_balance_mismatches,
    find_orphaned_transactions,
    ledger_order,
    reconcile_balances,
    running_balances,
)
from .ordering import plan_move
from .search import (
    ACCOUNT_SEARCH_CONFIG,
    TRANSACTION_SEARCH_CONFIG,
    rank_records,
    search_records,
)
from .validation import (
    validate_amount,
    validate_dps_config,
    validate_new_account,
    validate_new_transaction,
)

__all__ = [
    "build_accounts_view",
    "count_transactions",
    "filter_accounts",
    "filter_transactions",
    "group_by_currency",
    "sort_accounts",
    "toggle_sort",
    "apply_balances",
    "build_statement",
    "current_balance",
    "find_balance_mismatches",
    "find_orphaned_transactions",
    "ledger_order",
    "reconcile_balances",
    "running_balances",
    "plan_move",
    "ACCOUNT_SEARCH_CONFIG",
    "TRANSACTION_SEARCH_CONFIG",
    "rank_records",
    "search_records",
    "validate_amount",
    "validate_dps_config",
    "validate_new_account",
    "validate_new_transaction",
]
