"""Ledger calculations: balances and running-balance statements.

Balances are always recomputable from an account's initial balance and its
transactions. ``calculated_balance`` on the account record is a cache and is
never read here.
"""

from collections.abc import Iterable
from decimal import Decimal
from logging import Logger

from balanze_ledger.domain.models import Account, StatementLine, Transaction
from balanze_ledger.utils.time_utils import to_timestamp


def current_balance(
    account: Account,
    transactions: Iterable[Transaction],
) -> Decimal:
    """Return the balance of an account from its full transaction set.

    Transactions owned by other accounts are ignored.

    Args:
        account: Account whose balance is computed.
        transactions: Any transactions; only ``account.id`` rows count.

    Returns:
        Decimal: ``initial_balance + income - expense``, unrounded.
    """
    total = account.initial_balance
    for transaction in transactions:
        if transaction.account_id == account.id:
            total += transaction.signed_amount
    return total


def ledger_order(
    account: Account,
    transactions: Iterable[Transaction],
) -> list[Transaction]:
    """Return the account's transactions in statement order.

    Ascending by logical date, then creation time, then id.
    """
    owned = [t for t in transactions if t.account_id == account.id]
    return sorted(
        owned,
        key=lambda t: (to_timestamp(t.date), to_timestamp(t.created_at), t.id),
    )


def build_statement(
    account: Account,
    transactions: Iterable[Transaction],
) -> list[StatementLine]:
    """Walk the ledger forward and attach the balance after each entry."""
    balance = account.initial_balance
    lines = []
    for transaction in ledger_order(account, transactions):
        balance += transaction.signed_amount
        lines.append(
            StatementLine(transaction=transaction, balance_after=balance)
        )
    return lines


def running_balances(
    account: Account,
    transactions: Iterable[Transaction],
) -> dict[str, Decimal]:
    """Map each transaction id to the account balance right after it.

    The mapping is ordered like the ledger, so its last value equals
    ``current_balance``.
    """
    return {
        line.transaction.id: line.balance_after
        for line in build_statement(account, transactions)
    }


def reconcile_balances(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
    logger: Logger,
) -> dict[str, Decimal]:
    """Recompute the balance of every account in one pass.

    Transactions referencing an unknown account are excluded and reported
    as data-integrity warnings.

    Args:
        accounts: Known accounts.
        transactions: Transactions across all accounts.
        logger: Logger used for integrity warnings.

    Returns:
        dict[str, Decimal]: Recomputed balance per account id.
    """
    balances = {account.id: account.initial_balance for account in accounts}
    orphans: list[Transaction] = []
    for transaction in transactions:
        if transaction.account_id not in balances:
            orphans.append(transaction)
            continue
        balances[transaction.account_id] += transaction.signed_amount
    for orphan in orphans:
        logger.warning(
            f"Orphaned transaction {orphan.id} references unknown account "
            f"{orphan.account_id}; excluded from balances"
        )
    return balances


def find_orphaned_transactions(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
) -> list[Transaction]:
    """Return transactions whose account is not among ``accounts``."""
    known = {account.id for account in accounts}
    return [t for t in transactions if t.account_id not in known]


def find_balance_mismatches(
    accounts: Iterable[Account],
    balances: dict[str, Decimal],
) -> list[tuple[Account, Decimal]]:
    """Return accounts whose cached balance differs from the recomputed one."""
    mismatches = []
    for account in accounts:
        recomputed = balances.get(account.id)
        if recomputed is not None and recomputed != account.calculated_balance:
            mismatches.append((account, recomputed))
    return mismatches


def apply_balances(
    accounts: Iterable[Account],
    balances: dict[str, Decimal],
) -> list[Account]:
    """Return copies of the accounts carrying recomputed balances."""
    return [
        account.with_balance(balances.get(account.id, account.initial_balance))
        for account in accounts
    ]


__all__ = [
    "current_balance",
    "ledger_order",
    "build_statement",
    "running_balances",
    "reconcile_balances",
    "find_orphaned_transactions",
    "find_balance_mismatches",
    "apply_balances",
]
