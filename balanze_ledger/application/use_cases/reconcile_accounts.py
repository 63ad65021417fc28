"""Use case recomputing every account balance from its transactions.

The cached ``calculated_balance`` column is compared against the ledger and
optionally rewritten. Integrity problems are logged and reported, never
raised.
"""

from dataclasses import dataclass
from decimal import Decimal

from balanze_ledger.application.ports.ledger_store import LedgerStorePort
from balanze_ledger.domain.models import Account, Transaction
from balanze_ledger.domain.policies import find_link_violations
from balanze_ledger.domain.services.ledger import (
    apply_balances,
    find_balance_mismatches,
    find_orphaned_transactions,
    reconcile_balances,
)
from balanze_ledger.infrastructure.logging.logger import get_app_logger


@dataclass(frozen=True)
class BalanceMismatch:
    """Account whose cached balance differs from the ledger."""

    account_id: str
    account_name: str
    cached: Decimal
    recomputed: Decimal

    @property
    def difference(self) -> Decimal:
        return self.recomputed - self.cached


@dataclass(frozen=True)
class ReconciliationReport:
    """Result of a reconciliation run.

    Attributes:
        accounts: Accounts carrying recomputed balances.
        balances: Recomputed balance per account id.
        orphaned_transactions: Transactions whose account does not exist.
        mismatches: Accounts whose cached balance was stale.
        link_violations: DPS link problems found on the accounts.
        written_back: Number of cached balances rewritten.
    """

    accounts: tuple[Account, ...]
    balances: dict[str, Decimal]
    orphaned_transactions: tuple[Transaction, ...] = ()
    mismatches: tuple[BalanceMismatch, ...] = ()
    link_violations: tuple[str, ...] = ()
    written_back: int = 0

    @property
    def is_clean(self) -> bool:
        return not (
            self.orphaned_transactions
            or self.mismatches
            or self.link_violations
        )


class ReconcileAccountsUseCase:
    """Recompute balances and report ledger integrity problems."""

    def __init__(self, store: LedgerStorePort, logger=None) -> None:
        self._store = store
        self._logger = logger or get_app_logger()

    async def execute(self, write_back: bool = False) -> ReconciliationReport:
        """Run the reconciliation.

        Args:
            write_back: Rewrite stale ``calculated_balance`` values.

        Returns:
            ReconciliationReport: Recomputed balances and findings.
        """
        accounts = await self._store.list_accounts()
        transactions = await self._store.list_transactions()
        balances = reconcile_balances(accounts, transactions, self._logger)
        orphans = find_orphaned_transactions(accounts, transactions)
        mismatches = [
            BalanceMismatch(
                account_id=account.id,
                account_name=account.name,
                cached=account.calculated_balance,
                recomputed=recomputed,
            )
            for account, recomputed in find_balance_mismatches(
                accounts,
                balances,
            )
        ]
        for mismatch in mismatches:
            self._logger.warning(
                f"Cached balance of account {mismatch.account_id} is "
                f"{mismatch.cached}, ledger says {mismatch.recomputed}"
            )
        violations = find_link_violations(accounts, self._logger)

        written = 0
        if write_back:
            for mismatch in mismatches:
                await self._store.update_account(
                    mismatch.account_id,
                    {"calculated_balance": mismatch.recomputed},
                )
                written += 1
            self._logger.info(f"Rewrote {written} cached balances")

        self._logger.info(
            f"Reconciled {len(accounts)} accounts, {len(transactions)} "
            f"transactions ({len(orphans)} orphaned, "
            f"{len(mismatches)} mismatched)"
        )
        return ReconciliationReport(
            accounts=tuple(apply_balances(accounts, balances)),
            balances=balances,
            orphaned_transactions=tuple(orphans),
            mismatches=tuple(mismatches),
            link_violations=tuple(violations),
            written_back=written,
        )


__all__ = [
    "BalanceMismatch",
    "ReconciliationReport",
    "ReconcileAccountsUseCase",
]
