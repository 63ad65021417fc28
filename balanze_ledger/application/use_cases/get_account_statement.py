"""Use case producing the running-balance statement of one account."""

from dataclasses import dataclass
from decimal import Decimal

from balanze_ledger.application.ports.ledger_store import LedgerStorePort
from balanze_ledger.domain.errors import AccountNotFoundError
from balanze_ledger.domain.models import (
    Account,
    StatementLine,
    TransactionFilter,
)
from balanze_ledger.domain.services.account_view import filter_transactions
from balanze_ledger.domain.services.ledger import build_statement


@dataclass(frozen=True)
class AccountStatement:
    """Statement lines of an account with its opening and closing balance.

    ``closing_balance`` always covers the full ledger, even when the lines
    are filtered.
    """

    account: Account
    lines: tuple[StatementLine, ...]
    opening_balance: Decimal
    closing_balance: Decimal


class GetAccountStatementUseCase:
    """Build an account statement from the store's transactions."""

    def __init__(self, store: LedgerStorePort) -> None:
        self._store = store

    async def execute(
        self,
        account_id: str,
        transaction_filter: TransactionFilter | None = None,
    ) -> AccountStatement:
        account = await self._store.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        transactions = await self._store.list_transactions(account_id)
        lines = build_statement(account, transactions)
        closing = lines[-1].balance_after if lines else account.initial_balance
        if transaction_filter is not None:
            kept = {
                t.id
                for t in filter_transactions(
                    [line.transaction for line in lines],
                    transaction_filter,
                )
            }
            lines = [line for line in lines if line.transaction.id in kept]
        return AccountStatement(
            account=account.with_balance(closing),
            lines=tuple(lines),
            opening_balance=account.initial_balance,
            closing_balance=closing,
        )


__all__ = ["AccountStatement", "GetAccountStatementUseCase"]
