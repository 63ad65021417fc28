"""Dictionary-backed ledger store for the demo backend and tests."""

from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any
from uuid import uuid4

from balanze_ledger.application.ports.ledger_store import LedgerStorePort
from balanze_ledger.domain.constants import ACCOUNT_MUTABLE_FIELDS
from balanze_ledger.domain.errors import (
    AccountNotFoundError,
    LedgerValidationError,
)
from balanze_ledger.domain.models import (
    Account,
    NewAccount,
    NewTransaction,
    Transaction,
)
from balanze_ledger.domain.services.validation import (
    validate_new_account,
    validate_new_transaction,
)
from balanze_ledger.utils.time_utils import ensure_aware, utc_now


class InMemoryLedgerStore(LedgerStorePort):
    """Keep accounts and transactions in insertion-ordered dictionaries."""

    def __init__(
        self,
        accounts: Iterable[Account] = (),
        transactions: Iterable[Transaction] = (),
        clock=utc_now,
    ) -> None:
        self._accounts = {account.id: account for account in accounts}
        self._transactions = {t.id: t for t in transactions}
        self._clock = clock

    async def list_accounts(self) -> list[Account]:
        return list(self._accounts.values())

    async def get_account(self, account_id: str) -> Account | None:
        return self._accounts.get(account_id)

    async def create_account(self, new_account: NewAccount) -> Account:
        validate_new_account(new_account)
        now = self._clock()
        account = Account(
            id=str(uuid4()),
            name=new_account.name,
            type=new_account.type,
            currency=new_account.currency,
            initial_balance=new_account.initial_balance,
            calculated_balance=new_account.initial_balance,
            is_active=new_account.is_active,
            position=new_account.position,
            description=new_account.description,
            created_at=now,
            updated_at=now,
        )
        self._accounts[account.id] = account
        return account

    async def update_account(
        self,
        account_id: str,
        changes: Mapping[str, Any],
    ) -> None:
        unknown = sorted(set(changes) - set(ACCOUNT_MUTABLE_FIELDS))
        if unknown:
            raise LedgerValidationError(
                f"Cannot update account fields: {', '.join(unknown)}"
            )
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        self._accounts[account_id] = replace(
            account,
            updated_at=self._clock(),
            **changes,
        )

    async def delete_account(self, account_id: str) -> None:
        if account_id not in self._accounts:
            raise AccountNotFoundError(account_id)
        del self._accounts[account_id]
        self._transactions = {
            t.id: t
            for t in self._transactions.values()
            if t.account_id != account_id
        }

    async def list_transactions(
        self,
        account_id: str | None = None,
    ) -> list[Transaction]:
        return [
            t
            for t in self._transactions.values()
            if account_id is None or t.account_id == account_id
        ]

    async def create_transaction(
        self,
        new_transaction: NewTransaction,
    ) -> Transaction:
        validate_new_transaction(new_transaction)
        if new_transaction.account_id not in self._accounts:
            raise AccountNotFoundError(new_transaction.account_id)
        now = self._clock()
        transaction = Transaction(
            id=str(uuid4()),
            account_id=new_transaction.account_id,
            type=new_transaction.type,
            amount=new_transaction.amount,
            date=ensure_aware(new_transaction.date),
            created_at=now,
            category=new_transaction.category,
            description=new_transaction.description,
            updated_at=now,
            tags=frozenset(new_transaction.tags),
        )
        self._transactions[transaction.id] = transaction
        return transaction

    async def delete_transaction(self, transaction_id: str) -> None:
        self._transactions.pop(transaction_id, None)


__all__ = ["InMemoryLedgerStore"]
