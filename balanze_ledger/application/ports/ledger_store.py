"""Port for the persistent ledger store.

Every call is atomic on its own; the store offers no multi-call
transaction, so use cases spanning several writes must handle partial
failure themselves.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from balanze_ledger.domain.models import (
    Account,
    NewAccount,
    NewTransaction,
    Transaction,
)


class LedgerStorePort(Protocol):
    """Async CRUD access to accounts and transactions."""

    async def list_accounts(self) -> list[Account]:
        """Return every account."""

    async def get_account(self, account_id: str) -> Account | None:
        """Return one account or None when it does not exist."""

    async def create_account(self, new_account: NewAccount) -> Account:
        """Insert an account and return the stored record."""

    async def update_account(
        self,
        account_id: str,
        changes: Mapping[str, Any],
    ) -> None:
        """Apply a partial update to an account."""

    async def delete_account(self, account_id: str) -> None:
        """Delete an account and, in cascade, its transactions."""

    async def list_transactions(
        self,
        account_id: str | None = None,
    ) -> list[Transaction]:
        """Return all transactions, or those of one account."""

    async def create_transaction(
        self,
        new_transaction: NewTransaction,
    ) -> Transaction:
        """Insert a transaction and return the stored record."""

    async def delete_transaction(self, transaction_id: str) -> None:
        """Delete one transaction."""


__all__ = ["LedgerStorePort"]
