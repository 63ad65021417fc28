"""Use case deleting an account and its DPS savings account."""

from dataclasses import dataclass

from balanze_ledger.application.ports.ledger_store import LedgerStorePort
from balanze_ledger.domain.constants import DPS_CLEARED_FIELDS
from balanze_ledger.domain.errors import AccountNotFoundError
from balanze_ledger.domain.services.ledger import current_balance
from balanze_ledger.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)


@dataclass(frozen=True)
class DeleteAccountResult:
    """Ids touched by an account deletion."""

    account_id: str
    unlinked_parent_ids: tuple[str, ...] = ()
    deleted_dps_account_id: str | None = None


class DeleteAccountUseCase:
    """Delete an account; its transactions cascade in the store."""

    def __init__(
        self,
        store: LedgerStorePort,
        logger=None,
        usage_logger=None,
    ) -> None:
        self._store = store
        self._logger = logger or get_app_logger()
        self._usage_logger = usage_logger or get_usage_logger()

    async def execute(self, account_id: str) -> DeleteAccountResult:
        """Delete an account.

        Parents linking to the account as their DPS savings account are
        unlinked first. When the account owns a DPS plan, its savings
        account is deleted as well, with a warning if it still held money.

        Raises:
            AccountNotFoundError: If the account does not exist.
        """
        account = await self._store.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)

        accounts = await self._store.list_accounts()
        parents = [
            other.id
            for other in accounts
            if other.dps_savings_account_id == account_id
            and other.id != account_id
        ]
        for parent_id in parents:
            await self._store.update_account(
                parent_id,
                dict(DPS_CLEARED_FIELDS),
            )
            self._logger.info(
                f"Cleared DPS link of {parent_id} before deleting {account_id}"
            )

        await self._store.delete_account(account_id)

        dps_id = account.dps_savings_account_id
        deleted_dps = None
        if dps_id and dps_id != account_id:
            deleted_dps = await self._delete_dps_account(dps_id)

        self._usage_logger.info(f"Account deleted: {account_id}")
        return DeleteAccountResult(
            account_id=account_id,
            unlinked_parent_ids=tuple(parents),
            deleted_dps_account_id=deleted_dps,
        )

    async def _delete_dps_account(self, dps_id: str) -> str | None:
        dps_account = await self._store.get_account(dps_id)
        if dps_account is None:
            self._logger.warning(f"Linked DPS account {dps_id} already gone")
            return None
        transactions = await self._store.list_transactions(dps_id)
        balance = current_balance(dps_account, transactions)
        if balance:
            self._logger.warning(
                f"Deleting DPS account {dps_id} with non-zero balance "
                f"{balance} {dps_account.currency}"
            )
        await self._store.delete_account(dps_id)
        return dps_id


__all__ = ["DeleteAccountResult", "DeleteAccountUseCase"]
