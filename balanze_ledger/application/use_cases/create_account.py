"""Use case creating an account, optionally with a DPS plan."""

from balanze_ledger.application.ports.ledger_store import LedgerStorePort
from balanze_ledger.application.use_cases.manage_dps import DPSLifecycleManager
from balanze_ledger.domain.constants import (
    CASH_ACCOUNT_TYPE,
    DEFAULT_CASH_WALLET_NAME,
)
from balanze_ledger.domain.models import Account, DPSConfig, NewAccount
from balanze_ledger.domain.services.validation import (
    validate_dps_config,
    validate_new_account,
)
from balanze_ledger.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)


class CreateAccountUseCase:
    """Create accounts and keep a cash wallet available to the user."""

    def __init__(
        self,
        store: LedgerStorePort,
        dps_manager: DPSLifecycleManager | None = None,
        logger=None,
        usage_logger=None,
    ) -> None:
        self._store = store
        self._logger = logger or get_app_logger()
        self._usage_logger = usage_logger or get_usage_logger()
        self._dps_manager = dps_manager or DPSLifecycleManager(
            store,
            logger=self._logger,
            usage_logger=self._usage_logger,
        )

    async def execute(
        self,
        new_account: NewAccount,
        dps_config: DPSConfig | None = None,
    ) -> Account:
        """Create an account.

        Inputs are validated before any write. When the user owns no cash
        account afterwards, a default cash wallet is created in the same
        currency; a failure there is logged and does not fail the call.

        Args:
            new_account: Fields of the account to create.
            dps_config: Optional DPS plan enabled right after creation.

        Returns:
            Account: The stored account, with DPS fields when enabled.
        """
        validate_new_account(new_account)
        if dps_config is not None:
            validate_dps_config(dps_config)

        account = await self._store.create_account(new_account)
        self._usage_logger.info(
            f"Account created: {account.id} ({account.type}, "
            f"{account.currency})"
        )
        if dps_config is not None:
            account = await self._dps_manager.enable_dps(account, dps_config)
        await self._ensure_cash_wallet(account.currency)
        return account

    async def _ensure_cash_wallet(self, currency: str) -> None:
        try:
            accounts = await self._store.list_accounts()
            if any(a.type == CASH_ACCOUNT_TYPE for a in accounts):
                return
            wallet = await self._store.create_account(
                NewAccount(
                    name=DEFAULT_CASH_WALLET_NAME,
                    type=CASH_ACCOUNT_TYPE,
                    currency=currency,
                    description=(
                        "Default cash account for tracking physical money"
                    ),
                )
            )
        except Exception as exc:
            self._logger.error(f"Could not create default cash wallet: {exc}")
            return
        self._logger.info(f"Created default cash wallet {wallet.id}")


__all__ = ["CreateAccountUseCase"]
