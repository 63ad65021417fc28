"""Use case assembling the accounts page for presentation layers."""

from collections.abc import Iterable

from balanze_ledger.application.ports.ledger_store import LedgerStorePort
from balanze_ledger.domain.models import AccountsView, FilterState, SortState
from balanze_ledger.domain.services.account_view import (
    build_accounts_view,
    count_transactions,
)
from balanze_ledger.domain.services.ledger import (
    apply_balances,
    reconcile_balances,
)
from balanze_ledger.infrastructure.logging.logger import get_app_logger


class GetAccountsViewUseCase:
    """Read accounts, recompute balances and filter/sort/group them."""

    def __init__(self, store: LedgerStorePort, logger=None) -> None:
        self._store = store
        self._logger = logger or get_app_logger()

    async def execute(
        self,
        filter_state: FilterState | None = None,
        sort_state: SortState | None = None,
        selected_currencies: Iterable[str] = (),
    ) -> AccountsView:
        """Return the accounts to display.

        Balances come from the ledger, not from the cached column.

        Args:
            filter_state: View filters; defaults apply when omitted.
            sort_state: Optional explicit sort key and direction.
            selected_currencies: Currencies enabled in user settings.

        Returns:
            AccountsView: Ordered accounts and currency groups.
        """
        accounts = await self._store.list_accounts()
        transactions = await self._store.list_transactions()
        balances = reconcile_balances(accounts, transactions, self._logger)
        view = build_accounts_view(
            apply_balances(accounts, balances),
            filter_state or FilterState(),
            sort_state,
            selected_currencies=selected_currencies,
            transaction_counts=count_transactions(transactions),
        )
        self._logger.debug(
            f"Accounts view: {len(view.accounts)} of {len(accounts)} shown"
        )
        return view


__all__ = ["GetAccountsViewUseCase"]
