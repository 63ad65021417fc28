"""Streamlit accounts page entry point."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

import streamlit as st
import altair as alt

from balanze_ledger.application.ports.filter_state_store import (
    FilterStateStorePort,
)
from balanze_ledger.application.ports.ledger_store import LedgerStorePort
from balanze_ledger.application.use_cases.get_accounts_view import (
    GetAccountsViewUseCase,
)
from balanze_ledger.application.use_cases.manage_dps import DPSLifecycleManager
from balanze_ledger.application.use_cases.reorder_accounts import (
    ReorderAccountsUseCase,
)
from balanze_ledger.domain.constants import (
    ACCOUNT_TYPES,
    ALL,
    SORT_KEYS,
    STATUS_VALUES,
)
from balanze_ledger.domain.errors import (
    DPSBusyError,
    DPSDeletionError,
    LedgerError,
)
from balanze_ledger.domain.models import (
    Account,
    CurrencyGroup,
    DPSDeletionSnapshot,
    DPSDestination,
    FilterState,
    SortState,
)
from balanze_ledger.domain.services.account_view import toggle_sort
from balanze_ledger.infrastructure.container import (
    build_accounts_view_use_case,
    build_dps_manager,
    build_filter_state_store,
    build_ledger_store,
    build_reorder_accounts_use_case,
)
from balanze_ledger.infrastructure.settings import LedgerSettings
from balanze_ledger.utils.decimal_utils import format_amount


VIEW_NAME = "accounts"
SORT_STATE_KEY = "sort_state"
DPS_SNAPSHOT_KEY = "dps_snapshot"
DESTINATION_LABELS = {
    DPSDestination.MAIN_ACCOUNT: "Main account",
    DPSDestination.CASH_WALLET: "Cash wallet",
}


@dataclass(frozen=True)
class LedgerServices:
    """Objects shared by every rerun of the page."""

    settings: LedgerSettings
    store: LedgerStorePort
    filter_store: FilterStateStorePort
    dps_manager: DPSLifecycleManager
    accounts_view: GetAccountsViewUseCase
    reorder: ReorderAccountsUseCase


def _build_services() -> LedgerServices:
    """Wire the store and use cases from environment settings."""
    settings = LedgerSettings.from_env()
    store = build_ledger_store(settings)
    return LedgerServices(
        settings=settings,
        store=store,
        filter_store=build_filter_state_store(settings),
        dps_manager=build_dps_manager(store, settings),
        accounts_view=build_accounts_view_use_case(store),
        reorder=build_reorder_accounts_use_case(store),
    )


@st.cache_resource(show_spinner=False)
def _load_services() -> LedgerServices:
    """Cached wrapper so DPS locks survive Streamlit reruns."""
    return _build_services()


def _run(coroutine):
    """Drive a use-case coroutine to completion from Streamlit code."""
    return asyncio.run(coroutine)


def _account_rows(accounts: Sequence[Account]) -> list[dict[str, str]]:
    """Return table rows for the displayed accounts."""
    return [
        {
            "Name": account.name,
            "Type": account.type,
            "Currency": account.currency,
            "Balance": format_amount(account.calculated_balance),
            "Status": "Active" if account.is_active else "Inactive",
            "DPS": "Yes" if account.has_dps else "",
        }
        for account in accounts
    ]


def _prepare_subtotal_chart_data(
    groups: Sequence[CurrencyGroup],
) -> list[dict[str, str | float]]:
    """Prepare one bar per currency group.

    Args:
        groups: Currency groups in display order.

    Returns:
        Altair-ready rows with the subtotal and its display label.
    """
    return [
        {
            "currency": group.currency,
            "subtotal": float(group.subtotal),
            "subtotal_label": format_amount(group.subtotal, group.currency),
            "accounts": len(group.accounts),
        }
        for group in groups
    ]


def _render_subtotal_chart(groups: Sequence[CurrencyGroup]) -> None:
    """Render a bar chart of balances per currency."""
    if not groups:
        return
    data = _prepare_subtotal_chart_data(groups)
    chart = alt.Chart(alt.Data(values=data)).mark_bar(
        cornerRadiusTopLeft=4,
        cornerRadiusTopRight=4,
    ).encode(
        x=alt.X("currency:N", sort=None, title=None),
        y=alt.Y("subtotal:Q", title="Balance"),
        color=alt.Color("currency:N", legend=None),
        tooltip=[
            alt.Tooltip("currency:N"),
            alt.Tooltip("subtotal_label:N", title="Subtotal"),
            alt.Tooltip("accounts:Q", title="Accounts"),
        ],
    ).properties(height=240)
    st.subheader("Balance by currency")
    st.altair_chart(chart, width="stretch")


def _render_filters(
    filter_state: FilterState,
    currencies: Sequence[str],
) -> FilterState:
    """Render filter widgets and return the resulting state."""
    search_col, currency_col, type_col, status_col = st.columns(4)
    search = search_col.text_input(
        "Search",
        value=filter_state.search,
        placeholder="Name, type, currency...",
    )
    currency_options = [""] + list(currencies)
    currency = currency_col.selectbox(
        "Currency",
        options=currency_options,
        index=_index_or_zero(currency_options, filter_state.currency),
        format_func=lambda code: code or "All currencies",
    )
    type_options = [ALL, *ACCOUNT_TYPES]
    account_type = type_col.selectbox(
        "Type",
        options=type_options,
        index=_index_or_zero(type_options, filter_state.type),
    )
    status = status_col.selectbox(
        "Status",
        options=list(STATUS_VALUES),
        index=_index_or_zero(list(STATUS_VALUES), filter_state.status),
    )
    return FilterState(
        search=search,
        currency=currency,
        type=account_type,
        status=status,
    )


def _index_or_zero(options: Sequence[str], value: str) -> int:
    return options.index(value) if value in options else 0


def _render_sort_controls(sort_state: SortState | None) -> SortState | None:
    """Render one button per sort key plus a manual-order reset."""
    columns = st.columns(len(SORT_KEYS) + 1)
    if columns[0].button("Manual order"):
        return None
    for column, key in zip(columns[1:], SORT_KEYS):
        arrow = ""
        if sort_state is not None and sort_state.key == key:
            arrow = " ↓" if sort_state.descending else " ↑"
        if column.button(f"{key.title()}{arrow}", key=f"sort_{key}"):
            return toggle_sort(sort_state, key)
    return sort_state


def _render_account_list(
    services: LedgerServices,
    accounts: Sequence[Account],
    manual_order: bool,
) -> None:
    """Render accounts with move and DPS controls."""
    for index, account in enumerate(accounts):
        name_col, balance_col, up_col, down_col, dps_col = st.columns(
            [4, 2, 1, 1, 2]
        )
        name_col.write(f"**{account.name}** · {account.type}")
        balance_col.write(
            format_amount(account.calculated_balance, account.currency)
        )
        if manual_order:
            if up_col.button(
                "↑",
                key=f"up_{account.id}",
                disabled=index == 0,
            ):
                _run(services.reorder.move_up(account.id, accounts))
                st.rerun()
            if down_col.button(
                "↓",
                key=f"down_{account.id}",
                disabled=index == len(accounts) - 1,
            ):
                _run(services.reorder.move_down(account.id, accounts))
                st.rerun()
        if account.has_dps and dps_col.button(
            "Delete DPS",
            key=f"dps_{account.id}",
        ):
            _open_dps_dialog(services, account)


def _open_dps_dialog(services: LedgerServices, parent: Account) -> None:
    """Capture the DPS balance at the moment the dialog opens."""
    try:
        snapshot = _run(services.dps_manager.capture_deletion(parent))
    except LedgerError as exc:
        st.error(str(exc))
        return
    st.session_state[DPS_SNAPSHOT_KEY] = snapshot


def _delete_dps(
    services: LedgerServices,
    snapshot: DPSDeletionSnapshot,
    destination: DPSDestination,
) -> tuple[bool, str]:
    """Run the DPS deletion and return a success flag with a message."""
    try:
        result = _run(
            services.dps_manager.delete_dps_with_transfer(
                snapshot,
                destination,
            )
        )
    except DPSBusyError as exc:
        return False, str(exc)
    except DPSDeletionError as exc:
        details = ""
        if exc.result is not None:
            details = ", ".join(
                f"{outcome.step.value}={outcome.status.value}"
                for outcome in exc.result.steps.values()
            )
        return False, f"{exc} ({details})" if details else str(exc)
    message = (
        f"Moved {format_amount(snapshot.balance, snapshot.currency)} "
        f"from {snapshot.dps_account_name}"
    )
    if result.created_cash_wallet:
        message += " into a new cash wallet"
    if result.balance_drift:
        message += f" (balance drifted by {result.balance_drift})"
    return True, message


def _render_dps_dialog(services: LedgerServices) -> None:
    """Render the confirmation panel for a captured DPS deletion."""
    snapshot = st.session_state.get(DPS_SNAPSHOT_KEY)
    if snapshot is None:
        return
    st.subheader(f"Delete {snapshot.dps_account_name}")
    st.write(
        "Remaining balance: "
        f"{format_amount(snapshot.balance, snapshot.currency)}"
    )
    destination = st.radio(
        "Transfer the balance to",
        options=list(DESTINATION_LABELS),
        format_func=lambda value: DESTINATION_LABELS[value],
    )
    confirm_col, cancel_col = st.columns(2)
    if cancel_col.button("Cancel"):
        st.session_state.pop(DPS_SNAPSHOT_KEY, None)
        st.rerun()
    if confirm_col.button("Delete and transfer", type="primary"):
        ok, message = _delete_dps(services, snapshot, destination)
        if ok:
            st.session_state.pop(DPS_SNAPSHOT_KEY, None)
            st.success(message)
        else:
            st.error(message)


def main() -> None:
    """Render the Streamlit app."""
    st.set_page_config(page_title="Balanze Ledger", layout="wide")
    st.title("Accounts")

    services = _load_services()
    saved_filters = services.filter_store.load(VIEW_NAME)
    try:
        all_accounts = _run(services.store.list_accounts())
    except LedgerError as exc:
        st.error(str(exc))
        return
    currencies = sorted({account.currency for account in all_accounts})

    filter_state = _render_filters(saved_filters, currencies)
    if filter_state != saved_filters:
        services.filter_store.save(VIEW_NAME, filter_state)
    sort_state = _render_sort_controls(
        st.session_state.get(SORT_STATE_KEY)
    )
    st.session_state[SORT_STATE_KEY] = sort_state

    view = _run(
        services.accounts_view.execute(
            filter_state,
            sort_state,
            services.settings.selected_currencies,
        )
    )
    st.caption(f"{len(view.accounts)} accounts shown")
    if not view.accounts:
        st.warning("No accounts match the current filters.")
        return

    if view.groups is not None:
        _render_subtotal_chart(view.groups)
        for group in view.groups:
            st.markdown(
                f"#### {group.currency} · "
                f"{format_amount(group.subtotal, group.currency)}"
            )
            st.dataframe(
                _account_rows(group.accounts),
                width="stretch",
                hide_index=True,
            )
    else:
        st.dataframe(
            _account_rows(view.accounts),
            width="stretch",
            hide_index=True,
        )

    st.subheader("Arrange")
    _render_account_list(services, view.accounts, sort_state is None)
    _render_dps_dialog(services)


if __name__ == "__main__":  # pragma: no cover
    main()
