"""Tests for the Streamlit accounts page helpers."""

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import altair as alt

from balanze_ledger.adapters.interface.streamlit import app
from balanze_ledger.domain.errors import (
    AccountNotFoundError,
    DPSBusyError,
    DPSDeletionError,
)
from balanze_ledger.domain.models import (
    CurrencyGroup,
    DPSDeletionResult,
    DPSDeletionSnapshot,
    DPSDestination,
    SagaStep,
    StepStatus,
)


SNAPSHOT = DPSDeletionSnapshot(
    parent_id="wallet",
    dps_account_id="wallet-dps",
    dps_account_name="Wallet (DPS)",
    balance=Decimal("90"),
    currency="USD",
    captured_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
)


class _FakeStreamlit:
    def __init__(self) -> None:
        self.session_state: dict = {}
        self.errors: list[str] = []

    def error(self, text: str) -> None:
        self.errors.append(text)


def _services(dps_manager) -> SimpleNamespace:
    return SimpleNamespace(dps_manager=dps_manager)


def test_account_rows_format_balances(make_account):
    rows = app._account_rows(
        [
            make_account("main", calculated_balance=Decimal("1234.565")),
            make_account("old", is_active=False, has_dps=True),
        ]
    )

    assert rows[0] == {
        "Name": "Main",
        "Type": "bank",
        "Currency": "USD",
        "Balance": "1,234.57",
        "Status": "Active",
        "DPS": "",
    }
    assert rows[1]["Status"] == "Inactive"
    assert rows[1]["DPS"] == "Yes"


def test_prepare_subtotal_chart_data(make_account):
    """Each currency group becomes one bar with a formatted label."""
    groups = [
        CurrencyGroup(
            "EUR",
            (make_account("a", currency="EUR"),),
            Decimal("10.5"),
        ),
        CurrencyGroup(
            "USD",
            (make_account("b"), make_account("c")),
            Decimal("-2"),
        ),
    ]

    data = app._prepare_subtotal_chart_data(groups)

    assert data == [
        {
            "currency": "EUR",
            "subtotal": 10.5,
            "subtotal_label": "10.50 EUR",
            "accounts": 1,
        },
        {
            "currency": "USD",
            "subtotal": -2.0,
            "subtotal_label": "-2.00 USD",
            "accounts": 2,
        },
    ]


def test_render_subtotal_chart_builds_altair_chart(monkeypatch, make_account):
    fake_st = MagicMock()
    monkeypatch.setattr(app, "st", fake_st)

    app._render_subtotal_chart(
        [CurrencyGroup("USD", (make_account("a"),), Decimal("1"))]
    )

    chart = fake_st.altair_chart.call_args.args[0]
    assert isinstance(chart, alt.Chart)
    app._render_subtotal_chart([])
    assert fake_st.altair_chart.call_count == 1


def test_delete_dps_reports_success():
    result = DPSDeletionResult(
        SNAPSHOT,
        DPSDestination.CASH_WALLET,
        created_cash_wallet=True,
    )
    manager = MagicMock()
    manager.delete_dps_with_transfer = AsyncMock(return_value=result)

    ok, message = app._delete_dps(
        _services(manager),
        SNAPSHOT,
        DPSDestination.CASH_WALLET,
    )

    assert ok is True
    assert message == (
        "Moved 90.00 USD from Wallet (DPS) into a new cash wallet"
    )
    manager.delete_dps_with_transfer.assert_awaited_once_with(
        SNAPSHOT,
        DPSDestination.CASH_WALLET,
    )


def test_delete_dps_mentions_drift():
    result = DPSDeletionResult(
        SNAPSHOT,
        DPSDestination.MAIN_ACCOUNT,
        balance_drift=Decimal("5"),
    )
    manager = MagicMock()
    manager.delete_dps_with_transfer = AsyncMock(return_value=result)

    ok, message = app._delete_dps(
        _services(manager),
        SNAPSHOT,
        DPSDestination.MAIN_ACCOUNT,
    )

    assert ok is True
    assert message.endswith("(balance drifted by 5)")


def test_delete_dps_reports_busy_account():
    manager = MagicMock()
    manager.delete_dps_with_transfer = AsyncMock(
        side_effect=DPSBusyError("wallet-dps")
    )

    ok, message = app._delete_dps(
        _services(manager),
        SNAPSHOT,
        DPSDestination.MAIN_ACCOUNT,
    )

    assert ok is False
    assert "already in progress" in message


def test_delete_dps_lists_step_outcomes_on_failure():
    """A failed saga names every step status in the message."""
    result = DPSDeletionResult(SNAPSHOT, DPSDestination.MAIN_ACCOUNT)
    result.mark(SagaStep.RESOLVE_DESTINATION, StepStatus.SUCCEEDED)
    result.mark(SagaStep.CLEAR_PARENT_LINK, StepStatus.FAILED, "locked")
    manager = MagicMock()
    manager.delete_dps_with_transfer = AsyncMock(
        side_effect=DPSDeletionError("locked", result)
    )

    ok, message = app._delete_dps(
        _services(manager),
        SNAPSHOT,
        DPSDestination.MAIN_ACCOUNT,
    )

    assert ok is False
    assert message.startswith("locked (")
    assert "resolve_destination=succeeded" in message
    assert "clear_parent_link=failed" in message
    assert "refresh=pending" in message


def test_open_dps_dialog_stores_snapshot(monkeypatch, make_account):
    fake_st = _FakeStreamlit()
    monkeypatch.setattr(app, "st", fake_st)
    manager = MagicMock()
    manager.capture_deletion = AsyncMock(return_value=SNAPSHOT)
    parent = make_account("wallet", has_dps=True)

    app._open_dps_dialog(_services(manager), parent)

    assert fake_st.session_state[app.DPS_SNAPSHOT_KEY] is SNAPSHOT
    manager.capture_deletion.assert_awaited_once_with(parent)


def test_open_dps_dialog_shows_error(monkeypatch, make_account):
    fake_st = _FakeStreamlit()
    monkeypatch.setattr(app, "st", fake_st)
    manager = MagicMock()
    manager.capture_deletion = AsyncMock(
        side_effect=AccountNotFoundError("wallet-dps")
    )

    app._open_dps_dialog(_services(manager), make_account("wallet"))

    assert fake_st.session_state == {}
    assert fake_st.errors == ["Account not found: wallet-dps"]


def test_build_services_wires_container(monkeypatch):
    """_build_services should share one store across the use cases."""
    settings = app.LedgerSettings(backend="memory")
    store = object()
    monkeypatch.setattr(
        app.LedgerSettings,
        "from_env",
        classmethod(lambda cls: settings),
    )
    monkeypatch.setattr(app, "build_ledger_store", lambda s: store)
    monkeypatch.setattr(app, "build_filter_state_store", lambda s: "filters")
    monkeypatch.setattr(
        app,
        "build_dps_manager",
        lambda s, cfg: ("dps", s, cfg),
    )
    monkeypatch.setattr(
        app,
        "build_accounts_view_use_case",
        lambda s: ("view", s),
    )
    monkeypatch.setattr(
        app,
        "build_reorder_accounts_use_case",
        lambda s: ("reorder", s),
    )

    services = app._build_services()

    assert services.settings is settings
    assert services.store is store
    assert services.filter_store == "filters"
    assert services.dps_manager == ("dps", store, settings)
    assert services.accounts_view == ("view", store)
    assert services.reorder == ("reorder", store)


def test_index_or_zero():
    assert app._index_or_zero(["", "EUR", "USD"], "USD") == 2
    assert app._index_or_zero(["", "EUR"], "JPY") == 0
