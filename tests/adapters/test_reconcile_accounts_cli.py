"""Tests for the reconcile_accounts_cli adapter."""

import asyncio
from decimal import Decimal
from unittest.mock import MagicMock

from balanze_ledger.adapters import reconcile_accounts_cli
from balanze_ledger.domain.errors import LedgerError
from balanze_ledger.infrastructure.memory_ledger_store import (
    InMemoryLedgerStore,
)


def _patch_wiring(monkeypatch, store, fake_logger):
    monkeypatch.setattr(
        reconcile_accounts_cli,
        "get_app_logger",
        lambda: fake_logger,
    )
    monkeypatch.setattr(
        reconcile_accounts_cli.LedgerSettings,
        "from_env",
        classmethod(lambda cls: cls(backend="memory")),
    )
    monkeypatch.setattr(
        reconcile_accounts_cli,
        "build_ledger_store",
        lambda settings: store,
    )


def test_main_prints_balances_and_issues(
    monkeypatch,
    capsys,
    make_account,
    make_transaction,
):
    """The CLI should print recomputed balances and stale caches."""
    store = InMemoryLedgerStore(
        [make_account("wallet", initial_balance=Decimal("1000"))],
        [
            make_transaction("t1", "wallet", "234.5"),
            make_transaction("t2", "gone", "1"),
        ],
    )
    _patch_wiring(monkeypatch, store, MagicMock())
    monkeypatch.delenv("RECONCILE_WRITE_BACK", raising=False)

    reconcile_accounts_cli.main()

    out = capsys.readouterr().out
    assert "Reconciled 1 accounts: 1 orphaned transactions" in out
    assert "Wallet: 1,234.50 USD" in out
    assert "orphan: transaction t2 -> account gone" in out
    assert "Rewrote" not in out


def test_main_writes_back_when_requested(
    monkeypatch,
    capsys,
    make_account,
    make_transaction,
):
    store = InMemoryLedgerStore(
        [make_account("wallet")],
        [make_transaction("t1", "wallet", "3")],
    )
    _patch_wiring(monkeypatch, store, MagicMock())
    monkeypatch.setenv("RECONCILE_WRITE_BACK", "yes")

    reconcile_accounts_cli.main()

    assert "Rewrote 1 cached balances." in capsys.readouterr().out
    stored = asyncio.run(store.get_account("wallet"))
    assert stored.calculated_balance == Decimal("3")


def test_main_reports_failures(monkeypatch, capsys):
    """Store errors are logged and printed instead of raised."""
    fake_logger = MagicMock()
    store = MagicMock()
    store.list_accounts.side_effect = LedgerError("database unavailable")
    _patch_wiring(monkeypatch, store, fake_logger)

    reconcile_accounts_cli.main()

    out = capsys.readouterr().out
    assert "Reconciliation failed: database unavailable" in out
    fake_logger.error.assert_called_once()
