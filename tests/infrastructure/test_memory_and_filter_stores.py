"""Tests for the in-memory ledger store and the JSON filter-state store."""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from balanze_ledger.domain.errors import (
    AccountNotFoundError,
    LedgerValidationError,
)
from balanze_ledger.domain.models import (
    FilterState,
    NewAccount,
    NewTransaction,
)
from balanze_ledger.infrastructure.filter_state_store import (
    JsonFilterStateStore,
)
from balanze_ledger.infrastructure.memory_ledger_store import (
    InMemoryLedgerStore,
)


WHEN = datetime(2024, 1, 15, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_memory_store_crud_and_cascade():
    store = InMemoryLedgerStore(clock=lambda: WHEN)
    account = await store.create_account(
        NewAccount("Cash", "cash", "USD", initial_balance=Decimal("5"))
    )
    transaction = await store.create_transaction(
        NewTransaction(account.id, "income", Decimal("1"), WHEN)
    )

    await store.update_account(account.id, {"name": "Pocket"})

    assert (await store.get_account(account.id)).name == "Pocket"
    assert await store.list_transactions(account.id) == [transaction]
    await store.delete_account(account.id)
    assert await store.list_transactions() == []
    with pytest.raises(AccountNotFoundError):
        await store.update_account(account.id, {"name": "x"})
    with pytest.raises(AccountNotFoundError):
        await store.create_transaction(
            NewTransaction(account.id, "income", Decimal("1"), WHEN)
        )


@pytest.mark.asyncio
async def test_memory_store_rejects_unknown_fields_and_bad_input():
    store = InMemoryLedgerStore()
    account = await store.create_account(NewAccount("Cash", "cash", "USD"))

    with pytest.raises(LedgerValidationError):
        await store.update_account(account.id, {"created_at": WHEN})
    with pytest.raises(LedgerValidationError):
        await store.create_account(NewAccount("Cash", "cash", "usd"))


def test_filter_state_round_trip(tmp_path, fake_logger):
    """Saved filters load back; the file carries a version."""
    store = JsonFilterStateStore(tmp_path / "state", logger=fake_logger)
    state = FilterState(search="wallet", currency="USD", status="all")

    store.save("accounts", state)

    payload = json.loads((tmp_path / "state" / "accounts.json").read_text())
    assert payload["version"] == 1
    assert payload["filters"]["search"] == "wallet"
    assert store.load("accounts") == state


def test_filter_state_defaults_for_missing_or_bad_files(
    tmp_path,
    fake_logger,
):
    store = JsonFilterStateStore(tmp_path, logger=fake_logger)
    (tmp_path / "broken.json").write_text("{not json")
    (tmp_path / "future.json").write_text(
        json.dumps({"version": 99, "filters": {"search": "x"}})
    )

    assert store.load("missing") == FilterState()
    assert store.load("broken") == FilterState()
    assert store.load("future") == FilterState()
    assert fake_logger.warning.call_count == 2
    with pytest.raises(ValueError):
        store.load("../escape")
