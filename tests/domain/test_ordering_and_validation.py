"""Tests for position planning, input validation and DPS link policies."""

from collections import Counter
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from balanze_ledger.domain.errors import DPSLinkError, LedgerValidationError
from balanze_ledger.domain.models import (
    DPSConfig,
    DPSState,
    FilterState,
    NewAccount,
    NewTransaction,
)
from balanze_ledger.domain.policies import (
    dps_state,
    ensure_linked,
    find_link_violations,
    is_dps_savings_account,
)
from balanze_ledger.domain.services.ordering import (
    changed_positions,
    dense_positions,
    needs_renumbering,
    plan_move,
)
from balanze_ledger.domain.services.validation import (
    validate_amount,
    validate_currency,
    validate_dps_config,
    validate_new_account,
    validate_new_transaction,
)


BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_plan_move_swaps_with_neighbour_and_conserves_positions(
    make_account,
):
    """A swap exchanges the two position values."""
    displayed = [
        make_account("a", position=0),
        make_account("b", position=1),
        make_account("c", position=5),
    ]

    swap = plan_move(displayed, "c", "up")
    updates = swap.updates()

    assert updates == {"c": 1, "b": 5}
    before = Counter(a.position for a in displayed)
    after = Counter(updates.get(a.id, a.position) for a in displayed)
    assert before == after


def test_plan_move_returns_none_at_boundaries(make_account):
    """First-up, last-down and unknown ids are no-ops."""
    displayed = [make_account("a", position=0), make_account("b", position=1)]

    assert plan_move(displayed, "a", "up") is None
    assert plan_move(displayed, "b", "down") is None
    assert plan_move(displayed, "zzz", "up") is None
    with pytest.raises(LedgerValidationError):
        plan_move(displayed, "a", "sideways")


def test_equal_positions_need_renumbering(make_account):
    """Neighbours sharing a position are densely renumbered."""
    displayed = [
        make_account("a", position=0),
        make_account("b", position=0),
        make_account("c", position=2),
    ]

    swap = plan_move(displayed, "b", "up")
    positions = dense_positions(displayed)

    assert needs_renumbering(swap)
    assert positions == {"a": 0, "b": 1, "c": 2}
    assert changed_positions(displayed, positions) == {"b": 1}


def test_validate_currency_and_amount():
    assert validate_currency("USD") == "USD"
    for bad in ("usd", "US", "USDT", None):
        with pytest.raises(LedgerValidationError):
            validate_currency(bad)
    assert validate_amount(Decimal("0")) == Decimal("0")
    for bad in (Decimal("-1"), Decimal("NaN"), 3.5, "10"):
        with pytest.raises(LedgerValidationError):
            validate_amount(bad)


def test_validate_new_records():
    """Names, types and currencies are checked before storage."""
    validate_new_account(NewAccount("Wallet", "cash", "USD"))
    with pytest.raises(LedgerValidationError):
        validate_new_account(NewAccount("  ", "cash", "USD"))
    with pytest.raises(LedgerValidationError):
        validate_new_account(NewAccount("Wallet", "piggy", "USD"))
    with pytest.raises(LedgerValidationError):
        validate_new_transaction(
            NewTransaction("a", "transfer", Decimal("1"), BASE_TIME)
        )


@pytest.mark.parametrize(
    "config",
    [
        DPSConfig("yearly", "fixed", Decimal("10")),
        DPSConfig("monthly", "custom", None),
        DPSConfig("flexible", "fixed", Decimal("0")),
        DPSConfig("flexible", "weird"),
        DPSConfig("flexible", "custom", initial_balance=Decimal("-5")),
    ],
)
def test_validate_dps_config_rejects_incomplete_plans(config):
    with pytest.raises(LedgerValidationError):
        validate_dps_config(config)


def test_validate_dps_config_accepts_flexible_custom_without_amount():
    config = DPSConfig("flexible", "custom")

    assert validate_dps_config(config) is config
    assert config.to_account_fields()["dps_fixed_amount"] is None


def test_monthly_plan_keeps_fixed_amount_in_account_fields():
    fields = DPSConfig("monthly", "custom", Decimal("30")).to_account_fields()

    assert fields["has_dps"] is True
    assert fields["dps_fixed_amount"] == Decimal("30")


def test_dps_link_policies(make_account, fake_logger):
    """Links are checked, derived and audited."""
    parent = make_account("p", has_dps=True, dps_savings_account_id="s")
    savings = make_account("s", type="savings")
    stranger = make_account("x", dps_savings_account_id="s")
    selfish = make_account("y", dps_savings_account_id="y")

    ensure_linked(parent, savings)
    with pytest.raises(DPSLinkError):
        ensure_linked(parent, stranger)
    with pytest.raises(DPSLinkError):
        ensure_linked(selfish, selfish)
    assert dps_state(parent) is DPSState.DPS_ENABLED
    assert dps_state(savings) is DPSState.NO_DPS
    assert is_dps_savings_account(savings, [parent, savings])

    messages = find_link_violations(
        [parent, savings, stranger, selfish],
        fake_logger,
    )

    assert len(messages) == 2
    assert fake_logger.warning.call_count == 2


def test_filter_state_from_dict_merges_defaults():
    """Unknown or malformed fields fall back to the defaults."""
    state = FilterState.from_dict(
        {"search": "cash", "status": "archived", "type": 3}
    )

    assert state == FilterState(search="cash")
    assert FilterState.from_dict(None) == FilterState()
    assert FilterState.from_dict(state.to_dict()) == state
