"""Shared fixtures for ledger tests."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from balanze_ledger.domain.models import Account, Transaction


BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def fake_logger():
    """Logger stand-in recording every call."""
    return MagicMock()


@pytest.fixture
def make_account():
    """Build accounts with sensible defaults."""

    def _make(account_id: str, **overrides) -> Account:
        fields = {
            "id": account_id,
            "name": account_id.title(),
            "type": "bank",
            "currency": "USD",
            "initial_balance": Decimal("0"),
            "created_at": BASE_TIME,
        }
        fields.update(overrides)
        return Account(**fields)

    return _make


@pytest.fixture
def make_transaction():
    """Build transactions; ``day`` offsets the date from the base time."""

    def _make(
        transaction_id: str,
        account_id: str,
        amount: str,
        transaction_type: str = "income",
        day: int = 0,
        **overrides,
    ) -> Transaction:
        fields = {
            "id": transaction_id,
            "account_id": account_id,
            "type": transaction_type,
            "amount": Decimal(amount),
            "date": BASE_TIME + timedelta(days=day),
            "created_at": BASE_TIME + timedelta(days=day),
        }
        fields.update(overrides)
        return Transaction(**fields)

    return _make
