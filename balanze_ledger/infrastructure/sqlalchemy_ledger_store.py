"""SQLAlchemy-backed ledger store.

Amounts are stored as text so Decimal values survive unchanged on every
backend, tags as a JSON array, booleans as integers and timestamps as
ISO-8601 text. Blocking engine work runs in a worker thread so the store
exposes the async port.
"""

import asyncio
from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal
import json
from typing import Any
from uuid import uuid4

from sqlalchemy import text

from balanze_ledger.application.ports.database import DatabaseEnginePort
from balanze_ledger.application.ports.ledger_store import LedgerStorePort
from balanze_ledger.domain.constants import ACCOUNT_MUTABLE_FIELDS
from balanze_ledger.domain.errors import (
    AccountNotFoundError,
    LedgerValidationError,
)
from balanze_ledger.domain.models import (
    Account,
    NewAccount,
    NewTransaction,
    Transaction,
)
from balanze_ledger.domain.services.validation import (
    validate_new_account,
    validate_new_transaction,
)
from balanze_ledger.infrastructure.logging.logger import get_app_logger
from balanze_ledger.utils.decimal_utils import (
    coerce_decimal,
    coerce_optional_decimal,
)
from balanze_ledger.utils.time_utils import ensure_aware, utc_now


CREATE_ACCOUNTS_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    type TEXT NOT NULL,
    currency TEXT NOT NULL,
    initial_balance TEXT NOT NULL,
    calculated_balance TEXT NOT NULL,
    is_active INTEGER NOT NULL,
    position INTEGER,
    has_dps INTEGER NOT NULL,
    dps_type TEXT,
    dps_amount_type TEXT,
    dps_fixed_amount TEXT,
    dps_savings_account_id TEXT,
    description TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT
)
"""

CREATE_TRANSACTIONS_SQL = """
CREATE TABLE IF NOT EXISTS transactions (
    id TEXT PRIMARY KEY,
    account_id TEXT NOT NULL,
    type TEXT NOT NULL,
    amount TEXT NOT NULL,
    date TEXT NOT NULL,
    category TEXT,
    description TEXT,
    tags TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT
)
"""

CREATE_TRANSACTIONS_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS ix_transactions_account_id
ON transactions (account_id)
"""

ACCOUNT_COLUMNS = (
    "id, name, type, currency, initial_balance, calculated_balance, "
    "is_active, position, has_dps, dps_type, dps_amount_type, "
    "dps_fixed_amount, dps_savings_account_id, description, "
    "created_at, updated_at"
)

TRANSACTION_COLUMNS = (
    "id, account_id, type, amount, date, category, description, tags, "
    "created_at, updated_at"
)

SELECT_ACCOUNTS_SQL = text(
    f"""
    SELECT {ACCOUNT_COLUMNS}
    FROM accounts
    ORDER BY created_at, id
    """
)

SELECT_ACCOUNT_SQL = text(
    f"""
    SELECT {ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = :id
    """
)

INSERT_ACCOUNT_SQL = text(
    """
    INSERT INTO accounts (
        id,
        name,
        type,
        currency,
        initial_balance,
        calculated_balance,
        is_active,
        position,
        has_dps,
        description,
        created_at,
        updated_at
    )
    VALUES (
        :id,
        :name,
        :type,
        :currency,
        :initial_balance,
        :calculated_balance,
        :is_active,
        :position,
        0,
        :description,
        :created_at,
        :updated_at
    )
    """
)

DELETE_ACCOUNT_TRANSACTIONS_SQL = text(
    "DELETE FROM transactions WHERE account_id = :account_id"
)

DELETE_ACCOUNT_SQL = text("DELETE FROM accounts WHERE id = :id")

SELECT_TRANSACTIONS_SQL = text(
    f"""
    SELECT {TRANSACTION_COLUMNS}
    FROM transactions
    ORDER BY date, created_at, id
    """
)

SELECT_ACCOUNT_TRANSACTIONS_SQL = text(
    f"""
    SELECT {TRANSACTION_COLUMNS}
    FROM transactions
    WHERE account_id = :account_id
    ORDER BY date, created_at, id
    """
)

INSERT_TRANSACTION_SQL = text(
    """
    INSERT INTO transactions (
        id,
        account_id,
        type,
        amount,
        date,
        category,
        description,
        tags,
        created_at,
        updated_at
    )
    VALUES (
        :id,
        :account_id,
        :type,
        :amount,
        :date,
        :category,
        :description,
        :tags,
        :created_at,
        :updated_at
    )
    """
)

DELETE_TRANSACTION_SQL = text("DELETE FROM transactions WHERE id = :id")

_BOOLEAN_FIELDS = ("is_active", "has_dps")
_DECIMAL_FIELDS = ("initial_balance", "calculated_balance")
_OPTIONAL_DECIMAL_FIELDS = ("dps_fixed_amount",)


class SqlAlchemyLedgerStore(LedgerStorePort):
    """Ledger store persisting accounts and transactions with SQLAlchemy."""

    def __init__(self, db_port: DatabaseEnginePort, logger=None) -> None:
        """Initialize the store.

        Args:
            db_port: Port providing access to the ledger engine.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._db_port = db_port
        self._logger = logger or get_app_logger()

    def ensure_schema(self) -> None:
        """Create the ledger tables when they do not exist yet."""
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.execute(text(CREATE_ACCOUNTS_SQL))
            conn.execute(text(CREATE_TRANSACTIONS_SQL))
            conn.execute(text(CREATE_TRANSACTIONS_INDEX_SQL))
        self._logger.info("Ledger schema ensured")

    async def list_accounts(self) -> list[Account]:
        return await asyncio.to_thread(self._list_accounts)

    async def get_account(self, account_id: str) -> Account | None:
        return await asyncio.to_thread(self._get_account, account_id)

    async def create_account(self, new_account: NewAccount) -> Account:
        return await asyncio.to_thread(self._create_account, new_account)

    async def update_account(
        self,
        account_id: str,
        changes: Mapping[str, Any],
    ) -> None:
        await asyncio.to_thread(self._update_account, account_id, changes)

    async def delete_account(self, account_id: str) -> None:
        await asyncio.to_thread(self._delete_account, account_id)

    async def list_transactions(
        self,
        account_id: str | None = None,
    ) -> list[Transaction]:
        return await asyncio.to_thread(self._list_transactions, account_id)

    async def create_transaction(
        self,
        new_transaction: NewTransaction,
    ) -> Transaction:
        return await asyncio.to_thread(
            self._create_transaction,
            new_transaction,
        )

    async def delete_transaction(self, transaction_id: str) -> None:
        await asyncio.to_thread(self._delete_transaction, transaction_id)

    def _list_accounts(self) -> list[Account]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            rows = conn.execute(SELECT_ACCOUNTS_SQL).all()
        return [_row_to_account(row) for row in rows]

    def _get_account(self, account_id: str) -> Account | None:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            row = conn.execute(SELECT_ACCOUNT_SQL, {"id": account_id}).first()
        if row is None:
            return None
        return _row_to_account(row)

    def _create_account(self, new_account: NewAccount) -> Account:
        validate_new_account(new_account)
        now = _to_text(utc_now())
        params = {
            "id": str(uuid4()),
            "name": new_account.name,
            "type": new_account.type,
            "currency": new_account.currency,
            "initial_balance": str(new_account.initial_balance),
            "calculated_balance": str(new_account.initial_balance),
            "is_active": int(new_account.is_active),
            "position": new_account.position,
            "description": new_account.description,
            "created_at": now,
            "updated_at": now,
        }
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.execute(INSERT_ACCOUNT_SQL, params)
            row = conn.execute(
                SELECT_ACCOUNT_SQL,
                {"id": params["id"]},
            ).first()
        return _row_to_account(row)

    def _update_account(
        self,
        account_id: str,
        changes: Mapping[str, Any],
    ) -> None:
        unknown = sorted(set(changes) - set(ACCOUNT_MUTABLE_FIELDS))
        if unknown:
            raise LedgerValidationError(
                f"Cannot update account fields: {', '.join(unknown)}"
            )
        params = {
            name: _to_column(name, value) for name, value in changes.items()
        }
        params["updated_at"] = _to_text(utc_now())
        assignments = ", ".join(f"{name} = :{name}" for name in params)
        params["id"] = account_id
        statement = text(f"UPDATE accounts SET {assignments} WHERE id = :id")
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            result = conn.execute(statement, params)
        if result.rowcount == 0:
            raise AccountNotFoundError(account_id)

    def _delete_account(self, account_id: str) -> None:
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            removed = conn.execute(
                DELETE_ACCOUNT_TRANSACTIONS_SQL,
                {"account_id": account_id},
            ).rowcount
            result = conn.execute(DELETE_ACCOUNT_SQL, {"id": account_id})
            if result.rowcount == 0:
                raise AccountNotFoundError(account_id)
        self._logger.info(
            f"Deleted account {account_id} and {removed} transactions"
        )

    def _list_transactions(self, account_id: str | None) -> list[Transaction]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            if account_id is None:
                rows = conn.execute(SELECT_TRANSACTIONS_SQL).all()
            else:
                rows = conn.execute(
                    SELECT_ACCOUNT_TRANSACTIONS_SQL,
                    {"account_id": account_id},
                ).all()
        return [_row_to_transaction(row) for row in rows]

    def _create_transaction(
        self,
        new_transaction: NewTransaction,
    ) -> Transaction:
        validate_new_transaction(new_transaction)
        now = utc_now()
        transaction = Transaction(
            id=str(uuid4()),
            account_id=new_transaction.account_id,
            type=new_transaction.type,
            amount=new_transaction.amount,
            date=ensure_aware(new_transaction.date),
            created_at=now,
            category=new_transaction.category,
            description=new_transaction.description,
            updated_at=now,
            tags=frozenset(new_transaction.tags),
        )
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            owner = conn.execute(
                SELECT_ACCOUNT_SQL,
                {"id": transaction.account_id},
            ).first()
            if owner is None:
                raise AccountNotFoundError(transaction.account_id)
            conn.execute(
                INSERT_TRANSACTION_SQL,
                {
                    "id": transaction.id,
                    "account_id": transaction.account_id,
                    "type": transaction.type,
                    "amount": str(transaction.amount),
                    "date": _to_text(transaction.date),
                    "category": transaction.category,
                    "description": transaction.description,
                    "tags": json.dumps(sorted(transaction.tags)),
                    "created_at": _to_text(now),
                    "updated_at": _to_text(now),
                },
            )
        return transaction

    def _delete_transaction(self, transaction_id: str) -> None:
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.execute(DELETE_TRANSACTION_SQL, {"id": transaction_id})


def _to_text(value: datetime | None) -> str | None:
    if value is None:
        return None
    utc_value = ensure_aware(value).astimezone(timezone.utc)
    return utc_value.isoformat(timespec="microseconds")


def _from_text(value: str | None) -> datetime | None:
    if not value:
        return None
    return ensure_aware(datetime.fromisoformat(value))


def _to_column(name: str, value: Any) -> Any:
    """Convert a domain value to its stored representation."""
    if value is None:
        return None
    if name in _BOOLEAN_FIELDS:
        return int(bool(value))
    if name in _DECIMAL_FIELDS or name in _OPTIONAL_DECIMAL_FIELDS:
        if not isinstance(value, Decimal):
            raise LedgerValidationError(f"{name} must be a Decimal")
        return str(value)
    return value


def _row_to_account(row) -> Account:
    return Account(
        id=row.id,
        name=row.name,
        type=row.type,
        currency=row.currency,
        initial_balance=coerce_decimal(row.initial_balance),
        calculated_balance=coerce_decimal(row.calculated_balance),
        is_active=bool(row.is_active),
        position=row.position,
        has_dps=bool(row.has_dps),
        dps_type=row.dps_type,
        dps_amount_type=row.dps_amount_type,
        dps_fixed_amount=coerce_optional_decimal(row.dps_fixed_amount),
        dps_savings_account_id=row.dps_savings_account_id,
        description=row.description,
        created_at=_from_text(row.created_at),
        updated_at=_from_text(row.updated_at),
    )


def _row_to_transaction(row) -> Transaction:
    tags = json.loads(row.tags) if row.tags else []
    return Transaction(
        id=row.id,
        account_id=row.account_id,
        type=row.type,
        amount=coerce_decimal(row.amount),
        date=_from_text(row.date),
        created_at=_from_text(row.created_at),
        category=row.category or "",
        description=row.description or "",
        updated_at=_from_text(row.updated_at),
        tags=frozenset(tags),
    )


__all__ = ["SqlAlchemyLedgerStore"]
