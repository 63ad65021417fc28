"""Tests for infrastructure settings and the composition root."""

from pathlib import Path
from unittest.mock import MagicMock

from balanze_ledger.infrastructure import container
from balanze_ledger.infrastructure import settings as settings_module
from balanze_ledger.infrastructure.memory_ledger_store import (
    InMemoryLedgerStore,
)
from balanze_ledger.infrastructure.settings import LedgerSettings
from balanze_ledger.infrastructure.sqlalchemy_ledger_store import (
    SqlAlchemyLedgerStore,
)


def _isolate(monkeypatch) -> None:
    monkeypatch.setattr(settings_module.dotenv, "load_dotenv", lambda: None)
    monkeypatch.setattr(settings_module, "get_app_logger", MagicMock)
    for name in (
        "LEDGER_BACKEND",
        "LEDGER_STATE_DIR",
        "LEDGER_SELECTED_CURRENCIES",
        "DPS_REJECT_ON_DRIFT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_from_env_defaults(monkeypatch, tmp_path: Path) -> None:
    """Without variables the SQL backend and project state dir are used."""
    _isolate(monkeypatch)
    monkeypatch.setattr(settings_module, "get_project_root", lambda: tmp_path)

    settings = LedgerSettings.from_env()

    assert settings.backend == "sqlalchemy"
    assert settings.state_dir == tmp_path / "state"
    assert settings.selected_currencies == ()
    assert settings.reject_on_drift is False


def test_from_env_reads_variables(monkeypatch, tmp_path: Path) -> None:
    _isolate(monkeypatch)
    monkeypatch.setenv("LEDGER_BACKEND", " Memory ")
    monkeypatch.setenv("LEDGER_STATE_DIR", str(tmp_path))
    monkeypatch.setenv("LEDGER_SELECTED_CURRENCIES", "usd, EUR,,usd")
    monkeypatch.setenv("DPS_REJECT_ON_DRIFT", "true")

    settings = LedgerSettings.from_env()

    assert settings.backend == "memory"
    assert settings.state_dir == tmp_path.resolve()
    assert settings.selected_currencies == ("USD", "EUR")
    assert settings.reject_on_drift is True


def test_unknown_backend_falls_back(monkeypatch) -> None:
    _isolate(monkeypatch)
    monkeypatch.setenv("LEDGER_BACKEND", "mongo")

    assert LedgerSettings.from_env().backend == "sqlalchemy"


def test_build_ledger_store_memory_is_shared(monkeypatch) -> None:
    monkeypatch.setattr(container, "_memory_store", None)
    settings = LedgerSettings(backend="memory")

    first = container.build_ledger_store(settings)
    second = container.build_ledger_store(settings)

    assert isinstance(first, InMemoryLedgerStore)
    assert first is second


def test_build_ledger_store_sqlalchemy_ensures_schema(monkeypatch) -> None:
    ensured = []
    monkeypatch.setattr(container, "get_app_logger", MagicMock)
    monkeypatch.setattr(
        SqlAlchemyLedgerStore,
        "ensure_schema",
        lambda self: ensured.append(self),
    )

    store = container.build_ledger_store(
        LedgerSettings(backend="sqlalchemy"),
        db_port=MagicMock(),
    )

    assert isinstance(store, SqlAlchemyLedgerStore)
    assert ensured == [store]


def test_build_dps_manager_reads_drift_setting(monkeypatch) -> None:
    monkeypatch.setattr(container, "get_app_logger", MagicMock)
    monkeypatch.setattr(container, "get_usage_logger", MagicMock)

    manager = container.build_dps_manager(
        InMemoryLedgerStore(),
        LedgerSettings(backend="memory", reject_on_drift=True),
    )

    assert manager._reject_on_drift is True
