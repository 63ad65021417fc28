"""Ensure interface adapter packages expose the expected metadata."""

from importlib import import_module


def test_adapters_package_exports_are_empty() -> None:
    module = import_module("balanze_ledger.adapters")
    assert module.__all__ == []


def test_interface_package_exports_are_empty() -> None:
    module = import_module("balanze_ledger.adapters.interface")
    assert module.__all__ == []


def test_streamlit_package_exports_are_empty() -> None:
    module = import_module("balanze_ledger.adapters.interface.streamlit")
    assert module.__all__ == []
