"""Port for persisting per-view filter state between sessions."""

from typing import Protocol

from balanze_ledger.domain.models import FilterState


class FilterStateStorePort(Protocol):
    """Load and save the non-authoritative filter state of a view."""

    def load(self, view: str) -> FilterState:
        """Return the saved state, or defaults when nothing is stored."""

    def save(self, view: str, state: FilterState) -> None:
        """Persist the state of a view."""


__all__ = ["FilterStateStorePort"]
