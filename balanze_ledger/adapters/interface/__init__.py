"""User interface adapters."""

__all__ = []
