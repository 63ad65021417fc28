"""Presentation and CLI adapters."""

__all__ = []
