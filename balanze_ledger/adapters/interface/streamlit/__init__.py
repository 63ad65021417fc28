"""Streamlit accounts page."""

__all__ = []
