"""Domain policies package."""

from .dps_links import (
    dps_savings_account_ids,
    dps_state,
    ensure_linked,
    find_link_violations,
    is_dps_savings_account,
)

__all__ = [
    "dps_savings_account_ids",
    "dps_state",
    "ensure_linked",
    "find_link_violations",
    "is_dps_savings_account",
]
