"""Policies over DPS parent / savings-account links."""

from collections.abc import Iterable
from logging import Logger

from balanze_ledger.domain.errors import DPSLinkError
from balanze_ledger.domain.models import Account, DPSState


def dps_savings_account_ids(accounts: Iterable[Account]) -> frozenset[str]:
    """Return the ids referenced as a DPS savings account by any account."""
    return frozenset(
        account.dps_savings_account_id
        for account in accounts
        if account.dps_savings_account_id
    )


def is_dps_savings_account(
    account: Account,
    accounts: Iterable[Account],
) -> bool:
    """Return True when another account links to ``account``."""
    return any(
        other.dps_savings_account_id == account.id
        for other in accounts
        if other.id != account.id
    )


def dps_state(account: Account) -> DPSState:
    """Steady-state DPS lifecycle state derived from the record."""
    if account.has_dps and account.dps_savings_account_id:
        return DPSState.DPS_ENABLED
    return DPSState.NO_DPS


def ensure_linked(parent: Account, dps_account: Account) -> None:
    """Raise unless ``dps_account`` is the savings account of ``parent``."""
    if parent.id == dps_account.id:
        raise DPSLinkError("An account cannot be its own DPS savings account")
    if parent.dps_savings_account_id != dps_account.id:
        raise DPSLinkError(
            f"Account {dps_account.id} is not the DPS savings account "
            f"of {parent.id}"
        )


def find_link_violations(
    accounts: Iterable[Account],
    logger: Logger,
) -> list[str]:
    """Report self-links and savings accounts shared by several parents.

    Violations are logged as integrity warnings and returned as messages.
    """
    parents_by_target: dict[str, list[str]] = {}
    messages = []
    for account in accounts:
        target = account.dps_savings_account_id
        if not target:
            continue
        if target == account.id:
            messages.append(f"Account {account.id} links to itself as DPS")
            continue
        parents_by_target.setdefault(target, []).append(account.id)
    for target in sorted(parents_by_target):
        parents = parents_by_target[target]
        if len(parents) > 1:
            messages.append(
                f"DPS savings account {target} is shared by "
                f"{', '.join(sorted(parents))}"
            )
    for message in messages:
        logger.warning(message)
    return messages


__all__ = [
    "dps_savings_account_ids",
    "is_dps_savings_account",
    "dps_state",
    "ensure_linked",
    "find_link_violations",
]
