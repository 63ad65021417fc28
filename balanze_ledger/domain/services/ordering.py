"""Manual account ordering through adjacent position swaps."""

from collections.abc import Sequence

from balanze_ledger.domain.errors import LedgerValidationError
from balanze_ledger.domain.models import Account, PositionSwap


UP = "up"
DOWN = "down"


def plan_move(
    displayed: Sequence[Account],
    account_id: str,
    direction: str,
) -> PositionSwap | None:
    """Plan the swap moving an account one row up or down.

    Args:
        displayed: Accounts in the order currently shown.
        account_id: Account to move.
        direction: ``up`` or ``down``.

    Returns:
        PositionSwap | None: The swap, or None when the account is at the
        boundary or not displayed.
    """
    if direction not in (UP, DOWN):
        raise LedgerValidationError(f"Unknown move direction: {direction!r}")
    index = _index_of(displayed, account_id)
    if index is None:
        return None
    target = index - 1 if direction == UP else index + 1
    if target < 0 or target >= len(displayed):
        return None
    account = displayed[index]
    neighbour = displayed[target]
    return PositionSwap(
        account_id=account.id,
        account_position=account.sort_position,
        neighbour_id=neighbour.id,
        neighbour_position=neighbour.sort_position,
    )


def needs_renumbering(swap: PositionSwap) -> bool:
    """True when the swap would not change the displayed order."""
    return swap.account_position == swap.neighbour_position


def dense_positions(displayed: Sequence[Account]) -> dict[str, int]:
    """Return ``0..n-1`` positions for the displayed order."""
    return {account.id: index for index, account in enumerate(displayed)}


def changed_positions(
    displayed: Sequence[Account],
    positions: dict[str, int],
) -> dict[str, int]:
    """Keep only the positions that differ from the stored ones."""
    return {
        account.id: positions[account.id]
        for account in displayed
        if account.id in positions
        and account.position != positions[account.id]
    }


def _index_of(displayed: Sequence[Account], account_id: str) -> int | None:
    for index, account in enumerate(displayed):
        if account.id == account_id:
            return index
    return None


__all__ = [
    "UP",
    "DOWN",
    "plan_move",
    "needs_renumbering",
    "dense_positions",
    "changed_positions",
]
