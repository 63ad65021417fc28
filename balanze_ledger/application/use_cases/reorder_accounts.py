"""Use case moving accounts up and down in the manual display order."""

import asyncio
from collections.abc import Mapping, Sequence

from balanze_ledger.application.ports.ledger_store import LedgerStorePort
from balanze_ledger.domain.models import Account, PositionSwap
from balanze_ledger.domain.services.ordering import (
    DOWN,
    UP,
    changed_positions,
    dense_positions,
    needs_renumbering,
    plan_move,
)
from balanze_ledger.infrastructure.logging.logger import get_app_logger


class ReorderAccountsUseCase:
    """Swap account positions with the adjacent displayed neighbour."""

    def __init__(self, store: LedgerStorePort, logger=None) -> None:
        """Initialize the use case.

        Args:
            store: Ledger store receiving the position updates.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._logger = logger or get_app_logger()

    async def move_up(
        self,
        account_id: str,
        displayed: Sequence[Account],
    ) -> PositionSwap | None:
        return await self._move(account_id, displayed, UP)

    async def move_down(
        self,
        account_id: str,
        displayed: Sequence[Account],
    ) -> PositionSwap | None:
        return await self._move(account_id, displayed, DOWN)

    async def normalize_positions(
        self,
        displayed: Sequence[Account],
    ) -> dict[str, int]:
        """Renumber the displayed accounts ``0..n-1`` in displayed order.

        Only rows whose stored position changes are written.

        Returns:
            dict[str, int]: Positions that were written, by account id.
        """
        changes = changed_positions(displayed, dense_positions(displayed))
        await self._write_positions(changes)
        if changes:
            self._logger.info(f"Renumbered {len(changes)} account positions")
        return changes

    async def _move(
        self,
        account_id: str,
        displayed: Sequence[Account],
        direction: str,
    ) -> PositionSwap | None:
        swap = plan_move(displayed, account_id, direction)
        if swap is None:
            return None
        if needs_renumbering(swap):
            await self.normalize_positions(displayed)
            positions = dense_positions(displayed)
            swap = PositionSwap(
                account_id=swap.account_id,
                account_position=positions[swap.account_id],
                neighbour_id=swap.neighbour_id,
                neighbour_position=positions[swap.neighbour_id],
            )
        await self._write_positions(swap.updates())
        self._logger.info(
            f"Moved account {account_id} {direction} "
            f"(swapped with {swap.neighbour_id})"
        )
        return swap

    async def _write_positions(self, positions: Mapping[str, int]) -> None:
        # Both writes settle before the first failure is re-raised.
        outcomes = await asyncio.gather(
            *(
                self._store.update_account(account_id, {"position": position})
                for account_id, position in positions.items()
            ),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                self._logger.error(f"Position update failed: {outcome}")
                raise outcome


__all__ = ["ReorderAccountsUseCase"]
