"""Settings helpers for infrastructure adapters."""

from dataclasses import dataclass
import os
from pathlib import Path

import dotenv

from balanze_ledger.infrastructure.logging.logger import get_app_logger
from balanze_ledger.utils.utils import get_project_root


_BACKENDS = ("sqlalchemy", "memory")
_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class LedgerSettings:
    """Settings for the ledger backend and presentation defaults.

    Attributes:
        backend: Store identifier (sqlalchemy or memory).
        state_dir: Directory holding persisted filter state.
        selected_currencies: Currencies enabled for display; empty for all.
        reject_on_drift: Abort DPS deletions when the balance moved since
            the confirmation dialog opened.
    """

    backend: str = "sqlalchemy"
    state_dir: Path | None = None
    selected_currencies: tuple[str, ...] = ()
    reject_on_drift: bool = False

    @classmethod
    def from_env(cls) -> "LedgerSettings":
        """Build settings from environment variables.

        Returns:
            LedgerSettings: Settings sourced from environment variables.
        """
        dotenv.load_dotenv()
        logger = get_app_logger()
        backend = os.getenv("LEDGER_BACKEND", "sqlalchemy").strip().lower()
        if backend not in _BACKENDS:
            logger.warning(
                f"Unknown LEDGER_BACKEND {backend!r}; using sqlalchemy"
            )
            backend = "sqlalchemy"
        raw_state_dir = os.getenv("LEDGER_STATE_DIR")
        if raw_state_dir:
            state_dir = Path(raw_state_dir).expanduser().resolve()
        else:
            state_dir = get_project_root() / "state"
        return cls(
            backend=backend,
            state_dir=state_dir,
            selected_currencies=cls._parse_currencies(
                os.getenv("LEDGER_SELECTED_CURRENCIES", "")
            ),
            reject_on_drift=cls._parse_bool(
                os.getenv("DPS_REJECT_ON_DRIFT", "")
            ),
        )

    @staticmethod
    def _parse_currencies(raw: str) -> tuple[str, ...]:
        """Split a comma list into unique upper-case codes, keeping order."""
        codes: list[str] = []
        for part in raw.split(","):
            code = part.strip().upper()
            if code and code not in codes:
                codes.append(code)
        return tuple(codes)

    @staticmethod
    def _parse_bool(raw: str) -> bool:
        return raw.strip().lower() in _TRUE_VALUES


__all__ = ["LedgerSettings"]
