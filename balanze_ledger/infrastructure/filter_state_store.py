"""JSON-file persistence for per-view filter state."""

import json
from pathlib import Path
import re

from balanze_ledger.application.ports.filter_state_store import (
    FilterStateStorePort,
)
from balanze_ledger.domain.constants import FILTER_STATE_VERSION
from balanze_ledger.domain.models import FilterState
from balanze_ledger.infrastructure.logging.logger import get_app_logger


_VIEW_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class JsonFilterStateStore(FilterStateStorePort):
    """Store each view's filters as ``<state_dir>/<view>.json``.

    Unreadable files, unknown versions and malformed fields fall back to
    defaults; filter state is never authoritative.
    """

    def __init__(self, state_dir: Path, logger=None) -> None:
        self._state_dir = Path(state_dir)
        self._logger = logger or get_app_logger()

    def load(self, view: str) -> FilterState:
        path = self._path_for(view)
        if not path.exists():
            return FilterState()
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self._logger.warning(
                f"Ignoring unreadable filter state {path}: {exc}"
            )
            return FilterState()
        if not isinstance(payload, dict):
            return FilterState()
        if payload.get("version") != FILTER_STATE_VERSION:
            self._logger.warning(
                f"Ignoring filter state {path} with version "
                f"{payload.get('version')!r}"
            )
            return FilterState()
        return FilterState.from_dict(payload.get("filters"))

    def save(self, view: str, state: FilterState) -> None:
        path = self._path_for(view)
        path.parent.mkdir(parents=True, exist_ok=True)
        filters = state.to_dict()
        filters.pop("version", None)
        payload = {"version": FILTER_STATE_VERSION, "filters": filters}
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def _path_for(self, view: str) -> Path:
        if not _VIEW_NAME_PATTERN.match(view):
            raise ValueError(f"Invalid view name: {view!r}")
        return self._state_dir / f"{view}.json"


__all__ = ["JsonFilterStateStore"]
