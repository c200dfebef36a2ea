"""Timestamp tracking for maintaining synchronization state."""

import json
from datetime import datetime
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import ValidationError

from vss_reconcile.models.history import SyncState

log = structlog.stdlib.get_logger()


class BuildHistoryProvider(Protocol):
    """Source of the previous successful synchronization point."""

    def last_sync_time(self, repository: str) -> datetime | None: ...

    def record_sync(self, sync_state: SyncState) -> None: ...


class TimestampTracker:
    """Manages sync state timestamps in a JSON state file.

    The file maps repository locations to their SyncState so one state file
    can serve several tracked repositories.
    """

    def __init__(self, state_file: str | Path):
        """
        Initialize timestamp tracker.

        Args:
            state_file: Path of the JSON file holding sync states
        """
        self._state_file = Path(state_file)
        log.info("timestamp_tracker_initialized", state_file=str(self._state_file))

    def save_sync_state(self, sync_state: SyncState) -> None:
        """
        Save synchronization state, replacing any previous state of the repository.

        Args:
            sync_state: Sync state to save

        Raises:
            RuntimeError: If the state file cannot be written
        """
        log.info(
            "saving_sync_state",
            repository=sync_state.repository,
            last_sync_timestamp=sync_state.last_sync_timestamp,
            record_count=sync_state.record_count,
        )

        states = self._read_states()
        states[sync_state.repository] = sync_state

        try:
            self._state_file.parent.mkdir(parents=True, exist_ok=True)
            payload = {key: state.model_dump(mode="json") for key, state in states.items()}
            tmp_file = self._state_file.with_suffix(self._state_file.suffix + ".tmp")
            tmp_file.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
            tmp_file.replace(self._state_file)
        except OSError as e:
            log.error(
                "failed_to_save_sync_state",
                repository=sync_state.repository,
                error=str(e),
            )
            raise RuntimeError(f"Failed to save sync state: {e}") from e

        log.info("sync_state_saved", repository=sync_state.repository)

    def load_sync_state(self, repository: str) -> SyncState | None:
        """
        Load synchronization state for a repository.

        Args:
            repository: Repository location

        Returns:
            SyncState if found, None otherwise

        Raises:
            RuntimeError: If the state file exists but cannot be read
        """
        log.info("loading_sync_state", repository=repository)

        sync_state = self._read_states().get(repository)
        if sync_state is None:
            log.info("no_sync_state_found", repository=repository)
            return None

        log.info(
            "sync_state_loaded",
            repository=repository,
            last_sync_timestamp=sync_state.last_sync_timestamp,
        )
        return sync_state

    def last_sync_time(self, repository: str) -> datetime | None:
        """Timestamp of the last successful synchronization, or None."""
        sync_state = self.load_sync_state(repository)
        return sync_state.last_sync_timestamp if sync_state else None

    def record_sync(self, sync_state: SyncState) -> None:
        self.save_sync_state(sync_state)

    def _read_states(self) -> dict[str, SyncState]:
        if not self._state_file.exists():
            return {}

        try:
            raw = self._state_file.read_text(encoding="utf-8")
            data = json.loads(raw)
            return {key: SyncState.model_validate(value) for key, value in data.items()}
        except (OSError, ValueError, AttributeError, ValidationError) as e:
            log.error("failed_to_load_sync_state", state_file=str(self._state_file), error=str(e))
            raise RuntimeError(f"Failed to load sync state: {e}") from e
