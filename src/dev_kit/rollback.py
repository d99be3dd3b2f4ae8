"""Rollback point tracking.

A rollback point captures the state of a target path just before it is
mutated: a populated backup when the target existed, or an empty marker
when it did not. Rolling back a populated point restores the backup;
rolling back a marker deletes the target.
"""

from __future__ import annotations

import logging
import tempfile
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

from dev_kit.errors import DevKitError, RollbackError
from dev_kit.filesystem import FileOperations
from dev_kit.protocols import FileSystem

BACKUP_NAMESPACE = "dev-kit-rollbacks"


def default_backup_root() -> Path:
    """Get the default backup directory under the system temp dir."""
    return Path(tempfile.gettempdir()) / BACKUP_NAMESPACE


@dataclass
class RollbackState:
    """State of a single rollback point.

    Attributes:
        id: Rollback identifier.
        timestamp: Creation time (seconds since epoch).
        original_path: Path that was captured.
        backup_path: Backup copy, or empty marker directory.
        target_existed: False if backup_path is an absence marker.
        completed: True once the rollback has been executed.
    """

    id: str
    timestamp: float
    original_path: Path
    backup_path: Path
    target_existed: bool
    completed: bool = False


class RollbackManager:
    """Creates, executes and cleans up rollback points.

    State is held in memory for the lifetime of the manager.
    """

    def __init__(
        self,
        filesystem: FileSystem | None = None,
        backup_root: Path | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the rollback manager.

        Args:
            filesystem: File operations implementation.
            backup_root: Directory for backups. Defaults to
                <tempdir>/dev-kit-rollbacks.
            logger: Logger to report to.
        """
        self.fs = filesystem or FileOperations()
        self.backup_root = backup_root or default_backup_root()
        self.logger = logger or logging.getLogger(__name__)
        self._states: dict[str, RollbackState] = {}

    def create_rollback_point(
        self, target_path: Path, backup_root: Path | None = None
    ) -> RollbackState:
        """Capture the current state of target_path.

        Args:
            target_path: Path about to be mutated.
            backup_root: Override the backup directory for this point.

        Returns:
            The tracked RollbackState.
        """
        target_path = Path(target_path)
        root = Path(backup_root) if backup_root is not None else self.backup_root
        rollback_id = f"rollback-{time.time_ns()}-{uuid.uuid4().hex[:8]}"
        self.logger.debug("Creating rollback point: %s", rollback_id)

        target_existed = self.fs.path_exists(target_path)
        if target_existed:
            backup_path = self.fs.backup_directory(target_path, root)
        else:
            backup_path = root / rollback_id
            backup_path.mkdir(parents=True, exist_ok=True)

        state = RollbackState(
            id=rollback_id,
            timestamp=time.time(),
            original_path=target_path,
            backup_path=backup_path,
            target_existed=target_existed,
        )
        self._states[rollback_id] = state

        self.logger.info("Created rollback point: %s", rollback_id)
        return state

    def rollback(self, rollback_id: str, cleanup: bool = True) -> None:
        """Execute a rollback.

        Args:
            rollback_id: Rollback point to execute.
            cleanup: Delete the backup afterwards.

        Raises:
            RollbackError: If the rollback point is unknown.
        """
        self.logger.info("Executing rollback: %s", rollback_id)

        state = self._states.get(rollback_id)
        if state is None:
            raise RollbackError(f"Rollback not found: {rollback_id}")

        if state.completed:
            self.logger.warning("Rollback already completed: %s", rollback_id)
            return

        try:
            if not state.target_existed:
                self.fs.remove_directory(state.original_path)
            elif self.fs.path_exists(state.backup_path):
                self.fs.restore_backup(state.backup_path, state.original_path)
            else:
                self.logger.warning("Backup not found: %s", state.backup_path)
        except (OSError, DevKitError):
            self.logger.exception("Rollback failed: %s", rollback_id)
            raise

        state.completed = True

        if cleanup:
            self.cleanup(rollback_id)

        self.logger.info("Rollback completed: %s", rollback_id)

    def cleanup(self, rollback_id: str) -> None:
        """Delete a rollback point's backup and forget it.

        Best-effort: failures are logged, never raised.
        """
        state = self._states.get(rollback_id)
        if state is None:
            self.logger.warning("Rollback not found: %s", rollback_id)
            return

        self.logger.debug("Cleaning up rollback: %s", rollback_id)
        try:
            self.fs.remove_directory(state.backup_path)
        except (OSError, DevKitError) as e:
            self.logger.warning("Cleanup failed for %s: %s", rollback_id, e)
            return

        del self._states[rollback_id]
        self.logger.debug("Cleaned up rollback: %s", rollback_id)

    def cleanup_all(self) -> None:
        """Clean up every tracked rollback point."""
        rollback_ids = list(self._states)
        if not rollback_ids:
            return

        self.logger.info("Cleaning up %d rollbacks...", len(rollback_ids))
        for rollback_id in rollback_ids:
            self.cleanup(rollback_id)

    def get_state(self, rollback_id: str) -> RollbackState | None:
        return self._states.get(rollback_id)

    def all_states(self) -> list[RollbackState]:
        return list(self._states.values())

    def mark_complete(self, rollback_id: str) -> None:
        """Mark a rollback point as completed without executing it."""
        state = self._states.get(rollback_id)
        if state is not None:
            state.completed = True
            self.logger.debug("Marked rollback as complete: %s", rollback_id)
