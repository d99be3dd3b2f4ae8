"""Tests for rollback module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from dev_kit.errors import PermissionDeniedError, RollbackError
from dev_kit.filesystem import FileOperations
from dev_kit.rollback import BACKUP_NAMESPACE, RollbackManager, default_backup_root


def test_default_backup_root() -> None:
    """Backups default to a namespaced temp directory."""
    assert default_backup_root().name == BACKUP_NAMESPACE


class TestCreateRollbackPoint:
    """Tests for create_rollback_point."""

    def test_existing_target_is_backed_up(
        self, rollbacks: RollbackManager, sample_skill_dir: Path, backup_root: Path
    ) -> None:
        """An existing target is copied into the backup root."""
        state = rollbacks.create_rollback_point(sample_skill_dir)

        assert state.target_existed
        assert state.backup_path.parent == backup_root
        assert (state.backup_path / "SKILL.md").read_text() == (
            sample_skill_dir / "SKILL.md"
        ).read_text()
        assert rollbacks.get_state(state.id) is state

    def test_missing_target_gets_marker(
        self, rollbacks: RollbackManager, tmp_path: Path, backup_root: Path
    ) -> None:
        """A missing target is recorded with an empty marker."""
        state = rollbacks.create_rollback_point(tmp_path / "new")

        assert not state.target_existed
        assert state.backup_path == backup_root / state.id
        assert state.backup_path.is_dir()

    def test_ids_are_unique(self, rollbacks: RollbackManager, tmp_path: Path) -> None:
        """Every rollback point has its own id."""
        ids = {rollbacks.create_rollback_point(tmp_path / "x").id for _ in range(5)}
        assert len(ids) == 5

    def test_backup_root_override(
        self, rollbacks: RollbackManager, sample_skill_dir: Path, tmp_path: Path
    ) -> None:
        """A per-call backup root takes precedence."""
        state = rollbacks.create_rollback_point(sample_skill_dir, tmp_path / "other")
        assert state.backup_path.parent == tmp_path / "other"


class TestRollback:
    """Tests for executing rollbacks."""

    def test_restores_modified_target(
        self, rollbacks: RollbackManager, sample_skill_dir: Path
    ) -> None:
        """The target is restored to its captured content."""
        original = (sample_skill_dir / "SKILL.md").read_text()
        state = rollbacks.create_rollback_point(sample_skill_dir)

        (sample_skill_dir / "SKILL.md").write_text("changed")
        (sample_skill_dir / "added.txt").write_text("added")
        rollbacks.rollback(state.id)

        assert (sample_skill_dir / "SKILL.md").read_text() == original
        assert not (sample_skill_dir / "added.txt").exists()
        assert (sample_skill_dir / "scripts" / "run.sh").exists()

    def test_empty_directory_round_trip(self, rollbacks: RollbackManager, tmp_path: Path) -> None:
        """An originally empty directory comes back empty, not deleted."""
        target = tmp_path / "empty"
        target.mkdir()
        state = rollbacks.create_rollback_point(target)

        (target / "SKILL.md").write_text("x")
        rollbacks.rollback(state.id)

        assert target.is_dir()
        assert list(target.iterdir()) == []

    def test_missing_target_is_removed(self, rollbacks: RollbackManager, tmp_path: Path) -> None:
        """A target that did not exist is deleted."""
        target = tmp_path / "new"
        state = rollbacks.create_rollback_point(target)

        target.mkdir()
        (target / "SKILL.md").write_text("x")
        rollbacks.rollback(state.id)

        assert not target.exists()

    def test_cleanup_after_rollback(
        self, rollbacks: RollbackManager, sample_skill_dir: Path
    ) -> None:
        """The backup is deleted and the point forgotten."""
        state = rollbacks.create_rollback_point(sample_skill_dir)
        rollbacks.rollback(state.id)

        assert not state.backup_path.exists()
        assert rollbacks.get_state(state.id) is None

    def test_keep_backup(self, rollbacks: RollbackManager, sample_skill_dir: Path) -> None:
        """cleanup=False keeps the backup and marks the point completed."""
        state = rollbacks.create_rollback_point(sample_skill_dir)
        rollbacks.rollback(state.id, cleanup=False)

        assert state.backup_path.exists()
        assert state.completed

    def test_completed_rollback_is_not_repeated(
        self, rollbacks: RollbackManager, sample_skill_dir: Path
    ) -> None:
        """A completed point is skipped."""
        state = rollbacks.create_rollback_point(sample_skill_dir)
        rollbacks.mark_complete(state.id)

        (sample_skill_dir / "SKILL.md").write_text("changed")
        rollbacks.rollback(state.id)

        assert (sample_skill_dir / "SKILL.md").read_text() == "changed"

    def test_cleanup_failure_keeps_restore(
        self, filesystem: FileOperations, backup_root: Path, sample_skill_dir: Path
    ) -> None:
        """A backup that cannot be deleted still leaves the rollback completed."""
        fs = MagicMock(wraps=filesystem)
        fs.remove_directory.side_effect = PermissionDeniedError(backup_root, "remove")
        rollbacks = RollbackManager(fs, backup_root)
        original = (sample_skill_dir / "SKILL.md").read_text()
        state = rollbacks.create_rollback_point(sample_skill_dir)

        (sample_skill_dir / "SKILL.md").write_text("changed")
        rollbacks.rollback(state.id)

        assert state.completed
        assert (sample_skill_dir / "SKILL.md").read_text() == original
        assert state.backup_path.exists()
        assert rollbacks.get_state(state.id) is state

    def test_unknown_id_raises(self, rollbacks: RollbackManager) -> None:
        """An unknown id is an error."""
        with pytest.raises(RollbackError, match="Rollback not found"):
            rollbacks.rollback("rollback-missing")


class TestCleanup:
    """Tests for cleanup and cleanup_all."""

    def test_cleanup_all(self, rollbacks: RollbackManager, sample_skill_dir: Path) -> None:
        """All backups are removed."""
        states = [rollbacks.create_rollback_point(sample_skill_dir) for _ in range(3)]
        rollbacks.cleanup_all()

        assert rollbacks.all_states() == []
        assert not any(s.backup_path.exists() for s in states)

    def test_cleanup_unknown_is_noop(self, rollbacks: RollbackManager) -> None:
        """Cleaning up an unknown id does nothing."""
        rollbacks.cleanup("rollback-missing")
