"""Tests for install module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from dev_kit.errors import PermissionDeniedError
from dev_kit.filesystem import FileOperations
from dev_kit.install import Installer
from dev_kit.rollback import RollbackManager
from dev_kit.types import (
    InstallError,
    InstallOptions,
    InstallResult,
    RollbackAction,
    RollbackKind,
    SkillBundle,
)


@pytest.fixture
def demo(sample_skill_content: str) -> SkillBundle:
    """Embedded demo skill."""
    return SkillBundle.from_content("demo", sample_skill_content)


def _bundle(name: str) -> SkillBundle:
    return SkillBundle.from_content(name, f"---\nname: {name}\ndescription: {name}\n---\n")


class TestSkillBundle:
    """Tests for SkillBundle immutability."""

    def test_bundle_is_hashable(self, demo: SkillBundle) -> None:
        """Frozen bundles can be used in sets."""
        assert hash(demo) == hash(SkillBundle.from_content("demo", demo.content or ""))
        assert len({demo, demo}) == 1

    def test_metadata_is_read_only(self, demo: SkillBundle) -> None:
        """Front-matter fields cannot be changed after construction."""
        assert demo.metadata["name"] == "demo"
        with pytest.raises(TypeError):
            demo.metadata["name"] = "other"  # type: ignore[index]


class TestInstallResult:
    """Tests for InstallResult dataclass."""

    def test_success_with_errors_raises(self) -> None:
        """success=True cannot carry errors."""
        with pytest.raises(ValueError, match="success=True but errors are set"):
            InstallResult(success=True, errors=[InstallError("x", "boom")])

    def test_failure_without_errors_raises(self) -> None:
        """success=False needs at least one error."""
        with pytest.raises(ValueError):
            InstallResult(success=False)

    def test_error_messages(self) -> None:
        """Errors are formatted as skill: message."""
        result = InstallResult(success=False, errors=[InstallError("x", "boom")])
        assert result.error_messages == ["x: boom"]


class TestRollbackAction:
    """Tests for RollbackAction invariants."""

    def test_restore_requires_rollback_id(self, tmp_path: Path) -> None:
        """RESTORE_FROM without a rollback point is rejected."""
        with pytest.raises(ValueError):
            RollbackAction(RollbackKind.RESTORE_FROM, "x", tmp_path)

    def test_remove_requires_target(self) -> None:
        """REMOVE_TARGET without a path is rejected."""
        with pytest.raises(ValueError):
            RollbackAction(RollbackKind.REMOVE_TARGET, "x")


class TestInstall:
    """Tests for Installer.install."""

    def test_install_embedded_skill(
        self, installer: Installer, demo: SkillBundle, target_dir: Path, sample_skill_content: str
    ) -> None:
        """A new skill is written and can be removed again."""
        result = installer.install(demo, target_dir)

        assert result.success
        assert result.installed_skills == ["demo"]
        assert (target_dir / "demo" / "SKILL.md").read_text() == sample_skill_content
        assert result.rollback_actions == [RollbackAction.remove_target("demo", target_dir / "demo")]

    def test_install_from_directory(
        self, installer: Installer, sample_skill_dir: Path, target_dir: Path
    ) -> None:
        """A directory bundle is copied with its supporting files."""
        result = installer.install(SkillBundle.from_directory(sample_skill_dir), target_dir)

        assert result.success
        assert (target_dir / "demo" / "scripts" / "run.sh").read_text() == "echo demo\n"

    def test_install_is_idempotent(
        self, installer: Installer, demo: SkillBundle, target_dir: Path
    ) -> None:
        """Installing twice skips the second time and leaves the tree unchanged."""
        installer.install(demo, target_dir)
        before = (target_dir / "demo" / "SKILL.md").read_text()

        result = installer.install(demo, target_dir)

        assert result.success
        assert result.installed_skills == []
        assert result.skipped_skills == ["demo"]
        assert (target_dir / "demo" / "SKILL.md").read_text() == before

    def test_overwrite_replaces_content(
        self, installer: Installer, target_dir: Path, sample_skill_content: str
    ) -> None:
        """With overwrite the new content wins and a backup is recorded."""
        installer.install(SkillBundle.from_content("demo", sample_skill_content), target_dir)
        updated = sample_skill_content.replace("Body", "Updated body")

        result = installer.install(
            SkillBundle.from_content("demo", updated), target_dir, InstallOptions(overwrite=True)
        )

        assert result.success
        assert result.installed_skills == ["demo"]
        assert (target_dir / "demo" / "SKILL.md").read_text() == updated
        assert result.rollback_actions[0].kind is RollbackKind.RESTORE_FROM

    def test_rollback_restores_previous_version(
        self, installer: Installer, target_dir: Path, sample_skill_content: str
    ) -> None:
        """Rolling back an overwrite restores the old content."""
        installer.install(SkillBundle.from_content("demo", sample_skill_content), target_dir)
        result = installer.install(
            SkillBundle.from_content("demo", sample_skill_content + "\nmore"),
            target_dir,
            InstallOptions(overwrite=True),
        )

        installer.rollback(result.rollback_actions[0])

        assert (target_dir / "demo" / "SKILL.md").read_text() == sample_skill_content

    def test_occupied_directory_is_left_untouched(
        self, installer: Installer, demo: SkillBundle, target_dir: Path
    ) -> None:
        """A non-skill directory with the same name blocks the install."""
        (target_dir / "demo").mkdir()

        result = installer.install(demo, target_dir)

        assert not result.success
        assert "not a valid skill" in result.errors[0].error
        assert list((target_dir / "demo").iterdir()) == []

    def test_invalid_skill_is_not_written(self, installer: Installer, target_dir: Path) -> None:
        """Validation errors stop the install before any write."""
        result = installer.install(SkillBundle.from_content("bad", "no frontmatter"), target_dir)

        assert not result.success
        assert not (target_dir / "bad").exists()

    def test_dry_run_writes_nothing(
        self, installer: Installer, demo: SkillBundle, target_dir: Path
    ) -> None:
        """A dry run reports success without touching the target."""
        result = installer.install(demo, target_dir, InstallOptions(dry_run=True))

        assert result.success
        assert result.installed_skills == ["demo"]
        assert result.rollback_actions[0].kind is RollbackKind.NONE
        assert not (target_dir / "demo").exists()

    def test_write_failure_removes_partial_install(
        self, installer: Installer, demo: SkillBundle, target_dir: Path
    ) -> None:
        """A failing write leaves no new directory behind."""
        installer.fs = MagicMock(wraps=installer.fs)

        def fail(target: Path, *args: object, **kwargs: object) -> bool:
            target.mkdir(parents=True)
            raise PermissionDeniedError(target / "SKILL.md", "write")

        installer.fs.write_skill_content.side_effect = fail

        result = installer.install(demo, target_dir)

        assert not result.success
        assert "Permission denied" in result.errors[0].error
        assert not (target_dir / "demo").exists()

    def test_failure_restores_backup(
        self, installer: Installer, target_dir: Path, sample_skill_content: str
    ) -> None:
        """A failing overwrite restores the previous install."""
        installer.install(SkillBundle.from_content("demo", sample_skill_content), target_dir)
        installer.fs = MagicMock(wraps=installer.fs)

        def fail(target: Path, *args: object, **kwargs: object) -> bool:
            (target / "SKILL.md").write_text("half written")
            raise OSError("disk full")

        installer.fs.write_skill_content.side_effect = fail

        result = installer.install(
            SkillBundle.from_content("demo", sample_skill_content + "v2"),
            target_dir,
            InstallOptions(overwrite=True),
        )

        assert not result.success
        assert (target_dir / "demo" / "SKILL.md").read_text() == sample_skill_content

    def test_verification_failure(
        self, installer: Installer, demo: SkillBundle, target_dir: Path
    ) -> None:
        """A post-install verification failure is rolled back."""
        installer.fs = MagicMock(wraps=installer.fs)
        installer.fs.write_skill_content.side_effect = lambda target, *a, **k: target.mkdir()

        result = installer.install(demo, target_dir)

        assert not result.success
        assert "Installation verification failed" in result.errors[0].error
        assert not (target_dir / "demo").exists()

    def test_encode_failure_removes_partial_install(
        self, installer: Installer, target_dir: Path
    ) -> None:
        """Content that cannot be encoded fails without leaving a directory."""
        skill = SkillBundle.from_content("demo", "---\nname: demo\n---\nbad \ud800")

        result = installer.install(skill, target_dir)

        assert not result.success
        assert "encode" in result.errors[0].error
        assert not (target_dir / "demo").exists()

    def test_progress_callback_failure_is_reported(
        self, installer: Installer, demo: SkillBundle, target_dir: Path
    ) -> None:
        """An exception from on_progress is returned as an install error."""

        def on_progress(current: int, total: int, name: str) -> None:
            raise RuntimeError("progress sink closed")

        result = installer.install(demo, target_dir, InstallOptions(on_progress=on_progress))

        assert not result.success
        assert result.errors[0].error == "progress sink closed"
        assert not (target_dir / "demo").exists()

    def test_backup_cleanup_failure_keeps_original_error(
        self,
        installer: Installer,
        filesystem: FileOperations,
        backup_root: Path,
        target_dir: Path,
        sample_skill_content: str,
    ) -> None:
        """A backup that cannot be deleted does not hide the install error."""
        installer.install(SkillBundle.from_content("demo", sample_skill_content), target_dir)
        rollback_fs = MagicMock(wraps=filesystem)
        rollback_fs.remove_directory.side_effect = PermissionDeniedError(backup_root, "remove")
        installer.rollbacks = RollbackManager(rollback_fs, backup_root)
        installer.fs = MagicMock(wraps=filesystem)
        installer.fs.write_skill_content.side_effect = OSError("disk full")

        result = installer.install(
            SkillBundle.from_content("demo", sample_skill_content + "v2"),
            target_dir,
            InstallOptions(overwrite=True),
        )

        assert not result.success
        assert result.errors[0].error == "disk full"
        assert (target_dir / "demo" / "SKILL.md").read_text() == sample_skill_content

    def test_unvalidated_existing_skill_is_skipped(
        self, installer: Installer, target_dir: Path, sample_skill_content: str
    ) -> None:
        """Without validation an existing SKILL.md is kept and reported as skipped."""
        (target_dir / "demo").mkdir()
        (target_dir / "demo" / "SKILL.md").write_text("---\nname: demo\n---\nlocal")

        result = installer.install(
            SkillBundle.from_content("demo", sample_skill_content),
            target_dir,
            InstallOptions(skip_validation=True),
        )

        assert result.success
        assert result.installed_skills == []
        assert result.skipped_skills == ["demo"]
        assert result.rollback_actions[0].kind is RollbackKind.NONE
        assert (target_dir / "demo" / "SKILL.md").read_text() == "---\nname: demo\n---\nlocal"


class TestInstallMultiple:
    """Tests for Installer.install_multiple."""

    def test_installs_all(self, installer: Installer, target_dir: Path) -> None:
        """Every skill is installed in order."""
        result = installer.install_multiple([_bundle("a"), _bundle("b")], target_dir)

        assert result.success
        assert result.installed_skills == ["a", "b"]
        assert [a.kind for a in result.rollback_actions] == [RollbackKind.REMOVE_TARGET] * 2

    def test_all_or_nothing(self, installer: Installer, target_dir: Path) -> None:
        """A failure rolls back every skill installed by the batch."""
        (target_dir / "c").mkdir()

        result = installer.install_multiple(
            [_bundle("a"), _bundle("b"), _bundle("c")], target_dir
        )

        assert not result.success
        assert result.installed_skills == []
        assert result.errors[0].skill == "c"
        assert sorted(p.name for p in target_dir.iterdir()) == ["c"]

    def test_batch_restores_overwritten_skill(
        self, installer: Installer, target_dir: Path
    ) -> None:
        """An overwritten skill is restored when a later skill fails."""
        installer.install(_bundle("a"), target_dir)
        original = (target_dir / "a" / "SKILL.md").read_text()
        (target_dir / "b").mkdir()
        (target_dir / "b" / "keep.txt").write_text("x")
        changed = SkillBundle.from_content("a", "---\nname: a\ndescription: v2\n---\n")
        broken = SkillBundle.from_content("b", "no frontmatter")

        result = installer.install_multiple(
            [changed, broken], target_dir, InstallOptions(overwrite=True)
        )

        assert not result.success
        assert (target_dir / "a" / "SKILL.md").read_text() == original
        assert (target_dir / "b" / "keep.txt").read_text() == "x"

    def test_rollback_result(self, installer: Installer, target_dir: Path) -> None:
        """A successful batch can be undone as a whole."""
        result = installer.install_multiple([_bundle("a"), _bundle("b")], target_dir)
        installer.rollback_result(result)
        assert list(target_dir.iterdir()) == []


class TestInstallerRollback:
    """Tests for Installer.rollback."""

    def test_none_does_nothing(self, installer: Installer) -> None:
        """NONE touches nothing."""
        installer.fs = MagicMock()
        installer.rollback(RollbackAction.none("x"))
        installer.fs.remove_directory.assert_not_called()

    def test_unknown_rollback_point_raises(
        self, installer: Installer, target_dir: Path
    ) -> None:
        """A stale restore action surfaces as SkillInstallationError."""
        from dev_kit.errors import SkillInstallationError

        action = RollbackAction.restore_from("x", target_dir / "x", target_dir, "rollback-gone")
        with pytest.raises(SkillInstallationError):
            installer.rollback(action)


def test_create_factory() -> None:
    """The factory wires default dependencies."""
    installer = Installer.create()
    assert isinstance(installer.rollbacks, RollbackManager)
    assert installer.validator is not None
