"""Protocol definitions for core abstractions.

This module defines abstract interfaces (Protocols) for the core services.
Designing to interfaces enables:
- Loose coupling between components
- Easy substitution of test doubles
- Clear contracts for implementations

All concrete implementations satisfy these protocols structurally (duck typing).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from dev_kit.types import (
    InstallOptions,
    InstallResult,
    ProgressCallback,
    RollbackAction,
    SkillBundle,
    ValidationResult,
)


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for filesystem operations.

    Abstracts filesystem access so installers and agents can be tested with
    doubles that count or reject writes.
    """

    def copy_directory(
        self,
        source: Path,
        target: Path,
        *,
        overwrite: bool = False,
        preserve_permissions: bool = False,
        on_progress: ProgressCallback | None = None,
        exclude: Iterable[str] | None = None,
    ) -> int:
        """Recursively copy a directory.

        Returns:
            Number of regular files copied.
        """
        ...

    def write_skill_content(
        self,
        target_dir: Path,
        content: str,
        *,
        overwrite: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> bool:
        """Write SKILL.md into target_dir.

        Returns:
            True if written, False if an existing file was kept.
        """
        ...

    def count_files(self, directory: Path) -> int:
        """Count regular files recursively (0 if absent)."""
        ...

    def remove_directory(self, path: Path) -> None:
        """Remove a directory tree; absence is not an error."""
        ...

    def backup_directory(self, source: Path, backup_root: Path) -> Path:
        """Copy source into a uniquely named backup under backup_root.

        Returns:
            Path of the backup.
        """
        ...

    def restore_backup(self, backup_path: Path, target_path: Path) -> None:
        """Replace target_path with the contents of backup_path."""
        ...

    def path_exists(self, path: Path) -> bool:
        """Check if a path exists."""
        ...

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        ...

    def read_text(self, path: Path) -> str:
        """Read text content from a file.

        Raises:
            FileNotFoundError: If file does not exist.
        """
        ...

    def list_directories(self, path: Path) -> list[str]:
        """List immediate subdirectory names (empty if absent)."""
        ...


@runtime_checkable
class BundleValidator(Protocol):
    """Protocol for skill bundle validation."""

    def validate(
        self,
        skill: SkillBundle,
        *,
        check_conflicts: bool = False,
        target_dir: Path | None = None,
    ) -> ValidationResult:
        """Validate a skill bundle.

        Args:
            skill: Bundle to validate.
            check_conflicts: Check for an existing install of the same name.
            target_dir: Directory the skill would be installed into.

        Returns:
            ValidationResult with all errors and warnings.
        """
        ...

    def validate_skill_at_path(self, skill_path: Path) -> ValidationResult:
        """Validate an installed skill directory."""
        ...


@runtime_checkable
class BundleInstaller(Protocol):
    """Protocol for skill installation operations."""

    def install(
        self,
        skill: SkillBundle,
        target_dir: Path,
        options: InstallOptions | None = None,
    ) -> InstallResult:
        """Install one skill into target_dir.

        Returns:
            InstallResult; failures are reported as data, not raised.
        """
        ...

    def install_multiple(
        self,
        skills: Sequence[SkillBundle],
        target_dir: Path,
        options: InstallOptions | None = None,
    ) -> InstallResult:
        """Install skills all-or-nothing."""
        ...

    def rollback(self, action: RollbackAction) -> None:
        """Undo one installed skill."""
        ...
