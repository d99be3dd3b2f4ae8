"""Filesystem operations for skill installation.

FileOperations wraps standard library Path, os and shutil operations with
the copy/overwrite/backup semantics the installer relies on, and translates
OS errors into dev-kit errors. Satisfies the FileSystem protocol structurally.
"""

from __future__ import annotations

import logging
import os
import shutil
import time
from collections.abc import Iterable
from pathlib import Path

from dev_kit.errors import PathNotFoundError, PermissionDeniedError
from dev_kit.types import SKILL_FILE, ProgressCallback

# rw-r--r--
DEFAULT_FILE_MODE = 0o644
# rwxr-xr-x
DEFAULT_DIR_MODE = 0o755


class FileOperations:
    """Production filesystem implementation."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize file operations.

        Args:
            logger: Logger to report to. Defaults to this module's logger.
        """
        self.logger = logger or logging.getLogger(__name__)

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

        Existing target files are skipped unless overwrite is set. Symlinks
        and special files are never copied. Excluded names are matched
        exactly against entry names and skip the whole subtree.

        Args:
            source: Source directory.
            target: Target directory (created if missing).
            overwrite: Replace existing target files.
            preserve_permissions: Keep source file modes instead of 0o644.
            on_progress: Called as (current, total, file_name) per copied file.
            exclude: Entry names to skip.

        Returns:
            Number of regular files copied.

        Raises:
            PathNotFoundError: If source does not exist.
            PermissionDeniedError: If a write is rejected.
        """
        source = Path(source)
        target = Path(target)
        self.logger.debug("Copying directory: %s -> %s", source, target)

        if not source.is_dir():
            raise PathNotFoundError(source)

        excluded = frozenset(exclude or ())
        total = self.count_files(source)
        copied = self._copy_tree(
            source,
            target,
            overwrite=overwrite,
            preserve_permissions=preserve_permissions,
            on_progress=on_progress,
            excluded=excluded,
            total=total,
            copied=0,
        )

        self.logger.debug("Copied %d files from %s to %s", copied, source, target)
        return copied

    def _copy_tree(
        self,
        source: Path,
        target: Path,
        *,
        overwrite: bool,
        preserve_permissions: bool,
        on_progress: ProgressCallback | None,
        excluded: frozenset[str],
        total: int,
        copied: int,
    ) -> int:
        self._make_dir(target)

        with os.scandir(source) as entries:
            ordered = sorted(entries, key=lambda e: e.name)

        for entry in ordered:
            if entry.name in excluded:
                self.logger.debug("Skipping excluded entry: %s", entry.name)
                continue

            src_path = Path(entry.path)
            tgt_path = target / entry.name

            if entry.is_symlink():
                self.logger.warning("Skipping symbolic link: %s", src_path)
            elif entry.is_dir(follow_symlinks=False):
                copied = self._copy_tree(
                    src_path,
                    tgt_path,
                    overwrite=overwrite,
                    preserve_permissions=preserve_permissions,
                    on_progress=on_progress,
                    excluded=excluded,
                    total=total,
                    copied=copied,
                )
            elif entry.is_file(follow_symlinks=False):
                if self.copy_file(
                    src_path,
                    tgt_path,
                    overwrite=overwrite,
                    preserve_permissions=preserve_permissions,
                ):
                    copied += 1
                    if on_progress is not None:
                        on_progress(copied, total, entry.name)
            else:
                self.logger.warning("Skipping special file: %s", src_path)

        return copied

    def copy_file(
        self,
        source: Path,
        target: Path,
        *,
        overwrite: bool = False,
        preserve_permissions: bool = False,
    ) -> bool:
        """Copy a single file.

        Args:
            source: Source file.
            target: Target file.
            overwrite: Replace the target if it exists.
            preserve_permissions: Keep the source mode instead of 0o644.

        Returns:
            True if the file was copied, False if an existing target was kept.
        """
        if self.path_exists(target) and not overwrite:
            self.logger.debug("File exists, skipping: %s", target)
            return False

        try:
            if self.path_exists(target):
                self._remove(target)
            if preserve_permissions:
                shutil.copy2(source, target)
            else:
                shutil.copyfile(source, target)
                os.chmod(target, DEFAULT_FILE_MODE)
        except PermissionError as e:
            raise PermissionDeniedError(target, "write", e) from e

        self.logger.debug("Copied file: %s", source.name)
        return True

    def write_skill_content(
        self,
        target_dir: Path,
        content: str,
        *,
        overwrite: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> bool:
        """Write embedded skill content to <target_dir>/SKILL.md.

        Args:
            target_dir: Skill directory (created if missing).
            content: SKILL.md text.
            overwrite: Replace an existing SKILL.md.
            on_progress: Called once as (1, 1, "SKILL.md") after writing.

        Returns:
            True if the file was written, False if an existing one was kept.
        """
        target_dir = Path(target_dir)
        self._make_dir(target_dir)
        skill_file = target_dir / SKILL_FILE

        if self.path_exists(skill_file) and not overwrite:
            self.logger.debug("SKILL.md exists, skipping: %s", skill_file)
            return False

        try:
            if self.path_exists(skill_file):
                self._remove(skill_file)
            skill_file.write_text(content, encoding="utf-8")
            os.chmod(skill_file, DEFAULT_FILE_MODE)
        except PermissionError as e:
            raise PermissionDeniedError(skill_file, "write", e) from e

        self.logger.debug("Wrote SKILL.md to: %s", target_dir)
        if on_progress is not None:
            on_progress(1, 1, SKILL_FILE)
        return True

    def count_files(self, directory: Path) -> int:
        """Count regular files in a directory recursively.

        Returns:
            Number of files, 0 if the directory does not exist.
        """
        count = 0
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    if entry.is_dir(follow_symlinks=False):
                        count += self.count_files(Path(entry.path))
                    elif entry.is_file(follow_symlinks=False):
                        count += 1
        except (FileNotFoundError, NotADirectoryError):
            return 0
        return count

    def remove_directory(self, path: Path) -> None:
        """Remove a directory tree. A missing path is not an error."""
        path = Path(path)
        self.logger.debug("Removing directory: %s", path)
        try:
            self._remove(path)
        except FileNotFoundError:
            return
        except PermissionError as e:
            raise PermissionDeniedError(path, "remove", e) from e

    def backup_directory(self, source: Path, backup_root: Path) -> Path:
        """Copy a directory into a uniquely named backup.

        Args:
            source: Directory to back up.
            backup_root: Directory holding backups.

        Returns:
            Path of the backup (<backup_root>/<name>-<timestamp>).
        """
        source = Path(source)
        backup_root = Path(backup_root)
        self._make_dir(backup_root)

        backup_path = backup_root / f"{source.name}-{time.time_ns()}"
        suffix = 1
        while self.path_exists(backup_path):
            backup_path = backup_root / f"{source.name}-{time.time_ns()}-{suffix}"
            suffix += 1

        self.logger.debug("Creating backup: %s -> %s", source, backup_path)
        self.copy_directory(source, backup_path, overwrite=True, preserve_permissions=True)
        self.logger.info("Created backup: %s", backup_path)
        return backup_path

    def restore_backup(self, backup_path: Path, target_path: Path) -> None:
        """Replace target_path entirely with the contents of a backup."""
        self.logger.info("Restoring backup: %s -> %s", backup_path, target_path)
        self.remove_directory(target_path)
        self.copy_directory(backup_path, target_path, overwrite=True, preserve_permissions=True)
        self.logger.info("Restored backup to: %s", target_path)

    def path_exists(self, path: Path) -> bool:
        """Check if a path exists. Dangling symlinks count as existing."""
        return os.path.lexists(path)

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        return Path(path).is_dir()

    def read_text(self, path: Path) -> str:
        """Read UTF-8 text from a file."""
        try:
            return Path(path).read_text(encoding="utf-8")
        except PermissionError as e:
            raise PermissionDeniedError(path, "read", e) from e

    def list_directories(self, path: Path) -> list[str]:
        """List immediate subdirectory names, sorted.

        Returns:
            Directory names, empty if path does not exist.
        """
        try:
            with os.scandir(path) as entries:
                return sorted(e.name for e in entries if e.is_dir(follow_symlinks=False))
        except (FileNotFoundError, NotADirectoryError):
            return []
        except PermissionError as e:
            raise PermissionDeniedError(path, "read", e) from e

    def _make_dir(self, path: Path) -> None:
        try:
            path.mkdir(mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True)
        except PermissionError as e:
            raise PermissionDeniedError(path, "create", e) from e

    def _remove(self, path: Path) -> None:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
