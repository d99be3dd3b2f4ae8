"""Installation of skill bundles into an agent's skill directory."""

from __future__ import annotations

import dataclasses
import logging
import time
from collections.abc import Sequence
from pathlib import Path

from dev_kit.errors import DevKitError, DevKitSystemError, SkillInstallationError
from dev_kit.filesystem import FileOperations
from dev_kit.protocols import BundleValidator, FileSystem
from dev_kit.rollback import RollbackManager
from dev_kit.types import (
    InstallError,
    InstallOptions,
    InstallResult,
    RollbackAction,
    RollbackKind,
    SkillBundle,
)
from dev_kit.validator import SkillValidator


class Installer:
    """Installs skills with validation, backup and rollback.

    Each install runs strictly in sequence: validate, back up an existing
    install, write, verify. Any failure after validation rolls the target
    back before a failed result is returned.

    Follows Separate Use from Creation: constructor requires all dependencies.
    Use factory method `create()` for production instantiation with defaults.
    """

    def __init__(
        self,
        validator: BundleValidator,
        filesystem: FileSystem,
        rollbacks: RollbackManager,
        logger: logging.Logger,
    ) -> None:
        """Initialize installer with required dependencies.

        Args:
            validator: Skill validator (required).
            filesystem: Filesystem abstraction (required).
            rollbacks: Rollback manager (required).
            logger: Logger to report to (required).

        Note:
            Use factory method `create()` for production code.
            Direct construction is for testing with explicit dependencies.
        """
        self.validator = validator
        self.fs = filesystem
        self.rollbacks = rollbacks
        self.logger = logger

    @classmethod
    def create(
        cls,
        filesystem: FileSystem | None = None,
        validator: BundleValidator | None = None,
        rollbacks: RollbackManager | None = None,
        logger: logging.Logger | None = None,
    ) -> Installer:
        """Factory method for production instantiation.

        Args:
            filesystem: Optional filesystem abstraction.
            validator: Optional validator (created if not provided).
            rollbacks: Optional rollback manager (created if not provided).
            logger: Optional logger.

        Returns:
            Configured Installer instance.
        """
        logger = logger or logging.getLogger(__name__)
        fs = filesystem or FileOperations(logger=logger.getChild("fs"))
        return cls(
            validator=validator or SkillValidator(fs, logger=logger.getChild("validator")),
            filesystem=fs,
            rollbacks=rollbacks or RollbackManager(fs, logger=logger.getChild("rollback")),
            logger=logger,
        )

    def install(
        self,
        skill: SkillBundle,
        target_dir: Path,
        options: InstallOptions | None = None,
    ) -> InstallResult:
        """Install a skill into target_dir/<skill.name>.

        Args:
            skill: The skill bundle to install.
            target_dir: The agent's skill directory.
            options: Installation options.

        Returns:
            InstallResult. Failures are reported in `errors`, never raised.
        """
        options = options or InstallOptions()
        start = time.monotonic()
        target_dir = Path(target_dir)
        target_path = target_dir / skill.name

        self.logger.info('Installing skill "%s" to %s', skill.name, target_path)

        if not options.skip_validation:
            validation = self.validator.validate(
                skill, check_conflicts=not options.overwrite, target_dir=target_dir
            )
            if not validation.is_valid:
                self.logger.error(
                    "Skill validation failed with %d errors", len(validation.errors)
                )
                return InstallResult(
                    success=False,
                    errors=[InstallError(skill.name, str(e)) for e in validation.errors],
                    duration=time.monotonic() - start,
                )

            for warning in validation.warnings:
                self.logger.warning("  - %s", warning)

            if validation.has_warning("naming") and not options.overwrite:
                self.logger.info('Skill "%s" already exists, skipping', skill.name)
                return InstallResult(
                    success=True,
                    skipped_skills=[skill.name],
                    rollback_actions=[RollbackAction.none(skill.name)],
                    duration=time.monotonic() - start,
                )

        target_existed = self.fs.path_exists(target_path)
        rollback_id: str | None = None
        backup_path: Path | None = None
        written = True

        try:
            if target_existed and (options.backup or options.overwrite) and not options.dry_run:
                state = self.rollbacks.create_rollback_point(target_path, options.backup_dir)
                rollback_id, backup_path = state.id, state.backup_path

            if options.dry_run:
                self.logger.info("[DRY RUN] Would install to: %s", target_path)
            else:
                written = self._write(skill, target_path, options)
                self._verify(target_path)
        except Exception as e:
            self.logger.error("Installation failed: %s", e)
            message = str(e) or type(e).__name__
            try:
                self._undo(skill.name, target_path, rollback_id, target_existed)
            except Exception as rollback_error:
                self.logger.exception('Rollback failed for "%s"', skill.name)
                message = f"{message}; rollback failed: {rollback_error}"
            return InstallResult(
                success=False,
                errors=[InstallError(skill.name, message)],
                duration=time.monotonic() - start,
            )

        if not written:
            self.logger.info('Skill "%s" already present, nothing written', skill.name)
            if rollback_id is not None:
                self.rollbacks.cleanup(rollback_id)
            return InstallResult(
                success=True,
                skipped_skills=[skill.name],
                rollback_actions=[RollbackAction.none(skill.name)],
                duration=time.monotonic() - start,
            )

        if options.dry_run:
            action = RollbackAction.none(skill.name)
        elif rollback_id is not None and backup_path is not None:
            action = RollbackAction.restore_from(skill.name, target_path, backup_path, rollback_id)
        elif not target_existed:
            action = RollbackAction.remove_target(skill.name, target_path)
        else:
            action = RollbackAction.none(skill.name)

        if not options.dry_run:
            self.logger.info('Installed skill "%s"', skill.name)

        return InstallResult(
            success=True,
            installed_skills=[skill.name],
            rollback_actions=[action],
            duration=time.monotonic() - start,
        )

    def install_multiple(
        self,
        skills: Sequence[SkillBundle],
        target_dir: Path,
        options: InstallOptions | None = None,
    ) -> InstallResult:
        """Install several skills, all or nothing.

        Skills are installed in order without per-skill backups. On the first
        failure every skill installed so far is rolled back in reverse order.

        Args:
            skills: Skills to install.
            target_dir: The agent's skill directory.
            options: Installation options applied to every skill.

        Returns:
            Combined InstallResult.
        """
        options = options or InstallOptions()
        batch_options = dataclasses.replace(options, backup=False)
        start = time.monotonic()

        self.logger.info("Installing %d skills to %s", len(skills), target_dir)

        installed: list[str] = []
        skipped: list[str] = []
        actions: list[RollbackAction] = []

        for skill in skills:
            result = self.install(skill, target_dir, batch_options)

            if result.success:
                installed.extend(result.installed_skills)
                skipped.extend(result.skipped_skills)
                actions.extend(a for a in result.rollback_actions if a.kind is not RollbackKind.NONE)
                continue

            self.logger.error("Installation failed, rolling back all skills...")
            self._rollback_all(actions)
            return InstallResult(
                success=False,
                skipped_skills=skipped,
                errors=result.errors,
                duration=time.monotonic() - start,
            )

        return InstallResult(
            success=True,
            installed_skills=installed,
            skipped_skills=skipped,
            rollback_actions=actions,
            duration=time.monotonic() - start,
        )

    def rollback(self, action: RollbackAction) -> None:
        """Undo one installed skill.

        RESTORE_FROM restores the captured backup and discards it;
        REMOVE_TARGET deletes the installed directory; NONE does nothing.

        Raises:
            SkillInstallationError: If restoring or removing fails.
        """
        if action.kind is RollbackKind.NONE:
            return

        self.logger.info('Rolling back "%s" (%s)', action.skill, action.kind.value)
        try:
            if action.kind is RollbackKind.RESTORE_FROM:
                self.rollbacks.rollback(action.rollback_id, cleanup=True)
            else:
                self.fs.remove_directory(action.target_path)
        except (OSError, DevKitError) as e:
            raise SkillInstallationError(action.skill, "rollback", e) from e

    def rollback_result(self, result: InstallResult) -> None:
        """Undo every skill installed by a result, newest first.

        Best-effort: a failing action is logged and the rest still run.
        """
        self._rollback_all(result.rollback_actions)

    def _rollback_all(self, actions: Sequence[RollbackAction]) -> None:
        for action in reversed(actions):
            try:
                self.rollback(action)
            except SkillInstallationError as e:
                self.logger.warning("Rollback failed: %s", e.format())

    def _write(self, skill: SkillBundle, target_path: Path, options: InstallOptions) -> bool:
        """Write the bundle. Returns False if existing content was kept untouched."""
        if skill.content is not None:
            written = self.fs.write_skill_content(
                target_path,
                skill.content,
                overwrite=options.overwrite,
                on_progress=options.on_progress,
            )
            self.logger.debug('Wrote embedded content for skill "%s"', skill.name)
            return written
        if skill.source_path is not None:
            copied = self.fs.copy_directory(
                skill.source_path,
                target_path,
                overwrite=options.overwrite,
                on_progress=options.on_progress,
            )
            self.logger.debug("Copied %d files from %s", copied, skill.source_path)
            return copied > 0
        raise DevKitSystemError(f'Skill "{skill.name}" has neither content nor source_path')

    def _verify(self, target_path: Path) -> None:
        self.logger.debug("Verifying installation...")
        verification = self.validator.validate_skill_at_path(target_path)
        if not verification.is_valid:
            details = "; ".join(str(e) for e in verification.errors)
            raise DevKitSystemError(f"Installation verification failed: {details}")

    def _undo(
        self,
        skill_name: str,
        target_path: Path,
        rollback_id: str | None,
        target_existed: bool,
    ) -> None:
        if rollback_id is not None:
            self.logger.info("Rolling back installation...")
            self.rollbacks.rollback(rollback_id, cleanup=True)
        elif not target_existed:
            self.logger.info('Removing partial install of "%s"', skill_name)
            self.fs.remove_directory(target_path)
        else:
            self.logger.warning(
                'No backup of "%s" was taken; leaving existing content in place', skill_name
            )
