"""Skill bundle validation.

Checks bundle structure and content before installation, and naming
conflicts against an existing install. Rule categories run independently so
a single call reports every problem.
"""

from __future__ import annotations

import logging
import stat
from pathlib import Path

from dev_kit.errors import DevKitError
from dev_kit.filesystem import FileOperations
from dev_kit.protocols import FileSystem
from dev_kit.types import SKILL_FILE, SkillBundle, ValidationResult
from dev_kit.validation import parse_frontmatter


class SkillValidator:
    """Validates skill bundles and installed skill directories."""

    def __init__(
        self,
        filesystem: FileSystem | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            filesystem: File operations used for existence checks.
            logger: Logger to report to.
        """
        self.fs = filesystem or FileOperations()
        self.logger = logger or logging.getLogger(__name__)

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
            ValidationResult with all errors and warnings found.
        """
        self.logger.debug("Validating skill: %s", skill.name)
        result = ValidationResult()

        self._validate_required_files(skill, result)
        self._validate_frontmatter(skill, result)
        if check_conflicts and target_dir is not None:
            self._validate_no_conflicts(skill, Path(target_dir), result)

        if result.is_valid:
            self.logger.debug('Skill "%s" is valid', skill.name)
        else:
            self.logger.warning(
                'Skill "%s" has %d validation errors', skill.name, len(result.errors)
            )
        return result

    def validate_skill_at_path(self, skill_path: Path) -> ValidationResult:
        """Validate an arbitrary directory as a skill.

        Used to verify an installation after writing it.
        """
        skill = SkillBundle(name=Path(skill_path).name, source_path=Path(skill_path))
        return self.validate(skill, check_conflicts=False)

    def _validate_required_files(self, skill: SkillBundle, result: ValidationResult) -> None:
        if skill.is_embedded:
            for required in skill.required_files:
                if required != SKILL_FILE:
                    result.add_error(
                        "files", f"Missing required file/directory: {required} (embedded skill)"
                    )
            return

        if skill.source_path is None:
            result.add_error("files", f"Missing required file: {SKILL_FILE}")
            return

        for required in skill.required_files:
            path = skill.source_path / required
            if not self.fs.path_exists(path):
                if required == SKILL_FILE:
                    result.add_error("files", f"Missing required file: {SKILL_FILE}")
                else:
                    result.add_error("files", f"Missing required file/directory: {required}")
                continue

            mode = path.lstat().st_mode
            if not (stat.S_ISREG(mode) or stat.S_ISDIR(mode)):
                result.add_warning(
                    "files",
                    f"Required path exists but is not a file or directory: {required}",
                )

    def _validate_frontmatter(self, skill: SkillBundle, result: ValidationResult) -> None:
        content = self._read_skill_file(skill, result)
        if content is None:
            return

        parsed = parse_frontmatter(content)
        for error in parsed.errors:
            result.add_error("frontmatter", error)
        if not parsed.success:
            return

        if "name" not in parsed.data and "description" not in parsed.data:
            result.add_warning(
                "frontmatter",
                'Frontmatter should include at least "name" or "description" field',
            )

        if parsed.data.get("user-invocable") is False:
            self.logger.debug('Skill "%s" is marked as not user-invocable', skill.name)

    def _read_skill_file(self, skill: SkillBundle, result: ValidationResult) -> str | None:
        if skill.content is not None:
            return skill.content
        if skill.source_path is None:
            result.add_error("frontmatter", "Failed to read SKILL.md: skill has no source")
            return None

        try:
            return self.fs.read_text(skill.source_path / SKILL_FILE)
        except (OSError, UnicodeDecodeError, DevKitError) as e:
            result.add_error("frontmatter", f"Failed to read SKILL.md: {e}")
            return None

    def _validate_no_conflicts(
        self, skill: SkillBundle, target_dir: Path, result: ValidationResult
    ) -> None:
        target_path = target_dir / skill.name
        if not self.fs.path_exists(target_path):
            self.logger.debug('No naming conflict for skill "%s"', skill.name)
            return

        if self.fs.path_exists(target_path / SKILL_FILE):
            result.add_warning(
                "naming",
                f'Skill "{skill.name}" already exists in target directory '
                "and will be treated as an update",
            )
        else:
            result.add_error(
                "naming",
                f'Path "{skill.name}" already exists but is not a valid skill '
                "(occupied by non-skill content)",
            )
