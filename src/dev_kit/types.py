"""Shared data types for dev-kit."""

from __future__ import annotations

import enum
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Literal

__all__ = [
    "SKILL_FILE",
    "FrontmatterValue",
    "ProgressCallback",
    "SkillBundle",
    "ValidationIssue",
    "ValidationResult",
    "InstallOptions",
    "InstallError",
    "RollbackKind",
    "RollbackAction",
    "InstallResult",
]

SKILL_FILE = "SKILL.md"

FrontmatterValue = str | bool
ProgressCallback = Callable[[int, int, str], None]
Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class SkillBundle:
    """A named, installable skill.

    Attributes:
        name: Unique skill identifier, also the installed directory name.
        content: Embedded SKILL.md text (mutually exclusive with source_path).
        source_path: Directory holding SKILL.md and supporting files.
        required_files: Relative paths that must exist. Always includes SKILL.md.
        compatible_agents: Agent names this skill is meant for.
        metadata: Parsed front-matter fields.
    """

    name: str
    content: str | None = None
    source_path: Path | None = None
    required_files: tuple[str, ...] = (SKILL_FILE,)
    compatible_agents: frozenset[str] = frozenset({"claude-code", "github-copilot"})
    metadata: Mapping[str, FrontmatterValue] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        """Validate invariants and normalize fields."""
        if not self.name:
            raise ValueError("name cannot be empty")
        if self.content is not None and self.source_path is not None:
            raise ValueError("content and source_path are mutually exclusive")
        required = tuple(dict.fromkeys((SKILL_FILE, *self.required_files)))
        object.__setattr__(self, "required_files", required)
        object.__setattr__(self, "compatible_agents", frozenset(self.compatible_agents))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
        if self.source_path is not None:
            object.__setattr__(self, "source_path", Path(self.source_path))

    @property
    def is_embedded(self) -> bool:
        """True if the bundle carries its SKILL.md text in memory."""
        return self.content is not None

    @classmethod
    def from_content(
        cls,
        name: str,
        content: str,
        compatible_agents: frozenset[str] | None = None,
    ) -> SkillBundle:
        """Build an embedded bundle from SKILL.md text.

        Args:
            name: Skill name.
            content: SKILL.md content.
            compatible_agents: Optional agent names; defaults to Claude Code
                and GitHub Copilot.

        Returns:
            SkillBundle with metadata parsed from the front-matter.
        """
        from dev_kit.validation import parse_frontmatter

        kwargs = {}
        if compatible_agents is not None:
            kwargs["compatible_agents"] = compatible_agents
        return cls(
            name=name,
            content=content,
            metadata=dict(parse_frontmatter(content).data),
            **kwargs,
        )

    @classmethod
    def from_directory(
        cls, path: Path, required_files: tuple[str, ...] = (SKILL_FILE,)
    ) -> SkillBundle:
        """Build a bundle that references a directory on disk.

        The bundle name is the directory base name. Metadata is parsed from
        SKILL.md when it is readable; an unreadable file is left for the
        validator to report.
        """
        from dev_kit.validation import parse_frontmatter

        metadata: dict[str, FrontmatterValue] = {}
        skill_file = path / SKILL_FILE
        if skill_file.is_file():
            try:
                metadata = dict(parse_frontmatter(skill_file.read_text(encoding="utf-8")).data)
            except (OSError, UnicodeDecodeError):
                metadata = {}
        return cls(
            name=path.name,
            source_path=path,
            required_files=required_files,
            metadata=metadata,
        )


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation error or warning."""

    field: str
    issue: str
    severity: Severity = "error"

    def __str__(self) -> str:
        return f"{self.field}: {self.issue}"


@dataclass
class ValidationResult:
    """Outcome of validating a skill bundle."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True when there are no errors. Warnings do not count."""
        return len(self.errors) == 0

    def add_error(self, field_name: str, issue: str) -> None:
        self.errors.append(ValidationIssue(field_name, issue, "error"))

    def add_warning(self, field_name: str, issue: str) -> None:
        self.warnings.append(ValidationIssue(field_name, issue, "warning"))

    def has_warning(self, field_name: str) -> bool:
        return any(w.field == field_name for w in self.warnings)


@dataclass
class InstallOptions:
    """Options for a single install or a batch install.

    Attributes:
        overwrite: Replace an existing skill of the same name.
        skip_validation: Skip pre-install validation (post-install
            verification still runs).
        backup: Back up an existing skill before writing.
        backup_dir: Root directory for backups (defaults to the temp dir).
        on_progress: Called as (current, total, file_name) per written file.
        dry_run: Report what would happen without writing anything.
    """

    overwrite: bool = False
    skip_validation: bool = False
    backup: bool = False
    backup_dir: Path | None = None
    on_progress: ProgressCallback | None = None
    dry_run: bool = False


@dataclass(frozen=True)
class InstallError:
    """A failed skill and the reason."""

    skill: str
    error: str


class RollbackKind(str, enum.Enum):
    """What undoing an installation means."""

    NONE = "none"
    RESTORE_FROM = "restore_from"
    REMOVE_TARGET = "remove_target"


@dataclass(frozen=True)
class RollbackAction:
    """Explicit description of how to undo one installed skill.

    Attributes:
        kind: NONE, RESTORE_FROM a backup, or REMOVE_TARGET.
        skill: Name of the skill the action belongs to.
        target_path: Installed skill directory.
        backup_path: Backup to restore from (RESTORE_FROM only).
        rollback_id: Rollback point tracking the backup (RESTORE_FROM only).
    """

    kind: RollbackKind
    skill: str = ""
    target_path: Path | None = None
    backup_path: Path | None = None
    rollback_id: str | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.kind is RollbackKind.RESTORE_FROM and self.rollback_id is None:
            raise ValueError("RESTORE_FROM requires a rollback_id")
        if self.kind is not RollbackKind.NONE and self.target_path is None:
            raise ValueError(f"{self.kind.value} requires a target_path")

    @classmethod
    def none(cls, skill: str = "") -> RollbackAction:
        return cls(RollbackKind.NONE, skill)

    @classmethod
    def remove_target(cls, skill: str, target_path: Path) -> RollbackAction:
        return cls(RollbackKind.REMOVE_TARGET, skill, target_path)

    @classmethod
    def restore_from(
        cls, skill: str, target_path: Path, backup_path: Path, rollback_id: str
    ) -> RollbackAction:
        return cls(RollbackKind.RESTORE_FROM, skill, target_path, backup_path, rollback_id)


@dataclass
class InstallResult:
    """Result of an installation operation.

    Attributes:
        success: True if every requested skill is installed or skipped.
        installed_skills: Skills written by this call.
        skipped_skills: Skills already present (overwrite disabled).
        errors: Failed skills with their error messages.
        rollback_actions: How to undo each installed skill, in install order.
        duration: Wall-clock seconds spent.
    """

    success: bool
    installed_skills: list[str] = field(default_factory=list)
    skipped_skills: list[str] = field(default_factory=list)
    errors: list[InstallError] = field(default_factory=list)
    rollback_actions: list[RollbackAction] = field(default_factory=list)
    duration: float = 0.0

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.success and self.errors:
            raise ValueError("success=True but errors are set")
        if not self.success and not self.errors:
            raise ValueError("success=False requires at least one error")

    @property
    def error_messages(self) -> list[str]:
        return [f"{e.skill}: {e.error}" for e in self.errors]
