"""Shared agent behavior.

One Agent class serves every assistant; per-assistant differences live in
its AgentDescriptor. An unsupported agent never reaches the filesystem:
detection answers False and installation raises before any file operation.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from pathlib import Path

from dev_kit.agents.descriptors import AgentDescriptor, AgentInfo
from dev_kit.errors import (
    AgentNotInstalledError,
    DevKitError,
    SkillInstallationError,
    UnsupportedAgentError,
)
from dev_kit.protocols import BundleInstaller, FileSystem
from dev_kit.types import SKILL_FILE, InstallOptions, InstallResult, SkillBundle
from dev_kit.validation import parse_frontmatter


class Agent:
    """An AI coding assistant that skills can be installed into."""

    def __init__(
        self,
        descriptor: AgentDescriptor,
        installer: BundleInstaller,
        filesystem: FileSystem,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize an agent.

        Args:
            descriptor: Static agent configuration.
            installer: Installer that performs the actual installation.
            filesystem: File operations for detection and listing.
            logger: Logger to report to.
        """
        self.descriptor = descriptor
        self.installer = installer
        self.fs = filesystem
        base_logger = logger or logging.getLogger(__name__)
        self.logger = base_logger.getChild(descriptor.name)

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def display_name(self) -> str:
        return self.descriptor.display_name

    @property
    def skill_path(self) -> Path:
        return self.descriptor.skill_path

    @property
    def supported(self) -> bool:
        return self.descriptor.supported

    @property
    def unsupported_reason(self) -> str | None:
        return self.descriptor.unsupported_reason

    def __repr__(self) -> str:
        return f"Agent(name={self.name!r}, skill_path={str(self.skill_path)!r})"

    def detect(self) -> bool:
        """Check if this agent's skill directory exists.

        Returns:
            True if detected. Always False for unsupported agents.
        """
        if not self.supported:
            self.logger.debug(
                "%s skills not supported: %s", self.display_name, self.unsupported_reason
            )
            return False

        self.logger.debug("Detecting %s at %s", self.display_name, self.skill_path)
        detected = self.fs.path_exists(self.skill_path) and self.fs.is_dir(self.skill_path)
        self.logger.debug("%s %s", self.display_name, "detected" if detected else "not detected")
        return detected

    def install(self, skill: SkillBundle, options: InstallOptions | None = None) -> InstallResult:
        """Install a skill for this agent.

        A backup of any existing install is always taken.

        Raises:
            UnsupportedAgentError: If skills cannot be installed for this agent.
            AgentNotInstalledError: If the agent's skill directory is missing.
        """
        self._ensure_installable()
        self.logger.info('Installing skill "%s" for %s', skill.name, self.display_name)
        options = dataclasses.replace(options or InstallOptions(), backup=True)
        return self.installer.install(skill, self.skill_path, options)

    def install_many(
        self, skills: Sequence[SkillBundle], options: InstallOptions | None = None
    ) -> InstallResult:
        """Install several skills all-or-nothing.

        Raises:
            UnsupportedAgentError: If skills cannot be installed for this agent.
            AgentNotInstalledError: If the agent's skill directory is missing.
        """
        self._ensure_installable()
        return self.installer.install_multiple(skills, self.skill_path, options)

    def verify(self, skill_name: str) -> bool:
        """Check that an installed skill has usable front-matter.

        Requires the front-matter delimiters and every key listed in the
        descriptor's required_frontmatter_keys.
        """
        if not self.supported:
            self.logger.warning("%s skills are not supported", self.display_name)
            return False

        skill_file = self.skill_path / skill_name / SKILL_FILE
        try:
            content = self.fs.read_text(skill_file)
        except FileNotFoundError:
            self.logger.debug('Skill "%s" not found at %s', skill_name, skill_file)
            return False
        except (OSError, UnicodeDecodeError, DevKitError) as e:
            self.logger.debug('Cannot read skill "%s": %s', skill_name, e)
            return False

        parsed = parse_frontmatter(content)
        if not parsed.success:
            self.logger.debug('Skill "%s" missing YAML frontmatter', skill_name)
            return False

        missing = [k for k in self.descriptor.required_frontmatter_keys if k not in parsed.data]
        if missing:
            self.logger.debug(
                'Skill "%s" missing %s in frontmatter', skill_name, ", ".join(missing)
            )
            return False
        return True

    def uninstall(self, skill_name: str) -> None:
        """Remove an installed skill directory.

        Raises:
            SkillInstallationError: If removal fails.
        """
        if not self.supported:
            self.logger.warning("%s skills are not supported", self.display_name)
            return

        target_path = self.skill_path / skill_name
        self.logger.info('Uninstalling skill "%s" from %s', skill_name, self.display_name)
        try:
            self.fs.remove_directory(target_path)
        except (OSError, DevKitError) as e:
            raise SkillInstallationError(skill_name, self.display_name, e) from e

    def get_installed_skills(self) -> list[str]:
        """List installed skill names (immediate subdirectories)."""
        if not self.supported:
            return []
        return self.fs.list_directories(self.skill_path)

    def info(self, detected: bool | None = None) -> AgentInfo:
        """Summarize this agent for display."""
        return AgentInfo(
            name=self.name,
            display_name=self.display_name,
            skill_path=str(self.skill_path),
            supported=self.supported,
            unsupported_reason=self.unsupported_reason,
            detected=detected,
        )

    def _ensure_installable(self) -> None:
        if not self.supported:
            raise UnsupportedAgentError(self.display_name, self.unsupported_reason)
        if not self.detect():
            raise AgentNotInstalledError(self.display_name, self.skill_path)
