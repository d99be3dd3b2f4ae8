"""Application context for dependency injection.

This module separates object creation from object use. Every service the
CLI needs (logger, configuration, file operations, installer, agent
registry) is constructed once here and passed down explicitly, so nothing
relies on process-wide singletons and tests can build a context from
doubles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from dev_kit.agents import AgentRegistry, create_agent_registry
from dev_kit.config import ConfigManager, UserConfig
from dev_kit.filesystem import FileOperations
from dev_kit.install import Installer
from dev_kit.protocols import FileSystem
from dev_kit.rollback import RollbackManager
from dev_kit.validator import SkillValidator


@dataclass
class AppContext:
    """Container for application dependencies.

    Provides a single injection point for all services used by CLI commands.
    """

    logger: logging.Logger
    config: UserConfig
    config_manager: ConfigManager
    filesystem: FileSystem
    rollbacks: RollbackManager
    installer: Installer
    registry: AgentRegistry

    def close(self) -> None:
        """Release temporary backups held by the rollback manager."""
        self.rollbacks.cleanup_all()


def create_context(
    config_dir: Path | None = None,
    home: Path | None = None,
    backup_root: Path | None = None,
    logger: logging.Logger | None = None,
) -> AppContext:
    """Factory for application dependencies.

    Creates all services with proper wiring. Use this in production code.
    For tests, pass temporary directories or construct AppContext directly.

    Args:
        config_dir: Override configuration directory.
        home: Override home directory used for agent paths.
        backup_root: Override the rollback backup directory.
        logger: Root logger for the application.

    Returns:
        Configured AppContext.
    """
    logger = logger or logging.getLogger("dev_kit")
    config_manager = ConfigManager.create(config_dir) if config_dir else ConfigManager.create_default()
    config = config_manager.load()

    config_check = config_manager.validate(config)
    for issue in (*config_check.errors, *config_check.warnings):
        logger.warning("Configuration %s: %s", config_manager.config_file, issue)

    filesystem = FileOperations(logger=logger.getChild("fs"))
    validator = SkillValidator(filesystem, logger=logger.getChild("validator"))
    rollbacks = RollbackManager(filesystem, backup_root, logger=logger.getChild("rollback"))
    installer = Installer(
        validator=validator,
        filesystem=filesystem,
        rollbacks=rollbacks,
        logger=logger.getChild("installer"),
    )
    registry = create_agent_registry(
        installer,
        filesystem,
        installation_paths=config.installation_paths,
        home=home,
        logger=logger.getChild("agents"),
    )

    return AppContext(
        logger=logger,
        config=config,
        config_manager=config_manager,
        filesystem=filesystem,
        rollbacks=rollbacks,
        installer=installer,
        registry=registry,
    )
