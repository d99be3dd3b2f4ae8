"""User configuration stored in ~/.dev-kit/config.json."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from dev_kit import __version__
from dev_kit.agents.descriptors import AGENT_NAMES
from dev_kit.errors import ConfigurationError
from dev_kit.types import ValidationResult

# Default configuration location
CONFIG_DIR = Path.home() / ".dev-kit"
CONFIG_VERSION = "1.0"


class UserPreferences(BaseModel):
    """CLI preferences."""

    model_config = ConfigDict(populate_by_name=True)

    verbose: bool = False
    auto_update: bool = Field(default=True, alias="autoUpdate")
    color_output: bool = Field(default=True, alias="colorOutput")
    confirm_before_install: bool = Field(default=True, alias="confirmBeforeInstall")


class UserConfig(BaseModel):
    """User configuration."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = CONFIG_VERSION
    preferred_agents: list[str] = Field(
        default_factory=lambda: ["claude-code", "github-copilot"], alias="preferredAgents"
    )
    installation_paths: dict[str, Path] = Field(
        default_factory=dict, alias="installationPaths"
    )
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    last_update_check: datetime | None = Field(default=None, alias="lastUpdateCheck")
    cli_version: str = Field(default=__version__, alias="cliVersion")


class ConfigManager:
    """Loads, saves, validates and migrates the user configuration.

    Follows Separate Use from Creation: prefer the factory methods
    `create()` or `create_default()`.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            config_dir: Directory for config.json. Defaults to ~/.dev-kit.
        """
        self.config_dir = config_dir or CONFIG_DIR
        self.config_file = self.config_dir / "config.json"

    @classmethod
    def create(cls, config_dir: Path) -> ConfigManager:
        return cls(config_dir=config_dir)

    @classmethod
    def create_default(cls) -> ConfigManager:
        return cls()

    def load(self) -> UserConfig:
        """Load configuration from disk.

        Returns:
            UserConfig; defaults if the file does not exist. An older
            version is migrated and written back.

        Raises:
            ConfigurationError: If the file cannot be parsed.
        """
        if not self.config_file.exists():
            return UserConfig()

        try:
            raw = json.loads(self.config_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Cannot read configuration {self.config_file}: {e}",
                "Fix or delete the file to restore defaults",
            ) from e

        if not isinstance(raw, dict):
            raise ConfigurationError(
                f"Configuration {self.config_file} must be a JSON object",
                "Fix or delete the file to restore defaults",
            )

        if raw.get("version") != CONFIG_VERSION:
            config = self.migrate(raw)
            self.save(config)
            return config

        try:
            return UserConfig.model_validate(raw)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration in {self.config_file}: {e.error_count()} problem(s)",
                "Fix or delete the file to restore defaults",
            ) from e

    def save(self, config: UserConfig) -> None:
        """Save configuration to disk."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        data = config.model_dump(mode="json", by_alias=True, exclude_none=True)
        self.config_file.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def validate(self, config: UserConfig) -> ValidationResult:
        """Check a configuration for unknown agents and unusable paths."""
        result = ValidationResult()

        for agent in config.preferred_agents:
            if agent not in AGENT_NAMES:
                result.add_error("preferredAgents", f"Unknown agent: {agent}")

        for agent, path in config.installation_paths.items():
            if agent not in AGENT_NAMES:
                result.add_error("installationPaths", f"Unknown agent: {agent}")
            elif not path.expanduser().is_absolute():
                result.add_warning(
                    "installationPaths",
                    f"Path for {agent} is relative and depends on the working directory: {path}",
                )

        return result

    def migrate(self, old_config: dict[str, Any]) -> UserConfig:
        """Upgrade an older configuration, keeping recognized values.

        Args:
            old_config: Raw JSON object from an older version.

        Returns:
            UserConfig at the current version.
        """
        defaults = UserConfig().model_dump(by_alias=True)
        merged: dict[str, Any] = {**defaults}
        for key, value in old_config.items():
            if key in defaults and value is not None:
                merged[key] = value

        preferences = old_config.get("preferences")
        if isinstance(preferences, dict):
            merged["preferences"] = {**defaults["preferences"], **preferences}

        merged["version"] = CONFIG_VERSION
        try:
            return UserConfig.model_validate(merged)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Cannot migrate configuration {self.config_file}",
                "Delete the file to restore defaults",
            ) from e
