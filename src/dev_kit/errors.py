"""Error types for dev-kit.

Errors fall into three families:
- UserError: invalid input or environment the user can fix (unknown agent,
  agent not detected). Surfaced with a remedy, never retried.
- DevKitSystemError: filesystem or runtime failures. Wraps the original cause.
- BundleValidationError: structural problems in a skill bundle, itemized so
  every problem is visible at once.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dev_kit.types import ValidationIssue

__all__ = [
    "DevKitError",
    "UserError",
    "DevKitSystemError",
    "BundleValidationError",
    "AgentNotInstalledError",
    "InvalidAgentError",
    "UnsupportedAgentError",
    "ConfigurationError",
    "SkillNotFoundError",
    "PermissionDeniedError",
    "PathNotFoundError",
    "SkillInstallationError",
    "RollbackError",
]


class DevKitError(Exception):
    """Base class for all dev-kit errors.

    Attributes:
        message: Human-readable description.
        code: Error family code (USER_ERROR, SYSTEM_ERROR, VALIDATION_ERROR).
        suggestion: Optional remedy shown to the user.
    """

    code = "DEV_KIT_ERROR"

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def format(self) -> str:
        """Format the error for display to the user."""
        output = f"Error: {self.message}"
        if self.suggestion:
            output += f"\n  -> {self.suggestion}"
        return output


class UserError(DevKitError):
    """Caused by invalid input or the user's environment."""

    code = "USER_ERROR"


class DevKitSystemError(DevKitError):
    """Caused by filesystem or runtime failures."""

    code = "SYSTEM_ERROR"

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message, suggestion)
        self.cause = cause

    def format(self) -> str:
        output = super().format()
        if self.cause is not None:
            output += f"\n  -> Caused by: {self.cause}"
        return output


class BundleValidationError(DevKitError):
    """Invalid bundle structure or missing fields."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, issues: Iterable[ValidationIssue] = ()) -> None:
        super().__init__(message)
        self.issues = list(issues)

    def format(self) -> str:
        output = f"Error: {self.message}"
        if self.issues:
            output += "\n\n  Issues:"
            for issue in self.issues:
                icon = "*" if issue.severity == "error" else "!"
                output += f"\n    {icon} {issue.field}: {issue.issue}"
        return output


class AgentNotInstalledError(UserError):
    """The agent's skill directory was not found on this system."""

    def __init__(self, display_name: str, expected_path: Path | str) -> None:
        super().__init__(
            f"{display_name} not detected at {expected_path}",
            f"Install {display_name} or verify the installation path",
        )
        self.display_name = display_name
        self.expected_path = expected_path


class InvalidAgentError(UserError):
    """Unknown agent name."""

    def __init__(self, agent_name: str, supported_agents: Iterable[str]) -> None:
        supported = list(supported_agents)
        super().__init__(
            f'Agent "{agent_name}" is not supported',
            f"Supported agents: {', '.join(supported)}",
        )
        self.agent_name = agent_name
        self.supported_agents = supported


class UnsupportedAgentError(UserError):
    """The agent is known but skills cannot be installed for it."""

    def __init__(self, display_name: str, reason: str | None = None) -> None:
        super().__init__(
            f"Cannot install skills for {display_name}",
            reason or "This agent does not support skills",
        )
        self.display_name = display_name
        self.reason = reason


class ConfigurationError(UserError):
    """Invalid or unreadable configuration."""


class SkillNotFoundError(UserError):
    """No embedded skill with the requested name."""

    def __init__(self, skill_name: str) -> None:
        super().__init__(f"Skill not found: {skill_name}")
        self.skill_name = skill_name


class PermissionDeniedError(DevKitSystemError):
    """The operating system rejected a read, write or remove."""

    def __init__(
        self, path: Path | str, operation: str, cause: BaseException | None = None
    ) -> None:
        super().__init__(
            f"Permission denied: Cannot {operation} {path}",
            cause,
            "Fix file permissions or run with appropriate privileges",
        )
        self.path = path
        self.operation = operation


class PathNotFoundError(DevKitSystemError):
    """A required source path does not exist."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(f"File not found: {path}")
        self.path = path


class SkillInstallationError(DevKitSystemError):
    """Installing or removing a skill failed."""

    def __init__(
        self, skill_name: str, target: str, cause: BaseException | None = None
    ) -> None:
        super().__init__(f'Failed to install skill "{skill_name}" for {target}', cause)
        self.skill_name = skill_name
        self.target = target


class RollbackError(DevKitSystemError):
    """A rollback point is unknown or could not be restored."""
