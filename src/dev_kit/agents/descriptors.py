"""Agent descriptor table.

Every supported AI coding assistant differs only in configuration: where
its skills live and whether skills can be installed for it at all. All
behavior is shared (see `dev_kit.agents.base.Agent`).
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

AgentName = Literal["claude-code", "github-copilot", "cursor", "opencode"]

AGENT_NAMES: tuple[AgentName, ...] = ("claude-code", "github-copilot", "cursor", "opencode")


class AgentDescriptor(BaseModel):
    """Static description of an agent."""

    model_config = ConfigDict(frozen=True)

    name: AgentName
    display_name: str
    skill_path: Path
    supported: bool = True
    unsupported_reason: str | None = None
    required_frontmatter_keys: tuple[str, ...] = ("name",)
    priority: int = 99
    homepage: str = ""

    @model_validator(mode="after")
    def _check_reason(self) -> AgentDescriptor:
        if not self.supported and not self.unsupported_reason:
            raise ValueError(f"Unsupported agent '{self.name}' needs an unsupported_reason")
        return self

    def with_skill_path(self, skill_path: Path) -> AgentDescriptor:
        """Return a copy pointing at a different skill directory."""
        return self.model_copy(update={"skill_path": skill_path})


def default_descriptors(home: Path | None = None) -> list[AgentDescriptor]:
    """Build the descriptor table.

    Args:
        home: Home directory to resolve paths against. Defaults to Path.home().

    Returns:
        Descriptors in priority order.
    """
    home = home or Path.home()
    return [
        AgentDescriptor(
            name="claude-code",
            display_name="Claude Code",
            skill_path=home / ".claude" / "skills",
            priority=1,
            homepage="https://code.claude.com",
        ),
        AgentDescriptor(
            name="github-copilot",
            display_name="GitHub Copilot",
            skill_path=home / ".copilot-skills",
            priority=2,
            homepage="https://github.com/features/copilot",
        ),
        AgentDescriptor(
            name="cursor",
            display_name="Cursor",
            skill_path=home / ".cursor" / "extensions",
            priority=3,
        ),
        AgentDescriptor(
            name="opencode",
            display_name="OpenCode",
            skill_path=home / ".config" / "opencode" / "skills",
            supported=False,
            unsupported_reason=(
                "OpenCode does not have a documented skills API. "
                "Use the dev-kit CLI directly via the Bash tool instead."
            ),
            priority=4,
        ),
    ]


def resolve_descriptors(
    overrides: Mapping[str, Path] | None = None,
    home: Path | None = None,
) -> list[AgentDescriptor]:
    """Build the descriptor table with per-agent skill path overrides.

    Args:
        overrides: Agent name to skill directory, usually from user config.
        home: Home directory to resolve default paths against.

    Returns:
        Descriptors with overrides applied.
    """
    overrides = overrides or {}
    return [
        d.with_skill_path(Path(overrides[d.name]).expanduser()) if d.name in overrides else d
        for d in default_descriptors(home)
    ]


class AgentInfo(BaseModel):
    """Display information about an agent."""

    name: str
    display_name: str
    skill_path: str
    supported: bool
    unsupported_reason: str | None = None
    detected: bool | None = Field(default=None)
