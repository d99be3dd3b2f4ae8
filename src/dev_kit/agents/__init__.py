"""Agent descriptors, shared agent behavior and the agent registry."""

from __future__ import annotations

from .base import Agent
from .descriptors import (
    AGENT_NAMES,
    AgentDescriptor,
    AgentInfo,
    AgentName,
    default_descriptors,
    resolve_descriptors,
)
from .registry import AgentRegistry, create_agent_registry

__all__ = [
    "AGENT_NAMES",
    "Agent",
    "AgentDescriptor",
    "AgentInfo",
    "AgentName",
    "AgentRegistry",
    "create_agent_registry",
    "default_descriptors",
    "get_descriptor",
    "resolve_descriptors",
]


def get_descriptor(name: str, home=None) -> AgentDescriptor:
    """Get the default descriptor for an agent.

    Args:
        name: Agent name (claude-code, github-copilot, cursor, opencode).
        home: Optional home directory for path resolution.

    Returns:
        AgentDescriptor.

    Raises:
        ValueError: If the agent is unknown.
    """
    for descriptor in default_descriptors(home):
        if descriptor.name == name:
            return descriptor
    raise ValueError(f"Unknown agent: {name}. Supported: {list(AGENT_NAMES)}")
