"""Registration and lookup of agents."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from dev_kit.agents.base import Agent
from dev_kit.agents.descriptors import AgentInfo, resolve_descriptors
from dev_kit.errors import InvalidAgentError
from dev_kit.protocols import BundleInstaller, FileSystem


class AgentRegistry:
    """Name-keyed collection of agents.

    Agents keep their registration order; lookups, listings and detection
    results follow it.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize an empty registry.

        Args:
            logger: Logger to report to.
        """
        self._agents: dict[str, Agent] = {}
        self.logger = logger or logging.getLogger(__name__)

    def register(self, agent: Agent) -> None:
        """Register an agent.

        Raises:
            ValueError: If an agent with the same name is already registered.
        """
        if agent.name in self._agents:
            raise ValueError(f'Agent "{agent.name}" is already registered')
        self._agents[agent.name] = agent
        self.logger.debug("Registered agent: %s", agent.name)

    def get(self, name: str) -> Agent | None:
        return self._agents.get(name)

    def get_or_throw(self, name: str) -> Agent:
        """Get an agent by name.

        Raises:
            InvalidAgentError: If no agent has that name. The message lists
                the currently supported agents.
        """
        agent = self._agents.get(name)
        if agent is None:
            raise InvalidAgentError(name, self.supported_names())
        return agent

    def has(self, name: str) -> bool:
        return name in self._agents

    def all(self) -> list[Agent]:
        return list(self._agents.values())

    def supported(self) -> list[Agent]:
        return [a for a in self._agents.values() if a.supported]

    def supported_names(self) -> list[str]:
        return [a.name for a in self.supported()]

    def detect_all(self) -> list[Agent]:
        """Detect every registered agent concurrently.

        Each check is read-only and targets its own directory, so they run
        in parallel.

        Returns:
            Detected agents in registration order.
        """
        self.logger.debug("Detecting all agents...")
        agents = self.all()
        if not agents:
            return []

        with ThreadPoolExecutor(max_workers=len(agents)) as pool:
            results = list(pool.map(lambda agent: agent.detect(), agents))

        for agent, detected in zip(agents, results):
            self.logger.debug("%s: %s", agent.name, "detected" if detected else "not detected")

        detected_agents = [a for a, ok in zip(agents, results) if ok]
        self.logger.info("Detected %d/%d agents", len(detected_agents), len(agents))
        return detected_agents

    def agent_info(self, detect: bool = False) -> list[AgentInfo]:
        """Get display information for every agent.

        Args:
            detect: Run detection and include the result.
        """
        detected = {a.name for a in self.detect_all()} if detect else None
        return [
            a.info(detected=(a.name in detected) if detected is not None else None)
            for a in self._agents.values()
        ]

    def clear(self) -> None:
        self._agents.clear()
        self.logger.debug("Cleared all agents")

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, name: object) -> bool:
        return name in self._agents


def create_agent_registry(
    installer: BundleInstaller,
    filesystem: FileSystem,
    installation_paths: Mapping[str, Path] | None = None,
    home: Path | None = None,
    logger: logging.Logger | None = None,
) -> AgentRegistry:
    """Create a registry holding every known agent.

    Args:
        installer: Installer shared by all agents.
        filesystem: File operations shared by all agents.
        installation_paths: Per-agent skill directory overrides.
        home: Home directory for default paths.
        logger: Parent logger; agents log to children of it.

    Returns:
        Populated AgentRegistry.
    """
    logger = logger or logging.getLogger("dev_kit.agents")
    registry = AgentRegistry(logger=logger)
    for descriptor in resolve_descriptors(installation_paths, home):
        registry.register(Agent(descriptor, installer, filesystem, logger=logger))
    logger.debug("Registered %d agents", len(registry))
    return registry
