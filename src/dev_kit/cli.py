"""CLI commands using Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from dev_kit import __version__
from dev_kit.console import ConsoleUI
from dev_kit.context import create_context
from dev_kit.data import get_dev_kit_skills
from dev_kit.errors import (
    AgentNotInstalledError,
    DevKitError,
    UnsupportedAgentError,
    UserError,
)
from dev_kit.types import InstallOptions

if TYPE_CHECKING:
    from dev_kit.agents import Agent
    from dev_kit.context import AppContext

app = typer.Typer(
    name="dev-kit",
    help="Install dev-kit skills into AI coding assistants",
    no_args_is_help=True,
)

console = Console()
ui = ConsoleUI(console)

DEV_KIT_SUBDIRS = ("docs", "knowledge", "tickets")


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"dev-kit v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Install dev-kit skills into AI coding assistants."""
    pass


def configure_logging(verbose: bool) -> None:
    """Route dev_kit logs through Rich.

    Args:
        verbose: Log at DEBUG instead of INFO.
    """
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    logging.getLogger("dev_kit").setLevel(logging.DEBUG if verbose else logging.INFO)


# ============================================================================
# Init
# ============================================================================


def _select_agent(ctx: AppContext, assume_yes: bool) -> str:
    """Pick an agent among those detected on this system.

    Raises:
        UserError: If no agent is detected.
    """
    console.print("No agent specified. Selecting agent interactively...")
    detected = ctx.registry.detect_all()

    if not detected:
        for agent in ctx.registry.supported():
            if agent.descriptor.homepage:
                console.print(f"  • {agent.display_name}: {agent.descriptor.homepage}")
        raise UserError("No supported agents detected", "Install a code agent and try again")

    console.print("Detected agents:")
    for agent in detected:
        console.print(f"  • {agent.display_name} ({agent.name})")

    names = [a.name for a in detected]
    if assume_yes or len(names) == 1:
        return names[0]
    return ui.prompt_choice("Select agent", names)


def _resolve_agent(ctx: AppContext, agent_name: str) -> Agent:
    """Look up an agent and check it can receive skills.

    Raises:
        InvalidAgentError: Unknown agent name.
        UnsupportedAgentError: Agent does not support skills.
        AgentNotInstalledError: Agent not detected.
    """
    agent = ctx.registry.get_or_throw(agent_name)
    if not agent.supported:
        raise UnsupportedAgentError(agent.display_name, agent.unsupported_reason)
    if not agent.detect():
        raise AgentNotInstalledError(agent.display_name, agent.skill_path)
    return agent


def _create_devkit_directory(project_dir: Path) -> Path:
    """Create the .dev-kit workspace in a project."""
    devkit_dir = project_dir / ".dev-kit"
    for subdir in DEV_KIT_SUBDIRS:
        (devkit_dir / subdir).mkdir(parents=True, exist_ok=True)
    return devkit_dir


def _run_init(
    ctx: AppContext,
    agent_name: str | None,
    force: bool,
    verify: bool,
    assume_yes: bool,
    project_dir: Path,
) -> None:
    start = time.monotonic()
    agent = _resolve_agent(ctx, agent_name or _select_agent(ctx, assume_yes))
    ui.show_success(f"{agent.display_name} detected at {agent.skill_path}")

    _create_devkit_directory(project_dir)

    skills = get_dev_kit_skills()
    console.print(f"Found {len(skills)} dev-kit skills to install")

    installed_names = set(agent.get_installed_skills())
    conflicting = [s.name for s in skills if s.name in installed_names]
    if conflicting and not force:
        ui.show_warning(f"Already installed: {', '.join(conflicting)}")
        console.print("Use --force to overwrite existing skills")
        if not assume_yes:
            if not ui.confirm("Skip existing skills and install only new ones?"):
                console.print("Installation cancelled")
                raise typer.Exit(0)
            skills = [s for s in skills if s.name not in installed_names]

    installed = skipped = failed = 0
    for skill in skills:
        result = agent.install(
            skill,
            InstallOptions(
                overwrite=force,
                backup=True,
                on_progress=lambda current, total, name: ctx.logger.debug(
                    "  [%d/%d] %s", current, total, name
                ),
            ),
        )
        ui.show_result(result)
        installed += len(result.installed_skills)
        skipped += len(result.skipped_skills)
        failed += len(result.errors)

        if verify and result.installed_skills:
            if agent.verify(skill.name):
                ui.show_success("  Verification passed")
            else:
                ui.show_warning("  Verification failed")

    ui.show_summary(installed, skipped, failed, time.monotonic() - start)
    if failed:
        raise typer.Exit(1)
    ui.show_next_steps()


@app.command()
def init(
    agent: Annotated[
        str | None, typer.Argument(help="Agent to initialize (e.g. claude-code)")
    ] = None,
    force: Annotated[bool, typer.Option("--force", help="Overwrite existing skills")] = False,
    verify: Annotated[bool, typer.Option("--verify", help="Verify skills after install")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose output")] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Non-interactive mode")] = False,
    project_dir: Annotated[
        Path | None, typer.Option("--project-dir", help="Project to create .dev-kit in")
    ] = None,
    _context=None,
) -> None:
    """Install the dev-kit skills for an agent."""
    ctx = _context or create_context()
    configure_logging(verbose or ctx.config.preferences.verbose)

    try:
        _run_init(ctx, agent, force, verify, yes, project_dir or Path.cwd())
    except DevKitError as e:
        ui.show_devkit_error(e)
        raise typer.Exit(1) from e
    finally:
        ctx.close()


# ============================================================================
# Agent and skill inspection
# ============================================================================


@app.command("agents")
def agents_command(_context=None) -> None:
    """List known agents and whether they are detected."""
    ctx = _context or create_context()
    ui.show_agents(ctx.registry.agent_info(detect=True))


@app.command("list")
def list_skills(
    agent: Annotated[str, typer.Argument(help="Agent name")],
    _context=None,
) -> None:
    """List skills installed for an agent."""
    ctx = _context or create_context()
    try:
        target = ctx.registry.get_or_throw(agent)
        ui.show_installed(target.display_name, target.get_installed_skills())
    except DevKitError as e:
        ui.show_devkit_error(e)
        raise typer.Exit(1) from e


@app.command()
def verify(
    agent: Annotated[str, typer.Argument(help="Agent name")],
    skill: Annotated[str, typer.Argument(help="Skill name")],
    _context=None,
) -> None:
    """Verify an installed skill."""
    ctx = _context or create_context()
    try:
        target = ctx.registry.get_or_throw(agent)
    except DevKitError as e:
        ui.show_devkit_error(e)
        raise typer.Exit(1) from e

    if target.verify(skill):
        ui.show_success(f"{skill} is correctly installed for {target.display_name}")
    else:
        ui.show_error(f"{skill} is missing or invalid for {target.display_name}")
        raise typer.Exit(1)


@app.command()
def uninstall(
    agent: Annotated[str, typer.Argument(help="Agent name")],
    skill: Annotated[str, typer.Argument(help="Skill name")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
    _context=None,
) -> None:
    """Remove an installed skill."""
    ctx = _context or create_context()
    try:
        target = ctx.registry.get_or_throw(agent)
        if skill not in target.get_installed_skills():
            ui.show_error(f"{skill} is not installed for {target.display_name}")
            raise typer.Exit(1)
        if not yes and not ui.confirm(f"Remove {skill} from {target.display_name}?"):
            raise typer.Exit(0)
        target.uninstall(skill)
        ui.show_success(f"Uninstalled {skill}")
    except DevKitError as e:
        ui.show_devkit_error(e)
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
