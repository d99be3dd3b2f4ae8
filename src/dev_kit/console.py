"""Terminal output for dev-kit commands."""

from __future__ import annotations

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from dev_kit.agents import AgentInfo
from dev_kit.errors import DevKitError
from dev_kit.types import InstallResult


class ConsoleUI:
    """Non-interactive output plus simple prompts."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the console UI.

        Args:
            console: Rich console to print to.
        """
        self.console = console or Console()

    def confirm(self, message: str, default: bool = False) -> bool:
        return Confirm.ask(message, default=default, console=self.console)

    def prompt_choice(self, message: str, choices: list[str]) -> str:
        return Prompt.ask(message, choices=choices, default=choices[0], console=self.console)

    def show_agents(self, agents: list[AgentInfo]) -> None:
        """Display agents table.

        Args:
            agents: Agent information, optionally with detection results.
        """
        table = Table(title="Agents")
        table.add_column("Name", style="cyan")
        table.add_column("Display name")
        table.add_column("Supported")
        table.add_column("Detected")
        table.add_column("Skill path", style="dim")

        for agent in agents:
            if agent.detected is None:
                detected = "-"
            else:
                detected = "[green]yes[/green]" if agent.detected else "[red]no[/red]"
            supported = (
                "[green]yes[/green]"
                if agent.supported
                else f"[yellow]no[/yellow] ({agent.unsupported_reason})"
            )
            table.add_row(agent.name, agent.display_name, supported, detected, agent.skill_path)

        self.console.print(table)

    def show_installed(self, agent_name: str, skills: list[str]) -> None:
        """Display installed skill names for an agent."""
        if not skills:
            self.console.print(f"[yellow]No skills installed for {agent_name}[/yellow]")
            return

        self.console.print(f"\n[bold]Installed skills ({agent_name})[/bold]")
        for skill in skills:
            self.console.print(f"  {skill}")

    def show_result(self, result: InstallResult) -> None:
        """Display per-skill outcome of an install."""
        for name in result.installed_skills:
            self.show_success(name)
        for name in result.skipped_skills:
            self.console.print(f"[dim]-[/dim] {name} (skipped)")
        for error in result.errors:
            self.show_error(f"{error.skill}: {error.error}")

    def show_summary(self, installed: int, skipped: int, failed: int, duration: float) -> None:
        """Display the final installation summary."""
        self.console.print()
        if failed == 0:
            self.show_success(f"dev-kit initialized successfully in {duration:.2f}s")
        else:
            self.show_error(f"Installation completed with {failed} error(s)")
        self.console.print(f"  Installed: {installed} skills")
        if skipped or failed:
            self.console.print(f"  Skipped: {skipped} skills")
        if failed:
            self.console.print(f"  Failed: {failed} skills")

    def show_next_steps(self) -> None:
        """Display next steps after a successful init."""
        self.console.print()
        self.console.print("[bold]Next steps:[/bold]")
        self.console.print("  1. Try dev-kit workflows:")
        self.console.print('     /dev-kit-init "My project description"')
        self.console.print('     /dev-kit-ticket "Add user authentication"')
        self.console.print("     /dev-kit-work ticket=DKIT-001")
        self.console.print("  2. List installed skills:")
        self.console.print("     dev-kit list <agent>")

    def show_devkit_error(self, error: DevKitError) -> None:
        """Show an error with its remedy."""
        self.console.print(f"[red]✗[/red] {error.format()}")

    def show_success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def show_error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def show_warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")
