"""Preflight checks to validate environment."""

from pathlib import Path

from yabp.agents.loader import AgentStore
from yabp.console import console
from yabp.engines import ENGINES, get_available_engines


def check_agents_dir(agents_dir: Path) -> bool:
    """Validate the agents directory exists and holds at least one agent."""
    if not agents_dir.is_dir():
        console.print(f"[red]✗[/red] Agents directory not found: {agents_dir}")
        console.print(
            "[dim]Run [cyan]yabp init[/cyan] to install the default agents.[/dim]"
        )
        return False

    agents = AgentStore(agents_dir).list_agents()
    if not agents:
        console.print(f"[red]✗[/red] No agents in {agents_dir}")
        return False

    console.print(f"[green]✓[/green] {len(agents)} agent(s) in {agents_dir}")
    return True


def check_engines() -> bool:
    """Check for installed agent CLIs. Only live execution needs one."""
    console.print("\n[bold]Agent CLIs:[/bold]")

    for engine in ENGINES:
        if engine.is_installed():
            console.print(
                f"  [green]✓[/green] {engine.name} ([cyan]{engine.cli_command}[/cyan])"
            )
        else:
            console.print(
                f"  [dim]✗[/dim] {engine.name} - [dim]{engine.install_info}[/dim]"
            )

    available = get_available_engines()
    if not available:
        console.print("\n[yellow]⚠[/yellow] No agent CLIs detected.")
        console.print("[dim]Prompts can only run in simulation mode.[/dim]")
        return False

    console.print(f"\n[green]✓[/green] {len(available)} engine(s) available")
    return True


def run_all_checks(agents_dir: Path) -> bool:
    """Run all preflight checks."""
    console.print("[bold]Running preflight checks...[/bold]\n")

    results = [check_agents_dir(agents_dir), check_engines()]
    all_passed = all(results)

    if all_passed:
        console.print("\n[bold green]All preflight checks passed![/bold green]")
    else:
        console.print("\n[bold red]Some preflight checks failed.[/bold red]")

    return all_passed
