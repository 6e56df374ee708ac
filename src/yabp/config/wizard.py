"""Interactive configuration wizard."""

import click

from yabp.config.loader import get_home_config_path, save_config
from yabp.config.schema import DEFAULT_CONFIG, ExecutablePolicyType, YabpConfig
from yabp.console import console
from yabp.engines import ENGINES, get_available_engines


def run_home_wizard() -> YabpConfig:
    """Run interactive wizard to create global config.

    Returns the created YabpConfig.
    """
    console.print("\n[bold]Let's create your global configuration.[/bold]\n")

    config = YabpConfig()

    # 1. Storage
    config.agents_dir = click.prompt("Agents directory", default=DEFAULT_CONFIG.agents_dir)
    config.projects_dir = click.prompt(
        "Default directory for new projects", default=DEFAULT_CONFIG.projects_dir
    )

    # 2. Engine
    config.engine = _wizard_select_engine()

    # 3. Execution mode
    config.simulation = not click.confirm(
        "Run prompts through the engine CLI (live mode)?", default=False
    )
    if not config.simulation:
        api_key = click.prompt(
            "API key for the engine (blank to use YABP_API_KEY)",
            default="",
            show_default=False,
            hide_input=True,
        )
        config.api_key = api_key or None

    # 4. Executable policy
    config.executable_policy = _wizard_select_policy()

    # Review
    console.print("\n[bold]Review Configuration:[/bold]")
    for key, value in config.to_dict().items():
        shown = "***" if key == "api_key" else value
        console.print(f"  {key}: {shown}")

    if click.confirm("\nSave configuration?", default=True):
        path = get_home_config_path()
        save_config(config, path)
        console.print(f"\n[green]Configuration saved to {path}[/green]")
    else:
        console.print("\n[yellow]Configuration not saved.[/yellow]")

    return config


def _wizard_select_engine() -> str:
    """Prompt user to select the engine for live runs."""
    available = get_available_engines()

    console.print("\n[bold]Engine[/bold]")
    for engine in ENGINES:
        marker = (
            "[green]installed[/green]" if engine in available else "[dim]missing[/dim]"
        )
        console.print(f"  - {engine.cli_command} ({engine.name}) {marker}")

    return click.prompt(
        "Engine",
        type=click.Choice([engine.cli_command.split("-")[0] for engine in ENGINES]),
        default=DEFAULT_CONFIG.engine,
    )


def _wizard_select_policy() -> ExecutablePolicyType:
    """Prompt user to select how executable prompts are chosen."""
    console.print("\n[bold]Executable prompts[/bold]")
    console.print(
        "  nested: fragments in category folders plus prompts flagged in metadata"
    )
    console.print("  listed: only prompts flagged executable in metadata")

    choice = click.prompt(
        "Policy",
        type=click.Choice(["nested", "listed"]),
        default="nested",
    )
    if choice == "listed":
        return "listed"
    return "nested"
