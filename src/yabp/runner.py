"""Engine validation for live prompt runs."""

from yabp.console import console
from yabp.engines import ENGINES, Engine, get_engine_by_name


def resolve_engine(engine_name: str) -> Engine | None:
    """Resolve the engine a live run will spawn.

    Returns the engine if valid, None if validation fails (errors printed).
    """
    engine = get_engine_by_name(engine_name)
    if engine is None:
        console.print(f"[red]Unknown engine: {engine_name}[/red]")
        console.print("Available engines: " + ", ".join(e.cli_command for e in ENGINES))
        return None
    if not engine.is_installed():
        console.print(f"[red]Engine '{engine.name}' is not installed.[/red]")
        console.print(f"Install: {engine.install_info}")
        return None
    return engine
