"""Agent CLI engine definitions and detection."""

from yabp.engines.base import Engine
from yabp.engines.claude import CLAUDE
from yabp.engines.cursor import CURSOR

__all__ = [
    "Engine",
    "ENGINES",
    "CLAUDE",
    "CURSOR",
    "DEFAULT_ENGINE",
    "get_available_engines",
    "get_engine_by_name",
    "get_missing_engines",
]

ENGINES: tuple[Engine, ...] = (
    CURSOR,
    CLAUDE,
)

DEFAULT_ENGINE = "cursor"


def get_available_engines() -> list[Engine]:
    """Return list of engines that are currently installed."""
    return [engine for engine in ENGINES if engine.is_installed()]


def get_missing_engines() -> list[Engine]:
    """Return list of engines that are not installed."""
    return [engine for engine in ENGINES if not engine.is_installed()]


def get_engine_by_name(name: str) -> Engine | None:
    """Find engine by name (case-insensitive), cli_command or short alias."""
    name_lower = name.lower()
    for engine in ENGINES:
        if (
            engine.name.lower() == name_lower
            or engine.cli_command == name
            or engine.cli_command.split("-")[0] == name_lower
        ):
            return engine
    return None
