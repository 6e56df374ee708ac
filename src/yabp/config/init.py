"""Initialization logic for the yabp home directory."""

import shutil
from pathlib import Path

from yabp.agents.loader import METADATA_YAML
from yabp.config.loader import get_home_dir


def get_package_agents_path() -> Path:
    """Get path to package-bundled default agents."""
    return Path(__file__).parent.parent / "agents" / "default"


def discover_agent_dirs(base_path: Path) -> dict[str, Path]:
    """Discover agent directories within a base path.

    Returns dict mapping agent id -> agent directory path.
    Only includes directories containing metadata.yaml.
    """
    agents: dict[str, Path] = {}
    if not base_path.exists():
        return agents

    for item in sorted(base_path.iterdir()):
        if item.is_dir() and (item / METADATA_YAML).exists():
            agents[item.name] = item
    return agents


def copy_default_agents(target: Path) -> list[str]:
    """Copy default agents from package to the agents directory.

    Agents that already exist in ``target`` are left untouched.

    Returns:
        List of agent ids that were copied.
    """
    target.mkdir(parents=True, exist_ok=True)

    copied: list[str] = []
    for agent_id, agent_dir in discover_agent_dirs(get_package_agents_path()).items():
        dest = target / agent_id
        if not dest.exists():
            shutil.copytree(agent_dir, dest)
            copied.append(agent_id)

    return copied


def ensure_home_yabp_dir() -> Path:
    """Create ~/.yabp directory if it doesn't exist.

    Returns the path to the home yabp directory.
    """
    home_yabp = get_home_dir()
    home_yabp.mkdir(parents=True, exist_ok=True)
    return home_yabp
