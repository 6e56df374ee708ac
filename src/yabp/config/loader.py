"""Configuration file loading and merging."""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml

from yabp.config.schema import DEFAULT_CONFIG, YabpConfig
from yabp.executors.base import ExecutionSettings

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"
REGISTRY_FILENAME = "projects.yaml"

ENV_API_KEY = "YABP_API_KEY"
ENV_AGENTS_DIR = "YABP_AGENTS_DIR"
ENV_PROJECTS_DIR = "YABP_PROJECTS_DIR"


def get_home_dir() -> Path:
    """Get path to the global yabp directory: ~/.yabp."""
    return Path.home() / ".yabp"


def get_home_config_path() -> Path:
    """Get path to global config: ~/.yabp/config.yaml."""
    return get_home_dir() / CONFIG_FILENAME


def get_local_config_path() -> Path:
    """Get path to local config: ./.yabp/config.yaml."""
    return Path.cwd() / ".yabp" / CONFIG_FILENAME


def get_registry_path() -> Path:
    """Get path to the project registry: ~/.yabp/projects.yaml."""
    return get_home_dir() / REGISTRY_FILENAME


def home_config_exists() -> bool:
    """Check if the global home config exists."""
    return get_home_config_path().exists()


def load_yaml_config(path: Path) -> dict[str, object] | None:
    """Load a YAML config file, return None if not found or empty."""
    if not path.exists():
        return None
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError:
        logger.warning("Ignoring invalid config file: %s", path)
        return None
    if not isinstance(data, dict):
        return None
    result: dict[str, object] = data
    return result


def load_config() -> YabpConfig:
    """Load merged configuration.

    Precedence (lowest to highest):
    1. Built-in defaults
    2. Global config (~/.yabp/config.yaml)
    3. Local config (./.yabp/config.yaml)
    """
    config = DEFAULT_CONFIG

    home_data = load_yaml_config(get_home_config_path())
    if home_data:
        config = config.merge(YabpConfig.from_dict(home_data))

    local_data = load_yaml_config(get_local_config_path())
    if local_data:
        config = config.merge(YabpConfig.from_dict(local_data))

    return config


def save_config(config: YabpConfig, path: Path) -> None:
    """Save config to a YAML file.

    Creates parent directories if needed.
    Only saves non-None values.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def apply_env_overrides(
    config: YabpConfig, environ: Mapping[str, str] | None = None
) -> YabpConfig:
    """Overlay YABP_* environment variables on a loaded config."""
    env = os.environ if environ is None else environ
    overrides = YabpConfig(
        api_key=env.get(ENV_API_KEY) or None,
        agents_dir=env.get(ENV_AGENTS_DIR) or None,
        projects_dir=env.get(ENV_PROJECTS_DIR) or None,
    )
    return config.merge(overrides)


def resolve_dir(value: str | None, fallback: str) -> Path:
    return Path(value or fallback).expanduser()


def settings_from_config(
    config: YabpConfig,
    simulation: bool | None = None,
    environ: Mapping[str, str] | None = None,
) -> ExecutionSettings:
    """Build executor settings. ``simulation`` overrides the configured mode."""
    return ExecutionSettings(
        engine=config.engine or DEFAULT_CONFIG.engine or "cursor",
        api_key=config.api_key,
        simulation=(
            simulation
            if simulation is not None
            else config.simulation is not False
        ),
        environ=dict(os.environ if environ is None else environ),
    )
