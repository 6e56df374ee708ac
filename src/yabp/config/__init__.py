"""Configuration management for yabp."""

from yabp.config.init import copy_default_agents, ensure_home_yabp_dir
from yabp.config.loader import (
    apply_env_overrides,
    get_home_config_path,
    get_local_config_path,
    get_registry_path,
    home_config_exists,
    load_config,
    resolve_dir,
    save_config,
    settings_from_config,
)
from yabp.config.preflight import run_all_checks
from yabp.config.schema import DEFAULT_CONFIG, ExecutablePolicyType, YabpConfig
from yabp.config.wizard import run_home_wizard

__all__ = [
    "DEFAULT_CONFIG",
    "ExecutablePolicyType",
    "YabpConfig",
    "apply_env_overrides",
    "copy_default_agents",
    "ensure_home_yabp_dir",
    "get_home_config_path",
    "get_local_config_path",
    "get_registry_path",
    "home_config_exists",
    "load_config",
    "resolve_dir",
    "run_all_checks",
    "run_home_wizard",
    "save_config",
    "settings_from_config",
]
