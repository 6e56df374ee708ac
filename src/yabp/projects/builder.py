"""Create projects and keep their compiled artifacts in sync with config."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from yabp.agents.loader import AgentStore
from yabp.errors import YabpError
from yabp.projects.base import (
    EXECUTABLE_FILES_KEY,
    PROJECT_PATH_KEY,
    PROMPT_AFFECTING_KEYS,
)
from yabp.projects.compiler import (
    CompileResult,
    ExecutablePolicy,
    compile_project,
    nested_path_policy,
    write_project_files,
)
from yabp.projects.store import ProjectStore

logger = logging.getLogger(__name__)


def create_project(
    name: str,
    config: dict[str, Any],
    projects: ProjectStore,
    agents: AgentStore,
    policy: ExecutablePolicy = nested_path_policy,
) -> CompileResult:
    """Register a project, compile its prompt catalogue and write its files.

    The project directory is ``config["projectPath"]`` when given, otherwise
    ``<default base>/<name>``.
    """
    if not name:
        raise YabpError("Project name is required")

    custom_path = config.get(PROJECT_PATH_KEY)
    project_dir = Path(custom_path) if custom_path else projects.default_base / name
    project_dir.mkdir(parents=True, exist_ok=True)
    projects.register(name, project_dir)

    result = compile_project(name, config, agents, policy)
    write_project_files(project_dir, result)
    logger.info(
        "Created project %s at %s (%d executable prompts)",
        name,
        project_dir,
        len(result.executable_files),
    )
    return result


def regenerate_project(
    name: str,
    projects: ProjectStore,
    agents: AgentStore,
    policy: ExecutablePolicy = nested_path_policy,
) -> CompileResult:
    """Recompile a project from its stored configuration."""
    project = projects.get_project(name)
    result = compile_project(name, project.config, agents, policy)
    write_project_files(project.path, result)
    return result


def update_project_config(
    name: str,
    updates: dict[str, Any],
    projects: ProjectStore,
    agents: AgentStore,
    policy: ExecutablePolicy = nested_path_policy,
) -> dict[str, Any]:
    """Merge configuration updates, recompiling when agents or selections change.

    ``executableFiles`` is owned by the compiler and is dropped from updates.

    Returns the configuration as stored afterwards.
    """
    if EXECUTABLE_FILES_KEY in updates:
        logger.warning("Ignoring %s update for project %s", EXECUTABLE_FILES_KEY, name)
        updates = {k: v for k, v in updates.items() if k != EXECUTABLE_FILES_KEY}
    config = projects.update_config(name, updates)
    if not any(key in updates for key in PROMPT_AFFECTING_KEYS):
        return config

    logger.info("Regenerating prompts for project %s", name)
    result = compile_project(name, config, agents, policy)
    write_project_files(projects.resolve_path(name), result)
    return result.config
