"""Project registry and per-project file storage.

Project layout::

    <project>/
        README.md
        .yabp/
            config.json
            context.json
            prompts.md
            executions/
        .deleted/          (soft-deleted files)
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

from yabp.errors import YabpError
from yabp.history.models import timestamp_slug
from yabp.projects.base import EXECUTABLE_FILES_KEY, FileNode, ProjectInfo

logger = logging.getLogger(__name__)

YABP_DIRNAME = ".yabp"
CONFIG_JSON = "config.json"
CONTEXT_JSON = "context.json"
PROMPTS_MD = "prompts.md"
DELETED_DIRNAME = ".deleted"

# Hidden from file tree listings
IGNORED_NAMES = frozenset({YABP_DIRNAME, "node_modules", ".git", ".DS_Store"})


class ProjectNotFoundError(YabpError):
    """Raised when a project directory or its configuration does not exist."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Project not found: {name}")


class InvalidPathError(YabpError):
    """Raised when a file path would leave the project directory."""


def _read_json(path: Path) -> dict[str, Any] | None:
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("Failed to parse %s", path)
        return None
    return data if isinstance(data, dict) else None


def _write_json(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def safe_relative_path(relative_path: str) -> PurePosixPath:
    """Validate a project-relative path, rejecting absolute paths and ``..``."""
    path = PurePosixPath(relative_path.replace("\\", "/"))
    if not relative_path or path.is_absolute() or ".." in path.parts:
        raise InvalidPathError(f"Invalid file path: {relative_path}")
    return path


class ProjectStore:
    """Registry of projects plus config, context and file access per project."""

    def __init__(self, registry_path: Path, default_base: Path) -> None:
        """Initialize the store.

        Args:
            registry_path: YAML file mapping project name to directory.
            default_base: Directory new projects are created under, and the
                fallback location for unregistered names.
        """
        self.registry_path = registry_path
        self.default_base = default_base

    # Registry

    def _load_registry(self) -> dict[str, str]:
        if not self.registry_path.exists():
            return {}
        try:
            with self.registry_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError:
            logger.warning("Invalid project registry: %s", self.registry_path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save_registry(self, registry: dict[str, str]) -> None:
        self.registry_path.parent.mkdir(parents=True, exist_ok=True)
        with self.registry_path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(registry, f, default_flow_style=False, sort_keys=True)

    def register(self, name: str, project_dir: Path) -> None:
        registry = self._load_registry()
        registry[name] = str(project_dir)
        self._save_registry(registry)

    def unregister(self, name: str) -> bool:
        registry = self._load_registry()
        if name not in registry:
            return False
        del registry[name]
        self._save_registry(registry)
        return True

    def resolve_path(self, name: str) -> Path:
        """Return a project's directory: registry entry, else under the default base."""
        registry = self._load_registry()
        if name in registry:
            return Path(registry[name])
        return self.default_base / name

    def list_projects(self) -> list[ProjectInfo]:
        """Return every registered project with its configuration."""
        return [
            ProjectInfo(name=name, path=Path(path), config=self.read_config(name))
            for name, path in sorted(self._load_registry().items())
        ]

    def get_project(self, name: str) -> ProjectInfo:
        project_dir = self.resolve_path(name)
        if not project_dir.exists():
            raise ProjectNotFoundError(name)
        return ProjectInfo(name=name, path=project_dir, config=self.read_config(name))

    def delete_project(self, name: str) -> bool:
        """Unregister a project and remove its directory if it lives under the default base.

        Returns True if the directory was removed.
        """
        project_dir = self.resolve_path(name)
        self.unregister(name)
        if project_dir.exists() and project_dir.resolve().is_relative_to(
            self.default_base.resolve()
        ):
            shutil.rmtree(project_dir)
            return True
        return False

    # Configuration and context

    def yabp_dir(self, name: str) -> Path:
        return self.resolve_path(name) / YABP_DIRNAME

    def config_exists(self, name: str) -> bool:
        return (self.yabp_dir(name) / CONFIG_JSON).exists()

    def read_config(self, name: str) -> dict[str, Any]:
        """Return the project configuration, or an empty dict when there is none."""
        return _read_json(self.yabp_dir(name) / CONFIG_JSON) or {}

    def write_config(self, name: str, config: dict[str, Any]) -> None:
        _write_json(self.yabp_dir(name) / CONFIG_JSON, config)

    def update_config(self, name: str, updates: dict[str, Any]) -> dict[str, Any]:
        """Merge top-level keys into the project configuration and return it."""
        if not self.resolve_path(name).exists():
            raise ProjectNotFoundError(name)
        config = {**self.read_config(name), **updates}
        self.write_config(name, config)
        return config

    def read_context(self, name: str) -> dict[str, Any]:
        return _read_json(self.yabp_dir(name) / CONTEXT_JSON) or {}

    def update_context(self, name: str, updates: dict[str, Any]) -> dict[str, Any]:
        """Merge top-level keys into the project context and return the result."""
        if not self.resolve_path(name).exists():
            raise ProjectNotFoundError(name)
        context = {**self.read_context(name), **updates}
        _write_json(self.yabp_dir(name) / CONTEXT_JSON, context)
        return context

    # Files

    def read_file(self, name: str, relative_path: str) -> str | None:
        """Return a project file's content, or None when it does not exist."""
        path = self.resolve_path(name) / safe_relative_path(relative_path)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def write_file(self, name: str, relative_path: str, content: str) -> Path:
        path = self.resolve_path(name) / safe_relative_path(relative_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def delete_file(self, name: str, relative_path: str) -> str | None:
        """Move a file into ``.deleted/`` under a timestamped, flattened name.

        Returns the new file name, or None when the file does not exist.
        """
        relative = safe_relative_path(relative_path)
        project_dir = self.resolve_path(name)
        source = project_dir / relative
        if not source.exists():
            return None

        deleted_dir = project_dir / DELETED_DIRNAME
        deleted_dir.mkdir(parents=True, exist_ok=True)
        flattened_dir = "_".join(relative.parent.parts) or "."
        dest_name = f"{timestamp_slug()}_{flattened_dir}_{relative.name}"
        shutil.move(str(source), deleted_dir / dest_name)
        logger.info("Soft-deleted %s from %s to %s", relative, name, dest_name)
        return dest_name

    def list_files(self, name: str) -> list[FileNode]:
        """Return the project's file tree, flagging executable prompt files."""
        project_dir = self.resolve_path(name)
        if not project_dir.exists():
            raise ProjectNotFoundError(name)
        executable = set(self.read_config(name).get(EXECUTABLE_FILES_KEY) or [])
        return _walk(project_dir, PurePosixPath(), executable)


def _walk(directory: Path, relative: PurePosixPath, executable: set[str]) -> list[FileNode]:
    nodes: list[FileNode] = []
    for item in sorted(directory.iterdir(), key=lambda p: p.name):
        if item.name in IGNORED_NAMES:
            continue
        item_path = (relative / item.name).as_posix()
        if item.is_dir():
            nodes.append(
                FileNode(
                    name=item.name,
                    path=item_path,
                    is_dir=True,
                    children=tuple(_walk(item, relative / item.name, executable)),
                )
            )
        else:
            nodes.append(
                FileNode(
                    name=item.name,
                    path=item_path,
                    is_dir=False,
                    executable=item.name in executable,
                )
            )
    return nodes
