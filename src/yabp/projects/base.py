"""Project configuration and file tree models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Keys with a meaning to the engine; everything else is carried through as-is
AGENTS_KEY = "agents"
LEGACY_AGENTS_KEY = "templates"
SELECTIONS_KEY = "selections"
PROJECT_PATH_KEY = "projectPath"
PHASES_KEY = "phases"
EXECUTABLE_FILES_KEY = "executableFiles"

PROMPT_AFFECTING_KEYS = (AGENTS_KEY, LEGACY_AGENTS_KEY, SELECTIONS_KEY)


@dataclass
class ProjectConfig:
    """Per-project configuration stored in ``.yabp/config.json``.

    ``executable_files`` is only ever set by the artifact compiler.
    """

    agents: list[str] = field(default_factory=list)
    selections: dict[str, Any] = field(default_factory=dict)
    project_path: str | None = None
    phases: list[dict[str, Any]] | None = None
    executable_files: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk JSON layout."""
        result: dict[str, Any] = dict(self.extra)
        result[AGENTS_KEY] = list(self.agents)
        result[SELECTIONS_KEY] = dict(self.selections)
        if self.project_path is not None:
            result[PROJECT_PATH_KEY] = self.project_path
        if self.phases is not None:
            result[PHASES_KEY] = list(self.phases)
        result[EXECUTABLE_FILES_KEY] = list(self.executable_files)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectConfig:
        """Create from the on-disk layout. Unknown keys are kept in ``extra``."""
        known = {
            AGENTS_KEY,
            LEGACY_AGENTS_KEY,
            SELECTIONS_KEY,
            PROJECT_PATH_KEY,
            PHASES_KEY,
            EXECUTABLE_FILES_KEY,
        }
        agents_raw = data.get(AGENTS_KEY) or data.get(LEGACY_AGENTS_KEY) or []
        selections_raw = data.get(SELECTIONS_KEY)
        phases_raw = data.get(PHASES_KEY)
        project_path = data.get(PROJECT_PATH_KEY)
        return cls(
            agents=[str(a) for a in agents_raw],
            selections=dict(selections_raw) if isinstance(selections_raw, dict) else {},
            project_path=str(project_path) if project_path else None,
            phases=list(phases_raw) if isinstance(phases_raw, list) else None,
            executable_files=[str(f) for f in data.get(EXECUTABLE_FILES_KEY) or []],
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class ProjectInfo:
    """A registered project and its current configuration."""

    name: str
    path: Path
    config: dict[str, Any]


@dataclass(frozen=True)
class FileNode:
    """One entry of a project's file tree."""

    name: str
    path: str  # Relative to the project root
    is_dir: bool
    executable: bool = False
    children: tuple[FileNode, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        if self.is_dir:
            return {
                "name": self.name,
                "type": "directory",
                "path": self.path,
                "children": [child.to_dict() for child in self.children],
            }
        return {
            "name": self.name,
            "type": "file",
            "path": self.path,
            "executable": self.executable,
        }
