"""Projects: configuration, storage, compilation and workflow presets."""

from yabp.projects.base import FileNode, ProjectConfig, ProjectInfo
from yabp.projects.builder import (
    create_project,
    regenerate_project,
    update_project_config,
)
from yabp.projects.compiler import (
    EXECUTABLE_POLICIES,
    CatalogueEntry,
    CompileError,
    CompileResult,
    compile_project,
    get_policy,
    parse_prompt_catalogue,
    write_project_files,
)
from yabp.projects.store import InvalidPathError, ProjectNotFoundError, ProjectStore
from yabp.projects.workflows import (
    WORKFLOW_TEMPLATES,
    WorkflowPhase,
    WorkflowTemplate,
    get_workflow_by_id,
)

__all__ = [
    "EXECUTABLE_POLICIES",
    "WORKFLOW_TEMPLATES",
    "CatalogueEntry",
    "CompileError",
    "CompileResult",
    "FileNode",
    "InvalidPathError",
    "ProjectConfig",
    "ProjectInfo",
    "ProjectNotFoundError",
    "ProjectStore",
    "WorkflowPhase",
    "WorkflowTemplate",
    "compile_project",
    "create_project",
    "get_policy",
    "get_workflow_by_id",
    "parse_prompt_catalogue",
    "regenerate_project",
    "update_project_config",
    "write_project_files",
]
