"""Compile a project's agents and selections into its prompt catalogue."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from yabp.agents.base import Agent
from yabp.agents.loader import AgentStore
from yabp.errors import YabpError
from yabp.projects.base import ProjectConfig
from yabp.projects.store import CONFIG_JSON, PROMPTS_MD, YABP_DIRNAME, _write_json
from yabp.selection.resolver import ResolvedFragment, resolve_fragments
from yabp.selection.rules import DEFAULT_RULES, SelectionRule
from yabp.templates.interpolator import interpolate

logger = logging.getLogger(__name__)

README_MD = "README.md"
CATALOGUE_SPLIT_RE = re.compile(r"^###\s+", re.MULTILINE)
_FENCE_RE = re.compile(r"^```\n?|```$")

ExecutablePolicy = Callable[[Agent, ResolvedFragment], bool]


class CompileError(YabpError):
    """Raised when resolved fragments cannot be written to the catalogue."""


def _listed_executable(agent: Agent, fragment: ResolvedFragment) -> bool:
    ref = agent.find_prompt(fragment.base_id, fragment.title)
    return ref is not None and ref.executable


def nested_path_policy(agent: Agent, fragment: ResolvedFragment) -> bool:
    """Fragments in a category directory count as curated and are executable.

    Top-level fragments are executable when the agent's prompt list flags them.
    """
    if "/" in fragment.relative_path:
        return True
    return _listed_executable(agent, fragment)


def listed_policy(agent: Agent, fragment: ResolvedFragment) -> bool:
    """Only fragments flagged executable in the agent's prompt list."""
    return _listed_executable(agent, fragment)


EXECUTABLE_POLICIES: dict[str, ExecutablePolicy] = {
    "nested": nested_path_policy,
    "listed": listed_policy,
}
DEFAULT_POLICY = "nested"


def get_policy(name: str | None) -> ExecutablePolicy:
    policy_name = name or DEFAULT_POLICY
    if policy_name not in EXECUTABLE_POLICIES:
        raise ValueError(f"Unknown executable policy: {policy_name}")
    return EXECUTABLE_POLICIES[policy_name]


def executable_filename(title: str) -> str:
    return f"{title}.md"


@dataclass(frozen=True)
class CompiledFragment:
    """A fragment as placed in the catalogue."""

    agent_id: str
    title: str
    relative_path: str
    executable: bool


@dataclass(frozen=True)
class CompileResult:
    """Output of one compile run."""

    combined_document: str
    executable_files: tuple[str, ...]
    config: dict[str, Any]
    readme: str
    fragments: tuple[CompiledFragment, ...] = ()


def build_readme(name: str, agents: list[str]) -> str:
    agent_lines = "\n".join(f"- {agent_id}" for agent_id in agents)
    return (
        f"# {name}\n\n"
        "This project was generated using YABP with the following agents:\n"
        f"{agent_lines}\n\n"
        "Check the `.yabp/prompts.md` for the prompts to use with the agent CLI."
    )


def _check_title(agent_id: str, title: str) -> None:
    if "\n" in title or "\r" in title or CATALOGUE_SPLIT_RE.search(title):
        raise CompileError(
            f"Fragment title of agent {agent_id} cannot be used as a heading: {title!r}"
        )


def compile_project(
    name: str,
    config: dict[str, Any],
    store: AgentStore,
    policy: ExecutablePolicy = nested_path_policy,
    rules: tuple[SelectionRule, ...] = DEFAULT_RULES,
) -> CompileResult:
    """Build the prompt catalogue, executable set and updated configuration.

    Agents are processed in configuration order. Agents without metadata
    are skipped. The returned configuration carries the freshly computed
    executable file list, replacing any previous one.
    """
    project_config = ProjectConfig.from_dict(config)

    parts = [f"# Project Prompts for {name}\n\nGenerated by YABP\n\n"]
    executable_files: list[str] = []
    compiled: list[CompiledFragment] = []

    for agent_id in project_config.agents:
        agent = store.get_agent(agent_id)
        if agent is None:
            logger.warning("Skipping unknown agent %s in project %s", agent_id, name)
            continue

        parts.append(f"## Agent: {agent.name}\n\n")

        for fragment in resolve_fragments(
            agent_id, store, project_config.selections, rules
        ):
            _check_title(agent_id, fragment.title)
            parts.append(f"### {fragment.title}\n\n```\n{fragment.content}\n```\n\n")

            is_executable = policy(agent, fragment)
            if is_executable:
                executable_files.append(executable_filename(fragment.title))
            compiled.append(
                CompiledFragment(
                    agent_id=agent_id,
                    title=fragment.title,
                    relative_path=fragment.relative_path,
                    executable=is_executable,
                )
            )

    project_config.executable_files = executable_files

    return CompileResult(
        combined_document="".join(parts),
        executable_files=tuple(executable_files),
        config=project_config.to_dict(),
        readme=build_readme(name, project_config.agents),
        fragments=tuple(compiled),
    )


def write_project_files(project_dir: Path, result: CompileResult) -> None:
    """Persist a compile result: config, catalogue and README together."""
    yabp_dir = project_dir / YABP_DIRNAME
    yabp_dir.mkdir(parents=True, exist_ok=True)
    _write_json(yabp_dir / CONFIG_JSON, result.config)
    (yabp_dir / PROMPTS_MD).write_text(result.combined_document, encoding="utf-8")
    (project_dir / README_MD).write_text(result.readme, encoding="utf-8")


@dataclass(frozen=True)
class CatalogueEntry:
    """A prompt read back from a compiled catalogue."""

    title: str
    body: str


def parse_prompt_catalogue(
    document: str, variables: dict[str, Any] | None = None
) -> list[CatalogueEntry]:
    """Split a catalogue on level-3 headings and interpolate each body."""
    entries: list[CatalogueEntry] = []
    for chunk in CATALOGUE_SPLIT_RE.split(document)[1:]:
        title, _, rest = chunk.partition("\n")
        body = _FENCE_RE.sub("", rest.strip())
        if variables is not None:
            body = interpolate(body, variables)
        entries.append(
            CatalogueEntry(title=title.strip().removesuffix(".md"), body=body)
        )
    return entries
