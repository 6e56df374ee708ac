"""Simulation executor: derive mock artifacts from fragment frontmatter.

No process is spawned. Each fragment that declares an ``output_file`` is
written to the project with its example content, so the file tree shows
what a live run would be expected to produce.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from yabp.agents.loader import AgentStore
from yabp.executors.base import (
    ExecutionRequest,
    ExecutionResult,
    ExecutionState,
    Executor,
    SimulatedArtifact,
)
from yabp.projects.store import InvalidPathError, safe_relative_path
from yabp.templates.frontmatter import (
    DOCS_DIR,
    docs_folder_prefix,
    extract_code_example,
    split_frontmatter,
)

logger = logging.getLogger(__name__)


def simulation_banner(user_prompt: str) -> str:
    return (
        "> **[SIMULATION MODE]**\n"
        f'> **User Input**: "{user_prompt}"\n'
        "> \n"
        "> *Note: This is a structural example. Connect an LLM to generate real "
        "content based on your input.*\n\n---\n\n"
    )


def inject_banner(content: str, banner: str) -> str:
    """Place the banner after a leading H1 line, otherwise in front."""
    if content.startswith("# "):
        first_line, newline, rest = content.partition("\n")
        if newline:
            return first_line + "\n\n" + banner + rest.strip()
        return content + "\n\n" + banner
    return banner + content


def effective_output_path(output_file: str, docs_folder: str | None) -> str:
    """Prefix ``docs/<folder>/`` unless the path already lives under ``docs/``."""
    prefix = docs_folder_prefix(docs_folder)
    if not prefix or output_file.startswith(f"{DOCS_DIR}/"):
        return output_file
    return (PurePosixPath(prefix) / output_file).as_posix()


def _write_artifact(
    project_root: Path, relative_path: str, content: str, source: str | None
) -> SimulatedArtifact:
    try:
        target = project_root / safe_relative_path(relative_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except (InvalidPathError, OSError) as e:
        logger.warning("Failed to write mock artifact %s: %s", relative_path, e)
        return SimulatedArtifact(path=relative_path, source=source, error=str(e))
    logger.info("Wrote mock artifact %s", relative_path)
    return SimulatedArtifact(path=relative_path, source=source)


def synthesize(
    agent_id: str | None,
    raw_prompt: str,
    project_root: Path,
    store: AgentStore | None = None,
    interpolated_prompt: str | None = None,
    docs_folder: str | None = None,
) -> list[SimulatedArtifact]:
    """Write mock artifacts for a prompt run.

    With an agent, every fragment of that agent whose frontmatter declares
    ``output_file`` yields one artifact. The fragment's ``docs_folder`` wins
    over ``docs_folder`` (the agent's). Without an agent, the prompt's own
    frontmatter is used and the content comes from ``interpolated_prompt``.

    Write failures are reported per artifact; the remaining artifacts are
    still written.
    """
    banner = simulation_banner(raw_prompt)
    artifacts: list[SimulatedArtifact] = []

    if agent_id is not None:
        if store is None:
            return artifacts
        for relative_path in store.list_fragments(agent_id):
            fragment = store.load_fragment(agent_id, relative_path)
            if fragment is None or fragment.frontmatter is None:
                continue
            output_file = fragment.frontmatter.output_file
            if output_file is None:
                continue

            folder = fragment.frontmatter.docs_folder or docs_folder
            out = effective_output_path(output_file, folder)
            source = PurePosixPath(relative_path).name
            content = extract_code_example(fragment.content)
            if content is None:
                content = (
                    f"<!-- Mock Content for {out} -->\n\n"
                    "# Generated by Simulation Mode\n\n"
                    f"(No example content found in {source})"
                )
            artifacts.append(
                _write_artifact(project_root, out, inject_banner(content, banner), source)
            )
        return artifacts

    frontmatter, _ = split_frontmatter(raw_prompt)
    if frontmatter is None or frontmatter.output_file is None:
        return artifacts

    out = effective_output_path(
        frontmatter.output_file, frontmatter.docs_folder or docs_folder
    )
    content = extract_code_example(interpolated_prompt or raw_prompt)
    if content is None:
        content = f"<!-- Mock Content for {out} -->\n\n# Generated by Simulation Mode"
    artifacts.append(
        _write_artifact(project_root, out, inject_banner(content, banner), None)
    )
    return artifacts


class SimulationExecutor(Executor):
    """Executor that writes mock artifacts instead of running an engine."""

    name = "simulation"

    def execute(self, request: ExecutionRequest) -> ExecutionResult:
        artifacts = synthesize(
            request.agent_id,
            request.raw_prompt,
            request.project_root,
            store=request.agent_store,
            interpolated_prompt=request.instruction,
            docs_folder=request.agent_docs_folder,
        )
        failed = any(not artifact.ok for artifact in artifacts)
        return ExecutionResult(
            state=ExecutionState.FAILED if failed else ExecutionState.COMPLETED,
            instruction=request.instruction,
            simulated=True,
            artifacts=artifacts,
        )
