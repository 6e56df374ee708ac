"""Assemble the final instruction sent to an execution backend.

The assembled text is laid out as::

    [Project Context block]      (when the prompt lists input_files)
    [CRITICAL SYSTEM INSTRUCTION] (when the agent defines one)
    CRITICAL GLOBAL RULES header
    interpolated prompt body
    [OUTPUT INSTRUCTION footer]  (when a docs folder applies)
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from yabp.agents.base import Agent
from yabp.projects.store import InvalidPathError, safe_relative_path
from yabp.templates.frontmatter import docs_folder_prefix
from yabp.templates.interpolator import interpolate

logger = logging.getLogger(__name__)

GLOBAL_RULES_HEADER = """
# CRITICAL GLOBAL RULES (NON-NEGOTIABLE) ⚠️
1. **LANGUAGE**: All output MUST be in **ENGLISH**. No Portuguese, no Spanish. ENGLISH ONLY.
2. **DIAGRAMS**: If a diagram is requested, it MUST be generic **Mermaid**.
   - Use ```mermaid``` code blocks.
   - **NO ASCII**.
   - **STRICT SYNTAX**:
     - Quoted IDs are NOT allowed in graph definitions (e.g. `A["Label"]` is GOOD, `"A"["Label"]` is BAD).
     - Node Labels MUST be quoted (e.g. `id["My Label"]`).
     - No colons in Node IDs (e.g. `Class:Method` -> BAD, `ClassMethod` -> GOOD).
3. **FILE FORMAT**: Return Markdown or Code files as requested.

---
"""

INPUT_FILES_RE = re.compile(r"input_files:[ \t]*\n?((?:[ \t]*-[ \t]+.+\n?)+)")
_LIST_MARKER_RE = re.compile(r"-\s*")

CONTEXT_HEADER = (
    "\n\n# Project Context 🗂️\n"
    "The following artifacts have been created in previous phases:\n"
)
SECTION_SEPARATOR = "\n\n---\n\n"


def parse_input_files(raw_prompt: str) -> list[str]:
    """Return the paths listed under ``input_files:`` in a prompt, if any."""
    match = INPUT_FILES_RE.search(raw_prompt)
    if match is None:
        return []
    files = []
    for line in match.group(1).split("\n"):
        entry = _LIST_MARKER_RE.sub("", line, count=1).strip()
        if entry:
            files.append(entry)
    return files


def _read_project_file(project_root: Path, relative_path: str) -> str | None:
    try:
        path = project_root / safe_relative_path(relative_path)
    except InvalidPathError:
        logger.warning("Refusing to inject file outside the project: %s", relative_path)
        return None
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def build_context_block(project_root: Path, files: list[str]) -> str:
    """Render the Project Context block for upstream artifacts."""
    block = CONTEXT_HEADER
    for filename in files:
        try:
            content = _read_project_file(project_root, filename)
        except UnicodeDecodeError:
            logger.warning("Cannot inject non-UTF-8 file %s", filename)
            block += (
                f"\n> [UNREADABLE] {filename} is not UTF-8 text "
                "and was not injected.\n"
            )
            continue
        if content is None:
            block += (
                f"\n> [MISSING] {filename} not found. "
                "Ensure previous steps are completed.\n"
            )
        else:
            block += f"\n## {filename}\n```markdown\n{content}\n```\n"
    return block


def output_instruction(prefix: str) -> str:
    return (
        "\n\n# OUTPUT INSTRUCTION\n"
        f"IMPORTANT: Any markdown documentation created MUST be saved in the `{prefix}` "
        f"directory (e.g., `{prefix}my_file.md`). Do not output files to the root."
    )


def build_variables(
    project_config: Mapping[str, Any],
    context: Mapping[str, Any],
    project_name: str,
) -> dict[str, Any]:
    """Variable context for prompt interpolation.

    Config keys are top level, the shared context sits under ``context`` and
    ``name`` is always the project name.
    """
    return {**project_config, "context": dict(context), "name": project_name}


def assemble(
    raw_prompt: str,
    project_config: Mapping[str, Any],
    context: Mapping[str, Any],
    agent: Agent | None,
    project_root: Path,
    project_name: str,
    docs_folder: str | None = None,
) -> str:
    """Build the instruction for one prompt run.

    Args:
        raw_prompt: Prompt text as written, before interpolation.
        project_config: The project's config.json contents.
        context: The project's shared context.json contents.
        agent: Agent the prompt runs as, if any.
        project_root: Project directory, used to read ``input_files``.
        project_name: Value bound to ``{{name}}``.
        docs_folder: Overrides the agent's docs folder for the footer.

    Returns:
        The assembled instruction text.
    """
    variables = build_variables(project_config, context, project_name)
    body = GLOBAL_RULES_HEADER + interpolate(raw_prompt, variables)

    if agent is not None and agent.system_instruction:
        body = (
            f"\n\n# CRITICAL SYSTEM INSTRUCTION\n{agent.system_instruction}"
            f"{SECTION_SEPARATOR}{body}"
        )

    input_files = parse_input_files(raw_prompt)
    if input_files:
        body = build_context_block(project_root, input_files) + SECTION_SEPARATOR + body

    folder = docs_folder or (agent.docs_folder if agent is not None else None)
    prefix = docs_folder_prefix(folder)
    if prefix and prefix not in body:
        body += output_instruction(prefix)

    return body
