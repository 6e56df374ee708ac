"""Run a prompt against a project: assemble, log, dispatch."""

from __future__ import annotations

import logging
from datetime import datetime

from yabp.agents.loader import AgentStore
from yabp.executors import (
    ExecutionRequest,
    ExecutionResult,
    ExecutionSettings,
    ExecutionState,
    dispatch,
)
from yabp.history.repository import ExecutionLogRepository
from yabp.projects.store import ProjectStore
from yabp.prompts.assembler import assemble

logger = logging.getLogger(__name__)


def run_prompt(
    project_name: str,
    raw_prompt: str,
    projects: ProjectStore,
    agents: AgentStore,
    settings: ExecutionSettings,
    agent_id: str | None = None,
    docs_folder: str | None = None,
    now: datetime | None = None,
) -> ExecutionResult:
    """Assemble a prompt for a project, record it and hand it to an executor.

    The execution log is written before dispatch, so a failed or
    interrupted run still leaves the instruction on disk. An unknown
    ``agent_id`` is treated like a custom prompt for assembly but keeps its
    id in the log name.

    Raises:
        ProjectNotFoundError: If the project directory does not exist.
    """
    project = projects.get_project(project_name)
    agent = agents.get_agent(agent_id) if agent_id else None
    if agent_id and agent is None:
        logger.warning("Agent %s not found, running prompt without agent", agent_id)

    instruction = assemble(
        raw_prompt,
        project.config,
        projects.read_context(project_name),
        agent,
        project.path,
        project_name,
        docs_folder=docs_folder,
    )

    entry = ExecutionLogRepository(project.path).record(instruction, agent_id, now)
    logger.info("[%s] Executed prompt: %s", project_name, entry.filename)

    request = ExecutionRequest(
        project_root=project.path,
        instruction=instruction,
        log_path=entry.path,
        raw_prompt=raw_prompt,
        agent_id=agent_id,
        agent_store=agents,
        agent_docs_folder=docs_folder or (agent.docs_folder if agent else None),
    )
    result = dispatch(request, settings)
    result.transitions = [
        ExecutionState.ASSEMBLING,
        ExecutionState.DISPATCHED,
        result.state,
    ]
    return result
