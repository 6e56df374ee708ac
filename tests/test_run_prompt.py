"""Tests for running a prompt end to end."""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from yabp.agents.loader import AgentStore
from yabp.executors import ExecutionSettings, ExecutionState
from yabp.history import ExecutionLogRepository
from yabp.projects import ProjectNotFoundError, ProjectStore, create_project
from yabp.prompts import GLOBAL_RULES_HEADER, run_prompt

NOW = datetime(2024, 5, 1, 12, 30, 5, 123000, tzinfo=UTC)

REPORT_FRAGMENT = """---
output_file: report.md
---
# Report prompt

## Complete Code Example
# Report
Done.
"""


@pytest.fixture
def project(
    project_store: ProjectStore,
    agent_store: AgentStore,
    make_agent: Callable[..., Path],
) -> Path:
    make_agent(
        "qa-engineer",
        {"name": "QA Engineer", "docs_folder": "qa"},
        {"testing/report.md": REPORT_FRAGMENT},
    )
    create_project("shop", {"agents": ["qa-engineer"]}, project_store, agent_store)
    project_store.update_context("shop", {"region": "eu"})
    return project_store.resolve_path("shop")


class TestRunPrompt:
    """Tests for run_prompt()."""

    def test_simulated_run(
        self, project: Path, project_store: ProjectStore, agent_store: AgentStore
    ) -> None:
        result = run_prompt(
            "shop",
            "Test {{name}} in {{context.region}}",
            project_store,
            agent_store,
            ExecutionSettings(),
            agent_id="qa-engineer",
            now=NOW,
        )

        assert result.state is ExecutionState.COMPLETED
        assert result.transitions == [
            ExecutionState.ASSEMBLING,
            ExecutionState.DISPATCHED,
            ExecutionState.COMPLETED,
        ]
        assert result.instruction.startswith(GLOBAL_RULES_HEADER + "Test shop in eu")
        assert "`docs/qa/`" in result.instruction
        assert (project / "docs" / "qa" / "report.md").exists()

    def test_log_written_before_dispatch(
        self, project: Path, project_store: ProjectStore, agent_store: AgentStore
    ) -> None:
        with patch("yabp.prompts.run.dispatch") as mock_dispatch:
            mock_dispatch.side_effect = RuntimeError("backend down")

            with pytest.raises(RuntimeError):
                run_prompt(
                    "shop", "Go", project_store, agent_store, ExecutionSettings(), now=NOW
                )

        repo = ExecutionLogRepository(project)
        assert repo.list_filenames() == ["2024-05-01T12-30-05-123Z_custom.md"]
        assert repo.read_instruction(repo.list_filenames()[0]) == GLOBAL_RULES_HEADER + "Go"

    def test_request_carries_log_path(
        self, project: Path, project_store: ProjectStore, agent_store: AgentStore
    ) -> None:
        with patch("yabp.prompts.run.dispatch") as mock_dispatch:
            mock_dispatch.return_value = MagicMock(state=ExecutionState.COMPLETED)

            run_prompt(
                "shop",
                "Go",
                project_store,
                agent_store,
                ExecutionSettings(),
                agent_id="qa-engineer",
                now=NOW,
            )

        request = mock_dispatch.call_args.args[0]
        assert request.log_path == (
            project / ".yabp" / "executions" / "2024-05-01T12-30-05-123Z_qa_engineer.md"
        )
        assert request.agent_docs_folder == "qa"
        assert request.raw_prompt == "Go"

    def test_unknown_agent_runs_as_custom(
        self, project: Path, project_store: ProjectStore, agent_store: AgentStore
    ) -> None:
        result = run_prompt(
            "shop",
            "Go",
            project_store,
            agent_store,
            ExecutionSettings(),
            agent_id="ghost",
            now=NOW,
        )

        assert result.instruction == GLOBAL_RULES_HEADER + "Go"
        assert result.artifacts == []
        assert ExecutionLogRepository(project).list_filenames() == [
            "2024-05-01T12-30-05-123Z_ghost.md"
        ]

    def test_missing_project(
        self, project_store: ProjectStore, agent_store: AgentStore
    ) -> None:
        with pytest.raises(ProjectNotFoundError):
            run_prompt("nope", "Go", project_store, agent_store, ExecutionSettings())
