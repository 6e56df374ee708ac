"""Shared fixtures for yabp tests."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from yabp.agents.loader import AgentStore
from yabp.projects.store import ProjectStore

MakeAgent = Callable[..., Path]


@pytest.fixture
def agents_root(tmp_path: Path) -> Path:
    root = tmp_path / "agents"
    root.mkdir()
    return root


@pytest.fixture
def agent_store(agents_root: Path) -> AgentStore:
    return AgentStore(agents_root)


@pytest.fixture
def make_agent(agents_root: Path) -> MakeAgent:
    """Write an agent directory: metadata.yaml plus the given fragment files."""

    def _make(
        agent_id: str,
        metadata: dict[str, Any] | None = None,
        files: dict[str, str] | None = None,
    ) -> Path:
        agent_dir = agents_root / agent_id
        agent_dir.mkdir(parents=True, exist_ok=True)
        data = metadata if metadata is not None else {"name": agent_id}
        with (agent_dir / "metadata.yaml").open("w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
        for relative_path, content in (files or {}).items():
            path = agent_dir / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return agent_dir

    return _make


DEVOPS_FILES = {
    "prompts/001_cicd_pipeline.md": "Build a pipeline for {{name}}.",
    "infrastructure/aws_terraform_complete.md": "Terraform for AWS.",
    "infrastructure/aws_cloudformation_vpc.md": "CloudFormation VPC.",
    "cicd/github_actions_aws_ecs.md": "GitHub Actions to ECS.",
    "cicd/jenkins_pipeline_multicloud.md": "Jenkins pipeline.",
}

DEVOPS_METADATA = {
    "name": "DevOps Engineer",
    "role": "Pipelines and infrastructure",
    "docs_folder": "devops",
    "prompts": [
        {"id": "001_cicd_pipeline", "title": "Base CI/CD Pipeline", "executable": True},
    ],
}


@pytest.fixture
def devops_agent(make_agent: MakeAgent) -> Path:
    return make_agent("devops-engineer", DEVOPS_METADATA, DEVOPS_FILES)


@pytest.fixture
def project_store(tmp_path: Path) -> ProjectStore:
    return ProjectStore(tmp_path / "home" / "projects.yaml", tmp_path / "projects")
