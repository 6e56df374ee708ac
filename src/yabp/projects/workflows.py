"""Built-in workflow templates: phase presets for new projects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class WorkflowPhase:
    """A phase of a workflow and the agents that may run in it."""

    id: str
    label: str
    description: str
    allowed_agents: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "allowedAgents": list(self.allowed_agents),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowPhase:
        phase_id = str(data.get("id", ""))
        return cls(
            id=phase_id,
            label=str(data.get("label") or phase_id),
            description=str(data.get("description") or ""),
            allowed_agents=tuple(str(a) for a in data.get("allowedAgents") or []),
        )


@dataclass(frozen=True)
class WorkflowTemplate:
    """A named sequence of phases with recommended agents."""

    id: str
    name: str
    description: str
    phases: tuple[WorkflowPhase, ...]
    recommended_agents: tuple[str, ...] = ()

    def phases_config(self) -> list[dict[str, Any]]:
        """Phase list in the form stored in a project configuration."""
        return [phase.to_dict() for phase in self.phases]


WORKFLOW_TEMPLATES: tuple[WorkflowTemplate, ...] = (
    WorkflowTemplate(
        id="comprehensive-sdlc",
        name="Comprehensive SDLC",
        description=(
            "Full-scale software development lifecycle with dedicated planning, "
            "architecture, implementation, and verification phases."
        ),
        phases=(
            WorkflowPhase("Inception", "Inception",
                          "Define scope, requirements & user stories", ("pm-framework",)),
            WorkflowPhase("Architecture", "Architecture",
                          "System design & technical specifications",
                          ("senior-architect", "database-specialist")),
            WorkflowPhase("Implementation", "Implementation",
                          "Code construction & development",
                          ("frontend-developer", "nodejs-developer", "python-developer",
                           "go-developer", "java-specialist")),
            WorkflowPhase("Operations", "Operations",
                          "Infrastructure & Deployment", ("devops-engineer",)),
            WorkflowPhase("Verification", "Verification",
                          "QA testing & security auditing",
                          ("qa-engineer", "red-blue-team")),
        ),
        recommended_agents=(
            "pm-framework",
            "senior-architect",
            "database-specialist",
            "devops-engineer",
            "qa-engineer",
        ),
    ),
    WorkflowTemplate(
        id="documentation-heavy",
        name="Documentation Focus",
        description=(
            "Centered on creating thorough technical documentation, specifications, "
            "and project planning artifacts."
        ),
        phases=(
            WorkflowPhase("Discovery", "Discovery", "Gathering requirements",
                          ("pm-framework",)),
            WorkflowPhase("Specification", "Specification", "Writing technical specs",
                          ("senior-architect", "pm-framework")),
            WorkflowPhase("Review", "Review", "Review and validation",
                          ("senior-architect", "qa-engineer")),
        ),
        recommended_agents=("pm-framework", "senior-architect"),
    ),
    WorkflowTemplate(
        id="cloud-infrastructure",
        name="Cloud Infrastructure",
        description=(
            "Streamlined workflow for setting up cloud environments, CI/CD pipelines, "
            "and infrastructure as code."
        ),
        phases=(
            WorkflowPhase("Planning", "Planning", "Infrastructure requirements",
                          ("senior-architect", "devops-engineer")),
            WorkflowPhase("IAC-Dev", "IaC Dev", "Terraform/CloudFormation coding",
                          ("devops-engineer",)),
            WorkflowPhase("Security-Audit", "Security", "Security compliance check",
                          ("red-blue-team",)),
        ),
        recommended_agents=("devops-engineer", "senior-architect", "red-blue-team"),
    ),
    WorkflowTemplate(
        id="rapid-prototyping",
        name="Rapid Prototyping",
        description=(
            "Fast-paced workflow focused on quick implementation and feedback loops."
        ),
        phases=(
            WorkflowPhase("Concept", "Concept", "Quick requirements", ("pm-framework",)),
            WorkflowPhase("Build", "Build", "Rapid development",
                          ("frontend-developer", "nodejs-developer", "python-developer")),
            WorkflowPhase("Demo", "Demo", "Stakeholder review", ("pm-framework",)),
        ),
        recommended_agents=("pm-framework", "frontend-developer"),
    ),
)


def get_workflow_by_id(workflow_id: str) -> WorkflowTemplate | None:
    """Find a built-in workflow template by id."""
    for workflow in WORKFLOW_TEMPLATES:
        if workflow.id == workflow_id:
            return workflow
    return None
