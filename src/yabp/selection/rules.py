"""Declarative selection rules mapping user selections to agent fragments."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

Selections = Mapping[str, Any]  # section name -> value or list of values


def selected_values(selections: Selections, section: str, multi: bool) -> list[str]:
    """Return the chosen values of a section.

    Multi-valued sections are normalised to a list; a scalar becomes a list
    of one. Empty values are dropped.
    """
    raw = selections.get(section)
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        values = list(raw) if multi else []
    else:
        values = [raw]
    return [str(v) for v in values if v not in (None, "")]


@dataclass(frozen=True)
class Condition:
    """A test on one selection section.

    ``value`` None matches any non-empty selection for the section.
    """

    section: str
    value: str | None = None
    multi: bool = False

    def holds(self, selections: Selections) -> bool:
        if self.value is None:
            # Wildcards accept a list for any section
            return bool(selected_values(selections, self.section, multi=True))
        values = selected_values(selections, self.section, self.multi)
        return self.value in values

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"section": self.section}
        if self.value is not None:
            result["value"] = self.value
        if self.multi:
            result["multi"] = True
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        value = data.get("value")
        return cls(
            section=str(data["section"]),
            value=str(value) if value is not None else None,
            multi=bool(data.get("multi", False)),
        )


@dataclass(frozen=True)
class SelectionRule:
    """Include ``fragment_path`` for ``agent_id`` when the conditions hold.

    ``when`` is the primary condition set: any one of them is enough, and an
    empty set always matches. ``requires`` narrows the rule further: all of
    them must hold.
    """

    agent_id: str
    fragment_path: str
    title: str | None = None
    when: tuple[Condition, ...] = ()
    requires: tuple[Condition, ...] = ()

    def applies(self, selections: Selections) -> bool:
        primary = not self.when or any(c.holds(selections) for c in self.when)
        return primary and all(c.holds(selections) for c in self.requires)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"fragment": self.fragment_path}
        if self.title is not None:
            result["title"] = self.title
        if self.when:
            result["when"] = [c.to_dict() for c in self.when]
        if self.requires:
            result["requires"] = [c.to_dict() for c in self.requires]
        return result

    @classmethod
    def from_dict(cls, agent_id: str, data: dict[str, Any]) -> SelectionRule:
        title = data.get("title")
        return cls(
            agent_id=agent_id,
            fragment_path=str(data["fragment"]),
            title=str(title) if title is not None else None,
            when=tuple(Condition.from_dict(c) for c in data.get("when") or []),
            requires=tuple(Condition.from_dict(c) for c in data.get("requires") or []),
        )


def rule(
    agent_id: str,
    section: str | None,
    match: str | None,
    fragment_path: str,
    title: str | None = None,
    *,
    multi: bool = False,
    requires: tuple[Condition, ...] = (),
) -> SelectionRule:
    """Build a single-condition rule.

    ``section`` None makes the rule unconditional.
    """
    when = () if section is None else (Condition(section, match, multi),)
    return SelectionRule(
        agent_id=agent_id,
        fragment_path=fragment_path,
        title=title,
        when=when,
        requires=requires,
    )


CLOUD = "Cloud Provider"
INFRA = "Infrastructure"
CICD = "CI/CD Platform"
MONITORING = "Monitoring Stack"
JAVA_FRAMEWORK = "Java Framework"
PROJECT_ARTIFACTS = "Project Artifacts"
ARCHITECTURE_ARTIFACTS = "Architecture Artifacts"
FRONTEND_LIBRARY = "Frontend Library"
BACKEND_FRAMEWORK = "Backend Framework"
TESTING_FRAMEWORK = "Testing Framework"
PERFORMANCE_TOOLS = "Performance Tools"

_aws = Condition(CLOUD, "AWS")


def _frontend(library: str) -> tuple[Condition, ...]:
    return (
        Condition(FRONTEND_LIBRARY, library, multi=True),
        Condition(BACKEND_FRAMEWORK, library),
    )


DEFAULT_RULES: tuple[SelectionRule, ...] = (
    # Project manager
    rule("pm-framework", PROJECT_ARTIFACTS, "Project briefing",
         "prompts/spec_00X_project_briefing.md", "Project Briefing", multi=True),
    rule("pm-framework", PROJECT_ARTIFACTS, "User stories",
         "prompts/spec_002_user_stories.md", "User Stories", multi=True),
    rule("pm-framework", PROJECT_ARTIFACTS, "Roadmap",
         "prompts/spec_003_roadmap.md", "Project Roadmap", multi=True),
    # Senior architect
    rule("senior-architect", ARCHITECTURE_ARTIFACTS, "System Architecture Diagram",
         "prompts/001_system_architecture.md", "System Architecture", multi=True),
    rule("senior-architect", ARCHITECTURE_ARTIFACTS, "Component Diagram",
         "prompts/002_component_design.md", "Component Architecture", multi=True),
    rule("senior-architect", ARCHITECTURE_ARTIFACTS, "Deployment Architecture",
         "prompts/003_deployment_architecture.md", "Deployment Architecture", multi=True),
    rule("senior-architect", ARCHITECTURE_ARTIFACTS, "Architecture Decision Records (ADRs)",
         "prompts/005_architecture_decisions.md", "ADRs", multi=True),
    # Java microservice
    rule("java-microservice", None, None,
         "prompts/001_initial_structure.md", "Initial Project Structure"),
    rule("java-microservice", JAVA_FRAMEWORK, "Spring Boot",
         "framework/spring_boot_microservice.md", "Spring Boot Microservice"),
    rule("java-microservice", JAVA_FRAMEWORK, "Quarkus",
         "framework/quarkus_reactive.md", "Quarkus Reactive"),
    rule("java-microservice", JAVA_FRAMEWORK, "Micronaut",
         "framework/micronaut_native.md", "Micronaut Native"),
    # DevOps engineer
    rule("devops-engineer", CICD, None,
         "prompts/001_cicd_pipeline.md", "Base CI/CD Pipeline"),
    rule("devops-engineer", CLOUD, "AWS",
         "infrastructure/aws_terraform_complete.md", "AWS Infrastructure (Terraform)",
         requires=(Condition(INFRA, "Terraform", multi=True),)),
    rule("devops-engineer", CLOUD, "AWS",
         "infrastructure/aws_cloudformation_vpc.md", "AWS Infrastructure (CloudFormation)",
         requires=(Condition(INFRA, "CloudFormation", multi=True),)),
    rule("devops-engineer", CLOUD, "AWS",
         "infrastructure/aws_cdk_typescript.md", "AWS Infrastructure (CDK)"),
    rule("devops-engineer", CLOUD, "Azure",
         "infrastructure/azure_bicep_aks.md", "Azure Infrastructure (Bicep)"),
    rule("devops-engineer", CLOUD, "GCP",
         "infrastructure/gcp_terraform_gke.md", "GCP Infrastructure (Terraform)"),
    rule("devops-engineer", CICD, "GitHub Actions",
         "cicd/github_actions_aws_ecs.md", "GitHub Actions (AWS Deployment)",
         requires=(_aws,)),
    rule("devops-engineer", CICD, "GitLab CI",
         "cicd/gitlab_ci_kubernetes.md", "GitLab CI (Kubernetes)"),
    rule("devops-engineer", CICD, "Jenkins",
         "cicd/jenkins_pipeline_multicloud.md", "Jenkins Pipeline"),
    rule("devops-engineer", MONITORING, None,
         "monitoring/prometheus_grafana_kubernetes.md", "Prometheus & Grafana", multi=True),
    rule("devops-engineer", MONITORING, None,
         "monitoring/cloudwatch_aws.md", "AWS CloudWatch", multi=True, requires=(_aws,)),
    # Python developer
    rule("python-developer", BACKEND_FRAMEWORK, "Django",
         "framework/django_project_structure.md", "Django Project Structure"),
    rule("python-developer", BACKEND_FRAMEWORK, "Django",
         "framework/django_rest_api.md", "Django REST Framework API"),
    rule("python-developer", BACKEND_FRAMEWORK, "FastAPI",
         "framework/fastapi_project_structure.md", "FastAPI Project Structure"),
    rule("python-developer", BACKEND_FRAMEWORK, "Flask",
         "framework/flask_api_blueprint.md", "Flask Application Factory"),
    # Node.js developer
    rule("nodejs-developer", BACKEND_FRAMEWORK, "Express",
         "framework/express_typescript_setup.md", "Express Setup (TypeScript)"),
    rule("nodejs-developer", BACKEND_FRAMEWORK, "Express",
         "framework/express_api_routes.md", "Express API Routes"),
    rule("nodejs-developer", BACKEND_FRAMEWORK, "NestJS",
         "framework/nestjs_project_structure.md", "NestJS Project Structure"),
    rule("nodejs-developer", BACKEND_FRAMEWORK, "Fastify",
         "framework/fastify_high_performance.md", "Fastify High Performance API"),
    # Go developer
    rule("go-developer", BACKEND_FRAMEWORK, "Gin",
         "framework/gin_api.md", "Gin Web Framework"),
    rule("go-developer", BACKEND_FRAMEWORK, "Echo",
         "framework/echo_api.md", "Echo Framework"),
    # Frontend developer: either the library list or the framework picks it
    SelectionRule("frontend-developer", "framework/react_nextjs_app_router.md",
                  "Next.js App Router", when=_frontend("React")),
    SelectionRule("frontend-developer", "framework/react_component_library.md",
                  "React Component Library", when=_frontend("React")),
    SelectionRule("frontend-developer", "state/react_state_zustand.md",
                  "State Management (Zustand)", when=_frontend("React")),
    SelectionRule("frontend-developer", "framework/vue3_composition_api.md",
                  "Vue 3 Composition API", when=_frontend("Vue")),
    SelectionRule("frontend-developer", "framework/vue3_component_library.md",
                  "Vue 3 Component Library", when=_frontend("Vue")),
    SelectionRule("frontend-developer", "state/vue3_pinia_state.md",
                  "State Management (Pinia)", when=_frontend("Vue")),
    SelectionRule("frontend-developer", "framework/angular_standalone_components.md",
                  "Angular Standalone Components", when=_frontend("Angular")),
    SelectionRule("frontend-developer", "state/angular_ngrx_state.md",
                  "State Management (NgRx)", when=_frontend("Angular")),
    # QA engineer
    rule("qa-engineer", TESTING_FRAMEWORK, "Playwright",
         "testing/playwright_e2e_setup.md", "Playwright E2E Setup", multi=True),
    rule("qa-engineer", TESTING_FRAMEWORK, "Cypress",
         "testing/cypress_e2e_setup.md", "Cypress E2E Setup", multi=True),
    rule("qa-engineer", PERFORMANCE_TOOLS, "k6",
         "performance/k6_load_testing.md", "k6 Load Testing", multi=True),
)
