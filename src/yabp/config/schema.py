"""Configuration schema for yabp."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Literal, cast

ExecutablePolicyType = Literal["nested", "listed"]


@dataclass
class YabpConfig:
    """Yabp configuration schema.

    None values indicate "not set" and will use defaults or be inherited.
    """

    # Storage locations
    agents_dir: str | None = None
    projects_dir: str | None = None  # Default base for new projects

    # Execution settings
    engine: str | None = None
    api_key: str | None = None
    simulation: bool | None = None

    # Compilation settings
    executable_policy: ExecutablePolicyType | None = None

    def merge(self, other: YabpConfig) -> YabpConfig:
        """Merge another config into this one.

        Values from `other` take precedence when they are not None.
        Returns a new YabpConfig instance.
        """
        return YabpConfig(
            agents_dir=(
                other.agents_dir if other.agents_dir is not None else self.agents_dir
            ),
            projects_dir=(
                other.projects_dir
                if other.projects_dir is not None
                else self.projects_dir
            ),
            engine=other.engine if other.engine is not None else self.engine,
            api_key=other.api_key if other.api_key is not None else self.api_key,
            simulation=(
                other.simulation if other.simulation is not None else self.simulation
            ),
            executable_policy=(
                other.executable_policy
                if other.executable_policy is not None
                else self.executable_policy
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                result[f.name] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> YabpConfig:
        """Create a YabpConfig from a dictionary.

        Unknown keys are ignored. Type validation is performed.
        """
        agents_dir = data.get("agents_dir")
        projects_dir = data.get("projects_dir")
        engine = data.get("engine")
        api_key = data.get("api_key")
        simulation_raw = data.get("simulation")
        simulation = bool(simulation_raw) if simulation_raw is not None else None
        policy_raw = data.get("executable_policy")
        executable_policy: ExecutablePolicyType | None = None
        if policy_raw in ("nested", "listed"):
            executable_policy = cast(ExecutablePolicyType, policy_raw)

        return cls(
            agents_dir=str(agents_dir) if agents_dir is not None else None,
            projects_dir=str(projects_dir) if projects_dir is not None else None,
            engine=str(engine) if engine is not None else None,
            api_key=str(api_key) if api_key else None,
            simulation=simulation,
            executable_policy=executable_policy,
        )

    def __repr__(self) -> str:
        values = self.to_dict()
        if "api_key" in values:
            values["api_key"] = "***"
        args = ", ".join(f"{k}={v!r}" for k, v in values.items())
        return f"YabpConfig({args})"


# Default configuration values (used when not specified anywhere)
DEFAULT_CONFIG = YabpConfig(
    agents_dir="~/.yabp/agents",
    projects_dir="~/yabp-projects",
    engine="cursor",
    simulation=True,
    executable_policy="nested",
)
