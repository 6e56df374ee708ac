"""Execution request/result models and the base executor class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from yabp.agents.loader import AgentStore


class ExecutionState(Enum):
    """Lifecycle of one prompt run."""

    ASSEMBLING = "assembling"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ExecutionSettings:
    """How instructions are executed. Built by the caller, never from os.environ here."""

    engine: str = "cursor"
    api_key: str | None = None
    simulation: bool = True
    environ: Mapping[str, str] = field(default_factory=dict)  # Base env for spawned CLIs

    def __repr__(self) -> str:
        key = "set" if self.api_key else "unset"
        return (
            f"ExecutionSettings(engine={self.engine!r}, api_key=<{key}>, "
            f"simulation={self.simulation})"
        )


@dataclass(frozen=True)
class ExecutionRequest:
    """Everything an executor needs for one run."""

    project_root: Path
    instruction: str  # Fully assembled instruction
    log_path: Path  # Execution log holding the instruction
    raw_prompt: str
    agent_id: str | None = None
    agent_store: AgentStore | None = None
    agent_docs_folder: str | None = None


@dataclass(frozen=True)
class SimulatedArtifact:
    """One file written (or not) by the simulation synthesizer."""

    path: str  # Relative to the project root
    source: str | None = None  # Fragment the content came from
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def describe(self) -> str:
        if self.error is not None:
            return f"[MOCK] Failed to create artifact: {self.path} ({self.error})"
        if self.source is not None:
            return f"[MOCK] Created artifact: {self.path} (from {self.source})"
        return f"[MOCK] Created artifact: {self.path}"


@dataclass
class ExecutionResult:
    """Outcome of dispatching one instruction."""

    state: ExecutionState
    instruction: str
    simulated: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: int | None = None
    spawn_error: str | None = None
    artifacts: list[SimulatedArtifact] = field(default_factory=list)
    transitions: list[ExecutionState] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.state is ExecutionState.COMPLETED

    @property
    def output(self) -> str:
        """Combined transcript as shown to the user."""
        if self.simulated:
            return "".join(f"\n\n{a.describe()}" for a in self.artifacts)

        text = self.stdout
        if self.stderr:
            text += "".join(
                f"[STDERR]: {line}" for line in self.stderr.splitlines(keepends=True)
            )
        if self.spawn_error is not None:
            return text + f"\n[Spawn Error]: {self.spawn_error}"
        return text + f"\n[Process exited with code {self.exit_code}]"


class Executor(ABC):
    """Base class for execution backends."""

    name: str

    def __init__(self, settings: ExecutionSettings) -> None:
        self.settings = settings

    @abstractmethod
    def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Run the instruction and return its result. Never raises for backend failures."""
        ...
