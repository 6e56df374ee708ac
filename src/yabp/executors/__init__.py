"""Executor registry and dispatch."""

import logging

from yabp.executors.base import (
    ExecutionRequest,
    ExecutionResult,
    ExecutionSettings,
    ExecutionState,
    Executor,
    SimulatedArtifact,
)
from yabp.executors.live import LiveExecutor
from yabp.executors.simulation import SimulationExecutor, synthesize

logger = logging.getLogger(__name__)

EXECUTORS: dict[str, type[Executor]] = {
    "live": LiveExecutor,
    "simulation": SimulationExecutor,
}

DEFAULT_EXECUTOR = "simulation"


def get_executor(settings: ExecutionSettings, name: str | None = None) -> Executor:
    """Get an executor instance by name.

    Without a name, live execution is used only when the settings turn
    simulation off.
    """
    if name is None:
        name = DEFAULT_EXECUTOR if settings.simulation else "live"
    if name not in EXECUTORS:
        raise ValueError(f"Unknown executor: {name}")
    return EXECUTORS[name](settings)


def dispatch(request: ExecutionRequest, settings: ExecutionSettings) -> ExecutionResult:
    """Run an assembled instruction with the executor the settings select."""
    executor = get_executor(settings)
    logger.debug("Dispatching %s with %s executor", request.log_path.name, executor.name)
    return executor.execute(request)


__all__ = [
    "DEFAULT_EXECUTOR",
    "EXECUTORS",
    "ExecutionRequest",
    "ExecutionResult",
    "ExecutionSettings",
    "ExecutionState",
    "Executor",
    "LiveExecutor",
    "SimulatedArtifact",
    "SimulationExecutor",
    "dispatch",
    "get_executor",
    "synthesize",
]
