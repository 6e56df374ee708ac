"""Live executor: hands the instruction to an installed agent CLI."""

import logging
import subprocess

from yabp.engines import CURSOR, get_engine_by_name
from yabp.engines.base import Engine
from yabp.executors.base import (
    ExecutionRequest,
    ExecutionResult,
    ExecutionSettings,
    ExecutionState,
    Executor,
)

logger = logging.getLogger(__name__)

INSTRUCTION_TEMPLATE = "Please execute the instructions defined in the file: {path}"


class LiveExecutor(Executor):
    """Spawn the configured engine in the project directory and wait for it."""

    name = "live"

    def __init__(self, settings: ExecutionSettings) -> None:
        super().__init__(settings)
        self.engine: Engine = get_engine_by_name(settings.engine) or CURSOR

    def execute(self, request: ExecutionRequest) -> ExecutionResult:
        instruction = INSTRUCTION_TEMPLATE.format(path=request.log_path)
        argv = self.engine.build_argv(instruction)
        env = self.engine.build_env(self.settings.environ, self.settings.api_key)

        logger.info(
            "Spawning %s in %s (API key %s)",
            argv[0],
            request.project_root,
            "present" if self.settings.api_key else "missing",
        )
        try:
            proc = subprocess.run(
                argv,
                cwd=request.project_root,
                env=env,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            logger.warning("Failed to spawn %s: %s", argv[0], e)
            return ExecutionResult(
                state=ExecutionState.FAILED,
                instruction=request.instruction,
                simulated=False,
                spawn_error=str(e),
            )

        logger.info("%s exited with code %d", argv[0], proc.returncode)
        return ExecutionResult(
            state=ExecutionState.COMPLETED,
            instruction=request.instruction,
            simulated=False,
            stdout=proc.stdout,
            stderr=proc.stderr,
            exit_code=proc.returncode,
        )
