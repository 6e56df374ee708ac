"""Execution log storage under a project's ``.yabp/executions/`` directory."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

from yabp.history.models import ExecutionLogEntry, log_filename

logger = logging.getLogger(__name__)

EXECUTIONS_DIR = Path(".yabp") / "executions"
PROMPT_CONTENT_MARKER = "\n## Prompt Content\n\n"


class ExecutionLogRepository:
    """Write-once store of assembled instructions for one project."""

    def __init__(self, project_root: Path) -> None:
        self.project_root = project_root
        self.directory = project_root / EXECUTIONS_DIR

    def record(
        self,
        instruction: str,
        agent_id: str | None = None,
        now: datetime | None = None,
    ) -> ExecutionLogEntry:
        """Persist an instruction before it is dispatched.

        Entries are never overwritten: when the timestamped name is taken,
        ``_2``, ``_3`` and so on are appended to the file stem.
        """
        now = now or datetime.now(UTC)
        self.directory.mkdir(parents=True, exist_ok=True)
        filename = log_filename(agent_id, now)
        entry = ExecutionLogEntry(
            filename=filename,
            agent_id=agent_id,
            created_at=now.astimezone(UTC).isoformat(),
            instruction=instruction,
            path=self.directory / filename,
        )
        stem = filename.removesuffix(".md")
        attempt = 1
        while True:
            try:
                with entry.path.open("x", encoding="utf-8") as f:
                    f.write(entry.render(now.astimezone()))
                break
            except FileExistsError:
                attempt += 1
                unique = f"{stem}_{attempt}.md"
                entry = replace(entry, filename=unique, path=self.directory / unique)
        logger.info("Recorded execution log %s", entry.filename)
        return entry

    def list_filenames(self) -> list[str]:
        """Return log file names, oldest first."""
        if not self.directory.exists():
            return []
        return sorted(p.name for p in self.directory.glob("*.md") if p.is_file())

    def read_instruction(self, filename: str) -> str | None:
        """Return the instruction text stored in a log file."""
        path = self.directory / filename
        if not path.is_file():
            return None
        text = path.read_text(encoding="utf-8")
        _, marker, instruction = text.partition(PROMPT_CONTENT_MARKER)
        return instruction if marker else text
