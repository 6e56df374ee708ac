"""Execution log data models."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

DEFAULT_AGENT_LABEL = "custom"


def timestamp_slug(now: datetime | None = None) -> str:
    """ISO8601 UTC timestamp with milliseconds, ``:`` and ``.`` replaced by ``-``.

    ``2024-05-01T12:30:05.123Z`` becomes ``2024-05-01T12-30-05-123Z``.
    """
    now = (now or datetime.now(UTC)).astimezone(UTC)
    iso = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def sanitize_agent_id(agent_id: str | None) -> str:
    """Replace every non-alphanumeric character with ``_``."""
    return re.sub(r"[^a-zA-Z0-9]", "_", agent_id or DEFAULT_AGENT_LABEL)


def log_filename(agent_id: str | None, now: datetime | None = None) -> str:
    return f"{timestamp_slug(now)}_{sanitize_agent_id(agent_id)}.md"


@dataclass(frozen=True)
class ExecutionLogEntry:
    """Immutable record of an instruction issued for a project."""

    filename: str
    agent_id: str | None
    created_at: str  # ISO8601 UTC
    instruction: str  # Fully assembled instruction text
    path: Path

    @property
    def title(self) -> str:
        return self.agent_id or "Custom Prompt"

    def render(self, local_time: datetime) -> str:
        """Render the log file body."""
        return (
            f"# Execution Log: {self.title}\n"
            f"Date: {local_time.strftime('%Y-%m-%d %H:%M:%S')}\n\n"
            f"## Prompt Content\n\n{self.instruction}"
        )
