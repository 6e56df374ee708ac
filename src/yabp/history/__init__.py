"""Execution history: immutable logs of issued instructions."""

from yabp.history.models import (
    ExecutionLogEntry,
    log_filename,
    sanitize_agent_id,
    timestamp_slug,
)
from yabp.history.repository import ExecutionLogRepository

__all__ = [
    "ExecutionLogEntry",
    "ExecutionLogRepository",
    "log_filename",
    "sanitize_agent_id",
    "timestamp_slug",
]
