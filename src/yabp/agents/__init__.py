"""Agent definitions and the filesystem agent store."""

from yabp.agents.base import Agent, PromptRef, agent_id_from_name, prompt_title_from_id
from yabp.agents.loader import (
    AgentExistsError,
    AgentNotFoundError,
    AgentStore,
    BundleError,
    Fragment,
)

__all__ = [
    "Agent",
    "AgentExistsError",
    "AgentNotFoundError",
    "AgentStore",
    "BundleError",
    "Fragment",
    "PromptRef",
    "agent_id_from_name",
    "prompt_title_from_id",
]
