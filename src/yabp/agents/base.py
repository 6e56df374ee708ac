"""Agent definitions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_CATEGORY = "General"
DEFAULT_ICON = "🤖"


def agent_id_from_name(name: str) -> str:
    """Derive a stable agent id: lowercase, dashes for spaces, [a-z0-9-] only."""
    slug = re.sub(r"\s+", "-", name.lower())
    return re.sub(r"[^a-z0-9-]", "", slug)


def prompt_title_from_id(prompt_id: str) -> str:
    """Turn a prompt file stem like ``001_cicd_pipeline`` into a display title."""
    return " ".join(word[:1].upper() + word[1:] for word in prompt_id.split("_"))


@dataclass(frozen=True)
class PromptRef:
    """Reference from agent metadata to one of its prompt files."""

    id: str
    title: str
    executable: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "executable": self.executable}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PromptRef:
        prompt_id = str(data.get("id", ""))
        title = data.get("title")
        return cls(
            id=prompt_id,
            title=str(title) if title is not None else prompt_title_from_id(prompt_id),
            executable=bool(data.get("executable", False)),
        )


@dataclass(frozen=True)
class Agent:
    """A reusable persona: metadata plus the template fragments in its directory."""

    id: str
    name: str
    role: str = ""
    category: str = DEFAULT_CATEGORY
    icon: str = DEFAULT_ICON
    description: str = ""
    active: bool = True
    prompts: tuple[PromptRef, ...] = ()
    docs_folder: str | None = None  # Artifact subdirectory under docs/
    system_instruction: str | None = None
    source: Path | None = None  # Directory the agent was loaded from

    def find_prompt(self, prompt_id: str, title: str | None = None) -> PromptRef | None:
        """Find a prompt reference by id, or by title when given."""
        for ref in self.prompts:
            if ref.id == prompt_id or (title is not None and ref.title == title):
                return ref
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the metadata.yaml layout (id and source excluded)."""
        result: dict[str, Any] = {
            "name": self.name,
            "role": self.role,
            "category": self.category,
            "icon": self.icon,
            "description": self.description,
            "active": self.active,
            "prompts": [ref.to_dict() for ref in self.prompts],
        }
        if self.docs_folder is not None:
            result["docs_folder"] = self.docs_folder
        if self.system_instruction is not None:
            result["system_instruction"] = self.system_instruction
        return result

    @classmethod
    def from_dict(
        cls, agent_id: str, data: dict[str, Any], source: Path | None = None
    ) -> Agent:
        """Create an Agent from parsed metadata. Unknown keys are ignored."""
        prompts_raw = data.get("prompts") or []
        prompts = tuple(
            PromptRef.from_dict(p) for p in prompts_raw if isinstance(p, dict)
        )

        docs_folder = data.get("docs_folder")
        system_instruction = data.get("system_instruction")

        return cls(
            id=agent_id,
            name=str(data.get("name") or agent_id),
            role=str(data.get("role") or ""),
            category=str(data.get("category") or DEFAULT_CATEGORY),
            icon=str(data.get("icon") or DEFAULT_ICON),
            description=str(data.get("description") or ""),
            active=bool(data.get("active", True)),
            prompts=prompts,
            docs_folder=str(docs_folder) if docs_folder else None,
            system_instruction=str(system_instruction) if system_instruction else None,
            source=source,
        )
