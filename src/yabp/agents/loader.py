"""Filesystem-backed agent store.

Each agent lives in its own directory under the agents root::

    <root>/<agent-id>/
        metadata.yaml
        rules.yaml            (optional selection rules)
        prompts/*.md          (generic prompts)
        <category>/*.md       (curated fragments, e.g. infrastructure/)
"""

from __future__ import annotations

import io
import logging
import shutil
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

from yabp.agents.base import (
    DEFAULT_CATEGORY,
    DEFAULT_ICON,
    Agent,
    agent_id_from_name,
    prompt_title_from_id,
)
from yabp.errors import YabpError
from yabp.templates.frontmatter import Frontmatter, split_frontmatter

logger = logging.getLogger(__name__)

METADATA_YAML = "metadata.yaml"
PROMPTS_DIRNAME = "prompts"
FRAGMENT_SUFFIX = ".md"


class AgentNotFoundError(YabpError):
    """Raised when an agent directory or its metadata does not exist."""

    def __init__(self, agent_id: str) -> None:
        self.agent_id = agent_id
        super().__init__(f"Agent not found: {agent_id}")


class AgentExistsError(YabpError):
    """Raised when creating an agent whose id is already taken."""

    def __init__(self, agent_id: str) -> None:
        self.agent_id = agent_id
        super().__init__(f"Agent with this name already exists: {agent_id}")


class BundleError(YabpError):
    """Raised when an agent bundle archive cannot be imported."""


@dataclass(frozen=True)
class Fragment:
    """A template fragment read from an agent directory."""

    agent_id: str
    relative_path: str  # POSIX path relative to the agent directory
    content: str  # Full text including any frontmatter
    frontmatter: Frontmatter | None = None

    @property
    def stem(self) -> str:
        return PurePosixPath(self.relative_path).stem


def load_metadata(path: Path) -> dict[str, Any] | None:
    """Load a metadata.yaml file, return None if missing or not a mapping."""
    if not path.exists():
        return None
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError:
        logger.warning("Invalid agent metadata: %s", path)
        return None
    if not isinstance(data, dict):
        return None
    return data


def save_metadata(path: Path, data: dict[str, Any]) -> None:
    """Write metadata.yaml, preserving key order."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(
            data, f, default_flow_style=False, sort_keys=False, allow_unicode=True
        )


class AgentStore:
    """Read agent definitions and fragments; manage agent metadata and prompts."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def agent_path(self, agent_id: str) -> Path:
        return self.root / agent_id

    def _metadata_path(self, agent_id: str) -> Path:
        return self.agent_path(agent_id) / METADATA_YAML

    # Template store interface

    def list_agents(self) -> list[Agent]:
        """Return all agents that have a metadata file, sorted by id."""
        agents: list[Agent] = []
        if not self.root.exists():
            return agents

        for item in sorted(self.root.iterdir()):
            if not item.is_dir():
                continue
            data = load_metadata(item / METADATA_YAML)
            if data is not None:
                agents.append(Agent.from_dict(item.name, data, source=item))
        return agents

    def get_agent(self, agent_id: str) -> Agent | None:
        """Load one agent, or None if it has no metadata."""
        agent_dir = self.agent_path(agent_id)
        data = load_metadata(agent_dir / METADATA_YAML)
        if data is None:
            return None
        return Agent.from_dict(agent_id, data, source=agent_dir)

    def require_agent(self, agent_id: str) -> Agent:
        agent = self.get_agent(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        return agent

    def list_fragments(self, agent_id: str) -> list[str]:
        """Return the relative paths of every Markdown fragment of an agent."""
        agent_dir = self.agent_path(agent_id)
        if not agent_dir.is_dir():
            return []
        return sorted(
            path.relative_to(agent_dir).as_posix()
            for path in agent_dir.rglob(f"*{FRAGMENT_SUFFIX}")
            if path.is_file()
        )

    def read_fragment(self, agent_id: str, relative_path: str) -> str | None:
        """Return a fragment's raw text, or None when it does not exist."""
        path = self.agent_path(agent_id) / relative_path
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def load_fragment(self, agent_id: str, relative_path: str) -> Fragment | None:
        """Read a fragment and parse its frontmatter."""
        content = self.read_fragment(agent_id, relative_path)
        if content is None:
            return None
        frontmatter, _ = split_frontmatter(content)
        return Fragment(
            agent_id=agent_id,
            relative_path=relative_path,
            content=content,
            frontmatter=frontmatter,
        )

    # Agent management

    def create_agent(
        self,
        name: str,
        role: str = "",
        category: str = DEFAULT_CATEGORY,
        icon: str = DEFAULT_ICON,
    ) -> Agent:
        """Create an empty agent shell with a prompts/ directory."""
        agent_id = agent_id_from_name(name)
        if not agent_id:
            raise YabpError(f"Cannot derive an agent id from name: {name!r}")
        agent_dir = self.agent_path(agent_id)
        if agent_dir.exists():
            raise AgentExistsError(agent_id)

        (agent_dir / PROMPTS_DIRNAME).mkdir(parents=True)
        agent = Agent(
            id=agent_id,
            name=name,
            role=role,
            category=category or DEFAULT_CATEGORY,
            icon=icon or DEFAULT_ICON,
            source=agent_dir,
        )
        save_metadata(agent_dir / METADATA_YAML, agent.to_dict())
        logger.info("Created agent %s", agent_id)
        return agent

    def update_metadata(self, agent_id: str, updates: dict[str, Any]) -> Agent:
        """Shallow-merge ``updates`` into an agent's metadata."""
        path = self._metadata_path(agent_id)
        current = load_metadata(path)
        if current is None:
            raise AgentNotFoundError(agent_id)

        merged = {**current, **updates}
        save_metadata(path, merged)
        return Agent.from_dict(agent_id, merged, source=self.agent_path(agent_id))

    def list_prompts(self, agent_id: str) -> list[str]:
        """Return the filenames of the agent's generic prompts."""
        prompts_dir = self.agent_path(agent_id) / PROMPTS_DIRNAME
        if not prompts_dir.exists():
            return []
        return sorted(
            p.name
            for p in prompts_dir.iterdir()
            if p.is_file() and p.suffix == FRAGMENT_SUFFIX
        )

    def read_prompt(self, agent_id: str, filename: str) -> str | None:
        return self.read_fragment(agent_id, f"{PROMPTS_DIRNAME}/{filename}")

    def save_prompt(self, agent_id: str, filename: str, content: str) -> Path:
        """Write a prompt file and register it in the agent's prompt list.

        New prompts are registered as executable with a title derived from
        the file stem.
        """
        prompts_dir = self.agent_path(agent_id) / PROMPTS_DIRNAME
        prompts_dir.mkdir(parents=True, exist_ok=True)
        path = prompts_dir / filename
        path.write_text(content, encoding="utf-8")

        metadata_path = self._metadata_path(agent_id)
        metadata = load_metadata(metadata_path)
        if metadata is not None:
            prompt_id = Path(filename).stem
            prompts = list(metadata.get("prompts") or [])
            if not any(p.get("id") == prompt_id for p in prompts if isinstance(p, dict)):
                prompts.append(
                    {
                        "id": prompt_id,
                        "title": prompt_title_from_id(prompt_id),
                        "executable": True,
                    }
                )
                metadata["prompts"] = prompts
                save_metadata(metadata_path, metadata)
        return path

    def delete_prompt(self, agent_id: str, filename: str) -> bool:
        """Remove a prompt file and its metadata reference.

        Returns True if the file existed.
        """
        path = self.agent_path(agent_id) / PROMPTS_DIRNAME / filename
        existed = path.exists()
        if existed:
            path.unlink()

        metadata_path = self._metadata_path(agent_id)
        metadata = load_metadata(metadata_path)
        if metadata is not None and metadata.get("prompts"):
            prompt_id = Path(filename).stem
            metadata["prompts"] = [
                p
                for p in metadata["prompts"]
                if not (isinstance(p, dict) and p.get("id") == prompt_id)
            ]
            save_metadata(metadata_path, metadata)
        return existed

    def import_bundle(self, archive: Path | bytes) -> list[Agent]:
        """Install one or more agents from a zip bundle.

        Every directory in the archive that holds a metadata.yaml becomes an
        agent. A metadata.yaml at the archive root names the agent through its
        ``name`` field. Existing agents with the same id are replaced.
        """
        source = io.BytesIO(archive) if isinstance(archive, bytes) else archive
        try:
            with zipfile.ZipFile(source) as bundle:
                return self._install_from_zip(bundle)
        except zipfile.BadZipFile as e:
            raise BundleError(f"Not a valid agent bundle: {e}") from e

    def _install_from_zip(self, bundle: zipfile.ZipFile) -> list[Agent]:
        members = [m for m in bundle.namelist() if not m.endswith("/")]
        for member in members:
            parts = PurePosixPath(member).parts
            if member.startswith("/") or ".." in parts:
                raise BundleError(f"Unsafe path in bundle: {member}")

        prefixes: dict[str, str] = {}
        for member in members:
            member_path = PurePosixPath(member)
            if member_path.name != METADATA_YAML:
                continue
            prefix = member_path.parent.as_posix()
            prefix = "" if prefix == "." else prefix
            data = yaml.safe_load(bundle.read(member))
            if not isinstance(data, dict):
                raise BundleError(f"Invalid metadata in bundle: {member}")
            agent_id = (
                agent_id_from_name(PurePosixPath(prefix).name)
                if prefix
                else agent_id_from_name(str(data.get("name", "")))
            )
            if not agent_id:
                raise BundleError(f"Cannot derive agent id for {member}")
            prefixes[prefix] = agent_id

        if not prefixes:
            raise BundleError("Bundle does not contain any metadata.yaml")

        installed: list[Agent] = []
        for prefix, agent_id in prefixes.items():
            agent_dir = self.agent_path(agent_id)
            if agent_dir.exists():
                logger.warning("Replacing existing agent %s", agent_id)
                shutil.rmtree(agent_dir)
            agent_dir.mkdir(parents=True)

            for member in members:
                if prefix and not member.startswith(prefix + "/"):
                    continue
                relative = member[len(prefix) + 1:] if prefix else member
                # Nested agents belong to their own prefix
                if not prefix and any(
                    other and member.startswith(other + "/") for other in prefixes
                ):
                    continue
                target = agent_dir / relative
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(bundle.read(member))

            agent = self.get_agent(agent_id)
            if agent is not None:
                installed.append(agent)
                logger.info("Installed agent %s", agent_id)

        return installed
