"""Resolve an agent's template fragments from user selections."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath

from yabp.agents.loader import AgentStore
from yabp.selection.loader import load_agent_rules
from yabp.selection.rules import DEFAULT_RULES, SelectionRule, Selections

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedFragment:
    """A fragment chosen for inclusion in a project's prompt catalogue."""

    title: str
    content: str
    relative_path: str

    @property
    def base_id(self) -> str:
        """File stem, matched against the agent's prompt references."""
        return PurePosixPath(self.relative_path).stem


def rules_for_agent(
    agent_id: str,
    store: AgentStore,
    rules: tuple[SelectionRule, ...] = DEFAULT_RULES,
) -> tuple[SelectionRule, ...]:
    """Return the rule table for an agent.

    A rules.yaml in the agent directory replaces the built-in rules.
    """
    own_rules = load_agent_rules(store.agent_path(agent_id))
    if own_rules is not None:
        return own_rules
    return tuple(r for r in rules if r.agent_id == agent_id)


def resolve_fragments(
    agent_id: str,
    store: AgentStore,
    selections: Selections | None,
    rules: tuple[SelectionRule, ...] = DEFAULT_RULES,
) -> list[ResolvedFragment]:
    """Return the fragments an agent contributes for the given selections.

    Rules are evaluated in table order. Fragments that do not exist in the
    store are skipped, and an agent contributes nothing until selections
    have been made.
    """
    results: list[ResolvedFragment] = []
    if not selections:
        return results

    for selection_rule in rules_for_agent(agent_id, store, rules):
        if not selection_rule.applies(selections):
            continue

        content = store.read_fragment(agent_id, selection_rule.fragment_path)
        if content is None:
            logger.debug(
                "Skipping missing fragment %s for agent %s",
                selection_rule.fragment_path,
                agent_id,
            )
            continue

        path = PurePosixPath(selection_rule.fragment_path)
        results.append(
            ResolvedFragment(
                title=selection_rule.title or path.name.removesuffix(".md"),
                content=content,
                relative_path=selection_rule.fragment_path,
            )
        )

    return results
