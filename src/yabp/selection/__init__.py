"""Selection rules and fragment resolution."""

from yabp.selection.loader import load_agent_rules
from yabp.selection.resolver import ResolvedFragment, resolve_fragments, rules_for_agent
from yabp.selection.rules import (
    DEFAULT_RULES,
    Condition,
    SelectionRule,
    Selections,
    rule,
)

__all__ = [
    "DEFAULT_RULES",
    "Condition",
    "ResolvedFragment",
    "SelectionRule",
    "Selections",
    "load_agent_rules",
    "resolve_fragments",
    "rule",
    "rules_for_agent",
]
