"""Loading per-agent selection rules from rules.yaml."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from yabp.selection.rules import SelectionRule

logger = logging.getLogger(__name__)

RULES_YAML = "rules.yaml"


def load_agent_rules(agent_dir: Path) -> tuple[SelectionRule, ...] | None:
    """Load the rule table shipped with an agent.

    The file holds a ``rules`` list of mappings with ``fragment``, optional
    ``title``, ``when`` and ``requires`` keys. Returns None when the agent has
    no rules.yaml or the file is invalid.
    """
    rules_yaml = agent_dir / RULES_YAML
    if not rules_yaml.exists():
        return None

    try:
        with rules_yaml.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError:
        logger.warning("Ignoring invalid rules file: %s", rules_yaml)
        return None

    if not isinstance(data, dict) or not isinstance(data.get("rules"), list):
        logger.warning("Ignoring rules file without a rules list: %s", rules_yaml)
        return None

    agent_id = agent_dir.name
    rules: list[SelectionRule] = []
    for entry in data["rules"]:
        if not isinstance(entry, dict) or "fragment" not in entry:
            logger.warning("Skipping malformed rule in %s: %r", rules_yaml, entry)
            continue
        try:
            rules.append(SelectionRule.from_dict(agent_id, entry))
        except (KeyError, TypeError):
            logger.warning("Skipping malformed rule in %s: %r", rules_yaml, entry)
    return tuple(rules)
