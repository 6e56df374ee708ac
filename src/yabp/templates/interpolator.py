"""Placeholder interpolation for prompt templates."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

PLACEHOLDER_RE = re.compile(r"\{\{([\w.]+)\}\}", re.ASCII)

_MISSING = object()


def lookup(context: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted path against nested mappings and lists.

    Returns the module-level ``_MISSING`` sentinel when any segment is absent.
    """
    value: Any = context
    for key in path.split("."):
        if isinstance(value, Mapping):
            if key not in value:
                return _MISSING
            value = value[key]
        elif isinstance(value, list) and key.isdigit() and int(key) < len(value):
            value = value[int(key)]
        else:
            return _MISSING
    return value


def render_value(value: Any) -> str:
    """Render a resolved value the way it appears in prompt text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, indent=2, ensure_ascii=False)
    return str(value)


def interpolate(template: str, context: Mapping[str, Any]) -> str:
    """Replace ``{{dotted.path}}`` placeholders with values from ``context``.

    Unresolvable placeholders are left untouched, and substituted values are
    never scanned again.
    """

    def replace(match: re.Match[str]) -> str:
        value = lookup(context, match.group(1))
        if value is _MISSING:
            return match.group(0)
        return render_value(value)

    return PLACEHOLDER_RE.sub(replace, template)
