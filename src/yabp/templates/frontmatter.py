"""Frontmatter parsing for template fragments.

A fragment may open with a header block::

    ---
    output_file: report.md
    docs_folder: qa
    ---

The header is a loose, YAML-like list of ``key: value`` lines. Values are not
type-coerced, and a key with an empty value followed by ``- item`` lines
collects those items into a list.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

FRONTMATTER_RE = re.compile(r"^---\n([\s\S]*?)\n---")
CODE_EXAMPLE_RE = re.compile(r"## Complete Code Example\s*\n([\s\S]*)", re.IGNORECASE)
_KEY_RE = re.compile(r"^([A-Za-z_][\w-]*)\s*:\s*(.*)$")

OUTPUT_FILE_KEY = "output_file"
DOCS_FOLDER_KEY = "docs_folder"
DOCS_DIR = "docs"


@dataclass(frozen=True)
class Frontmatter:
    """Typed view over a parsed frontmatter header."""

    fields: Mapping[str, str | tuple[str, ...]] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        """Return a scalar value, or None when absent, empty or a list."""
        value = self.fields.get(key)
        if isinstance(value, str) and value:
            return value
        return None

    def get_list(self, key: str) -> tuple[str, ...]:
        """Return a list value. A scalar value becomes a list of one."""
        value = self.fields.get(key)
        if isinstance(value, tuple):
            return value
        if value:
            return (value,)
        return ()

    @property
    def output_file(self) -> str | None:
        return self.get(OUTPUT_FILE_KEY)

    @property
    def docs_folder(self) -> str | None:
        return self.get(DOCS_FOLDER_KEY)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_frontmatter_block(block: str) -> Frontmatter:
    """Parse the body of a frontmatter block (without the ``---`` lines)."""
    parsed: dict[str, str | tuple[str, ...]] = {}
    current_list_key: str | None = None
    items: list[str] = []

    def flush() -> None:
        if current_list_key is not None:
            parsed[current_list_key] = tuple(items) if items else ""

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        if current_list_key is not None and line.startswith("-"):
            item = _unquote(line[1:].strip())
            if item:
                items.append(item)
            continue

        match = _KEY_RE.match(line)
        if match is None:
            # Not a key and not a list item: ignore the line
            continue

        flush()
        current_list_key = None
        items = []

        key, value = match.group(1), match.group(2).strip()
        if value:
            parsed[key] = _unquote(value)
        else:
            current_list_key = key

    flush()
    return Frontmatter(fields=parsed)


def split_frontmatter(text: str) -> tuple[Frontmatter | None, str]:
    """Split a document into its frontmatter (if any) and the remaining body."""
    match = FRONTMATTER_RE.match(text)
    if match is None:
        return None, text
    body = text[match.end():].lstrip("\n")
    return parse_frontmatter_block(match.group(1)), body


def parse_frontmatter(text: str) -> Frontmatter | None:
    """Return the frontmatter of a document, or None when it has none."""
    frontmatter, _ = split_frontmatter(text)
    return frontmatter


def extract_code_example(text: str) -> str | None:
    """Return the stripped content following the Complete Code Example heading."""
    match = CODE_EXAMPLE_RE.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def docs_folder_prefix(folder: str | None) -> str:
    """``qa`` becomes ``docs/qa/``; no folder gives an empty prefix."""
    if not folder:
        return ""
    return f"{DOCS_DIR}/{folder.strip('/')}/"
