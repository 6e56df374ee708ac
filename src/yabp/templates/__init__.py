"""Template text handling: frontmatter and placeholder interpolation."""

from yabp.templates.frontmatter import (
    Frontmatter,
    docs_folder_prefix,
    extract_code_example,
    parse_frontmatter,
    split_frontmatter,
)
from yabp.templates.interpolator import interpolate, render_value

__all__ = [
    "Frontmatter",
    "docs_folder_prefix",
    "extract_code_example",
    "interpolate",
    "parse_frontmatter",
    "render_value",
    "split_frontmatter",
]
