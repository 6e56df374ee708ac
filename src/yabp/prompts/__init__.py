"""Prompt assembly and execution."""

from yabp.prompts.assembler import (
    GLOBAL_RULES_HEADER,
    assemble,
    build_context_block,
    build_variables,
    parse_input_files,
)
from yabp.prompts.run import run_prompt

__all__ = [
    "GLOBAL_RULES_HEADER",
    "assemble",
    "build_context_block",
    "build_variables",
    "parse_input_files",
    "run_prompt",
]
