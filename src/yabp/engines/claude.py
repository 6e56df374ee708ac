"""Claude Code engine definition."""

from yabp.engines.base import Engine

CLAUDE = Engine(
    name="Claude Code",
    cli_command="claude",
    install_info="https://github.com/anthropics/claude-code",
    default_args=("--dangerously-skip-permissions", "--print"),
    credential_env=("ANTHROPIC_API_KEY",),
)
