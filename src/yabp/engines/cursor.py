"""Cursor agent engine definition."""

from yabp.engines.base import Engine

CURSOR = Engine(
    name="Cursor",
    cli_command="cursor-agent",
    install_info="curl https://cursor.com/install -fsS | bash",
    default_args=("-p", "-f"),
    credential_env=("CURSOR_API_KEY", "OPENAI_API_KEY"),
    fallback_paths=("~/.local/bin/cursor-agent",),
)
