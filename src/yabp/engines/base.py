"""Base engine definition."""

import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Engine:
    """Definition of an agent CLI that can execute assembled instructions."""

    name: str
    cli_command: str
    install_info: str
    default_args: tuple[str, ...] = ()
    credential_env: tuple[str, ...] = ()  # Variables that receive the API key
    fallback_paths: tuple[str, ...] = ()  # Checked when cli_command is not on PATH

    def resolve_command(self) -> str | None:
        """Return the executable to spawn, or None when it cannot be found."""
        found = shutil.which(self.cli_command)
        if found is not None:
            return found
        for candidate in self.fallback_paths:
            path = Path(candidate).expanduser()
            if path.is_file():
                return str(path)
        return None

    def is_installed(self) -> bool:
        """Check if this engine's CLI command is available."""
        return self.resolve_command() is not None

    def build_argv(self, instruction: str) -> list[str]:
        """Command line for a single non-interactive run."""
        return [self.resolve_command() or self.cli_command, *self.default_args, instruction]

    def build_env(
        self, base_env: Mapping[str, str], api_key: str | None
    ) -> dict[str, str]:
        """Copy of ``base_env`` with the credential set on every credential variable."""
        env = dict(base_env)
        if api_key:
            for var in self.credential_env:
                env[var] = api_key
        return env
