"""Exceptions raised by the deployment services."""

from __future__ import annotations

from typing import Sequence


class CommandError(RuntimeError):
    """An external command exited with a non-zero status."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        *,
        stderr: str = "",
        stdout: str = "",
        message: str | None = None,
    ) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout
        detail = message or stderr.strip() or stdout.strip() or f"exit status {returncode}"
        super().__init__(f"{' '.join(self.command)} failed: {detail}")


class GitCommandError(CommandError):
    """A git subcommand failed."""


class BuildError(CommandError):
    """The static-site build did not produce a usable output directory."""


class ConfigurationError(ValueError):
    """Deployment settings could not be loaded or validated."""
