"""Invoke the external static-site generator."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from sitedeploy.models.settings import DEFAULT_BUILD_COMMAND, DEFAULT_BUILD_DIR
from sitedeploy.services.errors import BuildError


logger = logging.getLogger(__name__)

_COMMAND_NOT_FOUND = 127


@dataclass(slots=True)
class SiteBuilder:
    """Run the build tool against the source tree and locate its output directory."""

    repo_path: Path
    command: tuple[str, ...] = DEFAULT_BUILD_COMMAND
    output_dir: Path = field(default_factory=lambda: DEFAULT_BUILD_DIR)

    @property
    def output_path(self) -> Path:
        return self.repo_path / self.output_dir

    def build(self) -> Path:
        """Run the build command and return the absolute output directory."""

        command = list(self.command)
        try:
            result = subprocess.run(
                command,
                cwd=self.repo_path,
                text=True,
                check=False,
                capture_output=True,
            )
        except FileNotFoundError as exc:
            raise BuildError(
                command,
                _COMMAND_NOT_FOUND,
                message=f"build tool '{command[0]}' not found",
            ) from exc

        if result.stdout.strip():
            logger.debug("Build output:\n%s", result.stdout.rstrip())
        if result.returncode != 0:
            raise BuildError(command, result.returncode, stderr=result.stderr, stdout=result.stdout)

        output_path = self.output_path
        if not output_path.is_dir():
            raise BuildError(
                command,
                1,
                message=f"build directory '{self.output_dir}' was not created",
            )
        return output_path.resolve()
