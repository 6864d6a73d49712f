"""Data structures describing the outcome of a deployment run."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class StepResult:
    """Outcome of a single deployment step."""

    name: str
    succeeded: bool
    message: str = ""
    exit_code: int = 0


@dataclass(slots=True)
class DeployResult:
    """Structured summary of a deployment run."""

    main_branch: str
    deploy_branch: str
    steps: list[StepResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    commit_hash: str | None = None
    published_files: list[str] = field(default_factory=list)
    committed: bool = False
    exit_code: int = 0

    @property
    def succeeded(self) -> bool:
        """Return ``True`` when every step ran and none reported an error."""

        return not self.errors and self.exit_code == 0

    @property
    def failed_step(self) -> str | None:
        """Return the name of the step that aborted the run, if any."""

        for step in self.steps:
            if not step.succeeded:
                return step.name
        return None
