"""Publish the built site by replacing the contents of the deploy branch."""

from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Protocol

from sitedeploy.models.deploy import DeployResult, StepResult
from sitedeploy.models.settings import DeploySettings
from sitedeploy.services.builder import SiteBuilder
from sitedeploy.services.errors import CommandError
from sitedeploy.services.git import GitRepository
from sitedeploy.utils.fs import copy_tree_contents


logger = logging.getLogger(__name__)

NOTHING_TO_COMMIT = "Nothing to commit; deploy branch already matches the build output."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _exit_code(exc: CommandError) -> int:
    return exc.returncode if exc.returncode > 0 else 1


class SupportsBuild(Protocol):
    """Subset of :class:`SiteBuilder` relied on by the publisher."""

    def build(self) -> Path:
        """Run the build tool and return the output directory."""


@dataclass(slots=True)
class _RunState:
    """Values handed from one step to the next within a single run."""

    build_path: Path | None = None
    staging_dir: Path | None = None


@dataclass(slots=True)
class _Step:
    name: str
    status: str
    action: Callable[[_RunState, DeployResult], str]


@dataclass(slots=True)
class SitePublisher:
    """Build the site and force-publish it to the deploy branch."""

    repo_path: Path
    settings: DeploySettings = field(default_factory=DeploySettings)
    git: GitRepository | None = None
    builder: SupportsBuild | None = None
    clock: Callable[[], datetime] = _utcnow

    def __post_init__(self) -> None:
        if self.git is None:
            self.git = GitRepository(self.repo_path, git_executable=self.settings.git_executable)
        if self.builder is None:
            self.builder = SiteBuilder(
                self.repo_path,
                command=self.settings.build_command,
                output_dir=self.settings.build_dir,
            )

    def publish(self) -> DeployResult:
        """Run the precondition checks and every deployment step, stopping at the first failure."""

        settings = self.settings
        result = DeployResult(main_branch=settings.main_branch, deploy_branch=settings.deploy_branch)

        if not self._check_preconditions(result):
            return result

        logger.info("🚀 Starting deployment process...")
        state = _RunState()
        try:
            for step in self._steps():
                logger.info(step.status)
                if not self._run_step(step, state, result):
                    self._report_abort(result)
                    return result
        finally:
            self._discard_staging(state, ignore_errors=True)

        logger.info("✅ Deployment complete!")
        return result

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------
    def _check_preconditions(self, result: DeployResult) -> bool:
        git = self._git
        main_branch = self.settings.main_branch
        try:
            current = git.current_branch()
            if current != main_branch:
                return self._fail_precondition(
                    result,
                    "branch-check",
                    f"Must be on {main_branch} branch to deploy. Current branch: {current or '(detached HEAD)'}",
                )
            if not git.is_clean():
                return self._fail_precondition(
                    result,
                    "clean-tree",
                    "Working directory is not clean. Please commit or stash your changes first.",
                )
        except CommandError as exc:
            return self._fail_precondition(result, "preconditions", str(exc), exit_code=_exit_code(exc))
        except OSError as exc:
            return self._fail_precondition(result, "preconditions", str(exc))
        return True

    @staticmethod
    def _fail_precondition(result: DeployResult, name: str, message: str, *, exit_code: int = 1) -> bool:
        logger.error("❌ %s", message)
        result.steps.append(StepResult(name=name, succeeded=False, message=message, exit_code=exit_code))
        result.errors.append(message)
        result.exit_code = exit_code
        return False

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def _steps(self) -> list[_Step]:
        settings = self.settings
        return [
            _Step("build", "🏗️  Building site...", self._build),
            _Step("save", "📦 Saving built site...", self._save),
            _Step("switch", f"🔄 Switching to {settings.deploy_branch} branch...", self._switch),
            _Step("clean", "🗑️  Cleaning old files...", self._clean),
            _Step("copy", "📋 Copying new files...", self._copy),
            _Step("discard", "🗑️  Removing temporary copy...", self._discard),
            _Step("commit", "📝 Committing changes...", self._commit),
            _Step("push", f"⬆️  Pushing {settings.deploy_branch} to {settings.remote}...", self._push),
            _Step("restore", f"↩️  Switching back to {settings.main_branch}...", self._restore),
        ]

    def _run_step(self, step: _Step, state: _RunState, result: DeployResult) -> bool:
        try:
            message = step.action(state, result)
        except CommandError as exc:
            return self._fail_step(result, step.name, str(exc), _exit_code(exc))
        except OSError as exc:
            return self._fail_step(result, step.name, str(exc), 1)

        result.steps.append(StepResult(name=step.name, succeeded=True, message=message))
        if message:
            logger.debug("%s: %s", step.name, message)
        return True

    @staticmethod
    def _fail_step(result: DeployResult, name: str, message: str, exit_code: int) -> bool:
        error = f"{name.capitalize()} failed: {message}"
        logger.error("❌ %s", error)
        result.steps.append(StepResult(name=name, succeeded=False, message=message, exit_code=exit_code))
        result.errors.append(error)
        result.exit_code = exit_code
        return False

    def _report_abort(self, result: DeployResult) -> None:
        try:
            branch = self._git.current_branch()
        except (CommandError, OSError):
            return
        if branch and branch != self.settings.main_branch:
            warning = f"Deployment aborted; repository left on branch '{branch}'."
            logger.warning(warning)
            result.warnings.append(warning)

    def _build(self, state: _RunState, result: DeployResult) -> str:
        assert self.builder is not None
        state.build_path = self.builder.build()
        return f"Built site into {state.build_path}"

    def _save(self, state: _RunState, result: DeployResult) -> str:
        assert state.build_path is not None
        staging_dir = Path(tempfile.mkdtemp(prefix="sitedeploy-"))
        state.staging_dir = staging_dir
        copy_tree_contents(state.build_path, staging_dir)
        return f"Saved build output to {staging_dir}"

    def _switch(self, state: _RunState, result: DeployResult) -> str:
        git = self._git
        branch = self.settings.deploy_branch
        if git.branch_exists(branch):
            git.checkout(branch)
            return f"Checked out existing branch {branch}"
        git.checkout_orphan(branch)
        return f"Created orphan branch {branch}"

    def _clean(self, state: _RunState, result: DeployResult) -> str:
        removed = self._git.remove_all_tracked()
        return f"Removed {removed} tracked files"

    def _copy(self, state: _RunState, result: DeployResult) -> str:
        assert state.staging_dir is not None
        result.published_files = copy_tree_contents(state.staging_dir, self.repo_path)
        return f"Copied {len(result.published_files)} files"

    def _discard(self, state: _RunState, result: DeployResult) -> str:
        self._discard_staging(state)
        return "Removed temporary copy"

    def _commit(self, state: _RunState, result: DeployResult) -> str:
        git = self._git
        git.add(*result.published_files, force=True)
        if not git.has_staged_changes():
            logger.info(NOTHING_TO_COMMIT)
            result.warnings.append(NOTHING_TO_COMMIT)
            if git.branch_exists(self.settings.deploy_branch):
                result.commit_hash = git.head_commit()
            return NOTHING_TO_COMMIT

        timestamp = self.clock().astimezone(timezone.utc).isoformat(timespec="seconds")
        result.commit_hash = git.commit(self.settings.commit_message(timestamp))
        result.committed = True
        return f"Committed {result.commit_hash}"

    def _push(self, state: _RunState, result: DeployResult) -> str:
        settings = self.settings
        self._git.push(settings.remote, settings.deploy_branch, force=True)
        return f"Pushed {settings.deploy_branch} to {settings.remote}"

    def _restore(self, state: _RunState, result: DeployResult) -> str:
        self._git.checkout(self.settings.main_branch)
        return f"Checked out {self.settings.main_branch}"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @property
    def _git(self) -> GitRepository:
        assert self.git is not None
        return self.git

    @staticmethod
    def _discard_staging(state: _RunState, *, ignore_errors: bool = False) -> None:
        if state.staging_dir is None:
            return
        shutil.rmtree(state.staging_dir, ignore_errors=ignore_errors)
        state.staging_dir = None


__all__ = ["NOTHING_TO_COMMIT", "SitePublisher", "SupportsBuild"]
