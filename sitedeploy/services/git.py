"""Thin wrapper around the git command line used by the deploy workflow."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from sitedeploy.services.errors import GitCommandError


logger = logging.getLogger(__name__)

_COMMAND_NOT_FOUND = 127


@dataclass(slots=True)
class GitRepository:
    """Run git subcommands inside a local working copy."""

    repo_path: Path
    git_executable: str = "git"

    def run(
        self, *args: str, check: bool = True, input: str | None = None
    ) -> subprocess.CompletedProcess[str]:
        """Execute a git command within the repository and raise on error."""

        if not self.repo_path.exists():
            raise FileNotFoundError(f"Repository path '{self.repo_path}' does not exist")

        command = [self.git_executable, *args]
        logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=self.repo_path,
                input=input,
                text=True,
                check=False,
                capture_output=True,
            )
        except FileNotFoundError as exc:
            raise GitCommandError(
                command,
                _COMMAND_NOT_FOUND,
                message=f"git executable '{self.git_executable}' not found",
            ) from exc
        if check and result.returncode != 0:
            raise GitCommandError(command, result.returncode, stderr=result.stderr, stdout=result.stdout)
        return result

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def current_branch(self) -> str:
        """Return the checked-out branch name, or an empty string when HEAD is detached."""

        return self.run("branch", "--show-current").stdout.strip()

    def status_porcelain(self) -> list[str]:
        """Return the porcelain status lines, untracked files included."""

        output = self.run("status", "--porcelain").stdout
        return [line for line in output.splitlines() if line.strip()]

    def is_clean(self) -> bool:
        return not self.status_porcelain()

    def branch_exists(self, name: str) -> bool:
        result = self.run("show-ref", "--verify", "--quiet", f"refs/heads/{name}", check=False)
        return result.returncode == 0

    def tracked_files(self) -> list[str]:
        output = self.run("ls-files", "-z").stdout
        return [entry for entry in output.split("\0") if entry]

    def has_staged_changes(self) -> bool:
        """Return ``True`` when the index differs from HEAD (or from the empty tree on an unborn branch)."""

        result = self.run("diff", "--cached", "--quiet", check=False)
        if result.returncode not in (0, 1):
            raise GitCommandError(
                [self.git_executable, "diff", "--cached", "--quiet"],
                result.returncode,
                stderr=result.stderr,
            )
        return result.returncode == 1

    def head_commit(self) -> str:
        return self.run("rev-parse", "HEAD").stdout.strip()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def checkout(self, branch: str) -> None:
        self.run("checkout", branch)

    def checkout_orphan(self, branch: str) -> None:
        """Start a new branch with no history; the index keeps the previous tree until cleaned."""

        self.run("checkout", "--orphan", branch)

    def remove_all_tracked(self) -> int:
        """Remove every tracked file from the index and working tree, returning how many were removed."""

        tracked = self.tracked_files()
        if not tracked:
            return 0
        self.run("rm", "-r", "-f", "--quiet", "--", ".")
        return len(tracked)

    def add(self, *paths: str, force: bool = False) -> None:
        """Stage exactly ``paths``, read as literal names rather than glob patterns."""

        if not paths:
            return
        args = ["--literal-pathspecs", "add"]
        if force:
            args.append("--force")
        args.extend(["--pathspec-from-file=-", "--pathspec-file-nul"])
        self.run(*args, input="\0".join(paths))

    def commit(self, message: str) -> str:
        """Create a commit from the staged changes and return its hash."""

        self.run("commit", "--quiet", "-m", message)
        return self.head_commit()

    def push(self, remote: str, branch: str, *, force: bool = False) -> None:
        args = ["push", remote, branch]
        if force:
            args.append("--force")
        self.run(*args)
