"""Git and filesystem helpers shared by the tests."""

from __future__ import annotations

import subprocess
from pathlib import Path


BUILD_SCRIPT = '''\
"""Render every Markdown file into _site/ as a stand-in for the real site generator."""
import shutil
from pathlib import Path

root = Path(__file__).resolve().parent
output = root / "_site"
if output.exists():
    shutil.rmtree(output)
output.mkdir()
for source in sorted(root.rglob("*.md")):
    relative = source.relative_to(root)
    if relative.parts[0].startswith("_site"):
        continue
    target = output / relative.with_suffix(".html")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text("<article>" + source.read_text(encoding="utf-8") + "</article>", encoding="utf-8")
(output / ".nojekyll").write_text("", encoding="utf-8")
'''


def run_git(repo: Path, *args: str) -> str:
    """Run git in ``repo`` and return its stripped stdout."""

    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        check=True,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    return result.stdout.strip()


def init_repo(path: Path, *, branch: str = "master") -> None:
    path.mkdir(parents=True, exist_ok=True)
    run_git(path, "init", f"--initial-branch={branch}")
    run_git(path, "config", "user.name", "Blog Bot")
    run_git(path, "config", "user.email", "bot@example.com")
    run_git(path, "config", "commit.gpgsign", "false")


def commit_all(repo: Path, message: str) -> str:
    run_git(repo, "add", "--all")
    run_git(repo, "commit", "--quiet", "-m", message)
    return run_git(repo, "rev-parse", "HEAD")


def tree_files(repo: Path, ref: str) -> list[str]:
    """Return the files tracked by ``ref`` as a sorted list."""

    output = run_git(repo, "ls-tree", "-r", "--name-only", ref)
    return sorted(line for line in output.splitlines() if line)
