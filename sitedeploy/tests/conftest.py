"""Shared fixtures for the test suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from sitedeploy.models.settings import DeploySettings
from sitedeploy.tests.helpers import BUILD_SCRIPT, commit_all, init_repo, run_git


@pytest.fixture
def remote_repo(tmp_path: Path) -> Path:
    """Bare repository acting as the ``origin`` remote."""

    remote = tmp_path / "remote.git"
    remote.mkdir()
    run_git(remote, "init", "--bare", "--quiet")
    return remote


@pytest.fixture
def blog_repo(tmp_path: Path, remote_repo: Path) -> Path:
    """Clean checkout of ``master`` holding a couple of Markdown posts and a build script."""

    repo = tmp_path / "blog"
    init_repo(repo)
    (repo / ".gitignore").write_text("_site/\n", encoding="utf-8")
    (repo / "build.py").write_text(BUILD_SCRIPT, encoding="utf-8")
    (repo / "index.md").write_text("---\nlayout: home\n---\nWelcome\n", encoding="utf-8")
    posts = repo / "_posts"
    posts.mkdir()
    (posts / "2024-01-10-parsing-gpx.md").write_text(
        "---\ntitle: Parsing GPX files\ntags: [gpx, elixir]\n---\nTrack points and segments.\n",
        encoding="utf-8",
    )
    (posts / "2024-02-02-postgis.md").write_text(
        "---\ntitle: Storing routes in PostGIS\ntags: [postgis]\n---\nLineStrings all the way down.\n",
        encoding="utf-8",
    )
    commit_all(repo, "Initial posts")
    run_git(repo, "remote", "add", "origin", str(remote_repo))
    return repo


@pytest.fixture
def deploy_settings() -> DeploySettings:
    """Settings that build with the local stand-in script instead of Jekyll."""

    return DeploySettings(build_command=(sys.executable, "build.py"))
