"""Validated configuration for a site deployment run."""

from __future__ import annotations

import shlex
from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


DEFAULT_MAIN_BRANCH = "master"
DEFAULT_DEPLOY_BRANCH = "gh-pages"
DEFAULT_BUILD_DIR = Path("_site")
DEFAULT_BUILD_COMMAND: tuple[str, ...] = ("jekyll", "build")
DEFAULT_COMMIT_MESSAGE = "Deploy site built at {timestamp}"


class DeploySettings(BaseModel):
    """Branch names, build output location, and the commands used to publish the site."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    main_branch: str = Field(DEFAULT_MAIN_BRANCH, description="Branch holding the source content.")
    deploy_branch: str = Field(DEFAULT_DEPLOY_BRANCH, description="Branch rewritten with the build output.")
    build_dir: Path = Field(DEFAULT_BUILD_DIR, description="Build output directory, relative to the repository.")
    build_command: tuple[str, ...] = Field(DEFAULT_BUILD_COMMAND, description="Static-site build invocation.")
    remote: str = Field("origin", description="Remote receiving the force-pushed deploy branch.")
    git_executable: str = "git"
    commit_message_template: str = DEFAULT_COMMIT_MESSAGE

    @field_validator("main_branch", "deploy_branch", "remote", "git_executable")
    @classmethod
    def _ensure_not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Value must not be empty.")
        return cleaned

    @field_validator("build_command", mode="before")
    @classmethod
    def _split_command(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(shlex.split(value))
        return value

    @field_validator("build_command")
    @classmethod
    def _ensure_command(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value or not value[0].strip():
            raise ValueError("Build command must not be empty.")
        return value

    @field_validator("build_dir")
    @classmethod
    def _ensure_relative_build_dir(cls, value: Path) -> Path:
        posix = PurePosixPath(value.as_posix())
        if value.is_absolute() or posix.is_absolute():
            raise ValueError("Build directory must be relative to the repository root.")
        if ".." in posix.parts:
            raise ValueError("Build directory must stay inside the repository.")
        if not posix.parts:
            raise ValueError("Build directory must name a subdirectory of the repository.")
        return value

    @field_validator("commit_message_template")
    @classmethod
    def _ensure_timestamp_placeholder(cls, value: str) -> str:
        if "{timestamp}" not in value:
            raise ValueError("Commit message template must contain '{timestamp}'.")
        return value

    @model_validator(mode="after")
    def _ensure_distinct_branches(self) -> "DeploySettings":
        if self.main_branch == self.deploy_branch:
            raise ValueError("Main and deploy branches must differ.")
        return self

    def commit_message(self, timestamp: str) -> str:
        """Render the deploy commit message for the given build timestamp."""

        return self.commit_message_template.replace("{timestamp}", timestamp)
