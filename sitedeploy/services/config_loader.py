"""Helpers for assembling :class:`DeploySettings` from YAML, the environment, and CLI overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from sitedeploy.models.settings import DeploySettings
from sitedeploy.services.errors import ConfigurationError


DEFAULT_CONFIG_NAME = "_deploy.yml"

ENV_PREFIX = "SITEDEPLOY_"
_ENV_FIELDS: Mapping[str, str] = {
    "MAIN_BRANCH": "main_branch",
    "DEPLOY_BRANCH": "deploy_branch",
    "BUILD_DIR": "build_dir",
    "BUILD_COMMAND": "build_command",
    "REMOTE": "remote",
    "GIT": "git_executable",
}


def _read_config_file(path: Path) -> dict[str, Any]:
    """Return the mapping stored in ``path``, treating an empty file as no settings."""

    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{path} is not valid YAML: {exc}") from exc

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigurationError(f"{path} must contain a mapping of settings")
    return {str(key): value for key, value in payload.items()}


def _env_settings(env: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for suffix, field_name in _ENV_FIELDS.items():
        raw = env.get(f"{ENV_PREFIX}{suffix}")
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()
    return values


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "settings"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def resolve_config_path(config_path: Path | None, repo_path: Path) -> Path | None:
    """Return the configuration file to read, or ``None`` when the default file is absent."""

    if config_path is not None:
        candidate = config_path if config_path.is_absolute() else repo_path / config_path
        if not candidate.is_file():
            raise ConfigurationError(f"Configuration file '{candidate}' does not exist")
        return candidate

    default = repo_path / DEFAULT_CONFIG_NAME
    return default if default.is_file() else None


def load_settings(
    config_path: Path | None = None,
    *,
    repo_path: Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> DeploySettings:
    """Merge defaults, the YAML file, ``SITEDEPLOY_*`` variables, and overrides, in that order."""

    repo_path = repo_path or Path.cwd()
    env = os.environ if env is None else env

    values: dict[str, Any] = {}
    resolved = resolve_config_path(config_path, repo_path)
    if resolved is not None:
        values.update(_read_config_file(resolved))
    values.update(_env_settings(env))
    if overrides:
        values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return DeploySettings(**values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid deploy settings: {_describe_errors(exc)}") from exc


__all__ = ["DEFAULT_CONFIG_NAME", "ENV_PREFIX", "load_settings", "resolve_config_path"]
