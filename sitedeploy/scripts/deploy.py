"""Build the blog and publish the generated site to the deploy branch.

The script checks that it runs from a clean checkout of the main branch,
invokes the static-site generator, and replaces the whole contents of the
deploy branch with the fresh build output before force-pushing it.

Configuration precedence (lowest first):
- Built-in defaults (``master`` -> ``gh-pages``, output in ``_site``).
- ``_deploy.yml`` at the repository root, or the file passed via --config.
- ``SITEDEPLOY_*`` environment variables.
- Command-line flags.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, Sequence

from sitedeploy.models.deploy import DeployResult
from sitedeploy.models.settings import DeploySettings
from sitedeploy.services.config_loader import load_settings
from sitedeploy.services.errors import ConfigurationError
from sitedeploy.services.publisher import SitePublisher

LOGGER = logging.getLogger("sitedeploy.deploy")


def _configure_logging(level_name: str | None = None) -> None:
    """Configure root logging from ``--log-level`` or ``SITEDEPLOY_LOG_LEVEL``."""
    level_name = (level_name or os.getenv("SITEDEPLOY_LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the site and publish it to the deploy branch.")
    parser.add_argument(
        "--repo",
        type=Path,
        default=None,
        help="Repository to deploy (default: current directory).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file (default: _deploy.yml in the repository when present).",
    )
    parser.add_argument("--main-branch", default=None, help="Branch the deploy must start from.")
    parser.add_argument("--deploy-branch", default=None, help="Branch rewritten with the build output.")
    parser.add_argument("--build-dir", default=None, help="Build output directory relative to the repository.")
    parser.add_argument("--build-command", default=None, help="Command that builds the site, e.g. 'jekyll build'.")
    parser.add_argument("--remote", default=None, help="Remote receiving the force-pushed deploy branch.")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default from SITEDEPLOY_LOG_LEVEL or INFO).",
    )
    return parser.parse_args(argv)


def _load_settings(args: argparse.Namespace, repo_path: Path) -> DeploySettings:
    overrides: dict[str, Any] = {
        "main_branch": args.main_branch,
        "deploy_branch": args.deploy_branch,
        "build_dir": args.build_dir,
        "build_command": args.build_command,
        "remote": args.remote,
    }
    return load_settings(args.config, repo_path=repo_path, overrides=overrides)


def _build_publisher(repo_path: Path, settings: DeploySettings) -> SitePublisher:
    return SitePublisher(repo_path=repo_path, settings=settings)


def _summary(result: DeployResult) -> dict[str, Any]:
    return {
        "main_branch": result.main_branch,
        "deploy_branch": result.deploy_branch,
        "steps": [asdict(step) for step in result.steps],
        "failed_step": result.failed_step,
        "committed": result.committed,
        "commit_hash": result.commit_hash,
        "published_files": len(result.published_files),
        "warnings": result.warnings,
        "errors": result.errors,
        "succeeded": result.succeeded,
        "exit_code": result.exit_code,
    }


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.log_level)
    repo_path = (args.repo or Path.cwd()).resolve()

    try:
        settings = _load_settings(args, repo_path)
    except ConfigurationError as exc:
        LOGGER.error("❌ %s", exc)
        return 1

    LOGGER.info(
        "DEPLOY_START repo=%s main=%s deploy=%s build_dir=%s",
        repo_path,
        settings.main_branch,
        settings.deploy_branch,
        settings.build_dir,
    )

    publisher = _build_publisher(repo_path, settings)
    try:
        result = publisher.publish()
    except Exception:
        LOGGER.exception("Deployment encountered an unexpected error")
        return 1

    print(json.dumps(_summary(result), ensure_ascii=False))

    if not result.succeeded:
        LOGGER.error("Deployment failed at step '%s'", result.failed_step)
        return result.exit_code or 1

    LOGGER.info(
        "DEPLOY_COMPLETE deploy=%s commit=%s files=%s",
        settings.deploy_branch,
        result.commit_hash,
        len(result.published_files),
    )
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
