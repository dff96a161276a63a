"""Generate a starter prmetrics.yaml for the current repository."""

from __future__ import annotations

import dataclasses
from pathlib import Path

from ..errors import ConfigurationError
from ..project_config import ProjectConfig
from ..repo import detect_repo_from_git, parse_repo_arg
from ..storage import write_text_atomic


def init_config(
    output: Path,
    repo: str | None = None,
    reviewer: str | None = None,
    days: int | None = None,
    force: bool = False,
) -> ProjectConfig:
    """Write a config file, detecting the repository from git when not given.

    Raises:
        ConfigurationError: If the file exists (without ``force``), the repo
            string is malformed, or ``days`` is not positive.
    """
    if output.exists() and not force:
        raise ConfigurationError(f"{output} already exists (use --force to overwrite)")
    if days is not None and days <= 0:
        raise ConfigurationError(f"Days must be a positive number, got {days}")

    detected = parse_repo_arg(repo) if repo else detect_repo_from_git()

    config = ProjectConfig.default()
    config = dataclasses.replace(
        config,
        repo_owner=detected.owner if detected else None,
        repo_name=detected.name if detected else None,
        reviewer=reviewer or config.reviewer,
        days=days or config.days,
    )

    write_text_atomic(output, config.to_yaml())
    return config
