"""Repository detection and data path management.

Resolves owner/repo from the CLI flag, environment, config or git remote,
and manages the global cache directory used for logs.
"""

from __future__ import annotations

import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError
from .project_config import ProjectConfig

_NAME_PART = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class RepoInfo:
    """Repository information."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def data_dir(self) -> Path:
        """Global data directory for this repo."""
        return get_cache_dir() / self.owner / self.name

    @property
    def log_file(self) -> Path:
        return self.data_dir / "prmetrics.log"


def get_cache_dir() -> Path:
    """Get the global cache directory for prmetrics data."""
    # Use XDG_CACHE_HOME if set, otherwise ~/.cache
    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    if xdg_cache:
        return Path(xdg_cache) / "prmetrics"
    return Path.home() / ".cache" / "prmetrics"


def parse_repo_arg(value: str) -> RepoInfo:
    """Parse an ``owner/repo`` string.

    Raises:
        ConfigurationError: If the value is not exactly ``owner/repo``.
    """
    parts = value.strip().split("/") if value else []
    if len(parts) != 2 or not all(_NAME_PART.match(p) for p in parts):
        raise ConfigurationError(f"Repository must be in format owner/repo, got {value!r}")
    return RepoInfo(owner=parts[0], name=parts[1])


def parse_git_remote_url(url: str) -> RepoInfo | None:
    """Parse owner/repo from git remote URL.

    Supports:
    - git@github.com:owner/repo.git
    - https://github.com/owner/repo.git
    - https://github.com/owner/repo
    - ssh://git@github.com/owner/repo.git
    """
    # SSH format: git@github.com:owner/repo.git
    ssh_match = re.match(r"git@[\w.-]+:([^/]+)/([^/]+?)(?:\.git)?$", url)
    if ssh_match:
        return RepoInfo(owner=ssh_match.group(1), name=ssh_match.group(2))

    # HTTPS format: https://github.com/owner/repo.git
    https_match = re.match(r"https?://[\w.-]+/([^/]+)/([^/]+?)(?:\.git)?$", url)
    if https_match:
        return RepoInfo(owner=https_match.group(1), name=https_match.group(2))

    # SSH with ssh:// prefix
    ssh_url_match = re.match(r"ssh://git@[\w.-]+/([^/]+)/([^/]+?)(?:\.git)?$", url)
    if ssh_url_match:
        return RepoInfo(owner=ssh_url_match.group(1), name=ssh_url_match.group(2))

    return None


def get_git_remote_url(remote: str = "origin") -> str | None:
    """Get the URL of a git remote."""
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", remote],
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None


def detect_repo_from_git() -> RepoInfo | None:
    """Detect repo from git remote in current directory."""
    url = get_git_remote_url("origin")
    if url:
        return parse_git_remote_url(url)
    return None


def get_repo_from_config(config: ProjectConfig) -> RepoInfo | None:
    if config.repo_owner and config.repo_name:
        return RepoInfo(owner=config.repo_owner, name=config.repo_name)
    return None


def get_repo_from_env() -> RepoInfo | None:
    """Get repo from environment variables."""
    owner = os.environ.get("REPO_OWNER")
    name = os.environ.get("REPO_NAME")
    if owner and name:
        return RepoInfo(owner=owner, name=name)
    return None


def get_repo(explicit: str | None = None, config: ProjectConfig | None = None) -> RepoInfo:
    """Get repo info with fallback chain.

    Priority:
    1. Explicit ``owner/repo`` (the --repo flag)
    2. Environment variables (REPO_OWNER, REPO_NAME)
    3. prmetrics.yaml config (repo.owner, repo.name)
    4. Git remote detection

    Raises ConfigurationError if repo cannot be determined.
    """
    if explicit:
        return parse_repo_arg(explicit)

    repo = get_repo_from_env()
    if repo:
        return repo

    repo = get_repo_from_config(config or ProjectConfig.load())
    if repo:
        return repo

    repo = detect_repo_from_git()
    if repo:
        return repo

    raise ConfigurationError(
        "Could not determine repository: pass --repo owner/repo, set REPO_OWNER and REPO_NAME, "
        "add a repo section to prmetrics.yaml, or run inside a clone with a GitHub remote"
    )
