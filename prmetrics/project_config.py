"""Project configuration loaded from ``prmetrics.yaml``.

Example::

    repo:
      owner: your-org
      name: your-repo
    analysis:
      reviewer: coderabbitai[bot]
      days: 14
      data_file: ./temp/pr-data.json
    bots:
      patterns: ["^snyk"]        # regexes, case-insensitive
      logins: ["release-helper"] # exact logins
      include_default_patterns: true
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .config import DEFAULT_DATA_FILE, DEFAULT_DAYS, DEFAULT_REVIEWER
from .errors import ConfigurationError
from .signals.replies import DEFAULT_BOT_PATTERNS, BotDetector

CONFIG_CANDIDATES = ["prmetrics.yaml", ".prmetrics.yaml", "prmetrics.yml", ".prmetrics.yml"]


def _parse_days(value: Any) -> int:
    try:
        days = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Days must be a positive number, got {value!r}") from e
    if days <= 0:
        raise ConfigurationError(f"Days must be a positive number, got {days}")
    return days


@dataclass
class ProjectConfig:
    """Repository, reviewer and bot detection settings."""

    repo_owner: str | None = None
    repo_name: str | None = None
    reviewer: str = DEFAULT_REVIEWER
    days: int = 7
    data_file: str = DEFAULT_DATA_FILE
    bot_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_BOT_PATTERNS))
    bot_logins: list[str] = field(default_factory=list)
    include_default_patterns: bool = True

    @classmethod
    def load(cls, path: Path | str | None = None) -> ProjectConfig:
        """Load config from YAML file or return defaults."""
        if path is None:
            for candidate in CONFIG_CANDIDATES:
                if Path(candidate).exists():
                    path = candidate
                    break

        if path is None or not Path(path).exists():
            return cls.default()

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse {path}: {e}") from e

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping at the top level")

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectConfig:
        """Create config from dictionary (e.g., parsed YAML)."""
        repo = data.get("repo") or {}
        analysis = data.get("analysis") or {}
        bots = data.get("bots") or {}

        include_defaults = bots.get("include_default_patterns", True)
        custom_patterns = list(bots.get("patterns", []))
        patterns = list(DEFAULT_BOT_PATTERNS) + custom_patterns if include_defaults else custom_patterns

        return cls(
            repo_owner=repo.get("owner"),
            repo_name=repo.get("name"),
            reviewer=analysis.get("reviewer", DEFAULT_REVIEWER),
            days=_parse_days(analysis.get("days", DEFAULT_DAYS)),
            data_file=analysis.get("data_file", DEFAULT_DATA_FILE),
            bot_patterns=patterns,
            bot_logins=list(bots.get("logins", [])),
            include_default_patterns=include_defaults,
        )

    @classmethod
    def default(cls) -> ProjectConfig:
        return cls(days=_parse_days(DEFAULT_DAYS))

    def bot_detector(self, reviewer: str | None = None) -> BotDetector:
        """Detector for configured patterns, exact logins and the reviewer itself."""
        logins = [*self.bot_logins, reviewer or self.reviewer]
        return BotDetector.with_logins(logins, patterns=self.bot_patterns)

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        data: dict[str, Any] = {}
        if self.repo_owner and self.repo_name:
            data["repo"] = {"owner": self.repo_owner, "name": self.repo_name}
        data["analysis"] = {
            "reviewer": self.reviewer,
            "days": self.days,
            "data_file": self.data_file,
        }

        # Only write the custom part of the bot patterns
        custom = [p for p in self.bot_patterns if p not in DEFAULT_BOT_PATTERNS]
        bots: dict[str, Any] = {}
        if custom or not self.include_default_patterns:
            bots["patterns"] = custom if self.include_default_patterns else self.bot_patterns
        if self.bot_logins:
            bots["logins"] = self.bot_logins
        if not self.include_default_patterns:
            bots["include_default_patterns"] = False
        if bots:
            data["bots"] = bots

        return yaml.dump(data, default_flow_style=False, sort_keys=False)
