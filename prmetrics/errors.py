"""Exception types for prmetrics.

Classification misses are never errors; only boundary validation raises.
"""


class PRMetricsError(Exception):
    """Base exception for all user-facing prmetrics errors."""


class ConfigurationError(PRMetricsError):
    """Raised when CLI arguments or configuration values are invalid."""


class UnsupportedFormatError(ConfigurationError):
    """Raised when a report format identifier is not supported."""


class DatasetError(PRMetricsError):
    """Raised when a stored dataset is missing or does not match the schema."""

    def __init__(self, message: str, problems: list[str] | None = None):
        super().__init__(message)
        self.problems = problems or []


class GitHubAPIError(PRMetricsError):
    """Raised when the GitHub API keeps failing after retries."""
