"""Pull request data extractor."""

from datetime import datetime

from ..models import PullRequest
from .users import extract_user


def parse_datetime(dt_str: str | None) -> datetime | None:
    """Parse ISO datetime string, returns None if input is empty."""
    if not dt_str:
        return None
    return datetime.fromisoformat(dt_str.replace("Z", "+00:00"))


def parse_datetime_required(dt_str: str) -> datetime:
    """Parse ISO datetime string, raises if input is empty."""
    if not dt_str:
        raise ValueError("datetime string is required")
    return datetime.fromisoformat(dt_str.replace("Z", "+00:00"))


def extract_pr(pr_data: dict) -> PullRequest:
    """Extract PR data from GitHub API response."""
    return PullRequest(
        number=pr_data["number"],
        title=pr_data.get("title") or "",
        state=pr_data.get("state", "open"),
        author=extract_user(pr_data.get("user")),
        created_at=parse_datetime_required(pr_data["created_at"]),
    )
