"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from prmetrics.models import Comment, DateRange, PullRequest, Reaction, User

BASE_TIME = datetime(2024, 1, 10, 12, 0, tzinfo=UTC)
REVIEWER = "coderabbitai[bot]"


def make_user(login: str = "alice", account_type: str = "User") -> User:
    return User(login=login, account_type=account_type)


def make_reaction(kind: str = "thumbs_up", login: str = "alice", synthetic: bool = False) -> Reaction:
    return Reaction(kind=kind, user=make_user(login), created_at=BASE_TIME, synthetic=synthetic)


def make_comment(
    id: int = 1,
    body: str = "Consider extracting this into a helper.",
    login: str = REVIEWER,
    account_type: str = "Bot",
    hours: float = 0,
    edited_hours: float | None = None,
    reactions: tuple[Reaction, ...] = (),
    in_reply_to_id: int | None = None,
    pr_number: int | None = 1,
) -> Comment:
    created = BASE_TIME + timedelta(hours=hours)
    updated = BASE_TIME + timedelta(hours=edited_hours) if edited_hours is not None else created
    return Comment(
        id=id,
        body=body,
        author=make_user(login, account_type),
        created_at=created,
        updated_at=updated,
        in_reply_to_id=in_reply_to_id,
        reactions=reactions,
        pr_number=pr_number,
        html_url=f"https://github.com/test/repo/pull/{pr_number}#discussion_r{id}",
    )


def make_reply(id: int, to: int | None, body: str = "Thanks, fixed.", login: str = "alice", hours: float = 1, **kwargs) -> Comment:
    return make_comment(id=id, body=body, login=login, account_type="User", hours=hours, in_reply_to_id=to, **kwargs)


def make_pr(number: int = 1, days_ago: float = 1) -> PullRequest:
    return PullRequest(
        number=number,
        title=f"PR {number}",
        author=make_user("alice"),
        created_at=BASE_TIME - timedelta(days=days_ago),
    )


@pytest.fixture
def period():
    """Seven days ending one day after BASE_TIME."""
    return DateRange.last_days(7, now=BASE_TIME + timedelta(days=1))


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    """Keep log files out of the real cache directory."""
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.delenv("REPO_OWNER", raising=False)
    monkeypatch.delenv("REPO_NAME", raising=False)


@pytest.fixture
def github_client_uninit():
    """Create an uninitialized GitHubClient with a fake PAT token.

    Use this for sync tests that don't need the async context manager.
    """
    from prmetrics.github_client import GitHubClient

    return GitHubClient(token="fake-token")
