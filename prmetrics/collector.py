"""Collect PRs and comments for one reviewer and time window.

Uses a trio producer/worker pipeline: the producer pages through PRs and
queues them, CONCURRENT_PRS workers fetch each PR's comments and reactions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import trio
from rich.console import Console
from rich.markup import escape

from . import config
from .errors import GitHubAPIError
from .extractors.comments import extract_comment, reaction_count
from .extractors.prs import extract_pr
from .github_client import GitHubClient
from .models import Comment, DateRange, PullRequest
from .repo import RepoInfo
from .storage import Dataset, build_dataset

logger = logging.getLogger(__name__)


@dataclass
class CollectionStats:
    """Running totals for one collection run."""

    total_prs: int = 0
    processed_prs: int = 0
    prs_with_reviewer: int = 0
    reviewer_comments: int = 0
    comments: int = 0
    failed_prs: int = 0
    api_requests: int = 0
    rate_limit_remaining: int | None = None


@dataclass
class PRComments:
    """Result of extracting a single PR's comments."""

    pr: PullRequest
    comments: list[Comment] = field(default_factory=list)
    reviewer_comments: int = 0


class DataCollector:
    """Fetches the dataset that the analyzer consumes.

    Only PRs the reviewer commented on contribute comments, but all of their
    comments are kept so human replies can be linked later.
    """

    def __init__(
        self,
        client: GitHubClient,
        repo: RepoInfo,
        reviewer: str,
        period: DateRange,
        console: Console | None = None,
    ):
        self.client = client
        self.repo = repo
        self.reviewer = reviewer
        self.period = period
        self.console = console or Console()

        self.prs: list[PullRequest] = []
        self.comments: list[Comment] = []
        self.failed_prs: dict[int, str] = {}
        self.stats = CollectionStats()

    def _is_reviewer(self, comment_data: dict) -> bool:
        login = (comment_data.get("user") or {}).get("login") or ""
        return login.strip().lower() == self.reviewer.strip().lower()

    async def _with_reactions(self, pr_number: int, comments_data: list[dict], review: bool) -> list[Comment]:
        """Build comments, fetching reaction lists for reacted reviewer comments."""
        reactions: dict[int, list[dict]] = {}

        async def fetch(comment_id: int):
            if review:
                reactions[comment_id] = await self.client.get_review_comment_reactions(self.repo, comment_id)
            else:
                reactions[comment_id] = await self.client.get_issue_comment_reactions(self.repo, comment_id)

        async with trio.open_nursery() as nursery:
            for data in comments_data:
                if self._is_reviewer(data) and reaction_count(data) > 0:
                    nursery.start_soon(fetch, data["id"])

        return [extract_comment(pr_number, data, reactions.get(data["id"])) for data in comments_data]

    async def extract_pr_comments(self, pr_data: dict) -> PRComments:
        """Fetch review and conversation comments for one PR concurrently."""
        pr = extract_pr(pr_data)
        result = PRComments(pr=pr)
        raw: dict[str, list[dict]] = {}

        async def fetch_review_comments():
            raw["review"] = await self.client.get_review_comments(self.repo, pr.number)

        async def fetch_issue_comments():
            raw["issue"] = await self.client.get_issue_comments(self.repo, pr.number)

        async with trio.open_nursery() as nursery:
            nursery.start_soon(fetch_review_comments)
            nursery.start_soon(fetch_issue_comments)

        result.reviewer_comments = sum(
            1 for data in raw["review"] + raw["issue"] if self._is_reviewer(data)
        )
        if result.reviewer_comments == 0:
            return result

        result.comments = await self._with_reactions(pr.number, raw["review"], review=True)
        result.comments += await self._with_reactions(pr.number, raw["issue"], review=False)
        return result

    def merge(self, details: PRComments) -> None:
        self.prs.append(details.pr)
        self.comments.extend(details.comments)

        self.stats.processed_prs += 1
        self.stats.comments += len(details.comments)
        self.stats.reviewer_comments += details.reviewer_comments
        if details.reviewer_comments:
            self.stats.prs_with_reviewer += 1
        self.stats.api_requests = self.client.request_count
        self.stats.rate_limit_remaining = self.client.rate_limit_remaining

    async def _process_single_pr(self, pr_data: dict) -> None:
        pr_number = pr_data["number"]
        try:
            details = await self.extract_pr_comments(pr_data)
        except Exception as e:
            self.stats.failed_prs += 1
            self.failed_prs[pr_number] = f"{type(e).__name__}: {e}"
            logger.exception(f"PR #{pr_number} failed")
            return

        self.merge(details)
        logger.debug(f"PR #{pr_number}: {details.reviewer_comments} reviewer comments")

    async def _pr_producer(self, send_channel: trio.MemorySendChannel, limit: int | None) -> None:
        async with send_channel:
            async for pr in self.client.get_pull_requests(self.repo, self.period):
                self.stats.total_prs += 1
                await send_channel.send(pr)
                if limit and self.stats.total_prs >= limit:
                    break

    async def _pr_worker(self, receive_channel: trio.MemoryReceiveChannel) -> None:
        async with receive_channel:
            async for pr_data in receive_channel:
                await self._process_single_pr(pr_data)

    async def run(self, limit: int | None = None) -> Dataset:
        """Collect everything and return the dataset (PRs sorted by number)."""
        logger.info(
            f"Collecting {self.repo.full_name} for {self.reviewer}: "
            f"{self.period.start.isoformat()} to {self.period.end.isoformat()}"
        )
        self.console.print(
            f"[bold]{self.repo.full_name}[/] | {escape(self.reviewer)} | "
            f"{self.period.start.date()} to {self.period.end.date()} [dim]({self.client.auth_type.upper()})[/]"
        )

        send_channel, receive_channel = trio.open_memory_channel[dict](config.PR_QUEUE_SIZE)

        with self.console.status("Fetching pull requests..."):
            async with trio.open_nursery() as nursery:
                nursery.start_soon(self._pr_producer, send_channel, limit)
                for _ in range(config.CONCURRENT_PRS):
                    nursery.start_soon(self._pr_worker, receive_channel.clone())
                await receive_channel.aclose()

        logger.info(
            f"Collection finished: {self.stats.processed_prs} PRs, {self.stats.reviewer_comments} reviewer "
            f"comments, {self.stats.failed_prs} failed, {self.client.request_count} API requests, "
            f"rate limit remaining: {self.stats.rate_limit_remaining}"
        )

        # An incomplete dataset would skew every rate, so nothing is saved
        if self.failed_prs:
            first = min(self.failed_prs)
            raise GitHubAPIError(
                f"{len(self.failed_prs)} PRs could not be collected "
                f"(first: #{first}: {self.failed_prs[first]})"
            )

        self.prs.sort(key=lambda pr: pr.number)
        self.comments.sort(key=lambda c: (c.created_at, c.id))

        self.console.print(f"Found {self.stats.processed_prs} pull requests")
        self.console.print(
            f"Found {self.stats.reviewer_comments} comments from {escape(self.reviewer)} "
            f"on {self.stats.prs_with_reviewer} PRs"
        )

        return build_dataset(
            prs=self.prs,
            comments=self.comments,
            repository=self.repo.full_name,
            reviewer=self.reviewer,
            period=self.period,
        )
