"""GitHub API client with rate limiting, retry logic, and App auth support.

Uses httpx.AsyncClient with trio for concurrent requests.
"""

import logging
import time
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import jwt
import trio

from . import config
from .errors import ConfigurationError, GitHubAPIError
from .models import DateRange
from .repo import RepoInfo

logger = logging.getLogger(__name__)


class GitHubAppAuth:
    """GitHub App authentication manager with automatic token refresh."""

    def __init__(self, app_id: str, private_key_path: str, installation_id: str):
        self.app_id = app_id
        self.installation_id = installation_id

        try:
            with open(private_key_path) as f:
                self.private_key = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read GitHub App private key {private_key_path}: {e}") from e

        self._token: str | None = None
        self._token_expires_at: datetime | None = None
        self._refresh_lock: trio.Lock | None = None  # Lazy init, needs a running trio loop

    def _generate_jwt(self) -> str:
        """Generate a JWT for GitHub App authentication."""
        now = datetime.now(UTC)
        payload = {
            "iat": int(now.timestamp()) - 60,  # Issued 60s ago (clock skew)
            "exp": int((now + timedelta(minutes=10)).timestamp()),
            "iss": self.app_id,
        }
        return jwt.encode(payload, self.private_key, algorithm="RS256")

    async def _fetch_installation_token(self) -> tuple[str, datetime]:
        """Exchange JWT for an installation access token."""
        jwt_token = self._generate_jwt()

        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"https://api.github.com/app/installations/{self.installation_id}/access_tokens",
                headers={
                    "Authorization": f"Bearer {jwt_token}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                timeout=30.0,
            )
            response.raise_for_status()

        data = response.json()
        token = data["token"]
        expires_at = datetime.fromisoformat(data["expires_at"].replace("Z", "+00:00"))

        return token, expires_at

    def _token_valid(self) -> bool:
        return (
            self._token is not None
            and self._token_expires_at is not None
            and self._token_expires_at > datetime.now(UTC) + timedelta(minutes=5)
        )

    async def get_token(self) -> str:
        """Get a valid installation token, refreshing if needed."""
        if self._refresh_lock is None:
            self._refresh_lock = trio.Lock()

        if self._token_valid():
            return self._token

        async with self._refresh_lock:
            # Another task may have refreshed while we waited
            if self._token_valid():
                return self._token

            self._token, self._token_expires_at = await self._fetch_installation_token()
            logger.info(f"Refreshed GitHub App token, expires {self._token_expires_at.isoformat()}")
            return self._token


class GitHubClient:
    """Async GitHub REST API client with automatic rate limit handling.

    Supports both PAT and GitHub App authentication.
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str | None = None,
        app_auth: GitHubAppAuth | None = None,
    ):
        """Initialize the client.

        Args:
            token: Personal access token (PAT) for authentication
            app_auth: GitHubAppAuth instance for App authentication

        If neither is provided, falls back to the GITHUB_APP_* variables
        (preferred) and then GITHUB_TOKEN.
        """
        self.app_auth = app_auth
        self.pat_token = token

        if self.app_auth is None and self.pat_token is None:
            if config.GITHUB_APP_ID and config.GITHUB_APP_PRIVATE_KEY_PATH and config.GITHUB_APP_INSTALLATION_ID:
                self.app_auth = GitHubAppAuth(
                    config.GITHUB_APP_ID,
                    config.GITHUB_APP_PRIVATE_KEY_PATH,
                    config.GITHUB_APP_INSTALLATION_ID,
                )
            elif config.GITHUB_TOKEN:
                self.pat_token = config.GITHUB_TOKEN
            else:
                raise ConfigurationError(
                    "GitHub auth required. Set GITHUB_TOKEN or "
                    "GITHUB_APP_ID + GITHUB_APP_PRIVATE_KEY_PATH + GITHUB_APP_INSTALLATION_ID"
                )

        self._auth_type = "app" if self.app_auth else "pat"
        self.client: httpx.AsyncClient | None = None
        self._request_count = 0
        self.rate_limit_remaining: int | None = None

    async def __aenter__(self):
        self.client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=30.0,
            http2=True,
        )
        return self

    async def __aexit__(self, *args):
        if self.client:
            await self.client.aclose()

    @property
    def auth_type(self) -> str:
        return self._auth_type

    @property
    def request_count(self) -> int:
        return self._request_count

    async def _get_auth_header(self) -> str:
        if self.app_auth:
            return f"Bearer {await self.app_auth.get_token()}"
        return f"Bearer {self.pat_token}"

    def _track_rate_limit(self, response: httpx.Response) -> None:
        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining is not None:
            self.rate_limit_remaining = int(remaining)

    async def _handle_rate_limit(self, response: httpx.Response) -> bool:
        """Handle rate limiting. Returns True if request should be retried."""
        if response.status_code == 403:
            remaining = int(response.headers.get("X-RateLimit-Remaining", 1))
            if remaining == 0:
                reset_time = int(response.headers.get("X-RateLimit-Reset", 0))
                wait_seconds = max(reset_time - time.time(), 60)
                logger.warning(f"Rate limited (primary). Waiting {wait_seconds:.0f}s until reset...")
                await trio.sleep(wait_seconds + 1)
                return True

        if response.status_code == 429:
            retry_after = int(response.headers.get("Retry-After", 60))
            logger.warning(f"Rate limited (secondary). Waiting {retry_after}s...")
            await trio.sleep(retry_after)
            return True

        return False

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        max_retries: int = 3,
    ) -> httpx.Response:
        """Make request with automatic rate limit handling and token refresh."""
        if not self.client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        headers = {"Authorization": await self._get_auth_header()}

        for attempt in range(max_retries):
            response = await self.client.request(method, path, params=params, headers=headers)
            self._request_count += 1
            self._track_rate_limit(response)

            if await self._handle_rate_limit(response):
                continue

            if response.status_code >= 500:
                wait = 2**attempt
                logger.warning(f"Server error {response.status_code}. Retrying in {wait}s...")
                await trio.sleep(wait)
                continue

            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise GitHubAPIError(f"GitHub API {method} {path} failed: {response.status_code}") from e
            return response

        raise GitHubAPIError(f"Max retries exceeded for {path}")

    async def get(self, path: str, params: dict | None = None) -> Any:
        """GET request returning JSON."""
        response = await self._request("GET", path, params=params)
        return response.json()

    async def paginate(
        self,
        path: str,
        params: dict | None = None,
        max_pages: int | None = None,
    ) -> AsyncGenerator[Any]:
        """Paginate through results, yielding each item."""
        params = params.copy() if params else {}
        params["per_page"] = config.PER_PAGE
        page = 1

        while True:
            params["page"] = page
            response = await self._request("GET", path, params=params)
            items = response.json()

            if not items:
                break

            for item in items:
                yield item

            if len(items) < config.PER_PAGE:
                break

            if max_pages and page >= max_pages:
                break

            page += 1

    async def paginate_all(self, path: str, params: dict | None = None) -> list[dict]:
        """Paginate through all results, returning a list."""
        results = []
        async for item in self.paginate(path, params):
            results.append(item)
        return results

    async def get_pull_requests(self, repo: RepoInfo, period: DateRange) -> AsyncGenerator[dict]:
        """Yield PRs created inside ``period``, newest first.

        Stops paging at the first PR older than the period start.
        """
        path = f"/repos/{repo.full_name}/pulls"
        params = {"state": "all", "sort": "created", "direction": "desc"}

        async for pr in self.paginate(path, params):
            pr_created = datetime.fromisoformat(pr["created_at"].replace("Z", "+00:00"))
            if pr_created < period.start:
                break
            if pr_created > period.end:
                continue
            yield pr

    async def get_review_comments(self, repo: RepoInfo, pr_number: int) -> list[dict]:
        """Get inline code review comments."""
        return await self.paginate_all(f"/repos/{repo.full_name}/pulls/{pr_number}/comments")

    async def get_issue_comments(self, repo: RepoInfo, pr_number: int) -> list[dict]:
        """Get PR conversation comments (issue comments)."""
        return await self.paginate_all(f"/repos/{repo.full_name}/issues/{pr_number}/comments")

    async def get_review_comment_reactions(self, repo: RepoInfo, comment_id: int) -> list[dict]:
        return await self.paginate_all(f"/repos/{repo.full_name}/pulls/comments/{comment_id}/reactions")

    async def get_issue_comment_reactions(self, repo: RepoInfo, comment_id: int) -> list[dict]:
        return await self.paginate_all(f"/repos/{repo.full_name}/issues/comments/{comment_id}/reactions")
