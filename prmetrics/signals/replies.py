"""Human reply detection for reviewer comments.

Explicit ``in_reply_to_id`` links are authoritative. When a comment has none,
a heuristic looks for human comments posted within a week that mention the
reviewer or read like a conversational answer. The heuristic favours recall:
expect some false positives (e.g. an unrelated "thanks" on the same PR) and
misses for terse replies that use none of the indicator phrases.
"""

from __future__ import annotations

import re
import statistics
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import timedelta

from ..models import AccountType, Comment, User

DEFAULT_BOT_PATTERNS = (
    r"bot$",
    r"\[bot\]",
    r"^dependabot",
    r"^renovate",
    r"^github-actions",
    r"^codecov",
    r"^sonarcloud",
    r"^coderabbit",
)

CONVERSATIONAL_INDICATORS = (
    "thanks",
    "thank you",
    "fixed",
    "done",
    "updated",
    "addressed",
    "good point",
    "you're right",
    "agreed",
    "disagree",
    "actually",
    "however",
)

REPLY_WINDOW = timedelta(days=7)


@dataclass(frozen=True)
class BotDetector:
    """Login patterns (regex, case-insensitive) that identify automation accounts."""

    patterns: tuple[str, ...] = DEFAULT_BOT_PATTERNS
    _compiled: tuple[re.Pattern, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        compiled = tuple(re.compile(p, re.IGNORECASE) for p in self.patterns)
        object.__setattr__(self, "_compiled", compiled)

    @classmethod
    def with_logins(cls, logins: Iterable[str], patterns: Iterable[str] = DEFAULT_BOT_PATTERNS) -> BotDetector:
        """Detector that also matches the given exact logins."""
        return cls(patterns=tuple(patterns)).including(logins)

    def including(self, logins: Iterable[str]) -> BotDetector:
        """Copy of this detector that also matches the given exact logins."""
        exact = tuple(rf"^{re.escape(login.strip())}$" for login in logins if login and login.strip())
        if not exact:
            return self
        return BotDetector(patterns=self.patterns + exact)

    def matches(self, login: str) -> bool:
        return any(p.search(login or "") for p in self._compiled)


DEFAULT_BOT_DETECTOR = BotDetector()


def is_human(user: User, detector: BotDetector = DEFAULT_BOT_DETECTOR) -> bool:
    """Neither the account type nor the login may mark the user as a bot."""
    if user.account_type == AccountType.BOT:
        return False
    return not detector.matches(user.login)


def _has_conversational_indicators(candidate: Comment, original: Comment) -> bool:
    body = (candidate.body or "").lower()
    if f"@{original.author.login.lower()}" in body:
        return True
    return any(indicator in body for indicator in CONVERSATIONAL_INDICATORS)


def find_explicit_replies(
    comment: Comment,
    pool: Sequence[Comment],
    detector: BotDetector = DEFAULT_BOT_DETECTOR,
) -> list[Comment]:
    return [
        c for c in pool
        if c.in_reply_to_id == comment.id and is_human(c.author, detector)
    ]


def find_conversational_replies(
    comment: Comment,
    pool: Sequence[Comment],
    detector: BotDetector = DEFAULT_BOT_DETECTOR,
) -> list[Comment]:
    replies = []
    for candidate in pool:
        if candidate.id == comment.id or not is_human(candidate.author, detector):
            continue
        delta = candidate.created_at - comment.created_at
        if timedelta(0) < delta <= REPLY_WINDOW and _has_conversational_indicators(candidate, comment):
            replies.append(candidate)
    return replies


def find_human_replies(
    comment: Comment,
    pool: Sequence[Comment],
    detector: BotDetector = DEFAULT_BOT_DETECTOR,
) -> list[Comment]:
    """Human replies to ``comment`` from ``pool``, oldest first.

    The heuristic path only runs when there are no explicit replies.
    """
    replies = find_explicit_replies(comment, pool, detector)
    if not replies:
        replies = find_conversational_replies(comment, pool, detector)
    # list.sort is stable, so equal timestamps keep pool order
    replies.sort(key=lambda c: c.created_at)
    return replies


def has_human_replies(comment: Comment) -> bool:
    return len(comment.replies) > 0


def count_human_replies(comment: Comment) -> int:
    return sum(1 for r in comment.replies if r.author.account_type != AccountType.BOT)


def fastest_reply_time(comment: Comment) -> timedelta | None:
    """Time from the comment to its first human reply."""
    delays = [
        r.created_at - comment.created_at
        for r in comment.replies
        if r.author.account_type != AccountType.BOT
    ]
    return min(delays) if delays else None


def median_first_reply_hours(comments: Iterable[Comment]) -> float | None:
    hours = [
        delay.total_seconds() / 3600
        for delay in (fastest_reply_time(c) for c in comments)
        if delay is not None
    ]
    if not hours:
        return None
    return statistics.median(hours)
