"""Aggregate classified reviewer comments into summary and detailed metrics.

Every call builds fresh frozen records. Percentages are rounded to one
decimal here so that every report encoding shows the same numbers.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from .models import Comment, PullRequest, ReactionKind
from .signals.categories import Category, classify_category, classify_sentiment
from .signals.reactions import (
    extract_commit_hash,
    negative_reactions,
    positive_reactions,
    reaction_sentiment_score,
)
from .signals.replies import has_human_replies, median_first_reply_hours

# Composite score: 40% resolution, 30% engagement (replies), 30% positivity
EFFECTIVENESS_WEIGHTS = {
    "resolution": 0.4,
    "engagement": 0.3,
    "positivity": 0.3,
}

# Checked top-down, first threshold reached wins
EFFECTIVENESS_TIERS = (
    (70.0, "excellent"),
    (40.0, "good"),
    (0.0, "needs improvement"),
)

EXCERPT_LENGTH = 80


def _rate(part: int, whole: int) -> float:
    if not whole:
        return 0.0
    return 100.0 * part / whole


def percentage(part: int, whole: int) -> float:
    """Percentage rounded to one decimal, 0.0 when ``whole`` is zero."""
    return round(_rate(part, whole), 1)


def effectiveness_score(resolution_rate: float, reply_rate: float, positivity_rate: float) -> float:
    """Weighted blend of three 0-100 rates, rounded to one decimal."""
    score = (
        EFFECTIVENESS_WEIGHTS["resolution"] * resolution_rate
        + EFFECTIVENESS_WEIGHTS["engagement"] * reply_rate
        + EFFECTIVENESS_WEIGHTS["positivity"] * positivity_rate
    )
    return round(min(max(score, 0.0), 100.0), 1)


def effectiveness_tier(score: float) -> str:
    for threshold, label in EFFECTIVENESS_TIERS:
        if score >= threshold:
            return label
    return EFFECTIVENESS_TIERS[-1][1]


@dataclass(frozen=True)
class SummaryMetrics:
    """Headline numbers for one reviewer over one period."""

    total_prs: int
    total_comments: int
    average_comments_per_pr: float
    resolved_comments: int
    resolved_percentage: float
    replied_comments: int
    reply_percentage: float
    positive_reactions: int
    negative_reactions: int
    positive_reaction_percentage: float
    negative_reaction_percentage: float
    effectiveness_score: float
    effectiveness_tier: str


@dataclass(frozen=True)
class FollowUpComment:
    """A comment with neither a human reply nor a resolution signal."""

    id: int
    pr_number: int | None
    category: str
    excerpt: str
    html_url: str | None


@dataclass(frozen=True)
class PRBreakdown:
    pr_number: int
    comments: int
    resolved: int
    replied: int


@dataclass(frozen=True)
class DetailedMetrics:
    """Breakdowns behind the summary."""

    category_counts: dict[str, int]
    sentiment_counts: dict[str, int]
    reaction_counts: dict[str, int]
    synthetic_reactions: int
    comments_with_commit_fix: int
    average_reaction_sentiment: float
    median_first_reply_hours: float | None
    follow_up_comments: tuple[FollowUpComment, ...]
    per_pr: tuple[PRBreakdown, ...]


def calculate_summary(prs: Sequence[PullRequest], comments: Sequence[Comment]) -> SummaryMetrics:
    """Fold classified, reply-linked comments into summary metrics."""
    total_prs = len(prs)
    total_comments = len(comments)
    resolved = sum(1 for c in comments if c.is_resolved)
    replied = sum(1 for c in comments if has_human_replies(c))
    positive = sum(len(positive_reactions(c)) for c in comments)
    negative = sum(len(negative_reactions(c)) for c in comments)

    score = effectiveness_score(
        _rate(resolved, total_comments),
        _rate(replied, total_comments),
        _rate(positive, positive + negative),
    )

    return SummaryMetrics(
        total_prs=total_prs,
        total_comments=total_comments,
        average_comments_per_pr=round(total_comments / total_prs, 2) if total_prs else 0.0,
        resolved_comments=resolved,
        resolved_percentage=percentage(resolved, total_comments),
        replied_comments=replied,
        reply_percentage=percentage(replied, total_comments),
        positive_reactions=positive,
        negative_reactions=negative,
        positive_reaction_percentage=percentage(positive, positive + negative),
        negative_reaction_percentage=percentage(negative, positive + negative),
        effectiveness_score=score,
        effectiveness_tier=effectiveness_tier(score),
    )


def _excerpt(body: str) -> str:
    first_line = body.strip().splitlines()[0] if body.strip() else ""
    if len(first_line) > EXCERPT_LENGTH:
        return first_line[: EXCERPT_LENGTH - 3].rstrip() + "..."
    return first_line


def _per_pr_breakdown(prs: Sequence[PullRequest], comments: Sequence[Comment]) -> tuple[PRBreakdown, ...]:
    totals: Counter[int] = Counter()
    resolved: Counter[int] = Counter()
    replied: Counter[int] = Counter()
    for c in comments:
        if c.pr_number is None:
            continue
        totals[c.pr_number] += 1
        resolved[c.pr_number] += int(c.is_resolved)
        replied[c.pr_number] += int(has_human_replies(c))

    # PRs without reviewer comments still get a row
    numbers = {pr.number for pr in prs} | set(totals)
    return tuple(
        PRBreakdown(pr_number=n, comments=totals[n], resolved=resolved[n], replied=replied[n])
        for n in sorted(numbers)
    )


def calculate_detailed(prs: Sequence[PullRequest], comments: Sequence[Comment]) -> DetailedMetrics:
    """Category, sentiment and reaction breakdowns plus follow-up candidates."""
    categories = {category.value: 0 for category in Category}
    sentiments = {"positive": 0, "neutral": 0, "negative": 0}
    reactions = {kind.value: 0 for kind in ReactionKind}
    follow_ups = []

    for c in comments:
        category = classify_category(c)
        categories[category.value] += 1

        sentiment = classify_sentiment(c)
        if sentiment > 0:
            sentiments["positive"] += 1
        elif sentiment < 0:
            sentiments["negative"] += 1
        else:
            sentiments["neutral"] += 1

        for reaction in c.reactions:
            reactions[reaction.kind.value] += 1

        if not c.is_resolved and not has_human_replies(c):
            follow_ups.append(
                FollowUpComment(
                    id=c.id,
                    pr_number=c.pr_number,
                    category=category.value,
                    excerpt=_excerpt(c.body),
                    html_url=c.html_url,
                )
            )

    reacted = [c for c in comments if positive_reactions(c) or negative_reactions(c)]
    average_sentiment = (
        round(sum(reaction_sentiment_score(c) for c in reacted) / len(reacted), 2) if reacted else 0.0
    )
    median_hours = median_first_reply_hours(comments)

    return DetailedMetrics(
        category_counts=categories,
        sentiment_counts=sentiments,
        reaction_counts=reactions,
        synthetic_reactions=sum(1 for c in comments for r in c.reactions if r.synthetic),
        comments_with_commit_fix=sum(1 for c in comments if extract_commit_hash(c)),
        average_reaction_sentiment=average_sentiment,
        median_first_reply_hours=round(median_hours, 1) if median_hours is not None else None,
        follow_up_comments=tuple(follow_ups),
        per_pr=_per_pr_breakdown(prs, comments),
    )
