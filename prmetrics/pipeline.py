"""Copy-on-write processing stages from collected comments to a report.

Each stage returns a new list of records and leaves its input untouched,
so stages compose in any test without shared state.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from .metrics import calculate_detailed, calculate_summary
from .models import Comment, DateRange, PullRequest
from .report import MetricsReport, create_metrics_report
from .signals.reactions import detect_synthetic_resolution_reaction
from .signals.replies import DEFAULT_BOT_DETECTOR, BotDetector, find_human_replies
from .signals.resolution import is_resolved
from .storage import Dataset

logger = logging.getLogger(__name__)


def filter_by_time_range(prs: Sequence[PullRequest], period: DateRange) -> list[PullRequest]:
    return [pr for pr in prs if period.contains(pr.created_at)]


def filter_by_reviewer(comments: Sequence[Comment], reviewer: str) -> list[Comment]:
    """Comments authored by ``reviewer`` (case-insensitive, whitespace-trimmed)."""
    if not reviewer or not reviewer.strip():
        return []
    return [c for c in comments if c.author.matches_login(reviewer)]


def add_synthetic_reactions(comments: Sequence[Comment]) -> list[Comment]:
    """Append an inferred thumbs-up to "fixed in commit <sha>" comments."""
    result = []
    for c in comments:
        reaction = detect_synthetic_resolution_reaction(c)
        if reaction is not None and not any(r.synthetic for r in c.reactions):
            c = c.model_copy(update={"reactions": c.reactions + (reaction,)})
        result.append(c)
    return result


def detect_resolution(comments: Sequence[Comment]) -> list[Comment]:
    return [c.model_copy(update={"is_resolved": is_resolved(c)}) for c in comments]


def detect_replies(
    comments: Sequence[Comment],
    pool: Sequence[Comment] | None = None,
    detector: BotDetector = DEFAULT_BOT_DETECTOR,
) -> list[Comment]:
    """Attach human replies found in ``pool`` (defaults to ``comments``)."""
    pool = comments if pool is None else pool
    return [
        c.model_copy(update={"replies": tuple(find_human_replies(c, pool, detector))})
        for c in comments
    ]


def process_comments(
    comments: Sequence[Comment],
    pool: Sequence[Comment] | None = None,
    detector: BotDetector = DEFAULT_BOT_DETECTOR,
) -> list[Comment]:
    """Run every classification stage over reviewer comments.

    Synthetic reactions come first because they count towards resolution.
    """
    processed = add_synthetic_reactions(comments)
    processed = detect_resolution(processed)
    return detect_replies(processed, pool=pool, detector=detector)


def analyze_dataset(
    dataset: Dataset,
    detector: BotDetector | None = None,
    generated_at: datetime | None = None,
) -> MetricsReport:
    """Turn a loaded dataset into a report for its reviewer and period.

    The reviewer never counts as a human replier, whatever its account type.
    """
    meta = dataset.metadata
    detector = (detector or DEFAULT_BOT_DETECTOR).including([meta.reviewer])
    prs = filter_by_time_range(dataset.prs, meta.period)
    reviewer_comments = filter_by_reviewer(dataset.comments, meta.reviewer)
    logger.info(
        f"Analyzing {len(reviewer_comments)} of {len(dataset.comments)} comments "
        f"from {meta.reviewer} across {len(prs)} PRs"
    )

    processed = process_comments(reviewer_comments, pool=dataset.comments, detector=detector)

    return create_metrics_report(
        repository=meta.repository,
        period=meta.period,
        reviewer=meta.reviewer,
        summary=calculate_summary(prs, processed),
        detailed=calculate_detailed(prs, processed),
        generated_at=generated_at,
    )
