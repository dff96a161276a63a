"""Tests for metric aggregation."""

import pytest

from conftest import make_comment, make_pr, make_reaction, make_reply
from prmetrics.metrics import (
    calculate_detailed,
    calculate_summary,
    effectiveness_score,
    effectiveness_tier,
    percentage,
)


def resolved(comment):
    return comment.model_copy(update={"is_resolved": True})


def replied(comment):
    return comment.model_copy(update={"replies": (make_reply(100 + comment.id, to=comment.id),)})


class TestPercentage:
    def test_rounds_to_one_decimal(self):
        assert percentage(2, 3) == 66.7
        assert percentage(1, 3) == 33.3

    def test_zero_denominator(self):
        assert percentage(0, 0) == 0.0


class TestEffectiveness:
    def test_weights(self):
        assert effectiveness_score(100.0, 0.0, 0.0) == 40.0
        assert effectiveness_score(0.0, 100.0, 0.0) == 30.0
        assert effectiveness_score(0.0, 0.0, 100.0) == 30.0
        assert effectiveness_score(100.0, 100.0, 100.0) == 100.0

    @pytest.mark.parametrize(
        "score,tier",
        [
            (100.0, "excellent"),
            (70.0, "excellent"),
            (69.9, "good"),
            (40.0, "good"),
            (39.9, "needs improvement"),
            (0.0, "needs improvement"),
        ],
    )
    def test_tiers(self, score, tier):
        assert effectiveness_tier(score) == tier


class TestCalculateSummary:
    def test_empty(self):
        summary = calculate_summary([], [])
        assert summary.total_prs == 0
        assert summary.total_comments == 0
        assert summary.average_comments_per_pr == 0.0
        assert summary.resolved_percentage == 0.0
        assert summary.reply_percentage == 0.0
        assert summary.positive_reaction_percentage == 0.0
        assert summary.effectiveness_score == 0.0
        assert summary.effectiveness_tier == "needs improvement"

    def test_prs_without_comments(self):
        summary = calculate_summary([make_pr(1), make_pr(2)], [])
        assert summary.total_prs == 2
        assert summary.average_comments_per_pr == 0.0

    def test_counts_and_rates(self):
        comments = [
            resolved(make_comment(id=1, reactions=(make_reaction("+1"), make_reaction("heart")))),
            replied(make_comment(id=2, reactions=(make_reaction("-1"),))),
            resolved(make_comment(id=3)),
        ]
        summary = calculate_summary([make_pr(1), make_pr(2)], comments)

        assert summary.total_comments == 3
        assert summary.average_comments_per_pr == 1.5
        assert summary.resolved_comments == 2
        assert summary.resolved_percentage == 66.7
        assert summary.replied_comments == 1
        assert summary.reply_percentage == 33.3
        assert summary.positive_reactions == 2
        assert summary.negative_reactions == 1
        assert summary.positive_reaction_percentage == 66.7
        assert summary.negative_reaction_percentage == 33.3
        # 0.4 * 66.67 + 0.3 * 33.33 + 0.3 * 66.67
        assert summary.effectiveness_score == 56.7
        assert summary.effectiveness_tier == "good"

    def test_no_reactions_means_zero_positivity(self):
        comments = [resolved(replied(make_comment(id=1)))]
        summary = calculate_summary([make_pr(1)], comments)
        assert summary.positive_reaction_percentage == 0.0
        assert summary.effectiveness_score == 70.0
        assert summary.effectiveness_tier == "excellent"


class TestCalculateDetailed:
    def test_breakdowns(self):
        comments = [
            make_comment(id=1, body="Consider a constant here.", reactions=(make_reaction("+1"),)),
            make_comment(id=2, body="This is broken for empty input.", pr_number=2),
            make_comment(id=3, body="Great work!", reactions=(make_reaction("eyes"),)),
        ]
        detailed = calculate_detailed([make_pr(1), make_pr(2), make_pr(3)], comments)

        assert detailed.category_counts["suggestion"] == 1
        assert detailed.category_counts["issue"] == 1
        assert detailed.category_counts["praise"] == 1
        assert detailed.category_counts["question"] == 0
        assert detailed.sentiment_counts == {"positive": 1, "neutral": 1, "negative": 1}
        assert detailed.reaction_counts["thumbs_up"] == 1
        assert detailed.reaction_counts["eyes"] == 1
        assert detailed.reaction_counts["heart"] == 0
        assert detailed.average_reaction_sentiment == 1.0

    def test_follow_ups(self):
        comments = [
            make_comment(id=1, body="Why is this retried twice?\nSecond line"),
            resolved(make_comment(id=2)),
            replied(make_comment(id=3)),
        ]
        detailed = calculate_detailed([make_pr(1)], comments)

        assert len(detailed.follow_up_comments) == 1
        follow_up = detailed.follow_up_comments[0]
        assert follow_up.id == 1
        assert follow_up.category == "question"
        assert follow_up.excerpt == "Why is this retried twice?"
        assert follow_up.html_url.endswith("discussion_r1")

    def test_long_excerpt_truncated(self):
        detailed = calculate_detailed([], [make_comment(body="x" * 200)])
        excerpt = detailed.follow_up_comments[0].excerpt
        assert len(excerpt) == 80
        assert excerpt.endswith("...")

    def test_per_pr_includes_quiet_prs(self):
        comments = [resolved(make_comment(id=1, pr_number=2)), replied(make_comment(id=2, pr_number=2))]
        detailed = calculate_detailed([make_pr(1), make_pr(2)], comments)

        rows = {row.pr_number: row for row in detailed.per_pr}
        assert rows[1].comments == 0
        assert rows[2].comments == 2
        assert rows[2].resolved == 1
        assert rows[2].replied == 1

    def test_commit_fix_and_synthetic_counts(self):
        comment = make_comment(
            body="Fixed in commit abc1234",
            reactions=(make_reaction("+1", login="coderabbitai[bot]", synthetic=True),),
        )
        detailed = calculate_detailed([make_pr(1)], [comment])
        assert detailed.comments_with_commit_fix == 1
        assert detailed.synthetic_reactions == 1

    def test_median_reply_hours(self):
        comments = [replied(make_comment(id=1))]
        assert calculate_detailed([], comments).median_first_reply_hours == 1.0
        assert calculate_detailed([], [make_comment()]).median_first_reply_hours is None
