"""Tests for the processing pipeline."""

from datetime import UTC, datetime

from conftest import REVIEWER, make_comment, make_pr, make_reaction, make_reply
from prmetrics.pipeline import (
    add_synthetic_reactions,
    analyze_dataset,
    detect_replies,
    detect_resolution,
    filter_by_reviewer,
    filter_by_time_range,
    process_comments,
)
from prmetrics.storage import build_dataset


class TestFilters:
    def test_time_range(self, period):
        inside = make_pr(1, days_ago=1)
        outside = make_pr(2, days_ago=30)
        assert filter_by_time_range([inside, outside], period) == [inside]

    def test_reviewer_case_insensitive(self):
        mine = make_comment(id=1, login="CodeRabbitAI[bot]")
        other = make_reply(2, to=1)
        assert filter_by_reviewer([mine, other], " coderabbitai[bot]") == [mine]

    def test_blank_reviewer(self):
        assert filter_by_reviewer([make_comment()], "  ") == []


class TestStages:
    def test_synthetic_reaction_added_once(self):
        comment = make_comment(body="Fixed in commit abc1234")
        once = add_synthetic_reactions([comment])
        twice = add_synthetic_reactions(once)

        assert comment.reactions == ()
        assert len(once[0].reactions) == 1
        assert once[0].reactions[0].synthetic
        assert len(twice[0].reactions) == 1

    def test_stages_do_not_mutate_input(self):
        comments = [
            make_comment(id=1, body="[fixed] thanks"),
            make_comment(id=2),
        ]
        pool = comments + [make_reply(3, to=2, body="ok")]
        before = [c.model_dump() for c in comments]

        resolved = detect_resolution(comments)
        linked = detect_replies(comments, pool=pool)

        assert [c.model_dump() for c in comments] == before
        assert [c.is_resolved for c in resolved] == [True, False]
        assert [len(c.replies) for c in linked] == [0, 1]

    def test_synthetic_reaction_feeds_resolution(self):
        """One human thumbs-up plus a "fixed in commit" note reaches the threshold."""
        comment = make_comment(body="Fixed in commit abc1234", reactions=(make_reaction("+1"),))
        [processed] = process_comments([comment])
        assert processed.is_resolved

    def test_replies_from_pool(self):
        comment = make_comment(id=1)
        reply = make_reply(2, to=1)
        [processed] = process_comments([comment], pool=[comment, reply])
        assert processed.replies == (reply,)


class TestAnalyzeDataset:
    def test_end_to_end(self, period):
        prs = [make_pr(1), make_pr(2), make_pr(3), make_pr(4, days_ago=30)]
        comments = [
            make_comment(
                id=1,
                body="Consider using a constant here.",
                reactions=(make_reaction("+1"), make_reaction("heart", login="bob")),
                pr_number=1,
            ),
            make_comment(id=2, body="This is broken for empty input.", pr_number=2),
            make_comment(id=3, body="[fixed] Why is this needed?", pr_number=3),
            make_reply(20, to=2, body="Good catch", pr_number=2),
        ]
        dataset = build_dataset(prs, comments, "test/repo", REVIEWER, period)
        generated_at = datetime(2024, 1, 12, tzinfo=UTC)

        report = analyze_dataset(dataset, generated_at=generated_at)

        summary = report.summary
        assert summary.total_prs == 3
        assert summary.total_comments == 3
        assert summary.average_comments_per_pr == 1.0
        assert summary.resolved_comments == 2
        assert summary.resolved_percentage == 66.7
        assert summary.replied_comments == 1
        assert summary.reply_percentage == 33.3
        assert summary.positive_reaction_percentage == 100.0
        assert summary.effectiveness_score == 66.7
        assert summary.effectiveness_tier == "good"

        detailed = report.detailed
        assert detailed.category_counts["suggestion"] == 1
        assert detailed.category_counts["issue"] == 1
        assert detailed.category_counts["question"] == 1
        assert detailed.follow_up_comments == ()
        assert [row.pr_number for row in detailed.per_pr] == [1, 2, 3]

        assert report.metadata.repository == "test/repo"
        assert report.metadata.generated_at == generated_at
        # Input dataset untouched
        assert all(not c.is_resolved for c in dataset.comments)

    def test_reviewer_follow_up_is_not_a_human_reply(self, period):
        """A reviewer account reported as a plain user still never replies to itself."""
        reviewer = "review-assistant"
        comments = [
            make_comment(id=1, login=reviewer, account_type="User"),
            make_comment(
                id=2,
                body="Thanks, done. See the follow-up above.",
                login=reviewer,
                account_type="User",
                hours=1,
                in_reply_to_id=1,
            ),
        ]
        dataset = build_dataset([make_pr(1)], comments, "test/repo", reviewer, period)

        report = analyze_dataset(dataset)

        assert report.summary.total_comments == 2
        assert report.summary.replied_comments == 0
