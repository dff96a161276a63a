"""Tests for comment categories, sentiment, reactions and resolution."""

import pytest

from conftest import BASE_TIME, make_comment, make_reaction
from prmetrics.models import ReactionKind
from prmetrics.signals import (
    Category,
    classify_reaction_kind,
    classify_text,
    detect_synthetic_resolution_reaction,
    extract_commit_hash,
    is_resolved,
    reaction_sentiment_score,
)
from prmetrics.signals.categories import text_sentiment
from prmetrics.signals.resolution import has_resolution_marker, resolved_by_edit, resolved_by_reactions


class TestClassifyText:
    """Keyword categories, first match wins."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Consider using a dict here.", Category.SUGGESTION),
            ("I recommend splitting this function.", Category.SUGGESTION),
            ("This is broken when the list is empty.", Category.ISSUE),
            ("Why do we need this?", Category.QUESTION),
            ("Does it compile", Category.UNKNOWN),
            ("Does it compile?", Category.QUESTION),
            ("This is great!", Category.PRAISE),
            ("LGTM", Category.PRAISE),
            ("Random comment", Category.UNKNOWN),
        ],
    )
    def test_categories(self, text, expected):
        assert classify_text(text) == expected

    def test_suggestion_beats_issue(self):
        assert classify_text("Consider fixing this bug") == Category.SUGGESTION

    def test_issue_beats_question(self):
        """A question mark does not override an issue keyword."""
        assert classify_text("Is this a bug?") == Category.ISSUE

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("I'm suggesting a guard clause", Category.SUGGESTION),
            ("Recommending a context manager here", Category.SUGGESTION),
            ("Have you considered a set?", Category.SUGGESTION),
            ("This errored on the empty list", Category.ISSUE),
            ("Crashing when the file is missing", Category.ISSUE),
        ],
    )
    def test_keyword_inflections(self, text, expected):
        assert classify_text(text) == expected

    @pytest.mark.parametrize("text", ["the debugger output", "show the diff", "the terror of it"])
    def test_keyword_must_start_a_word(self, text):
        assert classify_text(text) == Category.UNKNOWN

    def test_multi_word_keyword_spans_whitespace(self):
        assert classify_text("It might\nwant a cache") == Category.SUGGESTION

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty(self, text):
        assert classify_text(text) == Category.UNKNOWN


class TestTextSentiment:
    def test_positive(self):
        assert text_sentiment("This is great!") == 1

    def test_negative(self):
        assert text_sentiment("This is broken") == -1

    def test_neutral(self):
        assert text_sentiment("Random comment") == 0

    def test_mixed_is_neutral(self):
        assert text_sentiment("Great idea but the test is broken") == 0

    def test_empty(self):
        assert text_sentiment("") == 0
        assert text_sentiment(None) == 0


class TestClassifyReactionKind:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("+1", ReactionKind.THUMBS_UP),
            ("plusone", ReactionKind.THUMBS_UP),
            ("PlusOne", ReactionKind.THUMBS_UP),
            ("thumbs-up", ReactionKind.THUMBS_UP),
            (" THUMBS_UP ", ReactionKind.THUMBS_UP),
            ("\N{THUMBS UP SIGN}", ReactionKind.THUMBS_UP),
            ("-1", ReactionKind.THUMBS_DOWN),
            ("tada", ReactionKind.HOORAY),
            ("heart", ReactionKind.HEART),
            ("rocket", ReactionKind.ROCKET),
            ("eyes", ReactionKind.EYES),
            ("garbage!!", ReactionKind.UNKNOWN),
            ("", ReactionKind.UNKNOWN),
            (None, ReactionKind.UNKNOWN),
            (42, ReactionKind.UNKNOWN),
        ],
    )
    def test_normalization(self, raw, expected):
        assert classify_reaction_kind(raw) == expected

    def test_enum_passthrough(self):
        assert classify_reaction_kind(ReactionKind.CONFUSED) == ReactionKind.CONFUSED


class TestReactionSentiment:
    def test_no_reactions(self):
        assert reaction_sentiment_score(make_comment()) == 0.0

    def test_mixed(self):
        comment = make_comment(
            reactions=(make_reaction("+1"), make_reaction("heart"), make_reaction("-1"))
        )
        assert reaction_sentiment_score(comment) == pytest.approx(1 / 3)

    def test_neutral_kinds_ignored(self):
        comment = make_comment(reactions=(make_reaction("eyes"), make_reaction("laugh")))
        assert reaction_sentiment_score(comment) == 0.0


class TestCommitFix:
    def test_hash_extracted(self):
        comment = make_comment(body="Fixed in commit abc1234567")
        assert extract_commit_hash(comment) == "abc1234567"

    @pytest.mark.parametrize(
        "body",
        ["Fixed in commit abc12", "Fixed in commit XYZ12345", "see commit abc1234567"],
    )
    def test_no_hash(self, body):
        assert extract_commit_hash(make_comment(body=body)) is None

    def test_synthetic_reaction(self):
        comment = make_comment(body="Addressed in commit 0f1e2d3c", edited_hours=3)
        reaction = detect_synthetic_resolution_reaction(comment)
        assert reaction is not None
        assert reaction.kind == ReactionKind.THUMBS_UP
        assert reaction.synthetic
        assert reaction.user == comment.author
        assert reaction.created_at == comment.updated_at

    def test_no_synthetic_reaction_without_hash(self):
        assert detect_synthetic_resolution_reaction(make_comment(body="Looks fixed")) is None


class TestResolution:
    def test_marker(self):
        comment = make_comment(body="[RESOLVED] done")
        assert has_resolution_marker(comment)
        assert is_resolved(comment)

    def test_check_mark(self):
        assert is_resolved(make_comment(body="\N{WHITE HEAVY CHECK MARK} Addressed"))

    def test_two_positive_reactions(self):
        comment = make_comment(reactions=(make_reaction("+1"), make_reaction("heart", login="bob")))
        assert resolved_by_reactions(comment)
        assert is_resolved(comment)

    def test_one_positive_reaction_not_enough(self):
        comment = make_comment(reactions=(make_reaction("+1"), make_reaction("-1", login="bob")))
        assert not is_resolved(comment)

    def test_single_thumbs_up_not_resolved(self):
        comment = make_comment(reactions=(make_reaction("+1"),))
        assert not resolved_by_reactions(comment)
        assert not is_resolved(comment)

    def test_edited_with_keyword(self):
        comment = make_comment(body="Updated: the null check is now in place", edited_hours=5)
        assert resolved_by_edit(comment)
        assert is_resolved(comment)

    def test_keyword_without_edit(self):
        comment = make_comment(body="Once this is fixed the test should pass")
        assert not resolved_by_edit(comment)
        assert not is_resolved(comment)

    def test_synthetic_reaction_counts(self):
        comment = make_comment(
            reactions=(
                make_reaction("+1"),
                make_reaction("+1", login="coderabbitai[bot]", synthetic=True),
            )
        )
        assert is_resolved(comment)

    def test_reaction_time_does_not_matter(self):
        reaction = make_reaction("rocket").model_copy(update={"created_at": BASE_TIME.replace(year=2030)})
        comment = make_comment(reactions=(reaction, make_reaction("hooray")))
        assert is_resolved(comment)
