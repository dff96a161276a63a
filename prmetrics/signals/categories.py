"""Keyword classification of reviewer comment text.

Literal keyword matching over the lower-cased body. A keyword has to start
at a word boundary but may run on, so "suggest" also matches "suggesting"
while "how" does not match inside "show".
"""

from __future__ import annotations

import re
from enum import Enum

from ..models import Comment


class Category(str, Enum):
    SUGGESTION = "suggestion"
    ISSUE = "issue"
    QUESTION = "question"
    PRAISE = "praise"
    UNKNOWN = "unknown"


SUGGESTION_KEYWORDS = (
    "suggest", "recommend", "consider", "could you", "you might",
    "might want", "instead of", "would be better", "prefer",
)
ISSUE_KEYWORDS = (
    "bug", "error", "broken", "issue", "problem", "incorrect",
    "fail", "crash", "leak", "vulnerab",
)
QUESTION_KEYWORDS = (
    "why", "what", "how", "when", "where", "which",
    "is there", "is this", "should we", "can we", "do we",
)
PRAISE_KEYWORDS = (
    "great", "nice", "looks good", "lgtm", "excellent", "awesome",
    "well done", "good job", "good work", "clean", "perfect", "love",
)

POSITIVE_TERMS = (
    "great", "excellent", "good job", "good work", "nice", "awesome",
    "well done", "perfect", "lgtm", "looks good", "thank", "helpful",
)
NEGATIVE_TERMS = (
    "broken", "wrong", "bad", "terrible", "incorrect", "fail",
    "poor", "confusing", "problematic", "ugly",
)


def _compile(terms: tuple[str, ...]) -> re.Pattern:
    alternation = "|".join(re.escape(term).replace(r"\ ", r"\s+") for term in terms)
    return re.compile(rf"\b(?:{alternation})")


# Priority order is significant: first match wins
CATEGORY_RULES: tuple[tuple[Category, re.Pattern], ...] = (
    (Category.SUGGESTION, _compile(SUGGESTION_KEYWORDS)),
    (Category.ISSUE, _compile(ISSUE_KEYWORDS)),
    (Category.QUESTION, _compile(QUESTION_KEYWORDS)),
    (Category.PRAISE, _compile(PRAISE_KEYWORDS)),
)

_POSITIVE = _compile(POSITIVE_TERMS)
_NEGATIVE = _compile(NEGATIVE_TERMS)


def classify_text(text: str | None) -> Category:
    """Categorize raw comment text.

    Suggestion is checked first, then issue, question (keyword or trailing
    ``?``) and praise.
    """
    text = text.strip() if text else ""
    if not text:
        return Category.UNKNOWN

    for category, pattern in CATEGORY_RULES:
        if pattern.search(text):
            return category
        if category is Category.QUESTION and text.endswith("?"):
            return category

    return Category.UNKNOWN


def classify_category(comment: Comment) -> Category:
    return classify_text(comment.body)


def text_sentiment(text: str | None) -> int:
    """Return +1, -1 or 0. Mixed positive and negative terms count as neutral."""
    if not text:
        return 0

    positive = bool(_POSITIVE.search(text))
    negative = bool(_NEGATIVE.search(text))
    if positive and not negative:
        return 1
    if negative and not positive:
        return -1
    return 0


def classify_sentiment(comment: Comment) -> int:
    return text_sentiment(comment.body)
