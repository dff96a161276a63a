"""Per-comment signals for AI reviewer comments.

Everything here is a pure function of its inputs and never raises on
unexpected text: misses resolve to ``unknown`` / ``0`` / ``False``.

This package provides:
- Keyword categories and sentiment
- Reaction normalization and synthetic "fixed in commit" reactions
- Resolution detection
- Human reply linking
"""

from .categories import Category, classify_category, classify_sentiment, classify_text
from .reactions import (
    classify_reaction_kind,
    detect_synthetic_resolution_reaction,
    extract_commit_hash,
    is_negative_reaction,
    is_positive_reaction,
    negative_reactions,
    positive_reactions,
    reaction_sentiment_score,
)
from .replies import (
    DEFAULT_BOT_DETECTOR,
    BotDetector,
    count_human_replies,
    fastest_reply_time,
    find_human_replies,
    has_human_replies,
    is_human,
)
from .resolution import RESOLUTION_REACTION_THRESHOLD, is_resolved

__all__ = [
    # Categories
    "Category",
    "classify_category",
    "classify_sentiment",
    "classify_text",
    # Reactions
    "classify_reaction_kind",
    "detect_synthetic_resolution_reaction",
    "extract_commit_hash",
    "is_positive_reaction",
    "is_negative_reaction",
    "positive_reactions",
    "negative_reactions",
    "reaction_sentiment_score",
    # Resolution
    "is_resolved",
    "RESOLUTION_REACTION_THRESHOLD",
    # Replies
    "BotDetector",
    "DEFAULT_BOT_DETECTOR",
    "is_human",
    "find_human_replies",
    "has_human_replies",
    "count_human_replies",
    "fastest_reply_time",
]
