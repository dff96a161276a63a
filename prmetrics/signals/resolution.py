"""Resolution detection for reviewer comments.

A comment counts as resolved when any of these hold:
- the body carries an explicit marker such as ``[fixed]`` or a check mark
- it has at least two positive reactions (synthetic ones included)
- it was edited and the edited body mentions a resolution keyword
"""

from __future__ import annotations

from ..models import Comment
from .reactions import positive_reactions

RESOLUTION_MARKERS = (
    "[resolved]",
    "[fixed]",
    "[done]",
    "[completed]",
    "\N{WHITE HEAVY CHECK MARK}",
    "\N{BALLOT BOX WITH CHECK}",
)

RESOLUTION_KEYWORDS = (
    "resolved",
    "fixed",
    "done",
    "completed",
    "addressed",
    "implemented",
    "updated",
)

RESOLUTION_REACTION_THRESHOLD = 2


def has_resolution_marker(comment: Comment) -> bool:
    body = (comment.body or "").lower()
    return any(marker in body for marker in RESOLUTION_MARKERS)


def resolved_by_reactions(comment: Comment) -> bool:
    return len(positive_reactions(comment)) >= RESOLUTION_REACTION_THRESHOLD


def resolved_by_edit(comment: Comment) -> bool:
    if not comment.was_edited:
        return False
    body = (comment.body or "").lower()
    return any(keyword in body for keyword in RESOLUTION_KEYWORDS)


def is_resolved(comment: Comment) -> bool:
    return (
        has_resolution_marker(comment)
        or resolved_by_reactions(comment)
        or resolved_by_edit(comment)
    )
