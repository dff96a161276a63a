"""Reaction normalization and reaction-based signals."""

from __future__ import annotations

import re

from ..models import Comment, Reaction, ReactionKind

POSITIVE_KINDS = frozenset(
    {ReactionKind.THUMBS_UP, ReactionKind.HEART, ReactionKind.HOORAY, ReactionKind.ROCKET}
)
NEGATIVE_KINDS = frozenset({ReactionKind.THUMBS_DOWN, ReactionKind.CONFUSED})

REACTION_ALIASES: dict[str, ReactionKind] = {
    "+1": ReactionKind.THUMBS_UP,
    "plusone": ReactionKind.THUMBS_UP,
    "plus_one": ReactionKind.THUMBS_UP,
    "thumbsup": ReactionKind.THUMBS_UP,
    "\N{THUMBS UP SIGN}": ReactionKind.THUMBS_UP,
    "-1": ReactionKind.THUMBS_DOWN,
    "minusone": ReactionKind.THUMBS_DOWN,
    "minus_one": ReactionKind.THUMBS_DOWN,
    "thumbsdown": ReactionKind.THUMBS_DOWN,
    "\N{THUMBS DOWN SIGN}": ReactionKind.THUMBS_DOWN,
    "tada": ReactionKind.HOORAY,
    "party": ReactionKind.HOORAY,
    "celebrate": ReactionKind.HOORAY,
    "\N{PARTY POPPER}": ReactionKind.HOORAY,
}

_NON_NAME_CHARS = re.compile(r"[^a-z_]")

# "Fixed in commit abc1234" style follow-ups posted by the reviewer
COMMIT_FIX_PATTERN = re.compile(
    r"\b(?:addressed|fixed|resolved|updated)\s+in\s+commit\s+([0-9a-f]{6,40})\b",
    re.IGNORECASE,
)


def classify_reaction_kind(raw) -> ReactionKind:
    """Normalize a raw reaction string. Unrecognized input maps to UNKNOWN."""
    if isinstance(raw, ReactionKind):
        return raw
    if not isinstance(raw, str):
        return ReactionKind.UNKNOWN

    folded = raw.strip().lower()
    if folded in REACTION_ALIASES:
        return REACTION_ALIASES[folded]

    normalized = _NON_NAME_CHARS.sub("", folded)
    if not normalized:
        return ReactionKind.UNKNOWN
    try:
        return ReactionKind(normalized)
    except ValueError:
        return REACTION_ALIASES.get(normalized, ReactionKind.UNKNOWN)


def is_positive_reaction(kind: ReactionKind) -> bool:
    return kind in POSITIVE_KINDS


def is_negative_reaction(kind: ReactionKind) -> bool:
    return kind in NEGATIVE_KINDS


def positive_reactions(comment: Comment) -> list[Reaction]:
    return [r for r in comment.reactions if is_positive_reaction(r.kind)]


def negative_reactions(comment: Comment) -> list[Reaction]:
    return [r for r in comment.reactions if is_negative_reaction(r.kind)]


def reaction_sentiment_score(comment: Comment) -> float:
    """Score between -1 (all negative) and 1 (all positive); 0 without reactions."""
    positive = len(positive_reactions(comment))
    negative = len(negative_reactions(comment))
    total = positive + negative
    if total == 0:
        return 0.0
    return (positive - negative) / total


def extract_commit_hash(comment: Comment) -> str | None:
    match = COMMIT_FIX_PATTERN.search(comment.body or "")
    return match.group(1) if match else None


def detect_synthetic_resolution_reaction(comment: Comment) -> Reaction | None:
    """Infer a thumbs-up from a "fixed in commit <sha>" follow-up.

    The reaction is attributed to the comment author and timestamped at the
    last edit.
    """
    if extract_commit_hash(comment) is None:
        return None

    return Reaction(
        kind=ReactionKind.THUMBS_UP,
        user=comment.author,
        created_at=comment.updated_at or comment.created_at,
        synthetic=True,
    )
