"""Comment extractors (inline review comments and PR conversation comments)."""

from ..models import Comment
from .prs import parse_datetime_required
from .reactions import extract_reaction
from .users import extract_user


def reaction_count(comment_data: dict) -> int:
    """Total reactions according to the summary embedded in the comment."""
    return (comment_data.get("reactions") or {}).get("total_count", 0)


def extract_comment(
    pr_number: int,
    comment_data: dict,
    reactions_data: list[dict] | None = None,
) -> Comment:
    """Extract a review or issue comment from GitHub API response.

    Issue comments carry no ``in_reply_to_id``; their replies can only be
    found heuristically.
    """
    created_at = parse_datetime_required(comment_data["created_at"])
    updated_raw = comment_data.get("updated_at")

    return Comment(
        id=comment_data["id"],
        body=comment_data.get("body") or "",
        author=extract_user(comment_data.get("user")),
        created_at=created_at,
        updated_at=parse_datetime_required(updated_raw) if updated_raw else created_at,
        in_reply_to_id=comment_data.get("in_reply_to_id"),
        reactions=tuple(extract_reaction(r) for r in reactions_data or []),
        pr_number=pr_number,
        html_url=comment_data.get("html_url"),
    )
