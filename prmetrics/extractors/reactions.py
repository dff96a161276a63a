"""Reaction extractor."""

from ..models import Reaction
from .prs import parse_datetime_required
from .users import extract_user


def extract_reaction(reaction_data: dict) -> Reaction:
    """Extract a reaction from the GitHub reactions API.

    ``content`` values such as "+1" or "tada" are normalized by the model.
    """
    return Reaction(
        kind=reaction_data.get("content", ""),
        user=extract_user(reaction_data.get("user")),
        created_at=parse_datetime_required(reaction_data["created_at"]),
    )
