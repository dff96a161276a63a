"""User extractor."""

from ..models import User


def extract_user(user_data: dict | None) -> User:
    """Extract user data from GitHub API response.

    The API ``type`` is kept as-is ("Bot" or not); login-based bot detection
    happens in the reply linker.
    """
    user_data = user_data or {}
    return User(
        login=user_data.get("login") or "unknown",
        account_type=user_data.get("type") or "User",
        id=user_data.get("id") or 0,
    )
