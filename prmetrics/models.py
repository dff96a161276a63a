"""Pydantic models for reviewer comments, reactions and pull requests.

All records are frozen. Pipeline stages derive new records with
``model_copy(update=...)`` instead of mutating the ones they receive.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from pydantic import AwareDatetime, BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .errors import ConfigurationError


class Record(BaseModel):
    """Immutable record serialized with camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class AccountType(str, Enum):
    HUMAN = "Human"
    BOT = "Bot"


class ReactionKind(str, Enum):
    THUMBS_UP = "thumbs_up"
    THUMBS_DOWN = "thumbs_down"
    LAUGH = "laugh"
    HOORAY = "hooray"
    CONFUSED = "confused"
    HEART = "heart"
    ROCKET = "rocket"
    EYES = "eyes"
    UNKNOWN = "unknown"


class User(Record):
    """Comment or reaction author."""

    login: str
    account_type: AccountType = AccountType.HUMAN
    id: int = 0

    @field_validator("account_type", mode="before")
    @classmethod
    def _coerce_account_type(cls, value):
        # GitHub reports "User" and "Organization" for non-bot accounts
        if isinstance(value, AccountType):
            return value
        if isinstance(value, str) and value.strip().lower() == "bot":
            return AccountType.BOT
        return AccountType.HUMAN

    def matches_login(self, login: str) -> bool:
        """Case-insensitive login comparison."""
        return self.login.strip().lower() == login.strip().lower()


class Reaction(Record):
    """A reaction on a comment, observed or inferred (synthetic)."""

    kind: ReactionKind
    user: User
    created_at: AwareDatetime
    synthetic: bool = False

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value):
        from .signals.reactions import classify_reaction_kind

        return classify_reaction_kind(value)


class Comment(Record):
    """A pull request comment.

    ``is_resolved`` and ``replies`` are derived by the pipeline and stay at
    their defaults until then.
    """

    id: int
    body: str = ""
    author: User
    created_at: AwareDatetime
    updated_at: AwareDatetime
    in_reply_to_id: int | None = None
    is_resolved: bool = False
    reactions: tuple[Reaction, ...] = ()
    replies: tuple["Comment", ...] = ()
    pr_number: int | None = None
    html_url: str | None = None

    @field_validator("body", mode="before")
    @classmethod
    def _none_body(cls, value):
        return value or ""

    @model_validator(mode="after")
    def _check_timestamps(self):
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not be earlier than created_at")
        return self

    @property
    def was_edited(self) -> bool:
        return self.updated_at > self.created_at


class PullRequest(Record):
    """Pull request data used for window filtering and counting."""

    number: int
    title: str = ""
    state: str = "open"
    author: User
    created_at: AwareDatetime


class DateRange(Record):
    """Inclusive time window."""

    start: AwareDatetime
    end: AwareDatetime

    @model_validator(mode="after")
    def _check_order(self):
        if self.start > self.end:
            raise ValueError("period start must not be after period end")
        return self

    @classmethod
    def last_days(cls, days: int, now: datetime | None = None) -> "DateRange":
        """Window covering the last ``days`` days up to ``now``."""
        if days <= 0:
            raise ConfigurationError("Days must be a positive number")
        end = now or datetime.now(UTC)
        return cls(start=end - timedelta(days=days), end=end)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end
