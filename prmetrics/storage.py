"""JSON dataset persistence.

Schema (stable)::

    {
      "prs": [...],
      "comments": [...],
      "metadata": {
        "repository": "owner/repo",
        "reviewer": "coderabbitai[bot]",
        "period": {"start": "<ISO-8601>", "end": "<ISO-8601>"},
        "totalPRs": 3,
        "totalComments": 12,
        "collectedAt": "<ISO-8601>"
      }
    }
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from pydantic import AwareDatetime, Field, ValidationError

from .errors import DatasetError
from .models import Comment, DateRange, PullRequest, Record

logger = logging.getLogger(__name__)


class DatasetMetadata(Record):
    repository: str
    reviewer: str
    period: DateRange
    total_prs: int = Field(alias="totalPRs")
    total_comments: int = Field(alias="totalComments")
    collected_at: AwareDatetime | None = Field(default=None, alias="collectedAt")


class Dataset(Record):
    prs: tuple[PullRequest, ...]
    comments: tuple[Comment, ...]
    metadata: DatasetMetadata


def build_dataset(
    prs: Sequence[PullRequest],
    comments: Sequence[Comment],
    repository: str,
    reviewer: str,
    period: DateRange,
    collected_at: datetime | None = None,
) -> Dataset:
    return Dataset(
        prs=tuple(prs),
        comments=tuple(comments),
        metadata=DatasetMetadata(
            repository=repository,
            reviewer=reviewer,
            period=period,
            total_prs=len(prs),
            total_comments=len(comments),
            collected_at=collected_at or datetime.now(UTC),
        ),
    )


def write_text_atomic(path: Path | str, content: str) -> None:
    """Write to a temp file first, then rename so no partial file is left behind."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_file = path.with_name(f"{path.name}.tmp")
    try:
        with open(temp_file, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(temp_file, path)  # Atomic on POSIX
    finally:
        if temp_file.exists():
            temp_file.unlink()


def save_dataset(path: Path | str, dataset: Dataset) -> None:
    write_text_atomic(path, dataset.model_dump_json(by_alias=True, indent=2))
    logger.info(
        f"Saved {dataset.metadata.total_prs} PRs and {dataset.metadata.total_comments} comments to {path}"
    )


def _format_errors(error: ValidationError) -> list[str]:
    problems = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "<root>"
        problems.append(f"{location}: {err['msg']}")
    return problems


def _read_json(path: Path) -> object:
    if not path.exists():
        raise DatasetError(f"Input file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise DatasetError(f"Invalid JSON in {path}: {e}", [str(e)]) from e


def load_dataset(path: Path | str) -> Dataset:
    """Load and validate a collected dataset.

    Raises:
        DatasetError: If the file is missing, not JSON, or off-schema.
    """
    path = Path(path)
    data = _read_json(path)

    try:
        dataset = Dataset.model_validate(data)
    except ValidationError as e:
        problems = _format_errors(e)
        raise DatasetError(f"Invalid data file format: {path} ({len(problems)} problems)", problems) from e

    meta = dataset.metadata
    if meta.total_prs != len(dataset.prs) or meta.total_comments != len(dataset.comments):
        logger.warning(
            f"Metadata counts ({meta.total_prs} PRs, {meta.total_comments} comments) do not match "
            f"records ({len(dataset.prs)} PRs, {len(dataset.comments)} comments) in {path}"
        )

    return dataset
