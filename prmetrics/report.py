"""Report rendering for reviewer effectiveness metrics.

Both encodings are projections of the same payload built by
``report_payload``, so JSON and Markdown always show identical numbers.
Nothing here recomputes or re-rounds a metric.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .errors import UnsupportedFormatError
from .metrics import DetailedMetrics, SummaryMetrics
from .models import DateRange

SUPPORTED_FORMATS = ("json", "markdown")

FILE_EXTENSIONS = {
    "json": ".json",
    "markdown": ".md",
}


@dataclass(frozen=True)
class ReportMetadata:
    repository: str
    period: DateRange
    reviewer: str
    generated_at: datetime


@dataclass(frozen=True)
class MetricsReport:
    """Everything a report encoding needs."""

    metadata: ReportMetadata
    summary: SummaryMetrics
    detailed: DetailedMetrics


def create_metrics_report(
    repository: str,
    period: DateRange,
    reviewer: str,
    summary: SummaryMetrics,
    detailed: DetailedMetrics,
    generated_at: datetime | None = None,
) -> MetricsReport:
    return MetricsReport(
        metadata=ReportMetadata(
            repository=repository,
            period=period,
            reviewer=reviewer,
            generated_at=generated_at or datetime.now(UTC),
        ),
        summary=summary,
        detailed=detailed,
    )


def is_format_supported(fmt: str) -> bool:
    return fmt.strip().lower() in SUPPORTED_FORMATS


def _check_format(fmt: str) -> str:
    normalized = fmt.strip().lower()
    if normalized not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(
            f"Invalid report format '{fmt}'. Supported formats: {', '.join(SUPPORTED_FORMATS)}"
        )
    return normalized


def get_file_extension(fmt: str) -> str:
    return FILE_EXTENSIONS[_check_format(fmt)]


def detect_output_format(path: Path | str) -> str | None:
    """Guess the report format from a file extension."""
    suffix = Path(path).suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".md", ".markdown"):
        return "markdown"
    return None


def default_report_path(input_path: Path | str, fmt: str) -> Path:
    """``data/pr-data.json`` -> ``data/pr-data-report.md`` (for markdown)."""
    path = Path(input_path)
    return path.with_name(f"{path.stem}-report{get_file_extension(fmt)}")


def report_payload(report: MetricsReport) -> dict[str, Any]:
    """The public report document (field names are a stable contract)."""
    meta = report.metadata
    summary = report.summary
    detailed = report.detailed

    return {
        "metadata": {
            "repository": meta.repository,
            "period": {
                "start": meta.period.start.isoformat(),
                "end": meta.period.end.isoformat(),
            },
            "reviewer": meta.reviewer,
            "generatedAt": meta.generated_at.isoformat(),
        },
        "summary": {
            "totalPRs": summary.total_prs,
            "totalComments": summary.total_comments,
            "averageCommentsPerPR": summary.average_comments_per_pr,
            "resolvedComments": summary.resolved_comments,
            "resolvedPercentage": summary.resolved_percentage,
            "repliedComments": summary.replied_comments,
            "replyPercentage": summary.reply_percentage,
            "positiveReactions": summary.positive_reactions,
            "negativeReactions": summary.negative_reactions,
            "positiveReactionPercentage": summary.positive_reaction_percentage,
            "negativeReactionPercentage": summary.negative_reaction_percentage,
            "effectivenessScore": summary.effectiveness_score,
            "effectivenessTier": summary.effectiveness_tier,
        },
        "detailed": {
            "categoryCounts": dict(detailed.category_counts),
            "sentimentCounts": dict(detailed.sentiment_counts),
            "reactionCounts": dict(detailed.reaction_counts),
            "syntheticReactions": detailed.synthetic_reactions,
            "commentsWithCommitFix": detailed.comments_with_commit_fix,
            "averageReactionSentiment": detailed.average_reaction_sentiment,
            "medianFirstReplyHours": detailed.median_first_reply_hours,
            "followUpComments": [
                {
                    "id": f.id,
                    "prNumber": f.pr_number,
                    "category": f.category,
                    "excerpt": f.excerpt,
                    "url": f.html_url,
                }
                for f in detailed.follow_up_comments
            ],
            "perPR": [
                {
                    "prNumber": row.pr_number,
                    "comments": row.comments,
                    "resolved": row.resolved,
                    "replied": row.replied,
                }
                for row in detailed.per_pr
            ],
        },
    }


def render_json(report: MetricsReport) -> str:
    return json.dumps(report_payload(report), indent=2, ensure_ascii=False) + "\n"


def format_pct(value: float | None) -> str:
    """Percentage as stored (already rounded by the aggregator)."""
    if value is None:
        return "N/A"
    return f"{value}%"


def format_hours(value: float | None) -> str:
    """Format hours in human-readable way."""
    if value is None:
        return "N/A"
    if value < 1:
        return f"{int(value * 60)} min"
    if value < 24:
        return f"{value} hrs"
    return f"{value / 24:.1f} days"


def _table(headers: list[str], rows: list[list[Any]]) -> list[str]:
    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join("---" for _ in headers) + " |",
    ]
    for row in rows:
        lines.append("| " + " | ".join(str(cell) for cell in row) + " |")
    return lines


def _summary_rows(summary: dict[str, Any]) -> list[list[Any]]:
    return [
        ["Total PRs", summary["totalPRs"]],
        ["Total comments", summary["totalComments"]],
        ["Average comments per PR", summary["averageCommentsPerPR"]],
        ["Resolved comments", summary["resolvedComments"]],
        ["Resolution rate", format_pct(summary["resolvedPercentage"])],
        ["Replied comments", summary["repliedComments"]],
        ["Reply rate", format_pct(summary["replyPercentage"])],
        ["Positive reactions", summary["positiveReactions"]],
        ["Negative reactions", summary["negativeReactions"]],
        ["Positive reaction rate", format_pct(summary["positiveReactionPercentage"])],
        ["Negative reaction rate", format_pct(summary["negativeReactionPercentage"])],
        ["Effectiveness score", f"{summary['effectivenessScore']} ({summary['effectivenessTier']})"],
    ]


def render_markdown(report: MetricsReport) -> str:
    payload = report_payload(report)
    meta = payload["metadata"]
    summary = payload["summary"]
    detailed = payload["detailed"]

    lines = [
        "# AI Reviewer Effectiveness Report",
        "",
        f"- **Repository:** {meta['repository']}",
        f"- **Reviewer:** {meta['reviewer']}",
        f"- **Period:** {meta['period']['start']} to {meta['period']['end']}",
        f"- **Generated:** {meta['generatedAt']}",
        "",
        "## Summary",
        "",
    ]
    lines += _table(["Metric", "Value"], _summary_rows(summary))

    lines += ["", "## Reaction Breakdown", ""]
    lines += _table(["Reaction", "Count"], [[k, v] for k, v in detailed["reactionCounts"].items()])
    lines += [
        "",
        f"- Synthetic reactions (\"fixed in commit\" follow-ups): {detailed['syntheticReactions']}",
        f"- Comments referencing a fix commit: {detailed['commentsWithCommitFix']}",
        f"- Average reaction sentiment: {detailed['averageReactionSentiment']}",
    ]

    lines += ["", "## Engagement Breakdown", ""]
    lines += [f"- Median time to first human reply: {format_hours(detailed['medianFirstReplyHours'])}", ""]
    lines += _table(["Category", "Comments"], [[k, v] for k, v in detailed["categoryCounts"].items()])
    lines.append("")
    lines += _table(["Sentiment", "Comments"], [[k, v] for k, v in detailed["sentimentCounts"].items()])

    if detailed["perPR"]:
        lines.append("")
        lines += _table(
            ["PR", "Comments", "Resolved", "Replied"],
            [[f"#{r['prNumber']}", r["comments"], r["resolved"], r["replied"]] for r in detailed["perPR"]],
        )

    lines += ["", "## Comments Needing Follow-up", ""]
    if detailed["followUpComments"]:
        for f in detailed["followUpComments"]:
            where = f"PR #{f['prNumber']}" if f["prNumber"] is not None else "unknown PR"
            label = f"[#{f['id']}]({f['url']})" if f["url"] else f"#{f['id']}"
            lines.append(f"- {label} ({where}, {f['category']}): {f['excerpt']}")
    else:
        lines.append("_Every comment was resolved or received a human reply._")

    return "\n".join(lines) + "\n"


def generate_report(report: MetricsReport, fmt: str) -> str:
    """Render ``report`` in the requested encoding."""
    fmt = _check_format(fmt)
    if fmt == "json":
        return render_json(report)
    return render_markdown(report)


def print_summary(report: MetricsReport, console: Console | None = None) -> None:
    """Print the summary table to the terminal."""
    console = console or Console()
    payload = report_payload(report)

    title = f"{payload['metadata']['reviewer']} on {payload['metadata']['repository']}"
    table = Table(title=escape(title))
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for label, value in _summary_rows(payload["summary"]):
        table.add_row(label, str(value))

    console.print(table)
