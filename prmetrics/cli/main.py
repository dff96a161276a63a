"""Main CLI entry point for prmetrics."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..errors import DatasetError, PRMetricsError
from ..models import DateRange
from ..project_config import ProjectConfig
from ..repo import get_cache_dir, get_repo
from .init_config import init_config

logger = logging.getLogger(__name__)


def setup_logging(log_file: Path) -> None:
    """Send log records to a file; the terminal only shows console output."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=[logging.FileHandler(log_file, mode="a")],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prmetrics",
        description="Measure how effective an AI code reviewer's PR comments are",
        epilog="Run 'prmetrics <command> --help' for more information on a command.",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to prmetrics.yaml (default: search the current directory)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser(
        "init",
        help="Generate prmetrics.yaml",
        description="Write a starter config, detecting the repository from the git remote.",
    )
    init_parser.add_argument("--output", "-o", type=Path, default=Path("prmetrics.yaml"))
    init_parser.add_argument("--repo", "-r", type=str, default=None, help="Repository in format owner/repo")
    init_parser.add_argument("--reviewer", "-u", type=str, default=None, help="Reviewer login to analyze")
    init_parser.add_argument("--days", "-d", type=int, default=None, help="Default number of days to analyze")
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")

    collect_parser = subparsers.add_parser(
        "collect",
        help="Collect PR data from GitHub and save to a JSON file",
        description="Fetch PRs in the time window and the comments on PRs the reviewer commented on.",
    )
    collect_parser.add_argument("--repo", "-r", type=str, default=None, help="Repository in format owner/repo")
    collect_parser.add_argument("--reviewer", "-u", type=str, default=None, help="Reviewer login to analyze")
    collect_parser.add_argument("--days", "-d", type=int, default=None, help="Number of days to analyze")
    collect_parser.add_argument("--output", "-o", type=Path, default=None, help="Output JSON file path")
    collect_parser.add_argument("--limit", "-n", type=int, default=None, help="Limit number of PRs to fetch")

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze collected PR data and generate a report",
        description="Classify the reviewer's comments and write a JSON or Markdown report.",
    )
    analyze_parser.add_argument("--input", "-i", type=Path, default=None, help="Input JSON file path")
    analyze_parser.add_argument(
        "--report",
        type=str,
        default=None,
        help="Report format: json or markdown (default: from --report-output extension, else json)",
    )
    analyze_parser.add_argument(
        "--report-output",
        type=Path,
        default=None,
        help="Report file path (default: <input>-report.json or .md next to the input)",
    )

    subparsers.add_parser("config", help="Show current configuration")

    return parser


def run_init(args: argparse.Namespace, console: Console) -> None:
    config = init_config(args.output, repo=args.repo, reviewer=args.reviewer, days=args.days, force=args.force)
    repo = f"{config.repo_owner}/{config.repo_name}" if config.repo_owner else "not detected"
    console.print(f"Wrote {args.output} (repository: {repo}, reviewer: {escape(config.reviewer)})")


def run_collect(args: argparse.Namespace, project: ProjectConfig, console: Console) -> None:
    # Import here to keep startup fast for the offline commands
    import trio

    from ..collector import DataCollector
    from ..github_client import GitHubClient
    from ..storage import save_dataset

    repo = get_repo(args.repo, project)
    reviewer = args.reviewer or project.reviewer
    period = DateRange.last_days(args.days if args.days is not None else project.days)
    output = args.output or Path(project.data_file)

    setup_logging(repo.log_file)

    async def collect():
        async with GitHubClient() as client:
            collector = DataCollector(client, repo, reviewer, period, console)
            return await collector.run(limit=args.limit)

    dataset = trio.run(collect)

    if not dataset.prs:
        console.print("No pull requests found in the specified time period.")
        return

    save_dataset(output, dataset)
    console.print(f"[green]Data saved to: {output}[/]")


def run_analyze(args: argparse.Namespace, project: ProjectConfig, console: Console) -> None:
    from ..pipeline import analyze_dataset, filter_by_reviewer
    from ..report import default_report_path, detect_output_format, generate_report, get_file_extension, print_summary
    from ..storage import load_dataset, write_text_atomic

    setup_logging(get_cache_dir() / "prmetrics.log")

    input_path = args.input or Path(project.data_file)
    fmt = args.report
    if fmt is None and args.report_output is not None:
        fmt = detect_output_format(args.report_output)
    fmt = (fmt or "json").strip().lower()
    get_file_extension(fmt)  # Validate before doing any work

    dataset = load_dataset(input_path)
    meta = dataset.metadata
    console.print(f"Loaded {meta.total_prs} PRs, {meta.total_comments} comments")

    if not filter_by_reviewer(dataset.comments, meta.reviewer):
        console.print(f"No comments found from reviewer: {escape(meta.reviewer)}")
        return

    report = analyze_dataset(dataset, detector=project.bot_detector(meta.reviewer))
    content = generate_report(report, fmt)

    output = args.report_output or default_report_path(input_path, fmt)
    write_text_atomic(output, content)

    print_summary(report, console)
    console.print(f"[green]Report saved to: {output}[/]")


def run_show_config(project: ProjectConfig, console: Console) -> None:
    try:
        repo = get_repo(None, project).full_name
    except PRMetricsError:
        repo = "not configured"
    period = DateRange.last_days(project.days)

    console.print("[bold]Configuration:[/]")
    console.print(f"Repository: {repo}")
    console.print(f"Reviewer: {escape(project.reviewer)}")
    console.print(f"Period: {period.start.date().isoformat()} to {period.end.date().isoformat()}")
    console.print(f"Data file: {project.data_file}")
    console.print(f"Bot patterns: {len(project.bot_patterns)} patterns, {len(project.bot_logins)} logins")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point for prmetrics."""
    parser = build_parser()
    args = parser.parse_args(argv)
    console = Console()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        if args.command == "init":
            run_init(args, console)
            return

        project = ProjectConfig.load(args.config)

        if args.command == "collect":
            run_collect(args, project, console)
        elif args.command == "analyze":
            run_analyze(args, project, console)
        elif args.command == "config":
            run_show_config(project, console)
        else:
            print(f"Unknown command: {args.command}")
            parser.print_help()
            sys.exit(1)

    except PRMetricsError as e:
        message = str(e)
        logger.error(message)
        if isinstance(e, DatasetError) and e.problems:
            for problem in e.problems:
                logger.error(f"  {problem}")
            message = f"{message}: {e.problems[0]}"
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
