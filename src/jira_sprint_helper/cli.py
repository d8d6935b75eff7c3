"""Command-line argument parsing for the Jira sprint helper."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from .config import ORGANIZATION_ENV, TOKEN_ENV, USER_ENV


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Args:
        value: Raw command-line argument value.

    Returns:
        The validated positive integer.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a number") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def _global_arguments() -> argparse.ArgumentParser:
    """Connection options shared by every subcommand.

    Defaults are left as ``None`` so the environment is only consulted by
    ``load_config`` and secrets never show up in ``--help``.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "-o",
        "--organization",
        help=f"Jira Cloud organization, as in <organization>.atlassian.net [env: {ORGANIZATION_ENV}].",
    )
    parent.add_argument("-u", "--user", help=f"Jira user email [env: {USER_ENV}].")
    parent.add_argument("-t", "--token", help=f"Jira API token [env: {TOKEN_ENV}].")
    parent.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr.",
    )
    return parent


def _board_or_sprint(parser: argparse.ArgumentParser, noun: str) -> None:
    select = parser.add_mutually_exclusive_group(required=True)
    select.add_argument(
        "-b",
        "--board-id",
        type=_positive_int,
        help=f"Board ID from which to fetch {noun}.",
    )
    select.add_argument(
        "-s",
        "--sprint-id",
        type=_positive_int,
        help=f"Sprint ID from which to fetch {noun}.",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the boards/sprints/issues/report subcommands."""
    parser = argparse.ArgumentParser(
        prog="jira-sprint-helper",
        description="A small tool to help prepare, start and complete sprints in Jira.",
    )
    common = _global_arguments()
    commands = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    commands.add_parser(
        "boards",
        parents=[common],
        help="List all boards you have access to.",
    )

    sprints = commands.add_parser(
        "sprints",
        parents=[common],
        help="List and filter sprints from a given board.",
    )
    sprints.add_argument(
        "-b",
        "--board-id",
        type=_positive_int,
        required=True,
        help="Board ID from which to fetch sprints.",
    )
    state = sprints.add_mutually_exclusive_group()
    state.add_argument("-A", "--all", dest="show_all", action="store_true", help="Also show closed sprints.")
    state.add_argument("-a", "--active", action="store_true", help="Only show active sprints.")
    state.add_argument("-f", "--future", action="store_true", help="Only show future sprints.")

    issues = commands.add_parser(
        "issues",
        parents=[common],
        help="List, filter and search issues from a given board.",
    )
    _board_or_sprint(issues, "issues")
    issue_filter = issues.add_mutually_exclusive_group()
    issue_filter.add_argument("-a", "--assignee", help="Only show issues for a given assignee.")
    issue_filter.add_argument("-i", "--issue", dest="issue_key", help="Show details from a specific issue.")
    issues.add_argument("-A", "--all", dest="show_all", action="store_true", help="Also show issues that are done.")
    issues.add_argument(
        "-S",
        "--no-subtasks",
        action="store_true",
        help="Only show stories, tasks and bugs.",
    )

    report = commands.add_parser(
        "report",
        parents=[common],
        help="Show and update original estimates and time logged.",
    )
    _board_or_sprint(report, "issues")
    report.add_argument("-p", "--planning", action="store_true", help="Ignore issues that are done.")
    report.add_argument(
        "-U",
        "--update",
        action="store_true",
        help="Update estimates and time logged.",
    )

    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed CLI arguments; ``command`` names the selected subcommand.
    """
    return build_parser().parse_args(argv)
