"""Application entrypoint for the Jira sprint helper CLI."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from . import commands
from .cli import parse_args
from .config import load_config
from .errors import ApiError, AuthenticationError, ConfigurationError
from .jira_client import JiraClient
from .tables import summary_width, terminal_columns

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_UNEXPECTED_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2
EXIT_AUTHENTICATION_ERROR = 3
EXIT_API_ERROR = 4


def configure_logging(verbose: bool) -> None:
    """Configure root logging on stderr, at DEBUG when ``verbose`` is set."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def dispatch(client: JiraClient, args: argparse.Namespace) -> None:
    """Run the subcommand selected in ``args``."""
    if args.command == "boards":
        commands.list_boards(client)
    elif args.command == "sprints":
        commands.list_sprints(client, args.board_id, args.show_all, args.active, args.future)
    elif args.command == "issues":
        commands.list_issues(
            client,
            board_id=args.board_id,
            sprint_id=args.sprint_id,
            assignee=args.assignee,
            issue_key=args.issue_key,
            show_all=args.show_all,
            no_subtasks=args.no_subtasks,
            width=summary_width(terminal_columns()),
        )
    elif args.command == "report":
        commands.report(
            client,
            board_id=args.board_id,
            sprint_id=args.sprint_id,
            planning=args.planning,
            update=args.update,
        )
    else:
        raise ValueError(f"Unknown command: {args.command}")


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments, run the selected command and map failures to exit codes.

    Returns:
        ``0`` on success, ``2`` for configuration errors, ``3`` for
        authentication errors, ``4`` for Jira API errors and ``1`` for anything
        unexpected.
    """
    try:
        args = parse_args(argv)
        configure_logging(args.verbose)

        config = load_config(organization=args.organization, user=args.user, token=args.token)
        client = JiraClient(config=config)
        dispatch(client, args)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIGURATION_ERROR
    except AuthenticationError as exc:
        print(f"Authentication error: {exc}", file=sys.stderr)
        return EXIT_AUTHENTICATION_ERROR
    except ApiError as exc:
        print(f"Jira API error: {exc}", file=sys.stderr)
        return EXIT_API_ERROR
    except Exception as exc:
        logger.debug("Unexpected failure", exc_info=True)
        print(f"Unexpected error: {exc}", file=sys.stderr)
        return EXIT_UNEXPECTED_ERROR

    return EXIT_SUCCESS


def main() -> None:
    """Console-script entrypoint."""
    sys.exit(run())


if __name__ == "__main__":
    main()
