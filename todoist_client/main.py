#!/usr/bin/env python3
"""
Todoist inbox report - example command-line driver

Lists projects, finds the inbox and reports how many minutes remain until
each timed inbox task is due.

Usage:
    python -m todoist_client.main                  # Inbox report
    python -m todoist_client.main --auth-url       # Print OAuth consent URL
    python -m todoist_client.main --code CODE      # Exchange OAuth code for a token
    python -m todoist_client.main --verbose        # Enable debug logging

Environment Variables Required:
    TODOIST_CLIENT_ID       - Todoist OAuth application client ID
    TODOIST_CLIENT_SECRET   - Todoist OAuth application client secret
    TODOIST_ACCESS_TOKEN    - Access token (inbox report only)
"""

import argparse
import logging
import sys
from pathlib import Path

from config.settings import load_settings, ConfigurationError
from todoist_client.agenda.upcoming import compute_upcoming, find_inbox
from todoist_client.todoist.client import TodoistClient
from todoist_client.todoist.exceptions import TodoistError


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Reduce noise from external libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Report upcoming tasks in your Todoist inbox",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m todoist_client.main                   # Inbox report
    python -m todoist_client.main --auth-url        # Start OAuth flow
    python -m todoist_client.main --code abc123     # Finish OAuth flow
    python -m todoist_client.main --env .env.local  # Use custom env file
        """,
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    parser.add_argument(
        "--env",
        type=Path,
        help="Path to .env file (default: .env in current directory)",
    )

    parser.add_argument(
        "--auth-url",
        action="store_true",
        help="Print the OAuth authorization URL and exit",
    )

    parser.add_argument(
        "--code",
        help="Exchange an OAuth authorization code for an access token",
    )

    return parser.parse_args(argv)


def report_inbox(client: TodoistClient, access_token: str) -> int:
    """
    Log projects and the minutes remaining for each timed inbox task.

    Returns:
        Exit code (0 for success, 1 if there is no inbox)
    """
    logger = logging.getLogger(__name__)

    projects = client.get_projects(access_token)
    for i, project in enumerate(projects):
        logger.info(f"{i}: {project.name} ({project.id}), inbox = {project.inbox_project}")

    inbox = find_inbox(projects)
    if inbox is None:
        logger.error("Inbox project not found")
        return 1

    tasks = client.get_tasks_by_project(access_token, inbox.id)
    for i, item in enumerate(compute_upcoming(tasks)):
        logger.info(
            f"{i}: {item.task.content} ({item.task.project_id}) - "
            f"{item.due_at.isoformat()}, until {item.minutes_remaining} mins"
        )

    return 0


def main(argv=None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    logger = logging.getLogger(__name__)

    try:
        settings = load_settings(env_file=args.env)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        logger.error("Please check your .env file or environment variables")
        return 1

    try:
        with TodoistClient(
            client_id=settings.todoist.client_id,
            client_secret=settings.todoist.client_secret,
            timeout=settings.todoist.timeout,
        ) as client:
            if args.auth_url:
                print(client.get_authorization_request_url())
                return 0

            if args.code:
                print(client.exchange_code(args.code))
                return 0

            if not settings.todoist.access_token:
                logger.error("TODOIST_ACCESS_TOKEN is required for the inbox report")
                logger.error("Run with --auth-url and --code to obtain one")
                return 1

            return report_inbox(client, settings.todoist.access_token)

    except TodoistError as e:
        logger.error(f"Todoist error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
