#!/usr/bin/env python3

import os
import re
import sys
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

import click

from ggl import __version__
from ggl.config import load_config
from ggl.domain import CommitRecord
from ggl.exit_codes import CommandError, InputError, INTERRUPTED, exit_with_code
from ggl.infra import GitBackend
from ggl.render import format_commit, get_console, render_log
from ggl.services import LogService

logger = logging.getLogger("ggl")

DEFAULT_DAYS = 7
UNTIL_FORMAT = '%Y-%m-%d'
UNTIL_PATTERN = re.compile(r'\d{4}-\d{2}-\d{2}')


@dataclass(frozen=True)
class RunOptions:
    """Everything the command line controls for one run."""
    fetch: bool = False
    until: Optional[str] = None
    config_path: Optional[str] = None
    output_json: bool = False
    color: bool = False


def resolve_cutoff(until: Optional[str], now: Optional[datetime] = None) -> datetime:
    """
    Resolve the earliest author time to show.

    Without `until` this is seven days before `now`. Otherwise `until`
    must be a YYYY-MM-DD date and the cutoff is local midnight of it.

    Raises:
        InputError: If `until` is not a valid date
    """
    if not until:
        now = now or datetime.now().astimezone()
        return now - timedelta(days=DEFAULT_DAYS)

    message = f"Failed to parse 'until' date {until!r}: expected a date like 2022-12-31"
    if not UNTIL_PATTERN.fullmatch(until):
        raise InputError(message)
    try:
        day = datetime.strptime(until, UNTIL_FORMAT)
    except ValueError as e:
        raise InputError(message) from e
    return day.astimezone()


def run(options: RunOptions, git_client: Optional[GitBackend] = None) -> List[CommitRecord]:
    """
    Build the global log and print it.

    Nothing is printed unless every repository was read successfully.
    """
    cutoff = resolve_cutoff(options.until)
    config = load_config(options.config_path)

    service = LogService(git_client)
    commits = service.aggregate(config.repositories, config.root, cutoff, fetch=options.fetch)

    if options.output_json:
        for commit in commits:
            click.echo(commit.to_jsonl())
    elif options.color:
        render_log(commits, get_console(force_terminal=True))
    else:
        for commit in commits:
            click.echo(format_commit(commit))

    return commits


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--fetch', is_flag=True,
              help='Fetch repositories that allow it before reading history')
@click.option('--until', '-u', metavar='YYYY-MM-DD',
              help='How far back should we go? e.g. 2022-11-01 (default: 7 days ago)')
@click.option('--config', '-c', 'config_path', type=click.Path(dir_okay=False),
              help='Path to config file (default: $GGL_CONFIG, ./config.yaml, ~/.config/ggl.yaml)')
@click.option('--json', 'output_json', is_flag=True,
              help='Output commits as JSONL')
@click.option('--color/--no-color', default=None,
              help='Highlight commit lines (default: when stdout is a terminal)')
@click.option('-v', '--verbose', is_flag=True,
              help='Show debug logging')
@click.version_option(version=__version__, prog_name='ggl')
def main(fetch: bool, until: Optional[str], config_path: Optional[str],
         output_json: bool, color: Optional[bool], verbose: bool):
    """ggl - global git log.

    Shows recent commits from every configured repository as one log,
    newest first, in `git log` format.

    \b
    Examples:
        # Last 7 days across all repositories
        ggl
        # Refresh from remotes first
        ggl --fetch
        # Everything since a date
        ggl --until 2022-11-01
        # JSONL output for piping
        ggl --json | jq '.subject'
    """
    if verbose:
        logger.setLevel(logging.DEBUG)

    if color is None:
        color = sys.stdout.isatty() and os.environ.get('NO_COLOR') is None

    options = RunOptions(
        fetch=fetch,
        until=until,
        config_path=config_path,
        output_json=output_json,
        color=color,
    )

    try:
        run(options)
    except KeyboardInterrupt:
        exit_with_code(INTERRUPTED, "Interrupted by user")
    except CommandError as e:
        exit_with_code(e.exit_code, f"error: {e}")


if __name__ == "__main__":
    main()
