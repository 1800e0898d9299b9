"""
Rendering functions for ggl output.

Commits are rendered the way `git log` prints them, with one extra
`Repository:` line naming where each commit came from.
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional

from rich.console import Console
from rich.text import Text

from .domain import CommitRecord, abbreviate



def get_console(force_terminal: Optional[bool] = None) -> Console:
    """Console for log output; force_terminal=True emits colors even when piped."""
    return Console(highlight=False, soft_wrap=True, force_terminal=force_terminal)


console = get_console()

# Four spaces, matching the message body of `git log`
INDENT = "    "

# Locale-independent names, as git prints them
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_offset(offset: Optional[timedelta]) -> str:
    """Format a UTC offset as +HHMM / -HHMM."""
    minutes = int((offset or timedelta(0)).total_seconds() // 60)
    sign = '-' if minutes < 0 else '+'
    hours, minutes = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}{minutes:02d}"


def format_date(when: datetime) -> str:
    """
    Format a timestamp like `git log` does: "Mon Jan 2 15:04:05 2006 -0700".

    The time is shown in the timestamp's own UTC offset.
    """
    return (
        f"{WEEKDAYS[when.weekday()]} {MONTHS[when.month - 1]} {when.day} "
        f"{when:%H:%M:%S} {when.year:04d} {format_offset(when.utcoffset())}"
    )


def format_commit(commit: CommitRecord) -> str:
    """
    Render one commit as a `git log` style block.

    The block has no leading or trailing whitespace apart from a single
    final newline. Message lines are emitted verbatim after the indent.
    """
    lines = [
        f"commit {commit.hash}",
        f"Repository: {commit.repository.name}",
    ]

    if commit.is_merge:
        lines.append("Merge: " + " ".join(abbreviate(p) for p in commit.parents))

    lines.append(f"Author: {commit.author.name} <{commit.author.email}>")
    lines.append(f"Date:   {format_date(commit.timestamp)}")
    lines.append("")

    for line in commit.message.split("\n"):
        lines.append(INDENT + line)

    return "\n".join(lines).strip() + "\n"


def render_log(commits: Iterable[CommitRecord], out: Optional[Console] = None) -> None:
    """
    Print commits to a terminal with the `commit` line highlighted.

    Each block is followed by a blank line. Only the `commit` line goes
    through rich; the rest of the block is written as is so tabs in
    messages survive.
    """
    out = out or console
    for commit in commits:
        header, _, rest = format_commit(commit).partition("\n")
        out.print(Text(header, style="yellow"))
        out.file.write(rest + "\n")
