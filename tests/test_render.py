"""
Tests for ggl/render.py rendering functions.

These tests verify that commits render exactly like `git log` blocks:
1. Header lines in the right order
2. Merge line only for merge commits
3. Dates in git's format with the author's UTC offset
4. Message indentation and whitespace trimming
"""
import pytest
from io import StringIO
from datetime import datetime, timedelta, timezone
from rich.console import Console

from ggl import render
from ggl.domain import Author, CommitRecord, RepositoryRef


def make_commit(message="Fix the parser\n\nLonger explanation.\n", parents=(), name='api', when=None):
    when = when or datetime(2022, 11, 2, 9, 30, 0, tzinfo=timezone(timedelta(hours=-7)))
    return CommitRecord(
        repository=RepositoryRef(name=name, path=name, branch='main'),
        hash='0123456789abcdef0123456789abcdef01234567',
        author=Author(name='Ann Example', email='ann@example.com', when=when),
        parents=tuple(parents),
        message=message,
    )


class TestFormatDate:
    """Tests for format_date."""

    def test_negative_offset(self):
        when = datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone(timedelta(hours=-7)))
        assert render.format_date(when) == "Mon Jan 2 15:04:05 2006 -0700"

    def test_two_digit_day_and_positive_offset(self):
        when = datetime(2022, 12, 31, 23, 59, 0, tzinfo=timezone(timedelta(hours=5, minutes=30)))
        assert render.format_date(when) == "Sat Dec 31 23:59:00 2022 +0530"

    def test_utc(self):
        when = datetime(2022, 11, 1, 8, 0, 0, tzinfo=timezone.utc)
        assert render.format_date(when) == "Tue Nov 1 08:00:00 2022 +0000"

    def test_offset_with_minutes_behind_utc(self):
        when = datetime(2022, 7, 4, 1, 2, 3, tzinfo=timezone(-timedelta(hours=3, minutes=30)))
        assert render.format_date(when) == "Mon Jul 4 01:02:03 2022 -0330"

    def test_time_shown_in_own_offset(self):
        """The wall-clock time is the author's, not converted to local time."""
        when = datetime(2022, 11, 1, 23, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert render.format_date(when).startswith("Tue Nov 1 23:00:00")


class TestFormatCommit:
    """Tests for format_commit."""

    def test_regular_commit(self):
        expected = (
            "commit 0123456789abcdef0123456789abcdef01234567\n"
            "Repository: api\n"
            "Author: Ann Example <ann@example.com>\n"
            "Date:   Wed Nov 2 09:30:00 2022 -0700\n"
            "\n"
            "    Fix the parser\n"
            "    \n"
            "    Longer explanation.\n"
        )
        assert render.format_commit(make_commit()) == expected

    def test_single_parent_has_no_merge_line(self):
        text = render.format_commit(make_commit(parents=['a' * 40]))
        assert "Merge:" not in text

    def test_merge_line(self):
        parents = ['1111111111aaaaaaaaaa', '2222222222bbbbbbbbbb', '3333333333cccccccccc']
        lines = render.format_commit(make_commit(parents=parents)).split("\n")

        assert lines[2] == "Merge: 111111111 222222222 333333333"
        assert lines[3].startswith("Author: ")

    def test_exactly_one_trailing_newline(self):
        text = render.format_commit(make_commit(message="Subject\n\n\n\n"))
        assert text.endswith("    Subject\n")
        assert not text.endswith("\n\n")

    def test_message_is_verbatim(self):
        message = "Use <tags> & 100% of\ttabs\n\n  indented line\n"
        text = render.format_commit(make_commit(message=message))

        assert "    Use <tags> & 100% of\ttabs\n" in text
        assert "      indented line" in text

    def test_message_without_trailing_newline(self):
        text = render.format_commit(make_commit(message="One line"))
        assert text.endswith("\n\n    One line\n")

    def test_deterministic(self):
        commit = make_commit(parents=['a' * 40, 'b' * 40])
        assert render.format_commit(commit) == render.format_commit(commit)

    def test_repository_name(self):
        text = render.format_commit(make_commit(name='billing'))
        assert text.split("\n")[1] == "Repository: billing"


class TestRenderLog:
    """Tests for render_log."""

    def test_plain_console(self):
        buf = StringIO()
        console = Console(file=buf, color_system=None, soft_wrap=True, highlight=False, width=200)
        commits = [make_commit(message="First"), make_commit(message="Second")]

        render.render_log(commits, console)

        expected = "".join(render.format_commit(c) + "\n" for c in commits)
        assert buf.getvalue() == expected

    def test_commit_line_is_highlighted(self):
        buf = StringIO()
        console = Console(file=buf, force_terminal=True, color_system='standard', soft_wrap=True)

        render.render_log([make_commit(message="First")], console)

        assert "\x1b[33mcommit 0123456789abcdef" in buf.getvalue()

    def test_tabs_in_message_are_kept(self):
        buf = StringIO()
        console = Console(file=buf, force_terminal=True, color_system='standard', soft_wrap=True)

        render.render_log([make_commit(message="a\tb")], console)

        assert "\n    a\tb\n" in buf.getvalue()

    def test_get_console_forced(self):
        assert render.get_console(force_terminal=True).is_terminal

    def test_empty(self):
        buf = StringIO()
        render.render_log([], Console(file=buf))
        assert buf.getvalue() == ""
