"""
Shared fixtures for ggl tests.

FakeBackend stands in for the git binary: it serves canned histories
keyed by repository path and records every call it receives.
"""

import os
import shutil
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from ggl.exit_codes import FetchError, RepositoryOpenError, RevisionResolutionError
from ggl.infra import FetchResult, RawCommit, RepositoryHandle

ROOT = Path("/repos")
T0 = datetime(2022, 11, 1, 12, 0, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """T0 shifted by a number of minutes."""
    return T0 + timedelta(minutes=minutes)


def raw_commit(
    seed: str,
    author_time: datetime,
    committer_time: Optional[datetime] = None,
    parents: Sequence[str] = (),
    message: str = "Change something\n",
    name: str = "Ann Example",
    email: str = "ann@example.com",
) -> RawCommit:
    return RawCommit(
        hash=(seed * 40)[:40],
        parents=tuple(parents),
        author_name=name,
        author_email=email,
        author_time=author_time,
        committer_time=committer_time or author_time,
        message=message,
    )


class FakeBackend:
    """In-memory GitBackend."""

    def __init__(
        self,
        histories: Dict[str, List[RawCommit]],
        missing_revisions: Sequence[str] = (),
        fetch_result: FetchResult = FetchResult.UPDATED,
        fetch_error: Optional[str] = None,
        changed: Optional[Dict[str, List[str]]] = None,
    ):
        self.histories = histories
        self.missing_revisions = set(missing_revisions)
        self.fetch_result = fetch_result
        self.fetch_error = fetch_error
        self.changed = changed or {}
        self.calls: List[tuple] = []
        self.walked: Dict[str, int] = {}
        self.closed: List[str] = []

    def _key(self, handle: RepositoryHandle) -> str:
        return handle.path.name

    def open(self, path: Path) -> RepositoryHandle:
        self.calls.append(('open', Path(path).name))
        if Path(path).name not in self.histories:
            raise RepositoryOpenError(f"Repository does not exist: {path}")
        return RepositoryHandle(path=Path(path))

    def fetch(self, handle: RepositoryHandle, remote: str) -> FetchResult:
        self.calls.append(('fetch', self._key(handle), remote))
        if self.fetch_error:
            raise FetchError(self.fetch_error)
        return self.fetch_result

    def resolve_revision(self, handle: RepositoryHandle, revision: str) -> str:
        self.calls.append(('resolve', self._key(handle), revision))
        if revision in self.missing_revisions:
            raise RevisionResolutionError(f"reference not found: {revision}")
        history = self.histories[self._key(handle)]
        return history[0].hash if history else "0" * 40

    def log(self, handle: RepositoryHandle, commit_id: str):
        key = self._key(handle)
        self.calls.append(('log', key, commit_id))
        self.walked[key] = 0
        try:
            for commit in self.histories[key]:
                self.walked[key] += 1
                yield commit
        finally:
            self.closed.append(key)

    def changed_paths(self, handle: RepositoryHandle, commit_id: str, parent_id: Optional[str] = None):
        self.calls.append(('changed_paths', self._key(handle), commit_id, parent_id))
        return self.changed.get(commit_id, [])


@pytest.fixture
def fake_git():
    """Factory for FakeBackend instances."""
    return FakeBackend


@pytest.fixture
def make_raw():
    """Factory for RawCommit instances."""
    return raw_commit


# ---------------------------------------------------------------------------
# Real git repositories
# ---------------------------------------------------------------------------

requires_git = pytest.mark.skipif(shutil.which('git') is None, reason="git is not installed")


def git(*args: str, cwd: Path, env: Optional[Dict[str, str]] = None) -> str:
    result = subprocess.run(
        ['git', *args],
        cwd=str(cwd),
        check=True,
        capture_output=True,
        text=True,
        env={**os.environ, **(env or {})},
    )
    return result.stdout.strip()


def git_commit(repo: Path, filename: str, message: str, date: str, author: str = "Ann Example") -> str:
    """Commit a change to `filename` with fixed author and committer dates (raw git format)."""
    path = repo / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{message}\n{date}\n")
    git('add', filename, cwd=repo)
    git(
        '-c', f'user.name={author}',
        '-c', 'user.email=ann@example.com',
        '-c', 'commit.gpgsign=false',
        'commit', '-q', '-m', message,
        cwd=repo,
        env={'GIT_AUTHOR_DATE': date, 'GIT_COMMITTER_DATE': date},
    )
    return git('rev-parse', 'HEAD', cwd=repo)


def git_init(repo: Path) -> Path:
    repo.mkdir(parents=True, exist_ok=True)
    git('init', '-q', cwd=repo)
    git('symbolic-ref', 'HEAD', 'refs/heads/main', cwd=repo)
    return repo


@pytest.fixture
def upstream_and_clone(tmp_path):
    """
    An upstream repository with three commits and a clone of it.

    Returns (upstream, clone_root, clone) where clone lives at
    clone_root / "work" and tracks upstream as origin.
    """
    upstream = git_init(tmp_path / 'upstream')
    git_commit(upstream, 'README', 'Initial commit', '1667296800 +0000')
    git_commit(upstream, 'src/app.py', 'Add app\n\nWith a body line.', '1667383200 +0200')
    git_commit(upstream, 'docs/guide.md', 'Write guide', '1667469600 -0700')

    clone_root = tmp_path / 'root'
    clone_root.mkdir()
    git('clone', '-q', str(upstream), 'work', cwd=clone_root)
    return upstream, clone_root, clone_root / 'work'
