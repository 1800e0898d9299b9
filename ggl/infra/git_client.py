"""
Git client infrastructure for ggl.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to replace with a fake backend for testing
- Consistent in error handling
- Isolated from business logic
"""

import subprocess
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterator, List, Optional, Protocol, Tuple
from pathlib import Path
import logging

from ..exit_codes import (
    FetchError,
    GitError,
    RepositoryOpenError,
    RevisionResolutionError,
)

logger = logging.getLogger(__name__)

# Field and record separators used in `git log` output
FIELD_SEP = '\x1f'
RECORD_SEP = '\x00'

LOG_FORMAT = FIELD_SEP.join(['%H', '%P', '%an', '%ae', '%ad', '%cd', '%B'])


@dataclass(frozen=True)
class RepositoryHandle:
    """An opened repository."""
    path: Path


@dataclass(frozen=True)
class RawCommit:
    """A commit as reported by the backend, before it is tied to a repository."""
    hash: str
    parents: Tuple[str, ...]
    author_name: str
    author_email: str
    author_time: datetime
    committer_time: datetime
    message: str


class FetchResult(Enum):
    """Outcome of a successful fetch."""
    UPDATED = "updated"
    UP_TO_DATE = "up-to-date"


class GitBackend(Protocol):
    """
    Capability the log service needs from git.

    GitClient implements it with the git binary; tests substitute a
    backend that returns canned commits.
    """

    def open(self, path: Path) -> RepositoryHandle: ...

    def fetch(self, handle: RepositoryHandle, remote: str) -> FetchResult: ...

    def resolve_revision(self, handle: RepositoryHandle, revision: str) -> str: ...

    def log(self, handle: RepositoryHandle, commit_id: str) -> Iterator[RawCommit]: ...

    def changed_paths(
        self, handle: RepositoryHandle, commit_id: str, parent_id: Optional[str] = None
    ) -> List[str]: ...


def parse_raw_date(value: str) -> datetime:
    """
    Parse git's raw date format ("1641159845 -0700").

    The returned datetime keeps the original UTC offset. Offsets of a
    day or more, which git records but Python cannot represent, are
    replaced with UTC.
    """
    seconds, offset = value.strip().split(' ', 1)
    sign = -1 if offset.startswith('-') else 1
    digits = offset.lstrip('+-')
    delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:4]))
    try:
        tz = timezone(sign * delta)
    except ValueError:
        logger.debug(f"Timezone offset {offset} out of range, using UTC")
        tz = timezone.utc
    return datetime.fromtimestamp(int(seconds), tz)


def parse_log_record(record: str) -> RawCommit:
    """Parse one NUL-separated record of `git log --format=LOG_FORMAT`."""
    parts = record.lstrip('\n').split(FIELD_SEP, 6)
    if len(parts) != 7:
        raise GitError(f"Unexpected git log record: {record[:80]!r}")

    commit_hash, parents, name, email, author_date, committer_date, message = parts
    return RawCommit(
        hash=commit_hash,
        parents=tuple(parents.split()),
        author_name=name,
        author_email=email,
        author_time=parse_raw_date(author_date),
        committer_time=parse_raw_date(committer_date),
        message=message,
    )


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient()
        handle = client.open(Path("/path/to/repo"))
        head = client.resolve_revision(handle, "origin/main")
        for commit in client.log(handle, head):
            print(commit.hash, commit.author_name)
    """

    def __init__(self, timeout: int = 30, fetch_timeout: int = 300, git: str = "git"):
        """
        Initialize GitClient.

        Args:
            timeout: Timeout in seconds for local commands (default: 30)
            fetch_timeout: Timeout in seconds for `git fetch` (default: 300)
            git: Git executable
        """
        self.timeout = timeout
        self.fetch_timeout = fetch_timeout
        self.git = git

    def _run(
        self,
        args: List[str],
        cwd: Path,
        timeout: Optional[int] = None,
    ) -> Tuple[str, str, int]:
        """
        Run a git command.

        Args:
            args: Arguments after the git executable
            cwd: Working directory
            timeout: Override the default timeout

        Returns:
            Tuple of (stdout, stderr, returncode)
        """
        cmd = [self.git, *args]
        logger.debug(f"Running command in '{cwd}': {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=timeout or self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise GitError(f"git {args[0]} timed out after {e.timeout}s in {cwd}") from e
        except OSError as e:
            raise GitError(f"Cannot run {self.git}: {e}") from e
        return result.stdout, result.stderr, result.returncode

    def open(self, path: Path) -> RepositoryHandle:
        """
        Open the repository whose top level (or bare git directory) is `path`.

        Raises:
            RepositoryOpenError: If `path` is not a git repository
        """
        path = Path(path).expanduser()
        if not path.is_dir():
            raise RepositoryOpenError(f"Repository does not exist: {path}")

        out, err, code = self._run(['rev-parse', '--is-bare-repository'], cwd=path)
        if code != 0:
            raise RepositoryOpenError(f"Not a git repository: {path} ({err.strip()})")
        if out.strip() == 'true':
            return RepositoryHandle(path=path.resolve())

        out, err, code = self._run(['rev-parse', '--show-toplevel'], cwd=path)
        if code != 0 or Path(out.strip()).resolve() != path.resolve():
            raise RepositoryOpenError(f"Not a git repository: {path}")
        return RepositoryHandle(path=path.resolve())

    def _remote_refs(self, handle: RepositoryHandle, remote: str) -> str:
        out, _, _ = self._run(
            ['for-each-ref', '--format=%(objectname) %(refname)', f'refs/remotes/{remote}/'],
            cwd=handle.path,
        )
        return out

    def fetch(self, handle: RepositoryHandle, remote: str) -> FetchResult:
        """
        Fetch from `remote`.

        Returns:
            FetchResult.UP_TO_DATE when no remote-tracking ref moved

        Raises:
            FetchError: If the fetch fails
        """
        before = self._remote_refs(handle, remote)
        try:
            _, err, code = self._run(['fetch', remote], cwd=handle.path, timeout=self.fetch_timeout)
        except GitError as e:
            raise FetchError(str(e)) from e
        if code != 0:
            raise FetchError(f"git fetch {remote} failed in {handle.path}: {err.strip()}")

        if self._remote_refs(handle, remote) == before:
            return FetchResult.UP_TO_DATE
        return FetchResult.UPDATED

    def resolve_revision(self, handle: RepositoryHandle, revision: str) -> str:
        """
        Resolve a revision such as "origin/main" to a commit hash.

        Raises:
            RevisionResolutionError: If the revision does not name a commit
        """
        out, _, code = self._run(
            ['rev-parse', '--verify', '--quiet', f'{revision}^{{commit}}'],
            cwd=handle.path,
        )
        if code != 0 or not out.strip():
            raise RevisionResolutionError(f"reference not found: {revision} in {handle.path}")
        return out.strip()

    def log(self, handle: RepositoryHandle, commit_id: str) -> Iterator[RawCommit]:
        """
        Walk history from `commit_id`, newest committer time first.

        The walk is lazy: records are parsed as git writes them, and the
        git process is stopped when the caller stops iterating.
        """
        cmd = [self.git, 'log', '-z', '--date=raw', f'--format={LOG_FORMAT}', commit_id, '--']
        logger.debug(f"Running command in '{handle.path}': {' '.join(cmd)}")

        with tempfile.TemporaryFile() as stderr:
            proc = subprocess.Popen(
                cmd,
                cwd=str(handle.path),
                stdout=subprocess.PIPE,
                stderr=stderr,
                text=True,
                encoding='utf-8',
                errors='replace',
            )
            finished = False
            try:
                buffer = ''
                while True:
                    chunk = proc.stdout.read(65536)
                    if not chunk:
                        break
                    buffer += chunk
                    *records, buffer = buffer.split(RECORD_SEP)
                    for record in records:
                        if record.strip():
                            yield parse_log_record(record)
                if buffer.strip():
                    yield parse_log_record(buffer)
                finished = True
            finally:
                if proc.poll() is None:
                    proc.kill()
                proc.stdout.close()
                proc.wait()

            if finished and proc.returncode != 0:
                stderr.seek(0)
                message = stderr.read().decode('utf-8', errors='replace').strip()
                raise GitError(f"git log failed in {handle.path}: {message}")

    def changed_paths(
        self, handle: RepositoryHandle, commit_id: str, parent_id: Optional[str] = None
    ) -> List[str]:
        """
        List files changed by a commit.

        Compared against `parent_id` when given; without a parent the
        commit is a root commit and every file it contains is listed.
        """
        if parent_id:
            args = ['diff-tree', '-r', '--name-only', '-z', parent_id, commit_id]
        else:
            args = ['diff-tree', '-r', '--name-only', '-z', '--root', '--no-commit-id', commit_id]

        out, err, code = self._run(args, cwd=handle.path)
        if code != 0:
            raise GitError(f"git diff-tree failed for {commit_id} in {handle.path}: {err.strip()}")
        return [p for p in out.split(RECORD_SEP) if p]
