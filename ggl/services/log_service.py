"""
Log service for ggl.

Reads recent history from every configured repository and merges it
into one log ordered by author time, newest first.

Failures are never isolated per repository: the first error raised
for any repository aborts the whole aggregation.
"""

from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Union
import logging

from ..domain import Author, CommitRecord, RepositoryRef
from ..infra import FetchResult, GitBackend, GitClient, RawCommit

logger = logging.getLogger(__name__)

# Maximum number of commits walked per repository
PAGE_SIZE = 1000


class LogService:
    """
    Service for building the global log.

    Example:
        service = LogService()
        cutoff = datetime.now().astimezone() - timedelta(days=7)
        for commit in service.aggregate(config.repositories, config.root, cutoff):
            print(commit.short_hash, commit.subject)
    """

    def __init__(self, git_client: Optional[GitBackend] = None, page_size: int = PAGE_SIZE):
        """
        Initialize LogService.

        Args:
            git_client: Git backend (creates a GitClient if None)
            page_size: Maximum commits walked per repository
        """
        self.git = git_client or GitClient()
        self.page_size = page_size

    def fetch_repository(
        self,
        repo: RepositoryRef,
        root: Union[str, Path],
        cutoff: datetime,
        fetch: bool = False,
    ) -> List[CommitRecord]:
        """
        Read the recent commits of one repository.

        Args:
            repo: Repository to read
            root: Directory `repo.path` is relative to
            cutoff: Commits authored before this time are not returned
            fetch: Fetch from the remote first (only if `repo.fetch` allows it)

        Returns:
            Commits in walk order (committer time, newest first)
        """
        if cutoff.tzinfo is None:
            cutoff = cutoff.astimezone()

        handle = self.git.open(Path(root) / repo.path)

        if fetch and repo.fetch:
            logger.info(f"Fetching {repo.name}: {repo.revision}")
            if self.git.fetch(handle, repo.remote) is FetchResult.UP_TO_DATE:
                logger.info("  already up-to-date")

        commit_id = self.git.resolve_revision(handle, repo.revision)

        commits: List[CommitRecord] = []
        walked = 0
        history = self.git.log(handle, commit_id)
        try:
            for raw in history:
                # Walk order is by committer time, so the first commit
                # authored before the cutoff ends the walk.
                if raw.author_time < cutoff:
                    break
                if walked >= self.page_size:
                    logger.warning(
                        f"{repo.name}: stopped after {self.page_size} commits, "
                        f"older commits since {cutoff:%Y-%m-%d} are not shown"
                    )
                    break
                walked += 1

                if repo.filters:
                    parent = raw.parents[0] if raw.parents else None
                    if not repo.should_include(self.git.changed_paths(handle, raw.hash, parent)):
                        continue

                commits.append(_to_record(repo, raw))
        finally:
            close = getattr(history, 'close', None)
            if close is not None:
                close()

        logger.debug(f"{repo.name}: {len(commits)} commits since {cutoff.isoformat()}")
        return commits

    def aggregate(
        self,
        repos: Iterable[RepositoryRef],
        root: Union[str, Path],
        cutoff: datetime,
        fetch: bool = False,
    ) -> List[CommitRecord]:
        """
        Build the global log across `repos`.

        Repositories are read in the given order and the first failure
        propagates. The result is sorted by author time, newest first;
        the sort is stable, so equal times keep repository order and
        then walk order.
        """
        all_commits: List[CommitRecord] = []
        for repo in repos:
            all_commits.extend(self.fetch_repository(repo, root, cutoff, fetch))

        all_commits.sort(key=lambda c: c.timestamp, reverse=True)
        return all_commits


def _to_record(repo: RepositoryRef, raw: RawCommit) -> CommitRecord:
    return CommitRecord(
        repository=repo,
        hash=raw.hash,
        author=Author(name=raw.author_name, email=raw.author_email, when=raw.author_time),
        parents=tuple(raw.parents),
        message=raw.message,
    )
