"""
Commit domain object for ggl.

A CommitRecord is one commit retrieved from a configured repository.
Records are immutable and ordered globally by their author time.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Tuple
import json

from .repository import RepositoryRef


SHORT_HASH_LENGTH = 9


def abbreviate(commit_hash: str) -> str:
    """Return the first 9 hex characters of a commit hash."""
    return commit_hash[:SHORT_HASH_LENGTH]


@dataclass(frozen=True)
class Author:
    """Commit author with a timezone-aware timestamp."""
    name: str
    email: str
    when: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'email': self.email,
            'date': self.when.isoformat(),
        }


@dataclass(frozen=True)
class CommitRecord:
    """
    A commit together with the repository it came from.

    Attributes:
        repository: Repository the commit was read from
        hash: Full commit hash
        author: Author name, email and time
        parents: Parent hashes; more than one marks a merge commit
        message: Full commit message
    """

    repository: RepositoryRef
    hash: str
    author: Author
    parents: Tuple[str, ...] = ()
    message: str = ""

    @property
    def short_hash(self) -> str:
        return abbreviate(self.hash)

    @property
    def subject(self) -> str:
        """First line of the commit message."""
        return self.message.split('\n', 1)[0]

    @property
    def timestamp(self) -> datetime:
        """Author time, the global sort key."""
        return self.author.when

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'repository': self.repository.name,
            'commit': self.hash,
            'short_hash': self.short_hash,
            'author': self.author.to_dict(),
            'parents': list(self.parents),
            'subject': self.subject,
            'message': self.message,
        }

    def to_jsonl(self) -> str:
        """Convert to single-line JSON for streaming output."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        return f"{self.short_hash} in {self.repository.name} at {self.timestamp.isoformat()}"
