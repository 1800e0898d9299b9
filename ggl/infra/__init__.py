"""
Infrastructure layer for ggl.

Contains abstractions for external systems:
- GitBackend: The git capability the log service consumes
- GitClient: GitBackend implemented with the git binary

These provide clean interfaces that can be replaced for testing.
"""

from .git_client import (
    GitBackend,
    GitClient,
    RepositoryHandle,
    RawCommit,
    FetchResult,
    parse_raw_date,
)

__all__ = [
    'GitBackend',
    'GitClient',
    'RepositoryHandle',
    'RawCommit',
    'FetchResult',
    'parse_raw_date',
]
