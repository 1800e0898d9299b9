"""
Domain layer for ggl.

Contains pure domain objects with no I/O or side effects:
- RepositoryRef: A repository taken from the configuration
- PathFilter: Changed-path filter attached to a repository
- CommitRecord: One commit read from a repository

These objects are immutable and provide serialization methods for
JSONL output.
"""

from .repository import RepositoryRef, PathFilter, INCLUDE, REJECT
from .commit import CommitRecord, Author, abbreviate, SHORT_HASH_LENGTH

__all__ = [
    'RepositoryRef',
    'PathFilter',
    'INCLUDE',
    'REJECT',
    'CommitRecord',
    'Author',
    'abbreviate',
    'SHORT_HASH_LENGTH',
]
