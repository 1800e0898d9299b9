"""
Service layer for ggl.

Contains business logic that orchestrates domain objects and infrastructure:
- LogService: Per-repository log retrieval and global aggregation

Services are the primary API for the command line to use.
"""

from .log_service import LogService, PAGE_SIZE

__all__ = [
    'LogService',
    'PAGE_SIZE',
]
