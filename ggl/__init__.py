"""
ggl - global git log.

Shows what changed, everywhere, recently: commits from an explicit set of
git repositories merged into one log ordered by author time.

Quick Start:
    from datetime import datetime, timedelta
    import ggl

    config = ggl.load_config("config.yaml")
    cutoff = datetime.now().astimezone() - timedelta(days=7)

    service = ggl.LogService()
    for commit in service.aggregate(config.repositories, config.root, cutoff):
        print(ggl.format_commit(commit))

Domain Objects:
    RepositoryRef - A repository taken from the configuration
    CommitRecord - One commit read from a repository

Services:
    LogService - Per-repository retrieval and global aggregation
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    RepositoryRef,
    PathFilter,
    CommitRecord,
    Author,
)

# Infrastructure
from .infra import GitBackend, GitClient

# Services
from .services import LogService, PAGE_SIZE

# Rendering
from .render import format_commit, format_date

# Configuration
from .config import Config, load_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "RepositoryRef",
    "PathFilter",
    "CommitRecord",
    "Author",
    # Infrastructure
    "GitBackend",
    "GitClient",
    # Services
    "LogService",
    "PAGE_SIZE",
    # Rendering
    "format_commit",
    "format_date",
    # Configuration
    "Config",
    "load_config",
]
