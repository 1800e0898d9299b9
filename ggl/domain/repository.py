"""
Repository domain object for ggl.

RepositoryRef identifies one configured repository. It is created once
from the configuration file and never mutated afterwards.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple


INCLUDE = "include"
REJECT = "reject"


@dataclass(frozen=True)
class PathFilter:
    """
    Changed-path filter attached to a repository.

    A filter matches a commit when any of its paths is a substring of
    any file the commit touched.
    """
    filter_type: str
    paths: Tuple[str, ...] = ()

    def matches(self, changed_paths: Iterable[str]) -> bool:
        changed = list(changed_paths)
        return any(p in f for p in self.paths for f in changed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'filter_type': self.filter_type,
            'paths': list(self.paths),
        }


@dataclass(frozen=True)
class RepositoryRef:
    """
    A repository taken from the configuration.

    Attributes:
        name: Display name used in the output
        path: Location relative to the configuration root
        remote: Remote name, e.g. "origin"
        branch: Branch name on that remote
        fetch: Whether `--fetch` may refresh this repository
        filters: Optional changed-path filters, evaluated in order
    """
    name: str
    path: str
    remote: str = "origin"
    branch: str = "main"
    fetch: bool = False
    filters: Tuple[PathFilter, ...] = ()

    @property
    def revision(self) -> str:
        """The remote-tracking reference walked for this repository."""
        return f"{self.remote}/{self.branch}"

    def should_include(self, changed_paths: Iterable[str]) -> bool:
        """
        Decide whether a commit touching `changed_paths` is shown.

        Without filters every commit is shown. Otherwise the first filter
        that matches decides; a commit no filter matches is hidden.
        """
        if not self.filters:
            return True

        changed = list(changed_paths)
        for path_filter in self.filters:
            if path_filter.matches(changed):
                return path_filter.filter_type == INCLUDE
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'path': self.path,
            'remote': self.remote,
            'branch': self.branch,
            'fetch': self.fetch,
            'filters': [f.to_dict() for f in self.filters],
        }
