"""Dependency entity and the version refinement rules used during resolution."""
from __future__ import annotations

import os
from typing import Iterable, List, Optional, Set, Tuple

from versioning.models import ResolutionMode, VersionSpec
from versioning.parser import compare_versions, ordering_key, parse_version_spec, satisfies


class Dependency:  # pylint: disable=too-many-instance-attributes
    """A requested artifact and the versions that could satisfy it.

    The requested ``version`` string is never rewritten. Resolution state lives
    in ``possible_versions`` (newest first) and ``repo_path``; narrowing from
    other requesters is kept as extra constraints so a later metadata load can
    not widen the range again.
    """

    def __init__(
        self,
        group: str,
        artifact: str,
        version: str,
        package_ids: Optional[Iterable[str]] = None,
        repositories: Optional[Iterable[str]] = None,
    ):
        self.group = group
        self.artifact = artifact
        self.version = version
        self.package_ids = list(package_ids) if package_ids is not None else None
        self.repositories = list(repositories) if repositories is not None else None
        self.repo_path: Optional[str] = None
        self.spec: VersionSpec = parse_version_spec(version)
        self._narrowing: List[VersionSpec] = []
        self._possible: List[str] = []
        self._available: List[str] = []
        self._removed: Set[Tuple[Optional[str], str]] = set()

    @property
    def key(self) -> str:
        """``group:artifact:version`` with the requested version."""
        return f"{self.group}:{self.artifact}:{self.version}"

    @property
    def versionless_key(self) -> str:
        """``group:artifact``, the same library regardless of version."""
        return f"{self.group}:{self.artifact}"

    @property
    def possible_versions(self) -> List[str]:
        """Acceptable versions still in play, newest first."""
        return list(self._possible)

    @property
    def has_possible_versions(self) -> bool:
        return bool(self._possible)

    @property
    def best_version(self) -> str:
        """Newest acceptable version, or an empty string if none is known."""
        return self._possible[0] if self._possible else ""

    @property
    def best_version_path(self) -> Optional[str]:
        """Directory of ``best_version`` inside ``repo_path``."""
        if not self.repo_path or not self.best_version:
            return None
        return os.path.join(self.repo_path, *self.group.split("."), self.artifact, self.best_version)

    def bind_repository(self, repo_path: str) -> None:
        """Point the dependency at a repository root.

        Versions loaded from a different root are dropped; removals recorded
        for any root are kept.
        """
        if repo_path != self.repo_path:
            self.repo_path = repo_path
            self._possible = []
            self._available = []

    def is_acceptable_version(self, version: str) -> bool:
        """Return True if ``version`` satisfies the request and every narrowing."""
        if self.spec.latest:
            if self._available and compare_versions(version, self._latest_available()) != 0:
                return False
        elif not satisfies(self.spec, version):
            return False
        return all(satisfies(bound, version) for bound in self._narrowing)

    def add_version(self, version: str) -> None:
        """Record a version listed in repository metadata if it is acceptable."""
        version = version.strip()
        if not version or (self.repo_path, version) in self._removed:
            return
        if version not in self._available:
            self._available.append(version)
        if self.spec.latest:
            acceptable = all(satisfies(bound, version) for bound in self._narrowing)
        else:
            acceptable = self.is_acceptable_version(version)
        if acceptable and version not in self._possible:
            self._possible.append(version)
            self._sort()

    def remove_possible_version(self, version: str) -> None:
        """Drop ``version`` for good, typically because its file is missing."""
        self._removed.add((self.repo_path, version))
        if version in self._possible:
            self._possible.remove(version)
        if version in self._available:
            self._available.remove(version)

    def refine_version_range(self, other: "Dependency") -> bool:
        """Narrow an open-ended request to the versions ``other`` also accepts.

        Returns:
            True if a non-empty range remains. On False nothing was changed.
        """
        if self.spec.mode is not ResolutionMode.OPEN_ENDED:
            return False
        bounds = other.narrowing_specs()
        if bounds is None:
            return False
        kept = [v for v in self._possible if all(satisfies(b, v) for b in bounds)]
        if not kept:
            return False
        self._possible = kept
        self._narrowing.extend(bounds)
        return True

    def narrowing_specs(self) -> Optional[List[VersionSpec]]:
        """Constraints another dependency must honour to agree with this one.

        A LATEST request pins to its current best version; None if unknown.
        """
        if self.spec.latest:
            if not self.best_version:
                return None
            own = parse_version_spec(self.best_version)
        else:
            own = self.spec
        return [own] + list(self._narrowing)

    def is_newer(self, other: "Dependency") -> bool:
        """Return True if this dependency resolves (or asks) for a newer version."""
        if (self.group, self.artifact) != (other.group, other.artifact):
            return False
        if self.best_version and other.best_version:
            result = compare_versions(self.best_version, other.best_version)
            if result:
                return result > 0
        return compare_requested(self, other) > 0

    def describe(self) -> str:
        """Human readable description used in diagnostics."""
        best = self.best_version or "none"
        return f"{self.key} (best version: {best}, repository: {self.repo_path or 'unresolved'})"

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"Dependency({self.key!r}, best_version={self.best_version!r})"

    def _latest_available(self) -> str:
        return max(self._available, key=ordering_key)

    def _sort(self) -> None:
        self._possible.sort(key=ordering_key, reverse=True)


def compare_requested(left: Dependency, right: Dependency) -> int:
    """Order two dependencies by the lowest version each one asks for.

    LATEST sorts above every concrete request.
    """
    if left.spec.latest or right.spec.latest:
        return int(left.spec.latest) - int(right.spec.latest)
    return compare_versions(left.spec.floor, right.spec.floor)
