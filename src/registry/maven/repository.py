"""Local Maven repository scanner.

Finds the newest installed version of a dependency across an ordered set of
repository roots. A root only counts when it both lists the version in its
metadata and holds a packaging file for it.
"""
from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from typing import Iterable, List, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from resolution.dependency import Dependency
from resolution.errors import ConfigurationError, ResolutionError
from .metadata import read_metadata_versions, read_pom_dependencies

logger = logging.getLogger(__name__)


class RepositoryScanner:
    """Searches repository roots for installed artifact versions."""

    def __init__(
        self,
        sdk_path: Optional[str] = None,
        repositories: Optional[Iterable[str]] = None,
        include_defaults: bool = True,
    ):
        self._sdk_path = sdk_path
        self._repositories: List[str] = []
        if include_defaults:
            for repo in Constants.DEFAULT_REPOSITORIES:
                self.add_repository(repo)
        for repo in repositories or []:
            self.add_repository(repo)

    @property
    def sdk_path(self) -> Optional[str]:
        """Configured SDK path, defaulting to the ANDROID_HOME environment variable."""
        if not self._sdk_path:
            self._sdk_path = os.environ.get(Constants.ENV_SDK_PATH)
        return self._sdk_path

    @property
    def repositories(self) -> List[str]:
        return list(self._repositories)

    def add_repository(self, path: str) -> None:
        """Append a root to the search order unless it is already present."""
        if path and path not in self._repositories:
            self._repositories.append(path)

    def expand_root(self, root: str) -> str:
        """Substitute the SDK placeholder in a repository root.

        Raises:
            ConfigurationError: If the root needs the SDK path and none is set.
        """
        if Constants.SDK_PLACEHOLDER not in root:
            return root
        sdk = self.sdk_path
        if not sdk:
            raise ConfigurationError(Constants.SDK_CONFIGURATION_ERROR)
        return os.path.normpath(root.replace(Constants.SDK_PLACEHOLDER, sdk))

    def roots_for(self, dep: Dependency) -> List[str]:
        """Ordered roots searched for ``dep``: registered roots, then its own."""
        roots = list(self._repositories)
        for repo in dep.repositories or []:
            if repo not in roots:
                roots.append(repo)
        return roots

    def find_candidate(self, dep: Dependency) -> Optional[Dependency]:
        """Load installed versions of ``dep`` from the first root that has one.

        Returns:
            ``dep`` itself with ``repo_path`` bound and ``best_version`` backed by
            a file on disk, or None if no root holds an acceptable version.
        """
        roots = self.roots_for(dep)
        for root in roots:
            repo_path = self.expand_root(root)
            if not os.path.isdir(repo_path):
                logger.info("Repository not found: %s", os.path.abspath(repo_path))
                continue
            if self.find_in_repository(repo_path, dep) is not None:
                return dep
        logger.warning(
            "Unable to find dependency %s %s %s in (%s)",
            dep.group, dep.artifact, dep.version, ", ".join(roots),
        )
        return None

    def find_in_repository(self, repo_path: str, dep: Dependency) -> Optional[Dependency]:
        """Look for ``dep`` in a single repository root."""
        artifact_dir = os.path.join(repo_path, *dep.group.split("."), dep.artifact)
        metadata_file = os.path.join(artifact_dir, Constants.METADATA_FILE)
        if not os.path.isfile(metadata_file):
            return None
        try:
            versions = read_metadata_versions(metadata_file)
        except (OSError, ET.ParseError) as e:
            logger.warning("Couldn't read metadata file %s: %s", metadata_file, e)
            return None

        dep.bind_repository(repo_path)
        for version in versions:
            dep.add_version(version)

        while dep.has_possible_versions:
            if self.find_artifact_file(dep) is not None:
                if is_debug_enabled(logger):
                    logger.debug("Candidate found", extra=extra_context(
                        event="decision", component="repository", action="find_candidate",
                        outcome="found", target=dep.versionless_key, version=dep.best_version
                    ))
                return dep
            logger.debug("%s version %s not available, ignoring.", dep.key, dep.best_version)
            dep.remove_possible_version(dep.best_version)
        return None

    def find_artifact_file(self, dep: Dependency) -> Optional[str]:
        """Return the packaging file of ``dep.best_version`` if one exists."""
        base_dir = dep.best_version_path
        if base_dir is None:
            return None
        for ext in Constants.PACKAGING:
            fname = os.path.join(base_dir, f"{dep.artifact}-{dep.best_version}{ext}")
            if os.path.isfile(fname):
                return fname
        return None

    def get_dependencies(self, dep: Dependency) -> List[Dependency]:
        """Return the transitive dependencies listed in the POM of ``dep.best_version``.

        Each entry is mapped to an installed candidate.

        Raises:
            ResolutionError: If a listed dependency is not installed anywhere.
        """
        if not dep.best_version or dep.best_version_path is None:
            logger.error("No compatible versions of %s given the set of dependencies", dep.key)
            return []
        basename = f"{dep.artifact}-{dep.best_version}{Constants.POM_EXTENSION}"
        pom_file = os.path.join(dep.best_version_path, basename)
        if not os.path.isfile(pom_file):
            logger.debug("No POM for %s at %s, assuming no dependencies", dep.key, pom_file)
            return []
        logger.debug(
            "Reading POM %s for %s, versions: %s",
            pom_file, dep.key, ", ".join(dep.possible_versions),
        )
        try:
            records = read_pom_dependencies(pom_file)
        except (OSError, ET.ParseError) as e:
            raise ResolutionError(f"Cannot read POM {pom_file}: {e}") from e

        found: List[Dependency] = []
        for record in records:
            candidate = self.find_candidate(
                Dependency(record.group_id, record.artifact_id, record.version)
            )
            if candidate is None:
                raise ResolutionError(
                    "Cannot find candidate artifact for "
                    f"{record.group_id}:{record.artifact_id}:{record.version}"
                )
            found.append(candidate)
        return found
