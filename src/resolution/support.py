"""Client-facing API for declaring, resolving and deploying dependencies.

Each client registers under a unique name and declares the artifacts it
needs. Declarations are persisted per client so that a later resolution sees
every client's constraints, not only those of the caller.
"""
from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from typing import Dict, Iterable, List, Optional

from constants import Constants
from registry.maven.repository import RepositoryScanner
from .dependency import Dependency
from .deployer import ArtifactDeployer, OverwriteConfirmation, delete_existing_file_or_directory
from .engine import ResolutionEngine
from .errors import ResolutionError
from .store import client_files, dependency_file_name, read_dependency_file, write_dependency_file

logger = logging.getLogger(__name__)

_INVALID_NAME_CHARS = frozenset('<>:"/\\|?*') | frozenset(chr(i) for i in range(32))


def validate_client_name(client_name: str) -> str:
    """Return ``client_name`` if it can be used inside a file name.

    Raises:
        ValueError: If the name is empty or contains invalid characters.
    """
    if not client_name or any(ch in _INVALID_NAME_CHARS for ch in client_name):
        raise ValueError(f"Invalid clientName: {client_name}")
    return client_name


class JarResolverClient:
    """Dependency declarations of one client plus access to shared resolution."""

    def __init__(
        self,
        client_name: str,
        sdk_path: Optional[str],
        settings_dir: str,
        extra_repositories: Optional[Iterable[str]] = None,
    ):
        self.client_name = validate_client_name(client_name)
        self.settings_dir = settings_dir
        self.scanner = RepositoryScanner(sdk_path=sdk_path, repositories=extra_repositories)
        self._client_dependencies: Dict[str, Dependency] = self.load_dependencies(False, keep_missing=True)

    @property
    def dependency_file_name(self) -> str:
        return dependency_file_name(self.settings_dir, self.client_name)

    @property
    def client_dependencies(self) -> Dict[str, Dependency]:
        """This client's declared dependencies keyed by ``Dependency.key``."""
        return dict(self._client_dependencies)

    def depend_on(
        self,
        group: str,
        artifact: str,
        version: str,
        package_ids: Optional[Iterable[str]] = None,
        repositories: Optional[Iterable[str]] = None,
    ) -> Dependency:
        """Declare a dependency for this client and persist it.

        The version may end with ``+`` ("or newer within the same prefix") or be
        ``LATEST``. Trailing zeros are implied, so ``1.0`` also matches ``1.0.0``.
        Only direct dependencies need declaring; transitive ones are found
        during resolution.
        """
        logger.debug(
            "DependOn - group: %s artifact: %s version: %s packageIds: %s repositories: %s",
            group, artifact, version,
            ", ".join(package_ids) if package_ids is not None else None,
            ", ".join(repositories) if repositories is not None else None,
        )
        dep = Dependency(group, artifact, version, package_ids=package_ids, repositories=repositories)
        if self.scanner.find_candidate(dep) is None:
            logger.warning("%s is not installed yet, keeping it unresolved", dep.key)
        self._client_dependencies[dep.key] = dep
        self.persist_dependencies()
        return dep

    def clear_dependencies(self) -> None:
        """Forget every dependency this client declared."""
        delete_existing_file_or_directory(self.dependency_file_name)
        self._client_dependencies = self.load_dependencies(False, keep_missing=True)

    def resolve_dependencies(self, use_latest: bool = False) -> Dict[str, Dependency]:
        """Resolve the dependencies declared by every client.

        Args:
            use_latest: Use the newest version of a conflicting dependency
                instead of raising ResolutionError.

        Returns:
            Resolved dependencies keyed by versionless key.
        """
        declared = self.load_dependencies(True, keep_missing=True)
        return ResolutionEngine(self.scanner, declared).resolve(use_latest)

    def copy_dependencies(
        self,
        dependencies: Dict[str, Dependency],
        dest_dir: str,
        confirmer: Optional[OverwriteConfirmation] = None,
    ) -> List[str]:
        """Copy resolved dependencies into ``dest_dir``, replacing older copies."""
        return ArtifactDeployer(self.scanner).copy_dependencies(dependencies, dest_dir, confirmer)

    def load_dependencies(self, all_clients: bool, keep_missing: bool = False) -> Dict[str, Dependency]:
        """Load persisted declarations.

        Args:
            all_clients: Load every client's file instead of only this client's.
            keep_missing: Keep dependencies that are not installed (unresolved)
                and skip unreadable files instead of raising ResolutionError.

        Returns:
            Dependencies keyed by ``Dependency.key``; the first declaration of a
            key wins.
        """
        files = client_files(self.settings_dir) if all_clients else [self.dependency_file_name]
        dependency_map: Dict[str, Dependency] = {}
        for dep_file in files:
            if not os.path.isfile(dep_file):
                continue
            try:
                records = read_dependency_file(dep_file)
            except (OSError, ET.ParseError) as e:
                if not keep_missing:
                    raise ResolutionError(f"Cannot read dependency file {dep_file}: {e}") from e
                logger.warning("Skipping unreadable dependency file %s: %s", dep_file, e)
                continue
            for record in records:
                for repo in record.repositories or []:
                    self.scanner.add_repository(repo)
                unresolved = record.to_dependency()
                dep = self.scanner.find_candidate(unresolved)
                if dep is None:
                    if not keep_missing:
                        raise ResolutionError(
                            "Cannot find candidate artifact for "
                            f"{record.group_id}:{record.artifact_id}:{record.version}"
                        )
                    dep = unresolved
                dependency_map.setdefault(dep.key, dep)
        return dependency_map

    def persist_dependencies(self) -> None:
        """Write this client's declarations to its dependency file."""
        write_dependency_file(self.dependency_file_name, self._client_dependencies.values())

    def reset_dependencies(self) -> None:
        """Delete the dependency files of every client in the settings directory."""
        for dep_file in client_files(self.settings_dir):
            delete_existing_file_or_directory(dep_file)
        self.clear_dependencies()


def register(
    client_name: str,
    sdk_path: Optional[str] = None,
    extra_repositories: Optional[Iterable[str]] = None,
    settings_dir: str = Constants.DEFAULT_SETTINGS_DIR,
) -> JarResolverClient:
    """Create the handle used by ``client_name`` to declare and resolve dependencies.

    ``sdk_path`` defaults to the ANDROID_HOME environment variable when needed.
    """
    return JarResolverClient(client_name, sdk_path, settings_dir, extra_repositories=extra_repositories)
