"""Deploy resolved artifacts into a destination directory.

The destination only ever holds one copy of each artifact. Older copies are
detected by file name (``<artifact>-<version>...``) and removed once the caller
confirms, and an up-to-date copy is left alone so reruns write nothing.
"""
from __future__ import annotations

import logging
import os
import re
import shutil
import stat
from typing import Callable, List, Mapping, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from versioning.parser import compare_versions
from .dependency import Dependency
from .errors import ResolutionError

logger = logging.getLogger(__name__)

# (old, new) -> True to replace the old copy
OverwriteConfirmation = Callable[[Dependency, Dependency], bool]

_VERSION_START = re.compile(r"^[0-9]")


def delete_existing_file_or_directory(path: str) -> None:
    """Delete a file or directory tree if it exists, clearing read-only flags."""
    if os.path.isdir(path) and not os.path.islink(path):
        os.chmod(path, os.stat(path).st_mode | stat.S_IWRITE)
        for entry in os.listdir(path):
            delete_existing_file_or_directory(os.path.join(path, entry))
        os.rmdir(path)
    elif os.path.lexists(path):
        if not os.path.islink(path):
            os.chmod(path, os.stat(path).st_mode | stat.S_IWRITE)
        os.remove(path)


class ArtifactDeployer:
    """Copies resolved dependencies out of their repositories.

    Args:
        scanner: Object providing ``find_artifact_file(dep)``.
    """

    def __init__(self, scanner):
        self.scanner = scanner

    def copy_dependencies(
        self,
        dependencies: Mapping[str, Dependency],
        dest_dir: str,
        confirmer: Optional[OverwriteConfirmation] = None,
    ) -> List[str]:
        """Copy every resolved dependency into ``dest_dir``.

        Args:
            dependencies: Resolved candidates keyed by versionless key.
            dest_dir: Destination directory, created if missing.
            confirmer: Asked once per artifact before older copies are removed.
                None means removal is always allowed.

        Returns:
            Destination paths that were written.

        Raises:
            ResolutionError: If a resolved artifact file is missing from its repository.
        """
        os.makedirs(dest_dir, exist_ok=True)
        written: List[str] = []
        for dep in dependencies.values():
            if not self._remove_old_copies(dep, dest_dir, confirmer):
                logger.info("Keeping existing copy of %s, replacement declined", dep.versionless_key)
                continue
            path = self._copy(dep, dest_dir)
            if path is not None:
                written.append(path)
        return written

    def find_existing_versions(self, dep: Dependency, dest_dir: str) -> List[tuple]:
        """Return ``(path, version)`` for each copy of ``dep``'s artifact in ``dest_dir``."""
        prefix = f"{dep.artifact}-"
        found = []
        for entry in sorted(os.listdir(dest_dir)):
            if not entry.startswith(prefix):
                continue
            if any(entry.endswith(ext) for ext in Constants.SIDECAR_EXTENSIONS):
                continue
            path = os.path.join(dest_dir, entry)
            # unpacked archives are directories without an extension
            name = entry if os.path.isdir(path) else os.path.splitext(entry)[0]
            # the whole remainder, qualifiers such as -beta1 included
            version = name[len(prefix):]
            if _VERSION_START.match(version):
                found.append((path, version))
        return found

    def _remove_old_copies(
        self,
        dep: Dependency,
        dest_dir: str,
        confirmer: Optional[OverwriteConfirmation],
    ) -> bool:
        """Remove stale copies of ``dep``. Returns False if the caller declined."""
        approved: Optional[bool] = None
        for path, version in self.find_existing_versions(dep, dest_dir):
            old = Dependency(dep.group, dep.artifact, version,
                             package_ids=dep.package_ids, repositories=dep.repositories)
            old.add_version(version)
            if compare_versions(old.best_version, dep.best_version) == 0:
                continue
            if approved is None:
                approved = confirmer is None or bool(confirmer(old, dep))
            if not approved:
                return False
            logger.info("Removing %s, replaced by %s", path, dep.key)
            delete_existing_file_or_directory(path)
        return True

    def _copy(self, dep: Dependency, dest_dir: str) -> Optional[str]:
        source = self.scanner.find_artifact_file(dep)
        if source is None:
            raise ResolutionError(f"Cannot find artifact for {dep}")
        extension = os.path.splitext(source)[1]
        base_name = f"{dep.artifact}-{dep.best_version}"
        dest_name = os.path.join(dest_dir, base_name + Constants.DEPLOYED_EXTENSIONS.get(extension, extension))
        dest_unpacked = os.path.join(dest_dir, base_name)
        existing = (dest_name if os.path.isfile(dest_name)
                    else dest_unpacked if os.path.isdir(dest_unpacked) else None)
        if existing is not None:
            if os.path.getmtime(existing) >= os.path.getmtime(source):
                if is_debug_enabled(logger):
                    logger.debug("Destination up to date", extra=extra_context(
                        event="decision", component="deployer", action="copy",
                        outcome="skipped", target=existing
                    ))
                return None
            delete_existing_file_or_directory(existing)
        shutil.copy2(source, dest_name)
        logger.info("Copied %s to %s", source, dest_name)
        return dest_name
