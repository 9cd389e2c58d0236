"""Per-client dependency files.

Each client keeps its declared (unresolved) dependencies in
``<settings>/JarDependencies<client>.xml``::

    <dependencies>
      <dependency>
        <groupId>com.example</groupId>
        <artifactId>lib</artifactId>
        <version>1.2+</version>
        <packageIds>extra-android-m2repository</packageIds>
        <repositories>/opt/repo /srv/repo</repositories>
      </dependency>
    </dependencies>

The version is the requested constraint, stored verbatim.
"""
from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from glob import escape, glob
from typing import Iterable, List, Optional

from constants import Constants
from .dependency import Dependency

logger = logging.getLogger(__name__)


@dataclass
class DependencyRecord:
    """One persisted ``<dependency>`` entry."""
    group_id: str
    artifact_id: str
    version: str
    package_ids: Optional[List[str]] = None
    repositories: Optional[List[str]] = None

    def to_dependency(self) -> Dependency:
        return Dependency(self.group_id, self.artifact_id, self.version,
                          package_ids=self.package_ids, repositories=self.repositories)


def dependency_file_name(settings_dir: str, client_name: str) -> str:
    """Path of the dependency file for ``client_name``."""
    return os.path.join(
        settings_dir,
        f"{Constants.DEPENDENCY_FILE_PREFIX}{client_name}{Constants.DEPENDENCY_FILE_EXTENSION}",
    )


def client_files(settings_dir: str) -> List[str]:
    """Dependency files of every client in ``settings_dir``, sorted by name."""
    pattern = os.path.join(escape(settings_dir), f"{Constants.DEPENDENCY_FILE_PREFIX}*")
    return sorted(p for p in glob(pattern) if os.path.isfile(p))


def _split_list(text: Optional[str]) -> Optional[List[str]]:
    if text is None:
        return None
    return [item for item in text.split(" ") if item]


def read_dependency_file(path: str) -> List[DependencyRecord]:
    """Read the records of one dependency file.

    Records missing a groupId, artifactId or version are skipped.

    Raises:
        ET.ParseError: If the file is not well-formed XML.
        OSError: If the file cannot be read.
    """
    root = ET.parse(path).getroot()
    records: List[DependencyRecord] = []
    for node in root.iter("dependency"):
        fields = {child.tag: (child.text or "").strip() for child in node}
        group = fields.get("groupId")
        artifact = fields.get("artifactId")
        version = fields.get("version")
        if not group or not artifact or not version:
            logger.warning("Skipping incomplete dependency record in %s", path)
            continue
        records.append(DependencyRecord(
            group_id=group,
            artifact_id=artifact,
            version=version,
            package_ids=_split_list(fields.get("packageIds")),
            repositories=_split_list(fields.get("repositories")),
        ))
    return records


def write_dependency_file(path: str, dependencies: Iterable[Dependency]) -> None:
    """Replace ``path`` with the given dependencies in declaration order."""
    root = ET.Element("dependencies")
    for dep in dependencies:
        node = ET.SubElement(root, "dependency")
        ET.SubElement(node, "groupId").text = dep.group
        ET.SubElement(node, "artifactId").text = dep.artifact
        ET.SubElement(node, "version").text = dep.version
        if dep.package_ids is not None:
            ET.SubElement(node, "packageIds").text = " ".join(dep.package_ids)
        if dep.repositories is not None:
            ET.SubElement(node, "repositories").text = " ".join(dep.repositories)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    tree = ET.ElementTree(root)
    ET.indent(tree)
    tree.write(path, encoding="utf-8", xml_declaration=True)
