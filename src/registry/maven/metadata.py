"""Readers for the Maven files found in a local repository.

Two files matter to the resolver: ``maven-metadata.xml`` next to the version
directories of an artifact, and the ``.pom`` of a concrete version which lists
its transitive dependencies.
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import List, Optional

from common.logging_utils import extra_context, is_debug_enabled

logger = logging.getLogger(__name__)

# Declared without a version, a POM dependency accepts whatever is installed.
ANY_VERSION = "+"
_SKIPPED_SCOPES = ("test",)


@dataclass
class PomDependency:
    """A dependency record read from a POM."""
    group_id: str
    artifact_id: str
    version: str


def _strip_namespaces(root: ET.Element) -> ET.Element:
    for elem in root.iter():
        if isinstance(elem.tag, str) and "}" in elem.tag:
            elem.tag = elem.tag.split("}", 1)[1]
    return root


def _parse(path: str) -> ET.Element:
    return _strip_namespaces(ET.parse(path).getroot())


def _text(node: Optional[ET.Element]) -> Optional[str]:
    if node is None or node.text is None:
        return None
    value = node.text.strip()
    return value or None


def read_metadata_versions(path: str) -> List[str]:
    """Return the versions listed in a ``maven-metadata.xml`` in file order.

    Raises:
        ET.ParseError: If the file is not well-formed XML.
        OSError: If the file cannot be read.
    """
    root = _parse(path)
    versions: List[str] = []
    for versions_elem in root.iter("versions"):
        for item in versions_elem.findall("version"):
            value = _text(item)
            if value and value not in versions:
                versions.append(value)
    if is_debug_enabled(logger):
        logger.debug("Read Maven metadata", extra=extra_context(
            event="function_exit", component="metadata", action="read_metadata_versions",
            target=path, count=len(versions)
        ))
    return versions


def read_pom_dependencies(path: str) -> List[PomDependency]:
    """Return the project-level dependencies declared in a POM.

    Entries without a groupId or artifactId are skipped, as are test-scoped
    ones. A missing version becomes ``+``.
    """
    root = _parse(path)
    result: List[PomDependency] = []
    dependencies = root.find("dependencies")
    if dependencies is None:
        return result
    for dependency in dependencies.findall("dependency"):
        group = _text(dependency.find("groupId"))
        artifact = _text(dependency.find("artifactId"))
        if group is None or artifact is None:
            logger.warning("Skipping incomplete dependency record in %s", path)
            continue
        scope = (_text(dependency.find("scope")) or "").lower()
        if scope in _SKIPPED_SCOPES:
            continue
        version = _text(dependency.find("version")) or ANY_VERSION
        result.append(PomDependency(group_id=group, artifact_id=artifact, version=version))
    return result
