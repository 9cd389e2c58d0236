"""Shared fixtures: throwaway local Maven repositories."""
from __future__ import annotations

import os
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from constants import Constants

METADATA_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<metadata>
  <groupId>{group}</groupId>
  <artifactId>{artifact}</artifactId>
  <versioning>
    <release>{release}</release>
    <versions>
{versions}
    </versions>
  </versioning>
</metadata>
"""

POM_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <groupId>{group}</groupId>
  <artifactId>{artifact}</artifactId>
  <version>{version}</version>
  <dependencies>
{dependencies}
  </dependencies>
</project>
"""


def write_artifact(
    repo: str,
    group: str,
    artifact: str,
    versions: Iterable[str],
    packaging: str = ".aar",
    missing: Iterable[str] = (),
    dependencies: Optional[Dict[str, List[Tuple[str, str, str]]]] = None,
) -> str:
    """Install ``group:artifact`` into ``repo``.

    Every version is listed in the metadata; versions in ``missing`` get no
    packaging file. ``dependencies`` maps a version to the
    ``(group, artifact, version)`` entries written to its POM.
    """
    versions = list(versions)
    artifact_dir = os.path.join(repo, *group.split("."), artifact)
    os.makedirs(artifact_dir, exist_ok=True)
    listed = "\n".join(f"      <version>{v}</version>" for v in versions)
    with open(os.path.join(artifact_dir, Constants.METADATA_FILE), "w", encoding="utf-8") as fh:
        fh.write(METADATA_TEMPLATE.format(
            group=group, artifact=artifact, release=versions[-1] if versions else "", versions=listed
        ))
    for version in versions:
        version_dir = os.path.join(artifact_dir, version)
        os.makedirs(version_dir, exist_ok=True)
        if version not in missing:
            with open(os.path.join(version_dir, f"{artifact}-{version}{packaging}"), "wb") as fh:
                fh.write(f"{group}:{artifact}:{version}".encode("utf-8"))
        deps = (dependencies or {}).get(version)
        if deps:
            entries = "\n".join(
                "    <dependency>\n"
                f"      <groupId>{g}</groupId>\n"
                f"      <artifactId>{a}</artifactId>\n"
                f"      <version>{v}</version>\n"
                "    </dependency>"
                for g, a, v in deps
            )
            with open(os.path.join(version_dir, f"{artifact}-{version}.pom"), "w", encoding="utf-8") as fh:
                fh.write(POM_TEMPLATE.format(group=group, artifact=artifact, version=version,
                                             dependencies=entries))
    return artifact_dir


@pytest.fixture(autouse=True)
def _no_ambient_sdk(monkeypatch):
    """Tests never pick up the developer's own SDK."""
    monkeypatch.delenv(Constants.ENV_SDK_PATH, raising=False)


@pytest.fixture
def sdk_dir(tmp_path):
    """An SDK root with an empty Google repository."""
    sdk = tmp_path / "sdk"
    (sdk / "extras" / "google" / "m2repository").mkdir(parents=True)
    return str(sdk)


@pytest.fixture
def google_repo(sdk_dir):
    """Path of the default Google repository inside ``sdk_dir``."""
    return os.path.join(sdk_dir, "extras", "google", "m2repository")


@pytest.fixture
def make_artifact():
    """Return the ``write_artifact`` helper."""
    return write_artifact
