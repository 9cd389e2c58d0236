"""Tests for the worklist resolution engine."""

import logging

import pytest

from registry.maven.repository import RepositoryScanner
from resolution.dependency import Dependency
from resolution.engine import ResolutionEngine
from resolution.errors import ResolutionError


@pytest.fixture
def scanner(sdk_dir):
    return RepositoryScanner(sdk_path=sdk_dir)


def _declared(scanner, *coordinates):
    """Declared dependencies loaded the way clients load them."""
    declared = {}
    for coordinate in coordinates:
        group, artifact, version = coordinate.split(":")
        dep = Dependency(group, artifact, version)
        scanner.find_candidate(dep)
        declared[dep.key] = dep
    return declared


def _widening_warnings(caplog):
    return [r for r in caplog.records
            if r.levelno == logging.WARNING and "No compatible versions" in r.getMessage()]


class TestSingleClient:
    """Resolution of one declaration."""

    def test_open_ended_stays_within_prefix(self, scanner, google_repo, make_artifact):
        make_artifact(google_repo, "com.example", "lib", ["1.2.3", "1.2.4", "1.3.0"])
        resolved = ResolutionEngine(scanner, _declared(scanner, "com.example:lib:1.2.3+")).resolve(False)
        assert list(resolved) == ["com.example:lib"]
        assert resolved["com.example:lib"].best_version == "1.2.4"

    def test_latest_picks_newest(self, scanner, google_repo, make_artifact):
        make_artifact(google_repo, "com.example", "lib", ["1.2.3", "1.3.0", "2.0.0"])
        resolved = ResolutionEngine(scanner, _declared(scanner, "com.example:lib:LATEST")).resolve(False)
        assert resolved["com.example:lib"].best_version == "2.0.0"

    def test_unknown_dependency_is_fatal(self, scanner):
        with pytest.raises(ResolutionError, match="com.example:absent:1.0"):
            ResolutionEngine(scanner, _declared(scanner, "com.example:absent:1.0")).resolve(True)

    def test_resolved_candidate_records_repository(self, scanner, google_repo, make_artifact):
        make_artifact(google_repo, "com.example", "lib", ["1.0"])
        resolved = ResolutionEngine(scanner, _declared(scanner, "com.example:lib:1.0")).resolve(False)
        assert resolved["com.example:lib"].repo_path == google_repo


class TestMultipleClients:
    """Reconciling overlapping and conflicting requests."""

    def test_open_range_is_refined_by_exact_request(self, scanner, google_repo, make_artifact):
        make_artifact(google_repo, "com.example", "lib", ["1.0.3", "1.0.5", "1.0.7"])
        declared = _declared(scanner, "com.example:lib:1.0+", "com.example:lib:1.0.5")
        resolved = ResolutionEngine(scanner, declared).resolve(False)
        assert len(resolved) == 1
        assert resolved["com.example:lib"].best_version == "1.0.5"

    def test_order_of_declarations_does_not_matter(self, scanner, google_repo, make_artifact):
        make_artifact(google_repo, "com.example", "lib", ["1.0.3", "1.0.5", "1.0.7"])
        declared = _declared(scanner, "com.example:lib:1.0.5", "com.example:lib:1.0+")
        resolved = ResolutionEngine(scanner, declared).resolve(False)
        assert resolved["com.example:lib"].best_version == "1.0.5"

    def test_two_open_ranges_meet_in_the_narrower(self, scanner, google_repo, make_artifact):
        make_artifact(google_repo, "com.example", "lib", ["1.0.0", "1.1.0", "1.1.4", "2.0.0"])
        declared = _declared(scanner, "com.example:lib:0+", "com.example:lib:1.1+")
        resolved = ResolutionEngine(scanner, declared).resolve(False)
        assert resolved["com.example:lib"].best_version == "1.1.4"

    def test_exclusive_versions_fail_without_use_latest(self, scanner, google_repo, make_artifact):
        make_artifact(google_repo, "com.example", "lib", ["1.0.0", "2.0.0"])
        declared = _declared(scanner, "com.example:lib:1.0.0", "com.example:lib:2.0.0")
        with pytest.raises(ResolutionError) as exc_info:
            ResolutionEngine(scanner, declared).resolve(False)
        assert "com.example:lib:1.0.0" in str(exc_info.value)
        assert "com.example:lib:2.0.0" in str(exc_info.value)

    def test_exclusive_versions_use_latest_warns_once(self, scanner, google_repo, make_artifact, caplog):
        make_artifact(google_repo, "com.example", "lib", ["1.0.0", "2.0.0"])
        declared = _declared(scanner, "com.example:lib:1.0.0", "com.example:lib:2.0.0")
        with caplog.at_level(logging.WARNING, logger="resolution.engine"):
            resolved = ResolutionEngine(scanner, declared).resolve(True)
        assert resolved["com.example:lib"].best_version == "2.0.0"
        assert len(_widening_warnings(caplog)) == 1


class TestTransitive:
    """Dependencies discovered through POMs."""

    def test_transitive_dependencies_are_resolved(self, scanner, google_repo, make_artifact):
        make_artifact(google_repo, "com.example", "app", ["1.0"],
                      dependencies={"1.0": [("com.example", "base", "2.0+")]})
        make_artifact(google_repo, "com.example", "base", ["2.0.0", "2.0.3"],
                      dependencies={"2.0.3": [("com.example", "core", "3.0")]})
        make_artifact(google_repo, "com.example", "core", ["3.0"])
        resolved = ResolutionEngine(scanner, _declared(scanner, "com.example:app:1.0")).resolve(False)
        assert {k: d.best_version for k, d in resolved.items()} == {
            "com.example:app": "1.0",
            "com.example:base": "2.0.3",
            "com.example:core": "3.0",
        }

    def test_transitive_request_narrows_declared_range(self, scanner, google_repo, make_artifact):
        make_artifact(google_repo, "com.example", "app", ["1.0"],
                      dependencies={"1.0": [("com.example", "base", "2.0.1")]})
        make_artifact(google_repo, "com.example", "base", ["2.0.0", "2.0.1", "2.0.2"])
        declared = _declared(scanner, "com.example:base:2.0+", "com.example:app:1.0")
        resolved = ResolutionEngine(scanner, declared).resolve(False)
        assert resolved["com.example:base"].best_version == "2.0.1"

    def test_shared_transitive_conflict_names_requesters(self, scanner, google_repo, make_artifact, caplog):
        make_artifact(google_repo, "com.example", "left", ["1.0"],
                      dependencies={"1.0": [("com.example", "base", "1.0")]})
        make_artifact(google_repo, "com.example", "right", ["1.0"],
                      dependencies={"1.0": [("com.example", "base", "2.0")]})
        make_artifact(google_repo, "com.example", "base", ["1.0", "2.0"])
        declared = _declared(scanner, "com.example:left:1.0", "com.example:right:1.0")
        with caplog.at_level(logging.WARNING, logger="resolution.engine"):
            resolved = ResolutionEngine(scanner, declared).resolve(True)
        assert resolved["com.example:base"].best_version == "2.0"
        warnings = _widening_warnings(caplog)
        assert len(warnings) == 1
        message = warnings[0].getMessage()
        assert "com.example:left:1.0" in message
        assert "com.example:right:1.0" in message
