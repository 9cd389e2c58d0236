"""Worklist resolution of declared and transitive dependencies.

Every pass walks the current worklist and classifies each entry against the
candidate chosen so far for its versionless key:

1. no candidate yet: scan the repositories and adopt what is found;
2. the candidate's version is acceptable: keep it, upgrading to the entry if
   the entry resolves newer and the candidate accepts that version too;
3. conflict: narrow an open-ended side and re-queue every declaration of the
   key, or fall back to the newer side when ``use_latest`` is set.

Entries settled by rules 1 and 2 (and the rule 3 fallback) queue the
transitive dependencies of the winning candidate for the next pass. The loop
ends when a pass queues nothing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Set

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from versioning.models import ResolutionMode
from .dependency import Dependency, compare_requested
from .errors import ResolutionError

logger = logging.getLogger(__name__)


@dataclass
class ResolutionState:
    """Transient state owned by a single ``resolve`` call."""
    candidates: Dict[str, Dependency] = field(default_factory=dict)
    # versionless key -> keys of the dependencies that pulled it in
    required_by: Dict[str, Set[str]] = field(default_factory=dict)
    warned: Set[str] = field(default_factory=set)
    passes: int = 0


class ResolutionEngine:
    """Computes one consistent version per versionless key.

    Args:
        scanner: Object providing ``find_candidate(dep)`` and
            ``get_dependencies(dep)``, normally a RepositoryScanner.
        declared: Declared dependencies of every client keyed by ``Dependency.key``.
    """

    def __init__(self, scanner, declared: Mapping[str, Dependency]):
        self.scanner = scanner
        self.declared = dict(declared)

    def resolve(self, use_latest: bool = False) -> Dict[str, Dependency]:
        """Run passes until no dependency is left unresolved.

        Args:
            use_latest: On an irreconcilable conflict use the newer dependency
                instead of failing.

        Returns:
            The winning candidate for every versionless key.

        Raises:
            ResolutionError: If a dependency cannot be found or a conflict can
                not be reconciled.
        """
        state = ResolutionState()
        worklist: List[Dependency] = list(self.declared.values())
        while worklist:
            state.passes += 1
            if state.passes > Constants.MAX_RESOLUTION_PASSES:
                raise ResolutionError(
                    f"Resolution did not converge after {Constants.MAX_RESOLUTION_PASSES} passes"
                )
            if is_debug_enabled(logger):
                logger.debug("Resolution pass", extra=extra_context(
                    event="loop", component="engine", action="resolve",
                    count=len(worklist), target=str(state.passes)
                ))
            next_pass: Dict[str, Dependency] = {}
            for dep in worklist:
                self._process(dep, state, next_pass, use_latest)
            worklist = list(next_pass.values())
        return state.candidates

    def _process(
        self,
        dep: Dependency,
        state: ResolutionState,
        next_pass: Dict[str, Dependency],
        use_latest: bool,
    ) -> None:
        vkey = dep.versionless_key
        candidate = state.candidates.get(vkey)

        if candidate is None:
            found = dep if dep.has_possible_versions and dep.repo_path else self.scanner.find_candidate(dep)
            if found is None:
                raise ResolutionError(f"Cannot resolve {dep}")
            state.candidates[vkey] = found
        elif candidate is dep or dep.is_acceptable_version(candidate.best_version):
            if (candidate is not dep and dep.best_version and dep.is_newer(candidate)
                    and candidate.is_acceptable_version(dep.best_version)):
                state.candidates[vkey] = dep
        elif self._refine(dep, candidate):
            for declared in self.declared.values():
                if declared.versionless_key == vkey and declared.key not in next_pass:
                    next_pass[declared.key] = declared
            if dep.key not in next_pass:
                next_pass[dep.key] = dep
            return
        elif use_latest:
            newer = dep if dep.is_newer(candidate) else candidate
            if not newer.has_possible_versions and self.scanner.find_candidate(newer) is None:
                raise ResolutionError(f"Cannot resolve {newer}")
            state.candidates[vkey] = newer
            self._warn_widened(newer, state)
        else:
            raise ResolutionError(f"Cannot resolve {dep} and {candidate}")

        self._queue_transitive(state.candidates[vkey], state, next_pass)

    @staticmethod
    def _refine(dep: Dependency, candidate: Dependency) -> bool:
        """Narrow whichever open-ended side asks for the older version.

        A refinement that leaves the possible versions unchanged does not
        count, so every successful refinement shrinks some range.
        """
        narrowed = False
        if dep.spec.mode is ResolutionMode.OPEN_ENDED and compare_requested(dep, candidate) <= 0:
            narrowed = _narrow(dep, candidate)
        if candidate.spec.mode is ResolutionMode.OPEN_ENDED and compare_requested(candidate, dep) <= 0:
            narrowed = _narrow(candidate, dep) or narrowed
        return narrowed

    def _queue_transitive(
        self,
        current: Dependency,
        state: ResolutionState,
        next_pass: Dict[str, Dependency],
    ) -> None:
        for child in self.scanner.get_dependencies(current):
            state.required_by.setdefault(child.versionless_key, set()).add(current.key)
            if child.key in next_pass:
                continue
            logger.debug("For %s adding dep %s", current.key, child.key)
            next_pass[child.key] = child

    @staticmethod
    def _warn_widened(dep: Dependency, state: ResolutionState) -> None:
        vkey = dep.versionless_key
        if vkey in state.warned:
            return
        state.warned.add(vkey)
        lines = ["Found dependencies:"]
        for key in sorted(state.required_by):
            lines.append(f"{key} required by ({', '.join(sorted(state.required_by[key]))})")
        parents = state.required_by.get(vkey)
        requesters = ", ".join(sorted(parents)) if parents else "declared"
        logger.warning(
            "No compatible versions of %s required by (%s), will try using the latest version %s\n%s",
            vkey, requesters, dep.best_version, "\n".join(lines),
        )


def _narrow(target: Dependency, other: Dependency) -> bool:
    before = target.possible_versions
    return target.refine_version_range(other) and target.possible_versions != before
