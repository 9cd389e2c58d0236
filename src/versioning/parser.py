"""Version string parsing, comparison and constraint matching.

Versions are dot-separated components. Components that parse as integers
compare numerically; a pair of components that both fail integer parsing
compares ordinally; a non-numeric component sorts below a numeric one. Missing
trailing components count as ``0``.
"""

from functools import cmp_to_key
from typing import Optional, Tuple

from constants import Constants
from .models import ResolutionMode, VersionSpec


def _split(version: str) -> Tuple[str, ...]:
    text = version.strip()
    if not text:
        return ()
    return tuple(part.strip() for part in text.split("."))


def _as_int(component: str) -> Optional[int]:
    if component.isdecimal():
        return int(component)
    return None


def _compare_components(left: str, right: str) -> int:
    left_num = _as_int(left)
    right_num = _as_int(right)
    if left_num is not None and right_num is not None:
        return (left_num > right_num) - (left_num < right_num)
    if left_num is None and right_num is None:
        return (left > right) - (left < right)
    # malformed sorts below well-formed
    return -1 if left_num is None else 1


def parse_version_spec(text: str) -> VersionSpec:
    """Parse a requested version constraint.

    ``1.2.3`` is exact, ``1.2.3+`` is open ended, ``LATEST`` is latest.
    ``1.2.+`` fixes the whole ``1.2`` prefix and leaves the next component free,
    so it is stored as ``1.2.0+``.
    Never raises; unusual text becomes an exact constraint on that text.
    """
    raw = text if text is not None else ""
    stripped = raw.strip()
    if stripped.upper() == Constants.LATEST:
        return VersionSpec(raw=raw, components=(), open_ended=False, latest=True)
    open_ended = stripped.endswith("+")
    if not open_ended:
        return VersionSpec(raw=raw, components=_split(stripped), open_ended=False, latest=False)
    body = stripped[:-1]
    components = _split(body.rstrip("."))
    if body.endswith("."):
        components += ("0",)
    return VersionSpec(raw=raw, components=components, open_ended=True, latest=False)


def compare_versions(left: str, right: str) -> int:
    """Compare two concrete version strings.

    Returns:
        -1, 0 or 1 as ``left`` is lower than, equal to or greater than ``right``.
    """
    left_parts = _split(left)
    right_parts = _split(right)
    for i in range(max(len(left_parts), len(right_parts))):
        lhs = left_parts[i] if i < len(left_parts) else "0"
        rhs = right_parts[i] if i < len(right_parts) else "0"
        result = _compare_components(lhs, rhs)
        if result:
            return result
    return 0


ordering_key = cmp_to_key(compare_versions)


def satisfies(constraint: VersionSpec, candidate: str) -> bool:
    """Return True if ``candidate`` meets the constraint.

    Open-ended constraints are prefix bounded: ``1.2.3+`` requires the ``1.2``
    prefix and a third component of at least ``3``. ``0+`` accepts anything.
    LATEST needs the set of known versions and is decided by the caller; here
    it accepts every candidate.
    """
    mode = constraint.mode
    if mode is ResolutionMode.LATEST:
        return True
    if mode is ResolutionMode.EXACT:
        return compare_versions(constraint.floor, candidate) == 0

    bound = constraint.components
    if not bound:
        return True
    candidate_parts = _split(candidate)
    for i, component in enumerate(bound[:-1]):
        other = candidate_parts[i] if i < len(candidate_parts) else "0"
        if _compare_components(component, other) != 0:
            return False
    prefix_len = len(bound) - 1
    tail = ".".join(candidate_parts[prefix_len:]) or "0"
    return compare_versions(tail, bound[-1]) >= 0


def tokenize_coordinate(token: str) -> Tuple[str, str, str]:
    """Split ``group:artifact:version`` into its parts.

    Raises:
        ValueError: If the coordinate does not have exactly three parts.
    """
    parts = [p.strip() for p in token.strip().split(":")]
    if len(parts) != 3 or not all(parts):
        raise ValueError(f"Expected group:artifact:version, got '{token}'")
    return parts[0], parts[1], parts[2]
