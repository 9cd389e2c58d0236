"""Data models for version constraints."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class ResolutionMode(Enum):
    """How a constraint selects versions."""
    EXACT = "exact"
    OPEN_ENDED = "open_ended"
    LATEST = "latest"


@dataclass(frozen=True)
class VersionSpec:
    """Normalized representation of a version constraint."""
    raw: str
    components: Tuple[str, ...]
    open_ended: bool
    latest: bool

    @property
    def mode(self) -> ResolutionMode:
        """Return the resolution mode derived from the flags."""
        if self.latest:
            return ResolutionMode.LATEST
        if self.open_ended:
            return ResolutionMode.OPEN_ENDED
        return ResolutionMode.EXACT

    @property
    def floor(self) -> str:
        """Lowest version this constraint can match, without the '+' marker."""
        return ".".join(self.components)
