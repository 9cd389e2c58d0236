"""Dependency resolution and deployment for local Maven repositories.

The client API lives in ``resolution.support``; it is not imported here so
that the repository scanner can depend on the entity model without a cycle.
"""

from .dependency import Dependency
from .deployer import ArtifactDeployer
from .engine import ResolutionEngine
from .errors import ConfigurationError, JarResolverError, ResolutionError

__all__ = [
    "ArtifactDeployer",
    "ConfigurationError",
    "Dependency",
    "JarResolverError",
    "ResolutionEngine",
    "ResolutionError",
]
