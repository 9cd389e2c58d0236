"""Exceptions raised by the resolver."""


class JarResolverError(Exception):
    """Base class for resolver failures surfaced to the caller."""


class ConfigurationError(JarResolverError):
    """Raised when required configuration, such as the SDK path, is missing."""


class ResolutionError(JarResolverError):
    """Raised when a dependency cannot be resolved or deployed."""
