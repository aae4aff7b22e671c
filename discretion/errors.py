"""Exception hierarchy shared by the providers, the cache and the CLI."""
from __future__ import annotations


class DiscretionError(Exception):
    """Base class for errors raised by discretion."""


class ConfigurationError(DiscretionError):
    """Startup cannot continue (no credential, no reachable subscription)."""


class EnumerationError(DiscretionError):
    """Listing the secrets of one container failed.

    The inventory collector skips the container and keeps going.
    """

    def __init__(self, container: str, cause: BaseException | str | None = None):
        self.container = container
        self.cause = cause
        message = f"could not list secrets in {container!r}"
        if cause:
            message += f": {cause}"
        super().__init__(message)


class ResolutionError(DiscretionError):
    """Fetching a secret value from the backend failed."""

    def __init__(self, identifier: str, cause: BaseException | str | None = None):
        self.identifier = identifier
        self.cause = cause
        message = f"could not resolve {identifier!r}"
        if cause:
            message += f": {cause}"
        super().__init__(message)


class ClipboardError(DiscretionError):
    """The host has no usable clipboard mechanism."""
