from __future__ import annotations


class MigrationError(Exception):
    """Base class for release migration errors."""


class NotFoundError(MigrationError):
    """Raised when a requested release, asset or tag does not exist on the host."""


class ValidationError(MigrationError):
    """Raised when a config, tag, or host payload fails validation."""


class ReleaseHostError(MigrationError):
    """Raised when a release host operation fails for any reason other than absence."""
