"""Exceptions raised by the cleanup core."""


class StorageGcError(RuntimeError):
    """Base class for storage cleanup errors."""


class ConfigError(StorageGcError):
    """Raised when the cleanup configuration is missing or inconsistent."""


class FatalSnapshotError(StorageGcError):
    """Raised when live metadata cannot be read; nothing may be deleted."""


class PerItemDeleteTimeout(StorageGcError):
    """Raised when a single deletion exceeds its time ceiling."""


class StagingStatementError(StorageGcError):
    """Raised when the staging database rejects a drop statement."""
