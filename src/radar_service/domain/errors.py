"""Error types raised by the radar services."""


class RadarError(Exception):
    """Base class for errors surfaced to API callers."""


class ValidationError(RadarError):
    """Input is malformed or out of range."""


class NotFoundError(RadarError):
    """A referenced entity does not exist."""


class ConflictError(RadarError):
    """A write would violate a uniqueness constraint."""


class StorageError(RadarError):
    """The persistence layer failed."""
