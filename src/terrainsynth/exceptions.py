"""Custom exceptions for terrain synthesis."""


class TerrainError(Exception):
    """Base exception for terrain errors."""

    pass


class TerrainFormatError(TerrainError, ValueError):
    """Raised when a saved terrain file is missing data or malformed."""

    pass
