from __future__ import annotations

from typing import Optional


class XpqError(Exception):
    """Base class for every error a command reports to the user."""


class MetadataError(XpqError):
    """File metadata is unreadable or the schema is malformed."""


class AssemblyError(XpqError):
    """Repetition/definition levels are inconsistent with the schema."""

    def __init__(self, message: str, row_group: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.row_group = row_group

    def at_row_group(self, row_group: int) -> "AssemblyError":
        if self.row_group is None:
            self.row_group = row_group
        return self

    def __str__(self) -> str:
        if self.row_group is None:
            return self.message
        return f"row group {self.row_group}: {self.message}"


class FormatError(XpqError):
    """A scalar payload does not match its declared kind."""


class InvalidColumnError(XpqError, ValueError):
    """A frequency request names a non-leaf or nonexistent column."""


class InvalidSampleSizeError(XpqError, ValueError):
    """Sample size is negative."""


class ConfigError(XpqError, ValueError):
    """Configuration file is unreadable or invalid."""
