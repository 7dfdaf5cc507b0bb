"""Error kinds raised by the memory store and the tool layer."""

from __future__ import annotations


class MemkeepError(Exception):
    """Base class for memkeep errors."""


class ValidationError(MemkeepError):
    """A required field is missing, empty, or unsafe. Raised before storage access."""


class StorageError(MemkeepError):
    """The backing directory could not be read or written."""
