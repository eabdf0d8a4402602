"""Image storage exceptions."""

from __future__ import annotations


class ImageStorageError(Exception):
    """Base exception for image storage errors."""


class ImageRejectedError(ImageStorageError):
    """Raised when an upload has a disallowed extension or is too large."""
