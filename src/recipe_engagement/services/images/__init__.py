"""Recipe image storage."""

from recipe_engagement.services.images.exceptions import (
    ImageRejectedError,
    ImageStorageError,
)
from recipe_engagement.services.images.storage import ImageStore, ImageUpload


__all__ = [
    "ImageRejectedError",
    "ImageStorageError",
    "ImageStore",
    "ImageUpload",
]
