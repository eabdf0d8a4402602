"""Recipe image storage on the local filesystem.

Uploads are written under ``<directory>/<subdirectory>/`` with a generated
``uuid4`` file name, and recipes reference them as ``<subdirectory>/<name>``.
Blocking file I/O runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from recipe_engagement.observability.logging import get_logger
from recipe_engagement.services.images.exceptions import ImageRejectedError


if TYPE_CHECKING:
    from collections.abc import Iterable

    from recipe_engagement.core.config import Settings

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded file as received from the client."""

    filename: str
    content: bytes


class ImageStore:
    """Save and remove recipe images."""

    def __init__(
        self,
        directory: Path | str,
        *,
        subdirectory: str = "recipes",
        max_bytes: int = 204800,
        allowed_extensions: Iterable[str] = ("jpg", "jpeg", "png"),
    ) -> None:
        self.root = Path(directory)
        self.subdirectory = subdirectory
        self.max_bytes = max_bytes
        self.allowed_extensions = frozenset(e.lower() for e in allowed_extensions)

    @classmethod
    def from_settings(cls, settings: Settings) -> ImageStore:
        uploads = settings.uploads
        return cls(
            uploads.directory,
            subdirectory=uploads.subdirectory,
            max_bytes=uploads.max_bytes,
            allowed_extensions=uploads.allowed_extensions,
        )

    def validate(self, upload: ImageUpload) -> str:
        """Return the normalized extension of an acceptable upload.

        Raises:
            ImageRejectedError: Wrong extension or larger than ``max_bytes``.
        """
        extension = PurePosixPath(upload.filename).suffix.lstrip(".").lower()
        if extension not in self.allowed_extensions:
            msg = "Only Images are allowed !"
            raise ImageRejectedError(msg)
        if len(upload.content) > self.max_bytes:
            msg = "File too large"
            raise ImageRejectedError(msg)
        return extension

    async def save(self, upload: ImageUpload) -> str:
        """Persist an upload and return its ``imageUrl`` value."""
        extension = self.validate(upload)
        name = f"{uuid.uuid4().hex}.{extension}"
        path = self.root / self.subdirectory / name

        await asyncio.to_thread(self._write, path, upload.content)
        logger.info("Recipe image saved", image=name, size=len(upload.content))
        return f"{self.subdirectory}/{name}"

    async def delete(self, image_url: str | None) -> bool:
        """Remove a stored image. Returns False if there was nothing to remove."""
        if not image_url:
            return False

        path = self._resolve(image_url)
        if path is None:
            logger.warning("Refusing to delete image outside storage", image=image_url)
            return False

        removed = await asyncio.to_thread(self._unlink, path)
        if removed:
            logger.info("Recipe image removed", image=image_url)
        return removed

    def _resolve(self, image_url: str) -> Path | None:
        root = (self.root / self.subdirectory).resolve()
        path = (self.root / image_url).resolve()
        if path.parent != root:
            return None
        return path

    @staticmethod
    def _write(path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    @staticmethod
    def _unlink(path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
