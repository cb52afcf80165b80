from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

import aiofiles

from leaktrack.core.exceptions import PhotoUploadError
from leaktrack.core.settings import AppSettings, get_app_settings

logger = logging.getLogger(__name__)


class PhotoStorage:
    """
    Blob storage for repair proof photos backed by a local directory.

    Objects are addressed by a relative POSIX path; the public URL is that
    path appended to PHOTO_PUBLIC_BASE_URL.
    """

    def __init__(self, root: str | Path, public_base_url: str) -> None:
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> "PhotoStorage":
        settings = settings or get_app_settings()
        return cls(settings.PHOTO_STORAGE_DIR, settings.PHOTO_PUBLIC_BASE_URL)

    def _resolve(self, name: str) -> Path:
        rel = PurePosixPath(name)
        if rel.is_absolute() or ".." in rel.parts or not rel.parts:
            raise PhotoUploadError("Invalid object name", {"name": name})
        return self.root.joinpath(*rel.parts)

    def public_url(self, name: str) -> str:
        return f"{self.public_base_url}/{name}"

    # PUBLIC_INTERFACE
    async def save(self, name: str, data: bytes) -> str:
        """
        Write `data` under `name` and return its public URL.

        Raises:
            PhotoUploadError: the object could not be written.
        """
        target = self._resolve(name)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                await f.write(data)
        except OSError as exc:
            raise PhotoUploadError("Could not store photo", {"name": name}) from exc
        logger.info("Stored repair photo %s (%d bytes)", name, len(data))
        return self.public_url(name)
