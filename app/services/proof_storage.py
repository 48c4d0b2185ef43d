from __future__ import annotations

import logging
from pathlib import Path
import shutil
import time
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/pjpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def extension_for(content_type: Optional[str]) -> Optional[str]:
    """Stored extension for an accepted image content type, else None."""
    if not content_type:
        return None
    media_type = content_type.split(";", 1)[0].strip().lower()
    return IMAGE_EXTENSIONS.get(media_type)


class ProofStorage:
    """Stores payment-proof images on disk under generated unique names.

    The extension always comes from the validated content type, never from
    the client's filename, so files are served back as images.
    """

    def __init__(self, directory: str | Path, prefix: str = "proof_"):
        self.directory = Path(directory)
        self.prefix = prefix

    def _generate_name(self, extension: str) -> str:
        return f"{self.prefix}{time.time_ns()}{extension}"

    def path_for(self, name: str) -> Path:
        return self.directory / Path(name).name

    def save(self, extension: str, stream: BinaryIO) -> str:
        if extension not in IMAGE_EXTENSIONS.values():
            raise ValueError(f"Unsupported image extension: {extension!r}")
        self.directory.mkdir(parents=True, exist_ok=True)
        name = self._generate_name(extension)
        path = self.path_for(name)
        with open(path, "xb") as target:
            try:
                shutil.copyfileobj(stream, target)
            except Exception:
                target.close()
                path.unlink(missing_ok=True)
                raise
        logger.info("Stored payment proof %s", name)
        return name

    def delete(self, name: str) -> None:
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        logger.info("Removed payment proof %s", name)
