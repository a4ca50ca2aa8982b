"""Image upload storage on the local filesystem.

Files land in ``settings.upload_dir`` under a random name and are served by
the static mount at ``/uploads``; the public path is what models store.
"""

from __future__ import annotations

import uuid
from pathlib import Path

from fastapi import UploadFile

from codeshare.core.config import get_settings
from codeshare.core.errors import BadRequest
from codeshare.core.logging import get_logger

logger = get_logger(__name__)

PUBLIC_PREFIX = "/uploads/"

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def upload_root() -> Path:
    return Path(get_settings().upload_dir)


async def save_image(file: UploadFile) -> str:
    """Validate and store *file*; return its public path."""
    ext = _EXTENSIONS.get(file.content_type or "")
    if ext is None:
        raise BadRequest("Only image files are allowed (jpeg, png, gif, webp)")

    limit = get_settings().max_upload_bytes
    data = await file.read(limit + 1)
    if len(data) > limit:
        raise BadRequest(f"File too large (max {limit // (1024 * 1024)} MB)")

    root = upload_root()
    root.mkdir(parents=True, exist_ok=True)
    name = f"{uuid.uuid4().hex}{ext}"
    (root / name).write_bytes(data)
    logger.debug("Upload stored", name=name, size=len(data))
    return PUBLIC_PREFIX + name


def delete_image(public_path: str | None) -> None:
    """Remove a previously stored upload; unknown paths are ignored."""
    if not public_path or not public_path.startswith(PUBLIC_PREFIX):
        return
    name = Path(public_path[len(PUBLIC_PREFIX):]).name
    (upload_root() / name).unlink(missing_ok=True)
