"""Image intake for post images and profile pictures."""

import logging
import time
import uuid
from pathlib import Path
from typing import Optional
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from socialfeed.core import config
from socialfeed.core.errors import UploadRejectedError, StoreError

# The stored extension always comes from here, so /uploads only ever serves image types
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def unique_filename(content_type: str) -> str:
    """``<epoch-ms>-<uuid4 hex><ext>``; nothing is taken from the client's filename."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}{ALLOWED_IMAGE_TYPES[content_type]}"


def _write(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)


async def accept_image(upload: UploadFile, upload_dir: Optional[Path] = None) -> str:
    """
    Validate and store an uploaded image.

    Returns the public URL path (``/uploads/<name>``) to persist on the owning row.
    Raises UploadRejectedError for content types outside ALLOWED_IMAGE_TYPES,
    empty files and files over the size ceiling.
    """
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise UploadRejectedError("Only image files are allowed")

    # one byte past the ceiling is enough to know it's too large
    data = await upload.read(config.MAX_UPLOAD_BYTES + 1)
    if not data:
        raise UploadRejectedError("Image file is empty")
    if len(data) > config.MAX_UPLOAD_BYTES:
        max_mb = config.MAX_UPLOAD_BYTES / (1024 * 1024)
        raise UploadRejectedError(f"File too large (max {max_mb:g}MB)")

    name = unique_filename(content_type)
    try:
        await run_in_threadpool(_write, (upload_dir or config.UPLOAD_DIR) / name, data)
    except OSError as e:
        logging.error(f"Image write error: {str(e)}")
        raise StoreError("Image upload failed")

    return f"{config.UPLOAD_URL_PREFIX}/{name}"


def discard_image(image_url: Optional[str], upload_dir: Optional[Path] = None) -> None:
    """Remove a stored upload after the row that would have referenced it failed to save."""
    if not image_url or not image_url.startswith(config.UPLOAD_URL_PREFIX + "/"):
        return
    path = (upload_dir or config.UPLOAD_DIR) / image_url.rsplit("/", 1)[-1]
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logging.error(f"Image cleanup error: {str(e)}")
