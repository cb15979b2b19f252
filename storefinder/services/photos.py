"""Store photo uploads.

Only image/* uploads are accepted. Files are written under the uploads
directory with a random UUID filename; the filename is what the store row
keeps. Resizing is left to the image pipeline in front of the app.
"""

import logging
import re
from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from storefinder.errors import UploadRejectedError

logger = logging.getLogger("uvicorn.error")

_EXTENSION_CHARS = re.compile(r"[^a-z0-9]")


def photo_filename(content_type: str) -> str:
    """UUID filename with an extension taken from the MIME subtype.

    Raises:
        UploadRejectedError: not an image/* content type.
    """
    mime = content_type.split(";", 1)[0].strip().lower()
    if not mime.startswith("image/"):
        raise UploadRejectedError()
    extension = _EXTENSION_CHARS.sub("", mime.split("/", 1)[1]) or "img"
    return f"{uuid4()}.{extension}"


def _write_file(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


async def save_photo(
    upload: UploadFile | None,
    uploads_dir: Path,
    max_bytes: int | None = None,
) -> str | None:
    """Persist an uploaded photo; None when the form had no file.

    Raises:
        UploadRejectedError: not an image, or larger than ``max_bytes``.
    """
    if upload is None or not upload.filename:
        return None

    filename = photo_filename(upload.content_type or "")
    data = await upload.read(-1 if max_bytes is None else max_bytes + 1)
    if max_bytes is not None and len(data) > max_bytes:
        raise UploadRejectedError("That photo is too large!")
    await run_in_threadpool(_write_file, uploads_dir / filename, data)
    logger.info(f"Saved photo {filename} ({len(data)} bytes)")
    return filename
