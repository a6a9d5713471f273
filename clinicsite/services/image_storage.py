"""
Image storage for admin uploads.

`save_upload` validates an uploaded file, re-encodes it, and stores it either
on local disk (served under /uploads) or on Cloudinary. It returns the
reference string that gallery, section and blog rows persist.
"""
import asyncio
import logging
import os
import re
import uuid

from cloudinary.exceptions import Error as CloudinaryError
from fastapi import UploadFile

from clinicsite.config import settings
from clinicsite.exceptions import ValidationError
from clinicsite.services.cloudinary_service import (
    cloudinary_configured,
    delete_image,
    public_id_from_url,
    upload_image,
)
from clinicsite.utils.image_converter import optimize_image

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"

_SAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _stored_name(filename: str) -> str:
    """Unique on-disk name that keeps a sanitized version of the original."""
    base = os.path.basename(filename or "image")
    base = _SAFE_CHARS.sub("-", base).strip("-.") or "image"
    return f"{uuid.uuid4().hex[:12]}-{base}"


def _write_file(directory: str, name: str, data: bytes) -> None:
    os.makedirs(directory, exist_ok=True)
    with open(os.path.join(directory, name), "wb") as fh:
        fh.write(data)


async def store_image(filename: str, data: bytes) -> str:
    """
    Store image bytes and return the reference to persist.

    Returns:
        str: "/uploads/<name>" for local storage, or the Cloudinary URL
    """
    if cloudinary_configured():
        result = await upload_image(data)
        return result["url"]

    name = _stored_name(filename)
    await asyncio.to_thread(_write_file, settings.upload_dir, name, data)
    logger.info(f"Stored upload on disk: {name} ({len(data):,} bytes)")
    return f"{UPLOAD_URL_PREFIX}/{name}"


async def save_upload(upload: UploadFile) -> str:
    """
    Validate and store an uploaded image.

    Raises:
        ValidationError: no file, not an image, or larger than MAX_UPLOAD_BYTES
    """
    if upload is None or not upload.filename:
        raise ValidationError("Please choose an image to upload")

    if not upload.content_type or not upload.content_type.startswith("image/"):
        raise ValidationError(f"File '{upload.filename}' is not a valid image file")

    # Read one byte past the cap so oversized uploads are detected without reading them fully
    data = await upload.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"File '{upload.filename}' is larger than the {settings.MAX_UPLOAD_BYTES:,} byte upload limit"
        )
    if not data:
        raise ValidationError(f"File '{upload.filename}' is empty")

    data, filename = await asyncio.to_thread(optimize_image, data, upload.filename)
    return await store_image(filename, data)


async def discard_image(reference: str) -> None:
    """
    Remove a stored image that no row ended up pointing to.

    Cleanup is best effort: failures are logged and the original error is
    what the caller reports.
    """
    try:
        if reference.startswith(f"{UPLOAD_URL_PREFIX}/"):
            path = os.path.join(settings.upload_dir, reference.rsplit("/", 1)[1])
            await asyncio.to_thread(os.remove, path)
            logger.info(f"Removed orphaned upload: {path}")
            return

        public_id = public_id_from_url(reference)
        if public_id:
            await delete_image(public_id)
    except FileNotFoundError:
        logger.debug(f"Orphaned upload already gone: {reference}")
    except (OSError, CloudinaryError) as e:
        logger.warning(f"Could not remove orphaned upload {reference}: {str(e)}")
