"""
Cloudinary service for image upload and cleanup.
Used by image storage when Cloudinary credentials are configured.
"""
import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from clinicsite.config import settings
import logging
import asyncio
import re
from typing import Dict, Any, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# Configure Cloudinary with credentials from settings
cloudinary.config(
    cloud_name=settings.CLOUDINARY_CLOUD_NAME,
    api_key=settings.CLOUDINARY_API_KEY,
    api_secret=settings.CLOUDINARY_API_SECRET,
    secure=True  # Always use HTTPS for secure URLs
)


def cloudinary_configured() -> bool:
    """True when all three Cloudinary credentials are set."""
    return bool(
        settings.CLOUDINARY_CLOUD_NAME
        and settings.CLOUDINARY_API_KEY
        and settings.CLOUDINARY_API_SECRET
    )


async def upload_image(
    data: bytes,
    folder: str = "clinicsite",
    max_retries: int = 3
) -> Dict[str, Any]:
    """
    Upload image bytes to Cloudinary with retry logic.

    Args:
        data: Image bytes to upload
        folder: Cloudinary folder path
        max_retries: Maximum number of retry attempts for transient failures

    Returns:
        dict: Upload result containing url, public_id, format and bytes

    Raises:
        CloudinaryError: If upload fails after all retries
    """
    for attempt in range(max_retries):
        try:
            # The SDK is blocking; keep it off the event loop
            result = await asyncio.to_thread(
                cloudinary.uploader.upload,
                data,
                folder=folder,
                quality="auto",
                fetch_format="auto",
            )

            logger.info(f"Successfully uploaded image: {result['public_id']}")

            return {
                "url": result["secure_url"],
                "public_id": result["public_id"],
                "format": result.get("format"),
                "bytes": result.get("bytes"),
            }

        except CloudinaryError as e:
            logger.warning(f"Cloudinary upload error (attempt {attempt + 1}/{max_retries}): {str(e)}")

            # Retry with exponential backoff for transient failures
            if attempt < max_retries - 1:
                await asyncio.sleep(2 ** attempt)  # 1s, 2s, 4s backoff
                continue

            logger.error(f"Cloudinary upload failed after {max_retries} attempts: {str(e)}")
            raise


def public_id_from_url(url: str) -> Optional[str]:
    """
    Recover the public_id from a Cloudinary delivery URL.

    https://res.cloudinary.com/<cloud>/image/upload/v123/clinicsite/abc.jpg
    -> "clinicsite/abc"
    """
    path = urlparse(url).path
    if "/upload/" not in path:
        return None
    tail = path.split("/upload/", 1)[1]
    tail = re.sub(r"^v\d+/", "", tail)
    return tail.rsplit(".", 1)[0] or None


async def delete_image(public_id: str) -> bool:
    """
    Delete an uploaded image from Cloudinary.

    Returns:
        bool: True if Cloudinary reports the image as deleted
    """
    result = await asyncio.to_thread(cloudinary.uploader.destroy, public_id, invalidate=True)
    deleted = result.get("result") == "ok"
    if deleted:
        logger.info(f"Deleted image from Cloudinary: {public_id}")
    else:
        logger.warning(f"Cloudinary did not delete {public_id}: {result}")
    return deleted
