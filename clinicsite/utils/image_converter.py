"""
Image conversion utility.
Re-encodes uploads as WebP (downscaled to a sane maximum) before they are stored.
"""
import io
import logging
from typing import Optional, Tuple
from PIL import Image, UnidentifiedImageError

from clinicsite.exceptions import ValidationError

logger = logging.getLogger(__name__)

# WebP conversion settings
DEFAULT_WEBP_QUALITY = 85  # Balance between quality and file size (0-100)
DEFAULT_WEBP_METHOD = 6    # Compression method (0-6, higher = better compression but slower)
MAX_DIMENSION = 2560       # Maximum width or height before downscaling


def convert_to_webp(
    image_bytes: bytes,
    quality: int = DEFAULT_WEBP_QUALITY,
    max_dimension: Optional[int] = MAX_DIMENSION,
) -> Optional[bytes]:
    """
    Convert image bytes to WebP.

    Args:
        image_bytes: Original image file bytes
        quality: WebP quality (0-100, default: 85)
        max_dimension: Maximum width or height before downscaling (None to disable)

    Returns:
        WebP bytes, or None if the bytes are not a readable image

    Raises:
        ValidationError: pixel count is over Pillow's decompression bomb limit
    """
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except Image.DecompressionBombError as e:
        logger.warning(f"Rejected oversized image: {str(e)}")
        raise ValidationError("Image dimensions are too large")
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Cannot identify image format: {str(e)}")
        return None

    if image.format == 'WEBP':
        return image_bytes

    # WebP keeps alpha, so only palette and exotic modes need converting
    if image.mode == 'P':
        image = image.convert('RGBA')
    elif image.mode not in ('RGB', 'RGBA', 'LA'):
        image = image.convert('RGB')

    if max_dimension and max(image.size) > max_dimension:
        image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
        logger.info(f"Downscaled image to {image.size[0]}x{image.size[1]}")

    buffer = io.BytesIO()
    try:
        image.save(buffer, format='WEBP', quality=quality, method=DEFAULT_WEBP_METHOD)
    except (OSError, KeyError, ValueError) as e:
        # Pillow builds without libwebp raise here
        logger.warning(f"WebP encoding unavailable: {str(e)}")
        return None
    return buffer.getvalue()


def optimize_image(image_bytes: bytes, filename: str) -> Tuple[bytes, str]:
    """
    Return (bytes, filename) to store: the WebP version when it is smaller
    than the original, otherwise the original untouched.
    """
    converted = convert_to_webp(image_bytes)
    if converted is None or len(converted) >= len(image_bytes):
        logger.debug(f"Keeping original encoding for {filename}")
        return image_bytes, filename

    stem = filename.rsplit('.', 1)[0] if '.' in filename else filename
    logger.info(
        f"Converted {filename} to WebP: "
        f"{len(image_bytes):,} bytes -> {len(converted):,} bytes"
    )
    return converted, f"{stem}.webp"
