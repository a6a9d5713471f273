"""Image storage and conversion tests"""

import io
import os
import threading
from unittest.mock import AsyncMock

import pytest
from PIL import Image
from starlette.datastructures import Headers, UploadFile

from clinicsite.config import settings
from clinicsite.exceptions import ValidationError
from clinicsite.services import image_storage
from clinicsite.services.cloudinary_service import public_id_from_url
from clinicsite.utils.image_converter import convert_to_webp

pytestmark = pytest.mark.anyio


def _png_bytes(size=(32, 32)):
    buffer = io.BytesIO()
    Image.new("RGB", size, "navy").save(buffer, format="PNG")
    return buffer.getvalue()


def _upload(data, filename="photo.png", content_type="image/png"):
    return UploadFile(file=io.BytesIO(data), filename=filename, headers=Headers({"content-type": content_type}))


async def test_decompression_bomb_is_a_validation_error(monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    with pytest.raises(ValidationError, match="too large"):
        convert_to_webp(_png_bytes())


async def test_optimization_runs_off_the_event_loop(monkeypatch):
    loop_thread = threading.get_ident()
    seen = {}

    def recording_optimize(data, filename):
        seen["thread"] = threading.get_ident()
        return data, filename
    monkeypatch.setattr(image_storage, "optimize_image", recording_optimize)

    reference = await image_storage.save_upload(_upload(_png_bytes()))

    assert seen["thread"] != loop_thread
    assert reference.startswith("/uploads/")


async def test_discard_local_upload():
    reference = await image_storage.store_image("orphan.png", _png_bytes())
    path = os.path.join(settings.upload_dir, reference.rsplit("/", 1)[1])
    assert os.path.exists(path)

    await image_storage.discard_image(reference)
    assert not os.path.exists(path)

    # Already gone: nothing to do
    await image_storage.discard_image(reference)


async def test_discard_cloudinary_upload(monkeypatch):
    delete_image = AsyncMock(return_value=True)
    monkeypatch.setattr(image_storage, "delete_image", delete_image)

    await image_storage.discard_image(
        "https://res.cloudinary.com/demo/image/upload/v1712345678/clinicsite/abc123.jpg"
    )

    delete_image.assert_awaited_once_with("clinicsite/abc123")


@pytest.mark.parametrize("url, public_id", [
    ("https://res.cloudinary.com/demo/image/upload/v1712345678/clinicsite/abc123.jpg", "clinicsite/abc123"),
    ("https://res.cloudinary.com/demo/image/upload/clinicsite/abc123.webp", "clinicsite/abc123"),
    ("https://example.com/images/abc123.jpg", None),
])
async def test_public_id_from_url(url, public_id):
    assert public_id_from_url(url) == public_id
