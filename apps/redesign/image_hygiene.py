from dataclasses import dataclass
import io

from PIL import Image, UnidentifiedImageError
from django.conf import settings

from .errors import InvalidRequest

# Pillow format name -> MIME type accepted by the image model
SUPPORTED_FORMATS = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "HEIF": "image/heif",
}

@dataclass
class ImageInfo:
    mime_type: str
    width: int
    height: int


def inspect_image(image_bytes: bytes) -> ImageInfo:
    """Check image hygiene (size, format, dimensions) and report what was found."""
    if not image_bytes:
        raise InvalidRequest("Image is empty")

    if len(image_bytes) > settings.REDESIGN_MAX_IMAGE_BYTES:
        raise InvalidRequest("Image too large")

    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidRequest(f"Invalid image: {e}") from e

    mime_type = SUPPORTED_FORMATS.get(img.format)
    if mime_type is None:
        raise InvalidRequest(f"Unsupported image format: {img.format}")

    w, h = img.size
    if w * h > settings.REDESIGN_MAX_PIXELS:
        raise InvalidRequest("Image dimensions too large")

    return ImageInfo(mime_type=mime_type, width=w, height=h)
