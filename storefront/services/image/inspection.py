"""
Upload inspection using Pillow.

Receipts and avatars are checked before they leave the browser session:
1. Size limit (avatars 5 MB, receipts 10 MB by default)
2. The bytes must decode as an image - the filename is not trusted
3. The stored extension and MIME type come from the decoded format

CRITICAL: A failed check blocks the upload; nothing is sent to storage.
"""

from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, Field

# Pillow format name -> file extension used in storage paths
FORMAT_EXTENSIONS = {
    "JPEG": "jpg",
    "PNG": "png",
    "WEBP": "webp",
    "GIF": "gif",
    "BMP": "bmp",
    "TIFF": "tiff",
    "HEIF": "heic",
}


class InvalidImageError(Exception):
    """Upload is not a usable image."""
    pass


class ImageTooLargeError(InvalidImageError):
    """Upload exceeds the size limit."""
    pass


class ImageInfo(BaseModel):
    """What we learned about an uploaded image."""

    format: str
    extension: str
    mime_type: str
    width: int = Field(ge=1)
    height: int = Field(ge=1)
    size_bytes: int = Field(ge=0)


def inspect_image(
    data: bytes,
    max_size_bytes: int,
    filename: Optional[str] = None,
) -> ImageInfo:
    """
    Check an uploaded file and describe it.

    Args:
        data: Raw file bytes
        max_size_bytes: Reject anything larger
        filename: Original name, only used for error messages

    Raises:
        ImageTooLargeError: File is over the limit
        InvalidImageError: File is empty or not an image
    """
    label = filename or "File"

    if not data:
        raise InvalidImageError(f"{label} is empty")

    if len(data) > max_size_bytes:
        limit_mb = max_size_bytes / (1024 * 1024)
        raise ImageTooLargeError(f"File size must be less than {limit_mb:g}MB")

    try:
        with Image.open(BytesIO(data)) as img:
            img.verify()
            image_format = img.format or ""
            width, height = img.size
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise InvalidImageError(f"{label} must be an image") from e

    extension = FORMAT_EXTENSIONS.get(image_format, image_format.lower() or "bin")
    mime_type = Image.MIME.get(image_format, f"image/{extension}")

    return ImageInfo(
        format=image_format,
        extension=extension,
        mime_type=mime_type,
        width=width,
        height=height,
        size_bytes=len(data),
    )
