"""Image inspection services."""

from storefront.services.image.inspection import (
    ImageInfo,
    ImageTooLargeError,
    InvalidImageError,
    inspect_image,
)

__all__ = [
    "ImageInfo",
    "ImageTooLargeError",
    "InvalidImageError",
    "inspect_image",
]
