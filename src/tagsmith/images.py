"""Cover image inspection with Pillow."""

import logging
from io import BytesIO
from typing import NamedTuple, Optional

from PIL import Image, UnidentifiedImageError

# Bits per pixel for the Pillow modes cover images commonly use
MODE_DEPTHS = {
    "1": 1,
    "L": 8,
    "P": 8,
    "LA": 16,
    "I;16": 16,
    "RGB": 24,
    "YCbCr": 24,
    "RGBA": 32,
    "CMYK": 32,
    "I": 32,
    "F": 32,
}


class ImageInfo(NamedTuple):
    mime_type: Optional[str]
    width: int
    height: int
    depth: int


def inspect_image(data: bytes) -> Optional[ImageInfo]:
    """Identify an image without decoding its pixels.

    Returns:
        ImageInfo, or None if Pillow does not recognize the data
    """
    try:
        with Image.open(BytesIO(data)) as img:
            width, height = img.size
            return ImageInfo(
                mime_type=Image.MIME.get(img.format or ""),
                width=width,
                height=height,
                depth=MODE_DEPTHS.get(img.mode, 0),
            )
    except (UnidentifiedImageError, OSError) as e:
        logging.debug(f"Not an identifiable image: {e}")
        return None
