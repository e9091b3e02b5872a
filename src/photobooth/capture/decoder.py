"""
Image Decoder
=============

Decoding of encoded images (JPEG, PNG, WebP, ...) into PixelBuffers.

Design Rules:
    - This is the ONLY place in the codebase that decodes images
    - Accepts grayscale, BGR and BGRA sources, always returns RGBA
    - Fails fast on corrupt data
"""

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from photobooth.capture.buffer import PixelBuffer
from photobooth.errors import ImageDecodeError


logger = logging.getLogger(__name__)


def decode_image(data: bytes) -> PixelBuffer:
    """
    Decode encoded image bytes to an RGBA PixelBuffer.

    Args:
        data: Encoded image bytes

    Returns:
        PixelBuffer with straight alpha (255 where the source has none)

    Raises:
        ImageDecodeError: If decoding fails or the image is invalid
    """
    if not data:
        raise ImageDecodeError("Cannot decode empty image data")

    nparr = np.frombuffer(data, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)

    if image is None:
        raise ImageDecodeError("Failed to decode image: cv2.imdecode returned None")

    return _to_pixel_buffer(image)


def load_image(path: Union[str, Path]) -> PixelBuffer:
    """
    Read and decode an image file.

    Raises:
        ImageDecodeError: If the file is missing or cannot be decoded
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageDecodeError(f"Failed to read image {path}: {e}")

    try:
        return decode_image(data)
    except ImageDecodeError as e:
        raise ImageDecodeError(f"{path}: {e}")


def _to_pixel_buffer(image: np.ndarray) -> PixelBuffer:
    """Normalize a decoded OpenCV image to RGBA uint8."""
    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise ImageDecodeError(f"Unsupported image dtype: {image.dtype}")

    if image.ndim == 2:
        return PixelBuffer(cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA))

    if image.ndim != 3:
        raise ImageDecodeError(f"Invalid image shape: {image.shape}")

    channels = image.shape[2]
    if channels == 3:
        return PixelBuffer.from_bgr(image)
    if channels == 4:
        return PixelBuffer.from_bgra(image)

    raise ImageDecodeError(f"Invalid channel count: {channels}")
