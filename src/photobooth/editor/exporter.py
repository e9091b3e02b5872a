"""
Exporter
========

Encodes the composed canvas into a shareable raster image.

Supported formats:
    - image/jpeg (default, lossy, quality 0..1)
    - image/webp (lossy, quality 0..1)
    - image/png  (lossless, quality ignored)

Encoding is read-only: the canvas is never modified.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

import cv2
import numpy as np

from photobooth.capture.buffer import PixelBuffer
from photobooth.editor.canvas import CanvasSurface
from photobooth.errors import EncodingFailed


logger = logging.getLogger(__name__)


MIME_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}

MIME_ALIASES = {
    "image/jpg": "image/jpeg",
}


@dataclass(frozen=True, slots=True)
class ComposedResult:
    """
    Encoded export of a composed canvas.

    Attributes:
        data: Encoded image bytes
        mime_type: Mime type of data
        quality: Quality factor used (0..1)
        width: Image width in pixels
        height: Image height in pixels
    """

    data: bytes
    mime_type: str
    quality: float
    width: int
    height: int

    @property
    def extension(self) -> str:
        return MIME_EXTENSIONS[self.mime_type]

    def suggested_filename(self, now: Optional[datetime] = None) -> str:
        """photobooth_<ISO timestamp with ':' and '.' replaced by '-'><ext>."""
        now = now or datetime.now(timezone.utc)
        stamp = now.isoformat().replace(":", "-").replace(".", "-")
        return f"photobooth_{stamp}{self.extension}"

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the image."""
        return (
            f"ComposedResult(mime_type={self.mime_type!r}, bytes={len(self.data)}, "
            f"quality={self.quality}, size={self.width}x{self.height})"
        )


class Exporter:
    """
    Canvas encoder.

    Attributes:
        default_mime_type: Format used when none is given
        default_quality: Quality used when none is given
    """

    def __init__(self, default_mime_type: str = "image/jpeg", default_quality: float = 0.9) -> None:
        self.default_mime_type = default_mime_type
        self.default_quality = default_quality

    def encode(
        self,
        canvas: Union[CanvasSurface, PixelBuffer],
        mime_type: Optional[str] = None,
        quality: Optional[float] = None,
    ) -> ComposedResult:
        """
        Encode a canvas (or a snapshot of one).

        Raises:
            EncodingFailed: On zero-size input, unsupported format,
                out-of-range quality or codec failure
        """
        mime_type = (mime_type or self.default_mime_type).lower()
        mime_type = MIME_ALIASES.get(mime_type, mime_type)
        quality = self.default_quality if quality is None else float(quality)

        if mime_type not in MIME_EXTENSIONS:
            raise EncodingFailed(f"Unsupported export format: {mime_type}")
        if not 0.0 <= quality <= 1.0:
            raise EncodingFailed(f"Quality must be within [0, 1], got {quality}")
        if canvas.width == 0 or canvas.height == 0:
            raise EncodingFailed(
                f"Cannot encode a zero-size canvas ({canvas.width}x{canvas.height})"
            )

        rgba = canvas.pixels
        if mime_type == "image/jpeg":
            image = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGR)
            params = [cv2.IMWRITE_JPEG_QUALITY, int(round(quality * 100))]
        elif mime_type == "image/webp":
            image = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA)
            params = [cv2.IMWRITE_WEBP_QUALITY, max(1, int(round(quality * 100)))]
        else:
            image = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA)
            params = []

        try:
            ok, buffer = cv2.imencode(MIME_EXTENSIONS[mime_type], image, params)
        except cv2.error as e:
            raise EncodingFailed(f"Encoder error for {mime_type}: {e}") from e

        if not ok or buffer is None:
            raise EncodingFailed(f"Failed to create {mime_type} image")

        data = np.asarray(buffer).tobytes()
        logger.info(
            f"Encoded {canvas.width}x{canvas.height} canvas as {mime_type} "
            f"(quality={quality}, {len(data)} bytes)"
        )
        return ComposedResult(
            data=data,
            mime_type=mime_type,
            quality=quality,
            width=canvas.width,
            height=canvas.height,
        )

    async def encode_async(
        self,
        snapshot: PixelBuffer,
        mime_type: Optional[str] = None,
        quality: Optional[float] = None,
    ) -> ComposedResult:
        """Encode an immutable snapshot in a worker thread."""
        return await asyncio.to_thread(self.encode, snapshot, mime_type, quality)
