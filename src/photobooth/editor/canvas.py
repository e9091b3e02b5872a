"""
Canvas Surface
==============

Fixed-size RGBA drawing target for composed results.

The canvas stores straight (non-premultiplied) RGBA. Drawing uses
source-over compositing; layers may be straight or premultiplied.

Design Rules:
    - Size is fixed at construction
    - Exactly one writer at a time (the compositor)
    - Read access hands out read-only views or snapshots
"""

import logging
from typing import Sequence

import cv2
import numpy as np

from photobooth.capture.buffer import PixelBuffer


logger = logging.getLogger(__name__)


class CanvasSurface:
    """
    Mutable RGBA surface.

    Attributes:
        width: Canvas width in pixels
        height: Canvas height in pixels
    """

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Canvas size must be non-negative, got {width}x{height}")
        self._width = int(width)
        self._height = int(height)
        self._pixels = np.zeros((self._height, self._width, 4), dtype=np.uint8)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> tuple:
        return (self._width, self._height)

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the RGBA pixels."""
        view = self._pixels.view()
        view.setflags(write=False)
        return view

    @property
    def array(self) -> np.ndarray:
        """Writable pixel array, for in-place pixel operations."""
        return self._pixels

    @property
    def is_opaque(self) -> bool:
        return bool(np.all(self._pixels[..., 3] == 255))

    def clear(self) -> None:
        """Reset every pixel to fully transparent."""
        self._pixels.fill(0)

    def fill(self, rgb: Sequence[int]) -> None:
        """Fill the whole canvas with an opaque color."""
        r, g, b = (int(c) for c in rgb)
        self._pixels[:, :] = (r, g, b, 255)

    def draw(self, layer: np.ndarray) -> None:
        """
        Composite a straight-alpha RGBA layer (uint8, canvas-sized) over
        the canvas.
        """
        self._check_layer(layer)
        alpha = layer[..., 3].astype(np.float32) / 255.0
        premultiplied = layer[..., :3].astype(np.float32) * alpha[..., None]
        self._source_over(premultiplied, alpha)

    def draw_premultiplied(self, layer: np.ndarray) -> None:
        """
        Composite a premultiplied float32 RGBA layer (values 0..255,
        canvas-sized) over the canvas.
        """
        self._check_layer(layer)
        alpha = np.clip(layer[..., 3] / 255.0, 0.0, 1.0).astype(np.float32)
        self._source_over(layer[..., :3].astype(np.float32), alpha)

    def draw_stretched(self, image: PixelBuffer) -> None:
        """Draw an image scaled to exactly cover the canvas."""
        if image.is_empty or self._width == 0 or self._height == 0:
            return

        if image.width == self._width and image.height == self._height:
            self.draw(image.pixels)
            return

        shrinking = image.width > self._width or image.height > self._height
        interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
        resized = cv2.resize(
            image.pixels,
            (self._width, self._height),
            interpolation=interpolation,
        )
        self.draw(resized)

    def snapshot(self) -> PixelBuffer:
        """Copy the current pixels into an immutable buffer."""
        return PixelBuffer(self._pixels)

    def tobytes(self) -> bytes:
        return self._pixels.tobytes()

    def _check_layer(self, layer: np.ndarray) -> None:
        if layer.shape != (self._height, self._width, 4):
            raise ValueError(
                f"Layer shape {layer.shape} does not match canvas "
                f"{(self._height, self._width, 4)}"
            )

    def _source_over(self, src_rgb: np.ndarray, src_a: np.ndarray) -> None:
        """Source-over with premultiplied source onto the straight canvas."""
        covered = src_a > 0
        if not covered.any():
            return

        dst = self._pixels[covered].astype(np.float32)
        sa = src_a[covered]
        da = dst[:, 3] / 255.0
        inv = 1.0 - sa

        out_a = sa + da * inv
        out_rgb = src_rgb[covered] + dst[:, :3] * (da * inv)[:, None]

        safe_a = np.where(out_a > 0, out_a, 1.0)
        out_rgb = out_rgb / safe_a[:, None]

        result = np.empty_like(dst)
        result[:, :3] = out_rgb
        result[:, 3] = out_a * 255.0
        self._pixels[covered] = np.clip(np.rint(result), 0, 255).astype(np.uint8)

    def __repr__(self) -> str:
        return f"CanvasSurface(width={self._width}, height={self._height})"
