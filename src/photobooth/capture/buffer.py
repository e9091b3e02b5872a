"""
Pixel Buffer
============

Internal pixel representation for the capture-and-composition pipeline.

Design Rules:
    - RGBA, 8 bits per channel, row-major, shape (height, width, 4)
    - Alpha is straight (NOT premultiplied)
    - Immutable: the wrapped array is a private read-only copy
    - Every handoff is a fresh buffer or an explicit clone()
"""

from dataclasses import dataclass

import cv2
import numpy as np


@dataclass(frozen=True, slots=True, eq=False)
class PixelBuffer:
    """
    Read-only RGBA pixel grid.

    The constructor copies the given array, so the caller keeps
    ownership of whatever it passed in and the buffer can never be
    mutated through an alias.

    Attributes:
        pixels: uint8 array of shape (height, width, 4), RGBA
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        """Validate shape and take a private read-only copy."""
        pixels = np.array(self.pixels, dtype=np.uint8, order="C", copy=True)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(
                f"PixelBuffer expects shape (height, width, 4), got {pixels.shape}"
            )
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def is_empty(self) -> bool:
        """True when either dimension is zero."""
        return self.width == 0 or self.height == 0

    def clone(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels)

    def to_array(self) -> np.ndarray:
        """Return a writable copy of the pixels."""
        return self.pixels.copy()

    def flipped_horizontally(self) -> "PixelBuffer":
        """Mirror about the vertical axis."""
        return PixelBuffer(cv2.flip(self.pixels, 1))

    @classmethod
    def from_bgr(cls, bgr: np.ndarray) -> "PixelBuffer":
        """Build from an OpenCV BGR frame (alpha = 255)."""
        return cls(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGBA))

    @classmethod
    def from_bgra(cls, bgra: np.ndarray) -> "PixelBuffer":
        """Build from an OpenCV BGRA image."""
        return cls(cv2.cvtColor(bgra, cv2.COLOR_BGRA2RGBA))

    @classmethod
    def from_rgb(cls, rgb: np.ndarray) -> "PixelBuffer":
        """Build from an RGB array (alpha = 255)."""
        return cls(cv2.cvtColor(np.ascontiguousarray(rgb, dtype=np.uint8), cv2.COLOR_RGB2RGBA))

    @classmethod
    def filled(cls, width: int, height: int, rgba: tuple) -> "PixelBuffer":
        """Build a solid-color buffer."""
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = rgba
        return cls(pixels)

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the pixels."""
        return f"PixelBuffer(width={self.width}, height={self.height})"
