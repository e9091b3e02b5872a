"""
Tone Adjuster
=============

Per-pixel brightness/contrast, applied in place to the canvas.

Formula (each of R, G, B independently, alpha untouched):

    v' = clamp(((v * brightness) - 128) * contrast + 128, 0, 255)

The order is fixed: brightness multiply, then contrast around
mid-gray, then clamp. The expression is evaluated in float64 without
intermediate rounding and the clamped result is rounded half-to-even.

Fully transparent pixels are skipped. brightness == contrast == 1 is
an identity and does not touch the pixels at all.
"""

import logging

import numpy as np

from photobooth.editor.canvas import CanvasSurface


logger = logging.getLogger(__name__)


MID_GRAY = 128.0


def adjust_value(value: float, brightness: float, contrast: float) -> int:
    """Apply the tone formula to a single channel value."""
    adjusted = ((value * brightness) - MID_GRAY) * contrast + MID_GRAY
    return int(np.rint(min(255.0, max(0.0, adjusted))))


class ToneAdjuster:
    """
    Brightness/contrast adjustment over a whole canvas.

    Attributes:
        pixels_adjusted: Running total of pixels rewritten
    """

    def __init__(self) -> None:
        self.pixels_adjusted: int = 0

    @staticmethod
    def is_identity(brightness: float, contrast: float) -> bool:
        return brightness == 1 and contrast == 1

    def apply(self, target: CanvasSurface, brightness: float, contrast: float) -> int:
        """
        Adjust every non-transparent pixel of the target.

        Args:
            target: Canvas to modify in place
            brightness: Channel multiplier
            contrast: Gain around mid-gray

        Returns:
            Number of pixels adjusted (0 on the identity fast path)
        """
        if self.is_identity(brightness, contrast):
            return 0

        pixels = target.array
        visible = pixels[..., 3] != 0
        count = int(np.count_nonzero(visible))
        if count == 0:
            return 0

        rgb = pixels[..., :3]
        values = rgb[visible].astype(np.float64)
        values *= brightness
        values -= MID_GRAY
        values *= contrast
        values += MID_GRAY
        np.clip(values, 0.0, 255.0, out=values)
        rgb[visible] = np.rint(values).astype(np.uint8)

        self.pixels_adjusted += count
        logger.debug(
            f"Tone applied to {count} pixels "
            f"(brightness={brightness}, contrast={contrast})"
        )
        return count
