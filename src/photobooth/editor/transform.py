"""
Transform Engine
================

Places a source image on the canvas with zoom and rotation.

Placement (in canvas coordinates, y pointing down):
    1. Origin moved to the canvas midpoint
    2. Rotation by rotate_degrees (clockwise on screen)
    3. Uniform zoom
    4. fit_scale = min(canvas_w / source_w, canvas_h / source_h)
    5. Source drawn centered, source_w * fit_scale by source_h * fit_scale

So a source point p maps to:

    canvas(p) = center + R(theta) * (fit_scale * zoom) * (p - source_center)

The pivot is always the canvas midpoint, so zoom and rotation stay
visually anchored while the sliders move independently. Areas the
source does not cover are left untouched (the background shows
through as letterboxing). Edge pixels blend by how much of them the
placed source covers.
"""

import logging
import math

import cv2
import numpy as np

from photobooth.capture.buffer import PixelBuffer
from photobooth.editor.canvas import CanvasSurface
from photobooth.models.controls import TransformState


logger = logging.getLogger(__name__)

# Sample points per pixel side when measuring edge coverage
COVERAGE_SAMPLES = 4


def fit_scale(source_width: int, source_height: int, canvas_width: int, canvas_height: int) -> float:
    """
    Scale that fits the source inside the canvas without cropping.

    Raises:
        ValueError: If the source has a zero dimension
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError(
            f"Source must have non-zero size, got {source_width}x{source_height}"
        )
    return min(canvas_width / source_width, canvas_height / source_height)


class TransformEngine:
    """
    Affine placement of a PixelBuffer onto a CanvasSurface.

    Resampling is bilinear by default. Edges are anti-aliased by the
    pixel coverage of the placed rectangle, so only the covered area of
    the canvas changes.

    Attributes:
        interpolation: OpenCV interpolation flag
    """

    def __init__(self, interpolation: int = cv2.INTER_LINEAR) -> None:
        self.interpolation = interpolation

    def total_scale(
        self,
        source: PixelBuffer,
        target: CanvasSurface,
        transform: TransformState,
    ) -> float:
        """fit_scale * zoom for this source/canvas pair."""
        return fit_scale(source.width, source.height, target.width, target.height) * transform.zoom

    def placement_matrix(
        self,
        source: PixelBuffer,
        target: CanvasSurface,
        transform: TransformState,
    ) -> np.ndarray:
        """
        2x3 affine matrix mapping source coordinates to canvas
        coordinates (pixel-edge convention: (0, 0) is the top-left
        corner of the top-left pixel).

        Pan is reserved and does not move the placement.
        """
        scale = self.total_scale(source, target, transform)
        theta = math.radians(transform.rotate_degrees)
        cos_t = math.cos(theta) * scale
        sin_t = math.sin(theta) * scale

        cx, cy = target.width / 2.0, target.height / 2.0
        sx, sy = source.width / 2.0, source.height / 2.0

        # canvas = center + R*s*(p - source_center)
        return np.array(
            [
                [cos_t, -sin_t, cx - cos_t * sx + sin_t * sy],
                [sin_t, cos_t, cy - sin_t * sx - cos_t * sy],
            ],
            dtype=np.float64,
        )

    def coverage(
        self,
        matrix: np.ndarray,
        source: PixelBuffer,
        target: CanvasSurface,
    ) -> np.ndarray:
        """
        Fraction of each canvas pixel covered by the placed source
        rectangle, as a canvas-sized float32 mask in [0, 1].

        Estimated on a regular grid of sample points per pixel, so
        pixels fully inside the rectangle are exactly 1 and pixels
        fully outside are exactly 0.
        """
        mask = np.zeros((target.height, target.width), dtype=np.float32)

        corners = np.array(
            [[0, 0, 1], [source.width, 0, 1], [source.width, source.height, 1], [0, source.height, 1]],
            dtype=np.float64,
        )
        placed = corners @ matrix.T
        x0 = max(int(math.floor(placed[:, 0].min())), 0)
        x1 = min(int(math.ceil(placed[:, 0].max())), target.width)
        y0 = max(int(math.floor(placed[:, 1].min())), 0)
        y1 = min(int(math.ceil(placed[:, 1].max())), target.height)
        if x0 >= x1 or y0 >= y1:
            return mask

        inverse = cv2.invertAffineTransform(matrix)
        ys, xs = np.mgrid[y0:y1, x0:x1].astype(np.float64)
        steps = (np.arange(COVERAGE_SAMPLES) + 0.5) / COVERAGE_SAMPLES

        hits = np.zeros(xs.shape, dtype=np.float32)
        for oy in steps:
            for ox in steps:
                px, py = xs + ox, ys + oy
                u = inverse[0, 0] * px + inverse[0, 1] * py + inverse[0, 2]
                v = inverse[1, 0] * px + inverse[1, 1] * py + inverse[1, 2]
                hits += (u >= 0) & (u < source.width) & (v >= 0) & (v < source.height)

        mask[y0:y1, x0:x1] = hits / (COVERAGE_SAMPLES * COVERAGE_SAMPLES)
        return mask

    def place(
        self,
        source: PixelBuffer,
        target: CanvasSurface,
        transform: TransformState,
    ) -> None:
        """
        Draw the source onto the target with the given transform.

        Colour is resampled with the border replicated, so edge pixels
        keep the source colour. Coverage of the placed rectangle
        becomes the layer's alpha, so nothing outside it changes.

        Raises:
            ValueError: If the source has a zero dimension
        """
        if source.is_empty:
            raise ValueError("Cannot place an empty source image")
        if target.width == 0 or target.height == 0:
            return

        matrix = self.placement_matrix(source, target, transform)

        # warpAffine works on pixel centers: shift by half a pixel on both sides
        linear = matrix[:, :2]
        offset = matrix[:, 2] + linear @ np.array([0.5, 0.5]) - 0.5
        warp = np.hstack([linear, offset[:, None]])

        # Premultiply so translucent source pixels interpolate correctly
        pixels = source.pixels.astype(np.float32)
        pixels[..., :3] *= pixels[..., 3:4] / 255.0

        layer = cv2.warpAffine(
            pixels,
            warp,
            (target.width, target.height),
            flags=self.interpolation,
            borderMode=cv2.BORDER_REPLICATE,
        )
        layer *= self.coverage(matrix, source, target)[..., None]
        target.draw_premultiplied(layer)

        logger.debug(
            f"Placed {source.width}x{source.height} source: "
            f"scale={self.total_scale(source, target, transform):.4f}, "
            f"rotate={transform.rotate_degrees:.1f}deg"
        )
