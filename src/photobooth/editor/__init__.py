"""
Editor Module
=============

The capture-and-composition core.

Components:
    - CanvasSurface: fixed-size RGBA output surface
    - TransformEngine: zoom/rotate placement with fit-scale
    - ToneAdjuster: brightness/contrast
    - Compositor: ordered compose cycle, owns the canvas
    - ComposeQueue: last-write-wins serialization per canvas
    - Exporter: raster encoding

Example:
    from photobooth.editor import Compositor, Exporter

    compositor = Compositor(frames=provider)
    canvas = await compositor.compose(source, "frame1", {"zoom": 1.2})
    result = Exporter().encode(canvas)
"""

from photobooth.editor.canvas import CanvasSurface
from photobooth.editor.transform import TransformEngine, fit_scale
from photobooth.editor.tone import ToneAdjuster, adjust_value
from photobooth.editor.compositor import Compositor
from photobooth.editor.queue import ComposeQueue, ComposeRequest
from photobooth.editor.exporter import ComposedResult, Exporter


__all__ = [
    "CanvasSurface",
    "TransformEngine",
    "fit_scale",
    "ToneAdjuster",
    "adjust_value",
    "Compositor",
    "ComposeQueue",
    "ComposeRequest",
    "ComposedResult",
    "Exporter",
]
