"""
Compositor
==========

Runs one compose cycle: placement, tone, frame overlay.

Compose Cycle (strictly ordered, never interleaved):
    0. Validate controls, resolve the overlay (awaited)
    1. Clear canvas to transparent
    2. Fill opaque background
    3. TransformEngine.place
    4. ToneAdjuster.apply (whole canvas, background included)
    5. Overlay stretched to the canvas, if one was resolved

Steps 1-5 are synchronous, so no partial canvas is ever observable.
Everything that can fail (bad controls, bad frame id) happens in
step 0, before the canvas is touched. A frame that cannot be resolved
is reported as a warning and the cycle finishes without an overlay.

Every call re-renders from step 1, so identical arguments yield
identical pixels.
"""

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from photobooth.capture.buffer import PixelBuffer
from photobooth.editor.canvas import CanvasSurface
from photobooth.editor.tone import ToneAdjuster
from photobooth.editor.transform import TransformEngine
from photobooth.errors import FrameResolutionFailed
from photobooth.frames.provider import FrameAssetProvider
from photobooth.models.controls import EditorControls, build_controls, ensure_valid


logger = logging.getLogger(__name__)


DEFAULT_CANVAS_WIDTH = 1396
DEFAULT_CANVAS_HEIGHT = 1006


class Compositor:
    """
    Owns the output canvas and its canonical dimensions.

    Attributes:
        canvas: The single output surface
        background: Opaque RGB fill drawn before the photo
        last_warning: Warning from the most recent compose, if any
        render_count: Number of completed renders
        warning_count: Number of frame resolution warnings

    Example:
        compositor = Compositor(frames=DirectoryFrameProvider("./frames"))
        canvas = await compositor.compose(source, "frame1", controls)
    """

    def __init__(
        self,
        frames: FrameAssetProvider,
        width: int = DEFAULT_CANVAS_WIDTH,
        height: int = DEFAULT_CANVAS_HEIGHT,
        background: Sequence[int] = (0, 0, 0),
        transform_engine: Optional[TransformEngine] = None,
        tone_adjuster: Optional[ToneAdjuster] = None,
    ) -> None:
        self.frames = frames
        self.canvas = CanvasSurface(width, height)
        self.background = tuple(int(c) for c in background)
        self.transform_engine = transform_engine or TransformEngine()
        self.tone_adjuster = tone_adjuster or ToneAdjuster()

        self.last_warning: Optional[str] = None
        self.render_count: int = 0
        self.warning_count: int = 0

        logger.info(f"Compositor initialized: canvas={width}x{height}")

    async def resolve_overlay(self, frame_id: Optional[str]) -> Optional[PixelBuffer]:
        """
        Resolve a frame id to its overlay image.

        Resolution failures are not fatal: they are logged, recorded in
        last_warning, and None is returned.
        """
        self.last_warning = None
        if not frame_id:
            return None

        try:
            return await self.frames.resolve(frame_id)
        except FrameResolutionFailed as e:
            self.warning_count += 1
            self.last_warning = str(e)
            logger.warning(f"Composing without overlay: {e}")
            return None

    def render(
        self,
        source: PixelBuffer,
        controls: EditorControls,
        overlay: Optional[PixelBuffer] = None,
    ) -> CanvasSurface:
        """
        Run steps 1-5 synchronously.

        Raises:
            InvalidControlState: Before the canvas is touched
            ValueError: If the source is empty, before the canvas is touched
        """
        ensure_valid(controls)
        if source.is_empty:
            raise ValueError("Cannot compose an empty source image")

        canvas = self.canvas

        # 1-2: background guarantee
        canvas.clear()
        canvas.fill(self.background)

        # 3: placement
        self.transform_engine.place(source, canvas, controls.transform)

        # 4: tone
        self.tone_adjuster.apply(canvas, controls.brightness, controls.contrast)

        # 5: overlay
        if overlay is not None:
            canvas.draw_stretched(overlay)

        self.render_count += 1
        return canvas

    async def compose(
        self,
        source: PixelBuffer,
        frame_id: Optional[str],
        controls: Union[EditorControls, Mapping[str, Any], None] = None,
    ) -> CanvasSurface:
        """
        Full compose cycle.

        Args:
            source: Captured image (native resolution)
            frame_id: Overlay id, or None/"" for no overlay
            controls: EditorControls or raw control values

        Returns:
            The composed canvas

        Raises:
            InvalidControlState: On invalid controls (canvas untouched)
        """
        if not isinstance(controls, EditorControls):
            controls = build_controls(controls)
        ensure_valid(controls)
        if source.is_empty:
            raise ValueError("Cannot compose an empty source image")

        overlay = await self.resolve_overlay(frame_id)
        return self.render(source, controls, overlay)
