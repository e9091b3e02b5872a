"""
Editor Session
==============

Explicitly owned editor/camera state for one kiosk.

The session retains the captured source image, the last controls and
the selected frame. Every change re-runs a full compose cycle on the
retained source through the ComposeQueue; nothing is patched
incrementally.

Example:
    session = EditorSession(compositor, capture=source)

    await session.capture(frame_id="frame1")
    await session.update(zoom=1.3)
    result = await session.export()
"""

import logging
from typing import Any, Optional

from photobooth.capture.buffer import PixelBuffer
from photobooth.capture.source import CaptureSource
from photobooth.delivery.sender import ImageSender
from photobooth.editor.canvas import CanvasSurface
from photobooth.editor.compositor import Compositor
from photobooth.editor.exporter import ComposedResult, Exporter
from photobooth.editor.queue import ComposeQueue, ComposeRequest
from photobooth.errors import NoSourceCaptured, NotInitializedError
from photobooth.models.controls import EditorControls
from photobooth.models.delivery import SendRequest, SendResult


logger = logging.getLogger(__name__)


_UNSET: Any = object()


class EditorSession:
    """
    Kiosk editing session.

    Attributes:
        compositor: Compositor owning the output canvas
        queue: Compose queue for that canvas
        capture_source: Camera capture, if one is configured
        exporter: Canvas encoder
        source: Retained source image (None until captured)
        controls: Last applied controls
        frame_id: Selected overlay, or None
    """

    def __init__(
        self,
        compositor: Compositor,
        capture: Optional[CaptureSource] = None,
        exporter: Optional[Exporter] = None,
        frame_id: Optional[str] = None,
    ) -> None:
        self.compositor = compositor
        self.queue = ComposeQueue(compositor)
        self.capture_source = capture
        self.exporter = exporter or Exporter()

        self.source: Optional[PixelBuffer] = None
        self.controls = EditorControls()
        self.frame_id: Optional[str] = frame_id

    @property
    def canvas(self) -> CanvasSurface:
        return self.compositor.canvas

    @property
    def has_source(self) -> bool:
        return self.source is not None

    async def capture(self, frame_id: Optional[str] = _UNSET) -> CanvasSurface:
        """
        Grab a frame from the camera and compose it.

        Raises:
            NotInitializedError: If no capture source is configured
            CaptureUnavailable: If the camera yields no frame
        """
        if self.capture_source is None:
            raise NotInitializedError("No capture source configured")

        frame = await self.capture_source.grab_frame()
        return await self.load_source(frame, frame_id=frame_id)

    async def load_source(
        self,
        image: PixelBuffer,
        frame_id: Optional[str] = _UNSET,
    ) -> CanvasSurface:
        """Retain an image as the source and compose it."""
        if image.is_empty:
            raise ValueError("Cannot load an empty source image")

        self.source = image
        if frame_id is not _UNSET:
            self.frame_id = frame_id or None

        logger.info(f"Source retained: {image.width}x{image.height}")
        return await self._compose()

    async def update(
        self,
        frame_id: Optional[str] = _UNSET,
        **controls: Optional[float],
    ) -> CanvasSurface:
        """
        Apply a control and/or frame change and re-compose.

        Control values of None are left unchanged; frame_id=None removes
        the overlay.

        Raises:
            NoSourceCaptured: If nothing was captured yet
            InvalidControlState: Before anything changes
        """
        if self.source is None:
            raise NoSourceCaptured("No image captured yet")

        new_controls = self.controls.merged(**controls)

        self.controls = new_controls
        if frame_id is not _UNSET:
            self.frame_id = frame_id or None

        return await self._compose()

    async def export(
        self,
        mime_type: Optional[str] = None,
        quality: Optional[float] = None,
    ) -> ComposedResult:
        """
        Encode the latest composed canvas.

        Waits for any in-flight compose, then encodes a snapshot in a
        worker thread so later composes cannot race the encoder.

        Raises:
            NoSourceCaptured: If nothing was captured yet
            EncodingFailed: If encoding fails
        """
        if self.source is None:
            raise NoSourceCaptured("No image captured yet")

        await self.queue.wait_idle()
        snapshot = self.canvas.snapshot()
        return await self.exporter.encode_async(snapshot, mime_type, quality)

    async def send(
        self,
        sender: ImageSender,
        recipients: list,
        caption: str = "",
        mime_type: Optional[str] = None,
        quality: Optional[float] = None,
    ) -> SendResult:
        """Export the current image and hand it to the image sender."""
        result = await self.export(mime_type, quality)
        request = SendRequest(
            image_bytes=result.data,
            mime_type=result.mime_type,
            recipients=recipients,
            caption=caption,
        )
        return await sender.send(request)

    def reset(self) -> None:
        """Drop the source and restore default controls.

        A compose still in flight is dropped and never repaints.
        """
        self.source = None
        self.controls = EditorControls()
        self.queue.invalidate()
        self.canvas.clear()
        logger.info("Editor session reset")

    def metrics(self) -> dict:
        return {
            "has_source": self.has_source,
            "frame_id": self.frame_id,
            "render_count": self.compositor.render_count,
            "frame_warnings": self.compositor.warning_count,
            **{f"queue_{k}": v for k, v in self.queue.metrics().items()},
        }

    async def _compose(self) -> CanvasSurface:
        request = ComposeRequest(
            source=self.source,
            frame_id=self.frame_id,
            controls=self.controls,
        )
        return await self.queue.submit(request)
