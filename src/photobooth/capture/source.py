"""
Capture Source
==============

Grabs still frames from a bound live feed.

Orientation:
    Front (user-facing) cameras deliver mirror-reversed frames. Which
    facing modes are mirrored is supplied by the camera management
    layer as configuration; the frame itself is never inspected.
    A mirrored mode is flipped about the vertical axis exactly once,
    a non-mirrored mode is never flipped.

Design Rules:
    - grab_frame() returns the feed's native resolution
    - Reading does not change feed state
    - Blocking feed reads run in a worker thread
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Iterable, Optional

from photobooth.capture.buffer import PixelBuffer
from photobooth.capture.feed import FrameFeed
from photobooth.errors import CaptureUnavailable, NotInitializedError


logger = logging.getLogger(__name__)


class FacingMode(str, Enum):
    """
    Logical capture mode supplied by camera management.

    Attributes:
        USER: Front camera, facing the person being photographed
        ENVIRONMENT: Rear camera
    """

    USER = "user"
    ENVIRONMENT = "environment"

    def toggled(self) -> "FacingMode":
        if self is FacingMode.USER:
            return FacingMode.ENVIRONMENT
        return FacingMode.USER


FeedFactory = Callable[[FacingMode], FrameFeed]


class CaptureSource:
    """
    Still-frame capture from a live feed.

    Attributes:
        facing_mode: Currently active facing mode
        mirrored_modes: Facing modes whose frames need mirror correction
        frames_captured: Number of successful grabs

    Example:
        source = CaptureSource(mirrored_modes=[FacingMode.USER])
        source.bind(OpenCVFeed(device=0), FacingMode.USER)

        frame = await source.grab_frame()
    """

    def __init__(
        self,
        feed: Optional[FrameFeed] = None,
        facing_mode: FacingMode = FacingMode.USER,
        mirrored_modes: Iterable[FacingMode] = (FacingMode.USER,),
        feed_factory: Optional[FeedFactory] = None,
    ) -> None:
        """
        Initialize capture source.

        Args:
            feed: Initially bound feed, if any
            facing_mode: Initial facing mode
            mirrored_modes: Modes that deliver mirror-reversed frames
            feed_factory: Opens a feed for a facing mode (used when switching)
        """
        self._feed: Optional[FrameFeed] = feed
        self._facing_mode = FacingMode(facing_mode)
        self.mirrored_modes = frozenset(FacingMode(m) for m in mirrored_modes)
        self._feed_factory = feed_factory
        self.frames_captured: int = 0

    @property
    def facing_mode(self) -> FacingMode:
        return self._facing_mode

    @property
    def is_bound(self) -> bool:
        return self._feed is not None

    @property
    def needs_mirror_correction(self) -> bool:
        """Whether frames from the active mode must be flipped."""
        return self._facing_mode in self.mirrored_modes

    def bind(self, feed: FrameFeed, facing_mode: Optional[FacingMode] = None) -> None:
        """Bind a feed, closing any previously bound one."""
        if self._feed is not None and self._feed is not feed:
            self._feed.close()
        self._feed = feed
        if facing_mode is not None:
            self._facing_mode = FacingMode(facing_mode)
        logger.info(f"Capture feed bound (facing_mode={self._facing_mode.value})")

    def unbind(self) -> None:
        """Close and drop the bound feed."""
        if self._feed is not None:
            self._feed.close()
            self._feed = None
            logger.info("Capture feed unbound")

    async def switch_facing_mode(self) -> FacingMode:
        """
        Toggle between user- and environment-facing capture.

        When a feed factory is configured, the feed for the new mode is
        opened (in a worker thread) and bound in place of the old one.

        Returns:
            The new facing mode
        """
        new_mode = self._facing_mode.toggled()

        if self._feed_factory is not None:
            feed = await asyncio.to_thread(self._feed_factory, new_mode)
            self.bind(feed, new_mode)
        else:
            self._facing_mode = new_mode

        logger.info(f"Switched facing mode to {new_mode.value}")
        return new_mode

    async def grab_frame(self) -> PixelBuffer:
        """
        Capture the current frame at native resolution.

        Returns:
            Orientation-corrected RGBA PixelBuffer

        Raises:
            NotInitializedError: If no feed is bound
            CaptureUnavailable: If the feed is closed or yields no frame
        """
        feed = self._feed
        if feed is None:
            raise NotInitializedError("Camera not initialized: no feed bound")
        if not feed.is_open:
            raise CaptureUnavailable("Camera feed is not open")

        frame = await asyncio.to_thread(feed.read)

        if frame is None or frame.is_empty:
            raise CaptureUnavailable("Camera feed returned no frame")

        if self.needs_mirror_correction:
            frame = frame.flipped_horizontally()

        self.frames_captured += 1
        logger.debug(
            f"Captured frame {frame.width}x{frame.height} "
            f"(facing_mode={self._facing_mode.value}, "
            f"mirrored={self.needs_mirror_correction})"
        )
        return frame
