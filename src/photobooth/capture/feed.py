"""
Frame Feeds
===========

Live feed bindings consumed by CaptureSource.

A feed hands out the current frame at its native resolution.
Opening devices, permissions and enumeration belong to the camera
management layer; feeds only read.

Components:
    - FrameFeed: Protocol every feed implements
    - OpenCVFeed: cv2.VideoCapture device
    - StillImageFeed: fixed image (kiosks without a camera, tests)
"""

import logging
from typing import Optional, Protocol

import cv2

from photobooth.capture.buffer import PixelBuffer


logger = logging.getLogger(__name__)


class FrameFeed(Protocol):
    """
    Protocol for live feeds.

    read() is blocking and is called from a worker thread.
    """

    @property
    def is_open(self) -> bool:
        ...

    def read(self) -> Optional[PixelBuffer]:
        """Return the current frame, or None if none is available."""
        ...

    def close(self) -> None:
        ...


class OpenCVFeed:
    """
    Camera device read through cv2.VideoCapture.

    The requested resolution is a hint; frames come back at whatever
    the device actually delivers.

    Attributes:
        device: OpenCV device index
        ideal_width: Requested capture width
        ideal_height: Requested capture height
    """

    def __init__(
        self,
        device: int = 0,
        ideal_width: int = 1280,
        ideal_height: int = 720,
    ) -> None:
        self.device = device
        self.ideal_width = ideal_width
        self.ideal_height = ideal_height

        self._capture = cv2.VideoCapture(device)
        if self._capture.isOpened():
            self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, ideal_width)
            self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, ideal_height)
            logger.info(
                f"OpenCVFeed opened: device={device}, "
                f"requested={ideal_width}x{ideal_height}"
            )
        else:
            logger.warning(f"OpenCVFeed could not open device {device}")

    @property
    def is_open(self) -> bool:
        return self._capture is not None and self._capture.isOpened()

    def read(self) -> Optional[PixelBuffer]:
        if not self.is_open:
            return None

        ok, frame = self._capture.read()
        if not ok or frame is None:
            logger.warning(f"OpenCVFeed read failed on device {self.device}")
            return None

        return PixelBuffer.from_bgr(frame)

    def close(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info(f"OpenCVFeed released device {self.device}")


class StillImageFeed:
    """Feed that always returns the same image."""

    def __init__(self, image: PixelBuffer) -> None:
        self._image: Optional[PixelBuffer] = image

    @property
    def is_open(self) -> bool:
        return self._image is not None

    def read(self) -> Optional[PixelBuffer]:
        if self._image is None:
            return None
        return self._image.clone()

    def close(self) -> None:
        self._image = None
