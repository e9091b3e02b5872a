"""
Error Types
===========

Exception hierarchy for the capture-and-composition pipeline.

Propagation Rules:
    - CaptureUnavailable: propagates to the caller (retry is possible)
    - InvalidControlState: raised before the canvas is touched
    - FrameResolutionFailed: swallowed by compose with a warning
    - EncodingFailed: propagates, terminal for that export attempt
    - DeliveryFailed: propagates from the image sender
"""


class PhotoboothError(Exception):
    """Base class for all pipeline errors."""
    pass


class CaptureUnavailable(PhotoboothError):
    """Raised when no frame can be grabbed from the camera feed."""
    pass


class NotInitializedError(CaptureUnavailable):
    """Raised when grabbing a frame with no feed bound."""
    pass


class NoSourceCaptured(PhotoboothError):
    """Raised when editing or exporting before any image was captured."""
    pass


class InvalidControlState(PhotoboothError, ValueError):
    """Raised when editor controls are out of range or non-finite."""
    pass


class FrameResolutionFailed(PhotoboothError):
    """Raised when a frame asset cannot be resolved to an image."""
    pass


class FrameNotFound(FrameResolutionFailed):
    """Raised when a frame id is not in the catalog."""

    def __init__(self, frame_id: str) -> None:
        super().__init__(f"Frame with ID {frame_id!r} not found")
        self.frame_id = frame_id


class EncodingFailed(PhotoboothError):
    """Raised when the canvas cannot be encoded."""
    pass


EncodingError = EncodingFailed


class DeliveryFailed(PhotoboothError):
    """Raised when the messaging gateway cannot be reached or gives no readable answer."""
    pass


class ImageDecodeError(PhotoboothError):
    """Raised when image bytes cannot be decoded."""
    pass
