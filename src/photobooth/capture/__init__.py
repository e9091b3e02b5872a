"""
Capture Module
==============

Still-frame capture from live camera feeds.

This module provides the ingestion layer of the photobooth:
    - PixelBuffer: Immutable RGBA pixel grid (internal representation)
    - FrameFeed / OpenCVFeed / StillImageFeed: feed bindings
    - CaptureSource: grabs orientation-corrected frames from a feed
    - decode_image / load_image: the only image decoders

Example:
    from photobooth.capture import CaptureSource, FacingMode, OpenCVFeed

    source = CaptureSource()
    source.bind(OpenCVFeed(device=0), FacingMode.USER)
    frame = await source.grab_frame()
"""

from photobooth.capture.buffer import PixelBuffer
from photobooth.capture.decoder import decode_image, load_image
from photobooth.capture.feed import FrameFeed, OpenCVFeed, StillImageFeed
from photobooth.capture.source import CaptureSource, FacingMode, FeedFactory


__all__ = [
    "PixelBuffer",
    "decode_image",
    "load_image",
    "FrameFeed",
    "OpenCVFeed",
    "StillImageFeed",
    "CaptureSource",
    "FacingMode",
    "FeedFactory",
]
