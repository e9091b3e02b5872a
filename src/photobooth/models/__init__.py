"""
Data Models
===========

Pydantic models for the photobooth service.

Models:
    Controls:
        - TransformState: zoom / rotation / (reserved) pan
        - ToneState: brightness / contrast
        - EditorControls: full slider state for one compose cycle

    Frames:
        - FrameAsset: catalog entry for a decorative overlay
        - FrameCatalog: frames/index.json document

    Delivery:
        - SendRequest: image + recipients handed to the gateway
        - SendResult: gateway response
"""

from photobooth.models.controls import (
    EditorControls,
    ToneState,
    TransformState,
    build_controls,
    ensure_valid,
)
from photobooth.models.frames import DEFAULT_FRAMES, FrameAsset, FrameCatalog
from photobooth.models.delivery import SendRequest, SendResult

__all__ = [
    # Controls
    "TransformState",
    "ToneState",
    "EditorControls",
    "build_controls",
    "ensure_valid",
    # Frames
    "FrameAsset",
    "FrameCatalog",
    "DEFAULT_FRAMES",
    # Delivery
    "SendRequest",
    "SendResult",
]
