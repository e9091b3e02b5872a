"""
Photobooth
==========

Capture-and-composition pipeline for a self-service photo kiosk.

A still frame is grabbed from a live camera, placed on a fixed-size
canvas with user-controlled zoom and rotation, tone-adjusted, covered
with a decorative frame overlay, and exported as an encoded image that
can be downloaded or handed to a messaging gateway.

Components:
    - capture: Camera feeds and orientation-corrected still capture
    - frames: Frame overlay catalog
    - editor: Canvas, transform, tone, compositor, exporter, compose queue
    - delivery: Messaging gateway client
    - session: Per-kiosk editor state

Example:
    from photobooth.config import settings
    from photobooth.session import EditorSession

    # The service is started via the FastAPI application
    # See main.py for entry point
"""

__version__ = "0.1.0"
__author__ = "Photobooth Project"

__all__ = [
    "__version__",
]
