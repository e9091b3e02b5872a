"""
Test Configuration
==================

Pytest fixtures and test configuration for the photobooth service.
"""

import asyncio
import json
import os

# No camera hardware in tests; must be set before photobooth.config loads
os.environ.setdefault("PHOTOBOOTH_CAMERA_BACKEND", "none")

import cv2
import numpy as np
import pytest

from photobooth.capture.buffer import PixelBuffer
from photobooth.editor.compositor import Compositor
from photobooth.frames.provider import DirectoryFrameProvider


CANVAS_WIDTH = 40
CANVAS_HEIGHT = 20


def write_png(path, rgba: np.ndarray) -> None:
    """Write an RGBA array as PNG."""
    ok = cv2.imwrite(str(path), cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA))
    assert ok, f"failed to write {path}"


def encode_png(rgba: np.ndarray) -> bytes:
    ok, buffer = cv2.imencode(".png", cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA))
    assert ok
    return buffer.tobytes()


class GatedFrameProvider:
    """Frame provider whose resolve blocks until released."""

    def __init__(self, overlay: PixelBuffer) -> None:
        self.overlay = overlay
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0

    def list_frames(self):
        return []

    async def resolve(self, frame_id: str) -> PixelBuffer:
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return self.overlay


@pytest.fixture
def solid_source():
    """Factory for solid-color source images."""

    def _make(width=20, height=20, rgba=(255, 255, 255, 255)) -> PixelBuffer:
        return PixelBuffer.filled(width, height, rgba)

    return _make


@pytest.fixture
def split_source():
    """20x20 source: left half red, right half blue."""
    pixels = np.zeros((20, 20, 4), dtype=np.uint8)
    pixels[:, :10] = (255, 0, 0, 255)
    pixels[:, 10:] = (0, 0, 255, 255)
    return PixelBuffer(pixels)


@pytest.fixture
def frames_dir(tmp_path):
    """
    Frame catalog directory.

    frame1: canvas-sized overlay, opaque green top row, transparent elsewhere
    broken: catalog entry whose file does not exist
    """
    directory = tmp_path / "frames"
    directory.mkdir()

    overlay = np.zeros((CANVAS_HEIGHT, CANVAS_WIDTH, 4), dtype=np.uint8)
    overlay[0, :] = (0, 255, 0, 255)
    write_png(directory / "frame1.png", overlay)

    index = {
        "frames": [
            {
                "id": "frame1",
                "name": "Frame 1",
                "url": "/frames/frame1.png",
                "thumbnail": "/frames/frame1.png",
                "type": "png",
            },
            {
                "id": "broken",
                "name": "Broken",
                "url": "/frames/missing.png",
            },
        ]
    }
    (directory / "index.json").write_text(json.dumps(index), encoding="utf-8")
    return directory


@pytest.fixture
def frame_provider(frames_dir):
    return DirectoryFrameProvider(frames_dir)


@pytest.fixture
def compositor(frame_provider):
    """Compositor on a small 40x20 canvas with a black background."""
    return Compositor(
        frames=frame_provider,
        width=CANVAS_WIDTH,
        height=CANVAS_HEIGHT,
        background=(0, 0, 0),
    )
