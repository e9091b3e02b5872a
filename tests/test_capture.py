"""
Capture Tests
=============

Tests for PixelBuffer, the image decoder and CaptureSource.
"""

import asyncio

import cv2
import numpy as np
import pytest

from conftest import encode_png
from photobooth.capture import (
    CaptureSource,
    FacingMode,
    PixelBuffer,
    StillImageFeed,
    decode_image,
    load_image,
)
from photobooth.errors import CaptureUnavailable, ImageDecodeError, NotInitializedError


RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


class TestPixelBuffer:
    """Tests for the immutable pixel grid."""

    def test_is_read_only_copy(self):
        array = np.zeros((2, 3, 4), dtype=np.uint8)
        buffer = PixelBuffer(array)

        array[0, 0] = 255
        assert tuple(buffer.pixels[0, 0]) == (0, 0, 0, 0)
        with pytest.raises(ValueError):
            buffer.pixels[0, 0] = 1

    def test_dimensions(self):
        buffer = PixelBuffer.filled(5, 3, RED)
        assert (buffer.width, buffer.height) == (5, 3)
        assert not buffer.is_empty

    def test_rejects_wrong_shape(self):
        with pytest.raises(ValueError):
            PixelBuffer(np.zeros((2, 2, 3), dtype=np.uint8))

    def test_from_bgr_adds_opaque_alpha(self):
        bgr = np.zeros((1, 1, 3), dtype=np.uint8)
        bgr[0, 0] = (255, 0, 0)
        assert tuple(PixelBuffer.from_bgr(bgr).pixels[0, 0]) == BLUE

    def test_flip(self, split_source):
        flipped = split_source.flipped_horizontally()
        assert tuple(flipped.pixels[0, 0]) == BLUE
        assert tuple(flipped.pixels[0, 19]) == RED
        assert tuple(split_source.pixels[0, 0]) == RED

    def test_compares_and_hashes_by_identity(self, solid_source):
        buffer = solid_source(4, 4)
        copy = buffer.clone()

        assert buffer == buffer
        assert buffer != copy
        assert len({buffer, buffer, copy}) == 2


class TestDecoder:
    """Tests for decode_image / load_image."""

    def test_png_with_alpha(self):
        rgba = np.zeros((4, 6, 4), dtype=np.uint8)
        rgba[:, :3] = (10, 20, 30, 128)

        image = decode_image(encode_png(rgba))

        assert (image.width, image.height) == (6, 4)
        assert tuple(image.pixels[0, 0]) == (10, 20, 30, 128)
        assert tuple(image.pixels[0, 5]) == (0, 0, 0, 0)

    def test_grayscale_becomes_rgba(self):
        gray = np.full((3, 3), 77, dtype=np.uint8)
        ok, data = cv2.imencode(".png", gray)
        assert ok

        image = decode_image(data.tobytes())

        assert tuple(image.pixels[1, 1]) == (77, 77, 77, 255)

    def test_corrupt_data(self):
        with pytest.raises(ImageDecodeError):
            decode_image(b"definitely not an image")

    def test_empty_data(self):
        with pytest.raises(ImageDecodeError):
            decode_image(b"")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageDecodeError):
            load_image(tmp_path / "missing.png")


class TestCaptureSource:
    """Tests for frame grabbing and orientation."""

    def test_user_facing_frames_are_mirrored(self, split_source):
        source = CaptureSource(StillImageFeed(split_source), FacingMode.USER)

        frame = asyncio.run(source.grab_frame())

        assert tuple(frame.pixels[0, 0]) == BLUE
        assert tuple(frame.pixels[0, 19]) == RED

    def test_environment_frames_are_not_mirrored(self, split_source):
        source = CaptureSource(StillImageFeed(split_source), FacingMode.ENVIRONMENT)

        frame = asyncio.run(source.grab_frame())

        np.testing.assert_array_equal(frame.pixels, split_source.pixels)

    def test_mirrored_modes_come_from_configuration(self, split_source):
        source = CaptureSource(
            StillImageFeed(split_source),
            FacingMode.ENVIRONMENT,
            mirrored_modes=[FacingMode.ENVIRONMENT],
        )
        assert source.needs_mirror_correction

        frame = asyncio.run(source.grab_frame())
        assert tuple(frame.pixels[0, 0]) == BLUE

    def test_native_resolution(self, solid_source):
        source = CaptureSource(StillImageFeed(solid_source(64, 48)))

        frame = asyncio.run(source.grab_frame())

        assert (frame.width, frame.height) == (64, 48)
        assert source.frames_captured == 1

    def test_unbound_source(self):
        source = CaptureSource()

        with pytest.raises(NotInitializedError):
            asyncio.run(source.grab_frame())
        assert not source.is_bound

    def test_closed_feed(self, solid_source):
        feed = StillImageFeed(solid_source())
        source = CaptureSource(feed)
        feed.close()

        with pytest.raises(CaptureUnavailable):
            asyncio.run(source.grab_frame())
        assert source.frames_captured == 0

    def test_switch_toggles_facing_mode(self, split_source):
        source = CaptureSource(StillImageFeed(split_source), FacingMode.USER)

        assert asyncio.run(source.switch_facing_mode()) is FacingMode.ENVIRONMENT
        frame = asyncio.run(source.grab_frame())
        assert tuple(frame.pixels[0, 0]) == RED

        assert asyncio.run(source.switch_facing_mode()) is FacingMode.USER

    def test_switch_rebinds_through_factory(self, solid_source):
        front = StillImageFeed(solid_source(4, 4, RED))
        opened = []

        def factory(mode):
            opened.append(mode)
            return StillImageFeed(solid_source(8, 8, BLUE))

        source = CaptureSource(front, FacingMode.USER, feed_factory=factory)
        asyncio.run(source.switch_facing_mode())

        assert opened == [FacingMode.ENVIRONMENT]
        assert not front.is_open
        frame = asyncio.run(source.grab_frame())
        assert (frame.width, tuple(frame.pixels[0, 0])) == (8, BLUE)

    def test_unbind_closes_feed(self, solid_source):
        feed = StillImageFeed(solid_source())
        source = CaptureSource(feed)

        source.unbind()

        assert not feed.is_open
        assert not source.is_bound
