"""
Exporter Tests
==============

Encoding the composed canvas to JPEG, PNG and WebP.
"""

import asyncio
from datetime import datetime, timezone

import numpy as np
import pytest

from photobooth.capture import decode_image
from photobooth.editor.canvas import CanvasSurface
from photobooth.editor.exporter import Exporter
from photobooth.errors import EncodingError, EncodingFailed


def gradient_canvas(width=16, height=8) -> CanvasSurface:
    canvas = CanvasSurface(width, height)
    canvas.fill((0, 0, 0))
    canvas.array[..., 0] = np.arange(width, dtype=np.uint8) * 10
    canvas.array[..., 1] = 200
    return canvas


class TestEncode:
    """Tests for Exporter.encode."""

    def test_jpeg_by_default(self):
        result = Exporter().encode(gradient_canvas())

        assert result.mime_type == "image/jpeg"
        assert result.quality == 0.9
        assert result.data[:2] == b"\xff\xd8"
        assert (result.width, result.height) == (16, 8)

    def test_png_is_lossless(self):
        canvas = gradient_canvas()

        result = Exporter().encode(canvas, "image/png")

        assert result.data[:8] == b"\x89PNG\r\n\x1a\n"
        np.testing.assert_array_equal(decode_image(result.data).pixels, canvas.pixels)

    def test_webp(self):
        result = Exporter().encode(gradient_canvas(), "image/webp", 0.8)

        assert result.data[:4] == b"RIFF"
        assert result.data[8:12] == b"WEBP"

    def test_jpg_alias(self):
        assert Exporter().encode(gradient_canvas(), "image/jpg").mime_type == "image/jpeg"

    def test_lower_quality_gives_smaller_jpeg(self):
        canvas = CanvasSurface(64, 64)
        rng = np.random.default_rng(7)
        canvas.array[:] = rng.integers(0, 256, size=(64, 64, 4), dtype=np.uint8)
        canvas.array[..., 3] = 255
        exporter = Exporter()

        low = exporter.encode(canvas, "image/jpeg", 0.1)
        high = exporter.encode(canvas, "image/jpeg", 1.0)

        assert len(low.data) < len(high.data)

    def test_encodes_snapshot(self):
        snapshot = gradient_canvas().snapshot()
        result = asyncio.run(Exporter().encode_async(snapshot, "image/png"))
        assert result.width == 16

    def test_does_not_modify_canvas(self):
        canvas = gradient_canvas()
        before = canvas.pixels.copy()

        Exporter().encode(canvas, "image/jpeg", 0.5)

        np.testing.assert_array_equal(before, canvas.pixels)


class TestEncodeErrors:
    """Tests for rejected exports."""

    def test_unsupported_format(self):
        with pytest.raises(EncodingFailed):
            Exporter().encode(gradient_canvas(), "image/gif")

    @pytest.mark.parametrize("quality", [-0.1, 1.5, float("nan")])
    def test_quality_out_of_range(self, quality):
        with pytest.raises(EncodingFailed):
            Exporter().encode(gradient_canvas(), "image/jpeg", quality)

    def test_zero_size_canvas(self):
        with pytest.raises(EncodingError):
            Exporter().encode(CanvasSurface(0, 10))


class TestComposedResult:
    """Tests for result metadata."""

    def test_suggested_filename(self):
        result = Exporter().encode(gradient_canvas(), "image/png")
        now = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)

        assert result.suggested_filename(now) == "photobooth_2024-01-02T03-04-05-678000+00-00.png"

    def test_extension(self):
        assert Exporter().encode(gradient_canvas()).extension == ".jpg"
