"""
Tone Adjuster Tests
===================

Brightness/contrast formula, rounding and the transparent-pixel skip.
"""

import numpy as np
import pytest

from photobooth.editor.canvas import CanvasSurface
from photobooth.editor.tone import ToneAdjuster, adjust_value


class TestAdjustValue:
    """Tests for the per-channel formula."""

    def test_brightness_then_contrast(self):
        """200 -> 240 -> (112 * 1.1) + 128 = 251.2 -> 251."""
        assert adjust_value(200, 1.2, 1.1) == 251

    def test_contrast_around_mid_gray(self):
        assert adjust_value(100, 1.0, 2.0) == 72
        assert adjust_value(128, 1.0, 5.0) == 128

    def test_identity(self):
        for value in (0, 1, 127, 128, 254, 255):
            assert adjust_value(value, 1.0, 1.0) == value

    def test_clamps_high_and_low(self):
        assert adjust_value(250, 2.0, 1.0) == 255
        assert adjust_value(10, 1.0, 3.0) == 0

    def test_rounds_half_to_even(self):
        """201 * 0.5 = 100.5 exactly, which rounds to 100."""
        assert adjust_value(201, 0.5, 1.0) == 100
        assert adjust_value(255, 0.5, 1.0) == 128

    def test_zero_brightness_and_negative_contrast(self):
        assert adjust_value(200, 0.0, 1.0) == 0
        # Inverts around mid-gray
        assert adjust_value(100, 1.0, -1.0) == 156


class TestToneAdjuster:
    """Tests for whole-canvas application."""

    def test_applies_to_every_channel_except_alpha(self):
        canvas = CanvasSurface(4, 2)
        canvas.fill((200, 100, 50))

        count = ToneAdjuster().apply(canvas, 1.2, 1.1)

        assert count == 8
        assert tuple(canvas.pixels[1, 3]) == (251, 119, 53, 255)
        assert np.all(canvas.pixels[..., 3] == 255)

    def test_identity_does_not_touch_pixels(self):
        """Every byte survives, including the colour of transparent pixels."""
        canvas = CanvasSurface(3, 2)
        canvas.array[0] = [(10, 20, 30, 255), (50, 60, 70, 0), (255, 0, 128, 17)]
        canvas.array[1] = [(0, 0, 0, 0), (1, 254, 127, 200), (99, 3, 255, 0)]
        before = canvas.tobytes()
        adjuster = ToneAdjuster()

        assert adjuster.apply(canvas, 1.0, 1.0) == 0
        assert adjuster.pixels_adjusted == 0
        assert canvas.tobytes() == before

    def test_transparent_pixels_are_skipped(self):
        """Contrast 0.5 would lift a transparent black pixel to 64."""
        canvas = CanvasSurface(3, 1)
        canvas.array[0, 0] = (200, 200, 200, 255)

        count = ToneAdjuster().apply(canvas, 1.0, 0.5)

        assert count == 1
        assert tuple(canvas.pixels[0, 0]) == (164, 164, 164, 255)
        assert tuple(canvas.pixels[0, 1]) == (0, 0, 0, 0)
        assert tuple(canvas.pixels[0, 2]) == (0, 0, 0, 0)

    def test_counts_accumulate(self):
        canvas = CanvasSurface(2, 2)
        canvas.fill((100, 100, 100))
        adjuster = ToneAdjuster()

        adjuster.apply(canvas, 1.1, 1.0)
        adjuster.apply(canvas, 0.9, 1.0)

        assert adjuster.pixels_adjusted == 8

    @pytest.mark.parametrize("brightness,contrast", [(1.0, 1.0), (0.0, 1.0), (3.0, 3.0)])
    def test_empty_canvas(self, brightness, contrast):
        canvas = CanvasSurface(0, 0)
        assert ToneAdjuster().apply(canvas, brightness, contrast) == 0
