"""
Frame Provider Tests
====================

Catalog loading, path mapping and overlay caching.
"""

import asyncio

import pytest

from photobooth.errors import FrameNotFound, FrameResolutionFailed
from photobooth.frames import DirectoryFrameProvider
from photobooth.models.frames import FrameAsset


class TestCatalog:
    """Tests for index.json handling."""

    def test_reads_index(self, frame_provider):
        frames = frame_provider.list_frames()

        assert [f.id for f in frames] == ["frame1", "broken"]
        assert frames[0].asset_url == "/frames/frame1.png"
        assert frames[1].thumbnail is None

    def test_missing_index_falls_back_to_defaults(self, tmp_path):
        provider = DirectoryFrameProvider(tmp_path)

        assert [f.id for f in provider.list_frames()] == ["frame1", "frame2"]

    def test_invalid_index_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "index.json").write_text("{not json", encoding="utf-8")

        provider = DirectoryFrameProvider(tmp_path)

        assert [f.id for f in provider.list_frames()] == ["frame1", "frame2"]

    def test_serializes_with_url_key(self, frame_provider):
        data = frame_provider.list_frames()[0].model_dump(by_alias=True)
        assert data["url"] == "/frames/frame1.png"

    def test_get_frame(self, frame_provider):
        assert frame_provider.get_frame("frame1").name == "Frame 1"
        assert frame_provider.get_frame("nope") is None


class TestAssetPath:
    """Tests for URL to path mapping."""

    def test_frames_prefix_maps_into_directory(self, tmp_path):
        provider = DirectoryFrameProvider(tmp_path)
        frame = FrameAsset(id="a", name="A", url="/frames/sub/a.png")

        assert provider.asset_path(frame) == tmp_path / "sub" / "a.png"

    def test_relative_url(self, tmp_path):
        provider = DirectoryFrameProvider(tmp_path)
        frame = FrameAsset(id="a", name="A", url="a.png")

        assert provider.asset_path(frame) == tmp_path / "a.png"


class TestResolve:
    """Tests for decoding and caching overlays."""

    def test_resolve_decodes_overlay(self, frame_provider):
        image = asyncio.run(frame_provider.resolve("frame1"))

        assert (image.width, image.height) == (40, 20)
        assert tuple(image.pixels[0, 0]) == (0, 255, 0, 255)
        assert tuple(image.pixels[5, 5]) == (0, 0, 0, 0)

    def test_resolve_is_cached_by_id(self, frame_provider):
        first = asyncio.run(frame_provider.resolve("frame1"))
        second = asyncio.run(frame_provider.resolve("frame1"))

        assert first is second
        assert frame_provider.loads == 1
        assert frame_provider.cache_hits == 1

    def test_clear_cache(self, frame_provider):
        asyncio.run(frame_provider.resolve("frame1"))

        assert frame_provider.clear_cache() == 1
        asyncio.run(frame_provider.resolve("frame1"))
        assert frame_provider.loads == 2

    def test_unknown_id(self, frame_provider):
        with pytest.raises(FrameNotFound) as exc_info:
            asyncio.run(frame_provider.resolve("nope"))
        assert exc_info.value.frame_id == "nope"

    def test_missing_asset(self, frame_provider):
        with pytest.raises(FrameResolutionFailed):
            asyncio.run(frame_provider.resolve("broken"))
        assert frame_provider.loads == 0
