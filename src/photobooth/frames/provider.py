"""
Frame Asset Provider
====================

Resolves frame identifiers to decoded overlay images.

Design Rules:
    - The catalog is loaded once and reused
    - Decoded overlays are cached by id for the provider's lifetime
    - Unknown ids raise FrameNotFound, undecodable assets raise
      FrameResolutionFailed; callers decide whether that is fatal
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

from pydantic import ValidationError

from photobooth.capture.buffer import PixelBuffer
from photobooth.capture.decoder import load_image
from photobooth.errors import FrameNotFound, FrameResolutionFailed, ImageDecodeError
from photobooth.models.frames import DEFAULT_FRAMES, FrameAsset, FrameCatalog


logger = logging.getLogger(__name__)


URL_PREFIX = "/frames/"


class FrameAssetProvider(Protocol):
    """
    Protocol for frame catalogs.

    Implementations must list frames in display order and resolve an
    id to a decoded RGBA overlay.
    """

    def list_frames(self) -> List[FrameAsset]:
        ...

    async def resolve(self, frame_id: str) -> PixelBuffer:
        """
        Raises:
            FrameNotFound: If the id is not in the catalog
            FrameResolutionFailed: If the asset cannot be loaded
        """
        ...


class DirectoryFrameProvider:
    """
    Frame catalog backed by a directory.

    Reads <directory>/index.json. If the index is missing or invalid,
    the built-in default catalog (frame1, frame2) is used instead.
    Asset URLs of the form "/frames/<name>" resolve to
    <directory>/<name>; other relative URLs resolve against the
    directory as well.

    Attributes:
        directory: Catalog directory
        loads: Number of overlays decoded from disk
        cache_hits: Number of resolves served from the cache
    """

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)
        self._frames: Optional[List[FrameAsset]] = None
        self._images: Dict[str, PixelBuffer] = {}
        self.loads: int = 0
        self.cache_hits: int = 0

    def list_frames(self) -> List[FrameAsset]:
        if self._frames is None:
            self._frames = self._load_catalog()
        return list(self._frames)

    def get_frame(self, frame_id: str) -> Optional[FrameAsset]:
        for frame in self.list_frames():
            if frame.id == frame_id:
                return frame
        return None

    async def resolve(self, frame_id: str) -> PixelBuffer:
        cached = self._images.get(frame_id)
        if cached is not None:
            self.cache_hits += 1
            return cached

        frame = self.get_frame(frame_id)
        if frame is None:
            raise FrameNotFound(frame_id)

        path = self.asset_path(frame)
        try:
            image = await asyncio.to_thread(load_image, path)
        except ImageDecodeError as e:
            raise FrameResolutionFailed(f"Failed to load frame {frame_id!r}: {e}") from e

        self._images[frame_id] = image
        self.loads += 1
        logger.info(f"Loaded frame {frame_id!r} ({image.width}x{image.height}) from {path}")
        return image

    def asset_path(self, frame: FrameAsset) -> Path:
        """Map a catalog URL to a file path."""
        url = frame.asset_url
        if url.startswith(URL_PREFIX):
            return self.directory / url[len(URL_PREFIX):]
        path = Path(url)
        if path.is_absolute():
            return path
        return self.directory / path

    def clear_cache(self) -> int:
        """Drop decoded overlays. Returns the number dropped."""
        count = len(self._images)
        self._images.clear()
        return count

    def _load_catalog(self) -> List[FrameAsset]:
        index_path = self.directory / "index.json"
        if index_path.exists():
            try:
                with open(index_path, "r", encoding="utf-8") as f:
                    catalog = FrameCatalog.model_validate(json.load(f))
                logger.info(f"Loaded {len(catalog.frames)} frames from {index_path}")
                return catalog.frames
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                logger.warning(f"Failed to read frame index {index_path}, using default frames: {e}")
        else:
            logger.info(f"No frame index at {index_path}, using default frames")

        return list(DEFAULT_FRAMES)
