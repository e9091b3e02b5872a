"""
Frames Module
=============

Decorative overlay catalog.

Components:
    - FrameAssetProvider: Protocol for catalogs
    - DirectoryFrameProvider: index.json + images on disk, cached by id
"""

from photobooth.frames.provider import DirectoryFrameProvider, FrameAssetProvider

__all__ = [
    "FrameAssetProvider",
    "DirectoryFrameProvider",
]
