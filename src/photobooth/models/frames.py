"""
Frame Catalog Schema
====================

Pydantic model for entries of the frame catalog (frames/index.json).

Catalog Contract:
    {
        "frames": [
            {
                "id": "frame1",
                "name": "Frame 1",
                "url": "/frames/frame1.png",
                "thumbnail": "/frames/frame1.png",
                "type": "png"
            }
        ]
    }
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FrameAsset(BaseModel):
    """
    Decorative overlay entry in the frame catalog.

    The decoded image is not part of the model; providers resolve and
    cache it by id.

    Attributes:
        id: Unique frame identifier
        name: Display name
        asset_url: Location of the overlay image
        thumbnail: Optional preview image location
        type: Optional image type hint (e.g. "png")
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Unique frame identifier")
    name: str = Field(..., description="Display name")
    asset_url: str = Field(..., alias="url", description="Overlay image location")
    thumbnail: Optional[str] = Field(default=None, description="Preview image location")
    type: Optional[str] = Field(default=None, description="Image type hint")


class FrameCatalog(BaseModel):
    """Top-level frames/index.json document."""

    frames: List[FrameAsset] = Field(default_factory=list)


DEFAULT_FRAMES: List[FrameAsset] = [
    FrameAsset(
        id="frame1",
        name="Frame 1",
        url="/frames/frame1.png",
        thumbnail="/frames/frame1.png",
        type="png",
    ),
    FrameAsset(
        id="frame2",
        name="Frame 2",
        url="/frames/frame2.png",
        thumbnail="/frames/frame2.png",
        type="png",
    ),
]
