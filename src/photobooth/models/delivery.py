"""
Image Sender Schema
===================

Request/response models for handing a finished image to the
external messaging gateway.

The core treats the gateway as an opaque sink; these models only
describe the boundary.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class SendRequest(BaseModel):
    """
    A finished image plus its recipients.

    Attributes:
        image_bytes: Encoded image data
        mime_type: Mime type of image_bytes
        recipients: Ordered phone numbers (normalized by the sender)
        caption: Free-text caption
    """

    image_bytes: bytes = Field(..., min_length=1, description="Encoded image")
    mime_type: str = Field(default="image/jpeg", description="Image mime type")
    recipients: List[str] = Field(..., min_length=1, description="Phone numbers")
    caption: str = Field(default="", description="Message caption")

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the image."""
        return (
            f"SendRequest(bytes={len(self.image_bytes)}, "
            f"mime_type={self.mime_type!r}, recipients={self.recipients!r})"
        )


class SendResult(BaseModel):
    """
    Gateway response.

    Attributes:
        success: Whether every recipient was handed the image
        message_ids: Per-recipient message identifiers, in recipient order
        error: Error message on failure
    """

    success: bool = Field(..., description="Overall success")
    message_ids: List[str] = Field(default_factory=list)
    error: Optional[str] = Field(default=None)
