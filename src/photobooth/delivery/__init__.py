"""
Delivery Module
===============

Boundary to the external messaging gateway.

Components:
    - ImageSender: Protocol for image sinks
    - HttpImageSender: multipart POST to the gateway
    - normalize_recipients / build_caption: input cleanup
"""

from photobooth.delivery.phone import (
    build_caption,
    is_valid_phone_number,
    normalize_phone_number,
    normalize_recipients,
    sanitize_caption,
)
from photobooth.delivery.sender import HttpImageSender, ImageSender

__all__ = [
    "ImageSender",
    "HttpImageSender",
    "build_caption",
    "is_valid_phone_number",
    "normalize_phone_number",
    "normalize_recipients",
    "sanitize_caption",
]
