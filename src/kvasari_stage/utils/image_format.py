# src/kvasari_stage/utils/image_format.py
"""Detect image formats from leading bytes rather than names or declared types."""

from __future__ import annotations

from kvasari_stage.models.artwork import ImageFormat

# Number of leading bytes inspected when sniffing a payload.
SNIFF_LENGTH = 512

ACCEPTED_MEDIA_TYPES: tuple[str, ...] = ("image/jpeg", "image/png", "image/webp")

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_JPEG_SIGNATURE = b"\xff\xd8\xff"


def detect_image_format(head: bytes) -> ImageFormat | None:
    """Return the image format announced by ``head``, or ``None`` when unsupported.

    Args:
        head: The first bytes of a payload; ``SNIFF_LENGTH`` bytes are plenty.

    Returns:
        The detected format, or ``None`` for anything other than PNG, JPEG or WEBP.
    """
    if head.startswith(_PNG_SIGNATURE):
        return ImageFormat.PNG
    if head.startswith(_JPEG_SIGNATURE):
        return ImageFormat.JPG
    # RIFF container: "RIFF" <4 byte little endian size> "WEBPVP"
    if len(head) >= 14 and head[:4] == b"RIFF" and head[8:14] == b"WEBPVP":
        return ImageFormat.WEBP
    return None
