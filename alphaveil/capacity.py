"""How many bytes the carrier pixels of an image can hold."""

from typing import Optional

from .buffer import ImageBuffer
from .carriers import carrier_count

MEGABYTE = 1_048_576


def available_bytes(buffer: ImageBuffer) -> Optional[int]:
    """3 bytes per carrier pixel, or None when the color model is unsupported.

    The count includes the 12 bytes the length header takes.
    """
    if not buffer.is_rgba8:
        return None
    return carrier_count(buffer) * 3


def capacity_report(buffer: ImageBuffer) -> str:
    available = available_bytes(buffer)
    if available is None:
        return "there are no available bytes in the image"
    return f"{available} bytes ({available // MEGABYTE} megabytes) available in the image"
