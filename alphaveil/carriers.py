"""Carrier pixel selection: pixels whose alpha byte is 0, in pixel order."""

from typing import Iterator

import numpy as np

from .buffer import ALPHA, ImageBuffer


def carrier_mask(buffer: ImageBuffer) -> np.ndarray:
    return buffer.pixels()[:, ALPHA] == 0


def carrier_indices(buffer: ImageBuffer) -> np.ndarray:
    """Pixel indices of every carrier, ascending. Rescanned on every call."""
    return np.flatnonzero(carrier_mask(buffer))


def carrier_count(buffer: ImageBuffer) -> int:
    return int(np.count_nonzero(carrier_mask(buffer)))


def iter_carriers(buffer: ImageBuffer) -> Iterator[np.ndarray]:
    """Yield writable 4-byte views of carrier pixels."""
    pixels = buffer.pixels()
    for index in carrier_indices(buffer):
        yield pixels[index]


def carrier_stream(buffer: ImageBuffer) -> bytes:
    """R, G and B of every carrier flattened into one byte string."""
    pixels = buffer.pixels()
    return pixels[carrier_mask(buffer), :3].tobytes()
