"""Length header: an 8-byte native-order length padded out to 12 bytes.

Layout of ``encode_length(n)`` with ``b0..b7`` the native-order bytes of n::

    b0 b1 b2 00 b3 b4 b5 00 b6 b7 00 00

Only the first 10 bytes are ever read back.
"""

import logging
import sys
from typing import Optional

from .buffer import ImageBuffer
from .carriers import carrier_stream

logger = logging.getLogger(__name__)

HEADER_SIZE = 12
HEADER_READ_SIZE = 10
# The raw-buffer pre-check needs strictly more than a header's worth of bytes.
MIN_BUFFER_BYTES = HEADER_SIZE + 1
MAX_LENGTH = 2**64 - 1

HEADER_SOURCES = ("carriers", "raw")


def encode_length(n: int) -> bytes:
    if not 0 <= n <= MAX_LENGTH:
        raise ValueError(f"Length must fit in an unsigned 64-bit integer, got {n}")
    header = bytearray(n.to_bytes(8, sys.byteorder))
    header.insert(3, 0)
    header.insert(7, 0)
    header += b"\x00\x00"
    return bytes(header)


def _read_u64(prefix: bytes, drop: tuple) -> int:
    if len(prefix) < HEADER_READ_SIZE:
        raise ValueError(f"Length header needs {HEADER_READ_SIZE} bytes, got {len(prefix)}")
    raw = bytearray(prefix[:HEADER_READ_SIZE])
    for position in drop:
        del raw[position]
    return int.from_bytes(raw, sys.byteorder)


def decode_length(prefix: bytes) -> int:
    """Inverse of ``encode_length``: drop the padding at positions 7 and 3."""
    return _read_u64(prefix, (7, 3))


def decode_raw_length(prefix: bytes) -> int:
    """Header read as done by the first release: drop positions 9 and 4.

    Agrees with ``decode_length`` only for lengths below 2**24 on
    little-endian hosts, where bytes b3..b7 are all zero.
    """
    return _read_u64(prefix, (9, 4))


def read_declared_length(buffer: ImageBuffer, header_source: str = "carriers") -> Optional[int]:
    """Return the payload length stored in ``buffer``, or None if there is no header.

    ``header_source="carriers"`` reads the header from the carrier byte stream,
    where ``embed_payload`` writes it. ``header_source="raw"`` reads the first
    10 bytes of the raw pixel buffer, alpha bytes included.
    """
    if header_source not in HEADER_SOURCES:
        raise ValueError(f"header_source must be one of {HEADER_SOURCES}, got '{header_source}'")
    if buffer.data.size < MIN_BUFFER_BYTES:
        return None

    if header_source == "raw":
        length = decode_raw_length(buffer.data[:HEADER_READ_SIZE].tobytes())
    else:
        stream = carrier_stream(buffer)
        if len(stream) < HEADER_SIZE:
            return None
        length = decode_length(stream[:HEADER_READ_SIZE])
    logger.debug("Declared payload length %d (header from %s)", length, header_source)
    return length
