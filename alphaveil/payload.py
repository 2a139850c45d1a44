"""Pack header+payload bytes into carrier pixels and read them back."""

import logging

import numpy as np

from .buffer import ImageBuffer
from .carriers import carrier_indices, carrier_stream
from .errors import CorruptPayload, InsufficientCapacity
from .length_codec import HEADER_SIZE, encode_length, read_declared_length

logger = logging.getLogger(__name__)


def embed_bytes(buffer: ImageBuffer, stream: bytes, strict: bool = True) -> int:
    """
    Overwrite R, G and B of each carrier pixel, in order, with the bytes of
    ``stream``. Alpha is left alone. Returns the number of bytes written.

    In strict mode a stream longer than the carriers can hold raises
    InsufficientCapacity and the buffer is not modified. Otherwise the tail
    of the stream is dropped.
    """
    source = np.frombuffer(bytes(stream), dtype=np.uint8)
    pixels = buffer.pixels()
    indices = carrier_indices(buffer)
    capacity = indices.size * 3

    if source.size > capacity:
        if strict:
            raise InsufficientCapacity(source.size, capacity)
        logger.info(
            "Payload truncated: %d of %d bytes fit in the image", capacity, source.size
        )

    written = min(capacity, source.size)
    if written == 0:
        return 0
    # A partially filled last carrier keeps its remaining channels.
    channels = pixels[indices, :3].reshape(-1)
    channels[:written] = source[:written]
    pixels[indices, :3] = channels.reshape(-1, 3)
    logger.debug("Wrote %d bytes into %d carrier pixels", written, -(-written // 3))
    return written


def embed_payload(buffer: ImageBuffer, payload: bytes, strict: bool = True) -> int:
    """Prefix ``payload`` with its length header and embed both."""
    buffer.require_rgba8()
    if not isinstance(payload, (bytes, bytearray)):
        raise TypeError(f"payload must be bytes, got {type(payload).__name__}")
    written = embed_bytes(buffer, encode_length(len(payload)) + bytes(payload), strict=strict)
    logger.info("Embedded %d payload bytes (%d written with header)", len(payload), written)
    return written


def extract_payload(buffer: ImageBuffer, header_source: str = "carriers") -> bytes:
    buffer.require_rgba8()
    length = read_declared_length(buffer, header_source)
    if length is None:
        raise CorruptPayload("error extracting text: no length header in the image")

    body = carrier_stream(buffer)[HEADER_SIZE:HEADER_SIZE + length]
    if len(body) != length:
        raise CorruptPayload(
            f"error extracting text: header declares {length} bytes "
            f"but only {len(body)} are stored in the image"
        )
    logger.info("Extracted %d payload bytes", length)
    return body


def decode_text(payload: bytes, encoding: str = "utf-8") -> str:
    try:
        return payload.decode(encoding)
    except UnicodeDecodeError as e:
        raise CorruptPayload(f"error extracting text: payload is not valid {encoding}: {str(e)}")


def extract_text(
    buffer: ImageBuffer, encoding: str = "utf-8", header_source: str = "carriers"
) -> str:
    return decode_text(extract_payload(buffer, header_source), encoding)
