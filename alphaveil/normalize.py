"""Make every pixel fully opaque."""

import logging

from .buffer import ALPHA, ImageBuffer

logger = logging.getLogger(__name__)


def make_opaque(buffer: ImageBuffer) -> ImageBuffer:
    """Set every alpha byte to 255.

    This erases the carrier markers, so run it only after any extraction.
    """
    buffer.pixels()[:, ALPHA] = 255
    logger.debug("Set alpha to 255 on %d pixels", buffer.width * buffer.height)
    return buffer
