"""In-memory RGBA pixel buffer plus the Pillow glue that reads and writes it."""

from __future__ import annotations

import enum
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import UnsupportedColorModel, UnsupportedOutputFormat

logger = logging.getLogger(__name__)

CHANNELS = 4
ALPHA = 3

# Only these keep every RGBA byte intact on save.
LOSSLESS_FORMATS = {"PNG", "TIFF"}
NO_ALPHA_FORMATS = {"JPEG", "PPM", "EPS"}
FORMAT_ALIASES = {"jpg": "jpeg", "tif": "tiff"}


class ColorModel(enum.Enum):
    RGBA8 = "rgba8"
    UNSUPPORTED = "unsupported"


@dataclass(eq=False)
class ImageBuffer:
    data: np.ndarray
    width: int
    height: int
    color_model: ColorModel = ColorModel.RGBA8
    source_mode: str = "RGBA"

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Invalid image dimensions: {self.width}x{self.height}")
        # Always a private, writable copy: the buffer owns its pixels.
        if isinstance(self.data, (bytes, bytearray, memoryview)):
            data = np.frombuffer(bytes(self.data), dtype=np.uint8).copy()
        else:
            data = np.array(self.data, dtype=np.uint8, copy=True).reshape(-1)
        expected = CHANNELS * self.width * self.height
        if data.size != expected:
            raise ValueError(
                f"Pixel buffer holds {data.size} bytes, expected {expected} "
                f"for a {self.width}x{self.height} RGBA image"
            )
        self.data = data

    @classmethod
    def from_raw(
        cls,
        raw: Union[bytes, bytearray],
        width: int,
        height: int,
        color_model: ColorModel = ColorModel.RGBA8,
    ) -> "ImageBuffer":
        return cls(bytes(raw), width, height, color_model)

    def pixels(self) -> np.ndarray:
        """Writable (N, 4) view over ``data``."""
        return self.data.reshape(-1, CHANNELS)

    def tobytes(self) -> bytes:
        return self.data.tobytes()

    @property
    def is_rgba8(self) -> bool:
        return self.color_model is ColorModel.RGBA8

    def require_rgba8(self) -> None:
        if not self.is_rgba8:
            raise UnsupportedColorModel(self.source_mode)

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.data.reshape(self.height, self.width, CHANNELS))


def _is_16bit(img: Image.Image) -> bool:
    """True when the undecoded tiles store 16 bits per sample."""
    for tile in getattr(img, "tile", None) or []:
        args = tile[3]
        rawmode = args[0] if isinstance(args, tuple) and args else args
        if isinstance(rawmode, str) and ";16" in rawmode:
            return True
    return False


def detect_color_model(img: Image.Image) -> ColorModel:
    """RGBA8 for 8-bit RGBA, and for palette/RGB images with a tRNS transparency entry."""
    if _is_16bit(img):
        return ColorModel.UNSUPPORTED
    if img.mode == "RGBA":
        return ColorModel.RGBA8
    if img.mode in ("P", "RGB") and "transparency" in img.info:
        return ColorModel.RGBA8
    return ColorModel.UNSUPPORTED


def from_pil(img: Image.Image) -> ImageBuffer:
    """Build a buffer from a Pillow image; the color model is fixed here, once."""
    if getattr(img, "n_frames", 1) > 1:
        logger.debug("Image has %d frames, using the first one", img.n_frames)
    mode = img.mode
    # Before convert(): decoding the pixels clears the tile list.
    color_model = detect_color_model(img)
    try:
        rgba = img.convert("RGBA")
    except Exception as e:
        raise ValueError(f"Failed to convert image to RGBA format: {str(e)}")
    width, height = rgba.size
    data = np.array(rgba, dtype=np.uint8).reshape(-1)
    logger.debug("Loaded %dx%d image, mode=%s, color model=%s", width, height, mode, color_model.value)
    return ImageBuffer(data, width, height, color_model, source_mode=mode)


def load_image(path: Union[str, Path]) -> ImageBuffer:
    image_path = Path(path)
    try:
        with Image.open(image_path) as img:
            return from_pil(img)
    except FileNotFoundError:
        raise FileNotFoundError(f"Image file not found: {image_path}")
    except UnidentifiedImageError as e:
        raise ValueError(f"Failed to open image file '{image_path}': {str(e)}")


def load_image_bytes(image_bytes: bytes) -> ImageBuffer:
    if not isinstance(image_bytes, bytes):
        raise TypeError(f"image_bytes must be bytes, got {type(image_bytes).__name__}")
    if not image_bytes:
        raise ValueError("Cannot decode empty image data")
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            return from_pil(img)
    except UnidentifiedImageError as e:
        raise ValueError(f"Failed to decode image data: {str(e)}")


def normalize_output_format(output_format: Optional[str]) -> str:
    """Map a format name or file extension to a Pillow format id ("PNG", "TIFF", ...)."""
    if not output_format:
        return "PNG"
    fmt = output_format.strip().lower()
    if fmt.startswith("."):
        fmt = fmt[1:]
    fmt = FORMAT_ALIASES.get(fmt, fmt)
    pil_format = Image.registered_extensions().get(f".{fmt}")
    if pil_format is None and fmt.upper() in Image.SAVE:
        pil_format = fmt.upper()
    if pil_format is None or pil_format not in Image.SAVE:
        raise UnsupportedOutputFormat(output_format)
    return pil_format


def check_output_format(output_format: str, *, embedding: bool) -> str:
    fmt = normalize_output_format(output_format)
    if embedding and fmt not in LOSSLESS_FORMATS:
        raise UnsupportedOutputFormat(output_format)
    return fmt


def _write(buffer: ImageBuffer, target, fmt: str) -> None:
    img = buffer.to_pil()
    if fmt in NO_ALPHA_FORMATS:
        img = img.convert("RGB")
    if fmt == "PNG":
        img.save(target, format="PNG", optimize=True)
    else:
        img.save(target, format=fmt)


def encode_image_bytes(
    buffer: ImageBuffer, output_format: str = "png", *, embedding: bool = False
) -> bytes:
    fmt = check_output_format(output_format, embedding=embedding)
    out = io.BytesIO()
    try:
        _write(buffer, out, fmt)
    except OSError as e:
        raise IOError(f"Failed to encode image as {fmt}: {str(e)}")
    return out.getvalue()


def save_image(buffer: ImageBuffer, path: Union[str, Path], *, embedding: bool = False) -> Path:
    """Write the buffer as an RGBA image; the format comes from the file extension."""
    output_path = Path(path)
    fmt = check_output_format(output_path.suffix or str(output_path), embedding=embedding)
    try:
        _write(buffer, output_path, fmt)
    except OSError as e:
        raise IOError(f"Failed to save image '{output_path}': {str(e)}")
    logger.info("Saved %dx%d image to %s (%s)", buffer.width, buffer.height, output_path, fmt)
    return output_path
