"""Hide bytes in the fully transparent pixels of an RGBA image."""

from .buffer import (
    ColorModel,
    ImageBuffer,
    encode_image_bytes,
    load_image,
    load_image_bytes,
    normalize_output_format,
    save_image,
)
from .capacity import available_bytes, capacity_report
from .carriers import carrier_count, carrier_indices, carrier_mask, carrier_stream, iter_carriers
from .errors import (
    AlphaVeilError,
    CorruptPayload,
    InsufficientCapacity,
    UnsupportedColorModel,
    UnsupportedOutputFormat,
)
from .length_codec import (
    HEADER_SIZE,
    decode_length,
    decode_raw_length,
    encode_length,
    read_declared_length,
)
from .normalize import make_opaque
from .payload import decode_text, embed_bytes, embed_payload, extract_payload, extract_text
from .pipeline import PipelineOptions, PipelineResult, run_pipeline

__version__ = "0.1.0"

__all__ = [
    "AlphaVeilError",
    "ColorModel",
    "CorruptPayload",
    "HEADER_SIZE",
    "ImageBuffer",
    "InsufficientCapacity",
    "PipelineOptions",
    "PipelineResult",
    "UnsupportedColorModel",
    "UnsupportedOutputFormat",
    "available_bytes",
    "capacity_report",
    "carrier_count",
    "carrier_indices",
    "carrier_mask",
    "carrier_stream",
    "decode_length",
    "decode_raw_length",
    "decode_text",
    "embed_bytes",
    "embed_payload",
    "encode_image_bytes",
    "encode_length",
    "extract_payload",
    "extract_text",
    "iter_carriers",
    "load_image",
    "load_image_bytes",
    "make_opaque",
    "normalize_output_format",
    "read_declared_length",
    "run_pipeline",
    "save_image",
]
