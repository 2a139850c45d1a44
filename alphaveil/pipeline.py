"""One run over one buffer: report, embed, extract, make opaque, save.

The stage order is fixed. Extraction needs the alpha == 0 markers that
``make_opaque`` destroys, and the saved image must reflect every earlier stage.
The first error ends the run; later stages never execute.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .buffer import ImageBuffer, save_image
from .capacity import available_bytes, capacity_report
from .normalize import make_opaque
from .payload import decode_text, embed_payload, extract_payload

logger = logging.getLogger(__name__)


@dataclass
class PipelineOptions:
    report_capacity: bool = False
    payload: Optional[bytes] = None
    strict: bool = True
    extract: bool = False
    text_encoding: Optional[str] = None
    print_text: bool = False
    text_path: Optional[Path] = None
    make_opaque: bool = False
    output_path: Optional[Path] = None
    header_source: str = "carriers"
    # Receive the capacity report and the printed text as the stages produce them.
    emit: Optional[Callable[[str], None]] = None
    emit_text: Optional[Callable[[str], None]] = None


@dataclass
class PipelineResult:
    buffer: ImageBuffer
    available_bytes: Optional[int] = None
    report: Optional[str] = None
    bytes_written: int = 0
    extracted: Optional[bytes] = None
    text: Optional[str] = None
    image_path: Optional[Path] = None


def run_pipeline(buffer: ImageBuffer, options: PipelineOptions) -> PipelineResult:
    emit = options.emit or (lambda line: None)
    result = PipelineResult(buffer=buffer, available_bytes=available_bytes(buffer))

    if options.report_capacity:
        result.report = capacity_report(buffer)
        emit(result.report)

    if options.payload is not None:
        logger.debug("Stage: embed (%d bytes, strict=%s)", len(options.payload), options.strict)
        result.bytes_written = embed_payload(buffer, options.payload, strict=options.strict)

    wants_text = options.print_text or options.text_path is not None
    if options.extract or wants_text:
        logger.debug("Stage: extract (header from %s)", options.header_source)
        result.extracted = extract_payload(buffer, options.header_source)
        if options.text_encoding or wants_text:
            result.text = decode_text(result.extracted, options.text_encoding or "utf-8")
        if options.print_text:
            (options.emit_text or emit)(result.text)
        if options.text_path is not None:
            text_path = Path(options.text_path)
            try:
                text_path.write_bytes(result.extracted)
            except OSError as e:
                raise IOError(f"Failed to write text file '{text_path}': {str(e)}")
            logger.info("Wrote extracted text to %s", text_path)

    if options.make_opaque:
        logger.debug("Stage: make opaque")
        make_opaque(buffer)

    if options.output_path is not None:
        result.image_path = save_image(
            buffer, options.output_path, embedding=options.payload is not None
        )

    return result
