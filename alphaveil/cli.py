"""Command line entry point: hide text in, or recover it from, an image's alpha channel."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .buffer import load_image
from .log import configure_logging
from .pipeline import PipelineOptions, run_pipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="alphaveil",
        description="Tool to hide text using image alpha channel.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # How much fits in the transparent pixels
  alphaveil cover.png -b

  # Hide a text file and save the result
  alphaveil cover.png -i secret.txt -o hidden.png

  # Print the hidden text, then make every pixel visible
  alphaveil hidden.png -p -a -o opaque.png
""",
    )
    parser.add_argument("input_image", metavar="PATH", type=Path, help="Path to input image file")
    parser.add_argument("-b", "--bytes", action="store_true", help="Available bytes in image")
    parser.add_argument(
        "-i", "--input-text", metavar="PATH", type=Path, help="Path to input text file"
    )
    parser.add_argument("-a", "--all", action="store_true", help="Make all pixels visible")
    parser.add_argument("-p", "--print", action="store_true", help="Print the invisible text")
    parser.add_argument(
        "-I",
        "--ignore",
        action="store_true",
        help="Ignore text length: truncate the text instead of failing when it does not fit",
    )
    parser.add_argument("-O", "--output-text", metavar="PATH", type=Path, help="Output text file")
    parser.add_argument("-o", "--output", metavar="PATH", type=Path, help="Output image file")
    parser.add_argument(
        "--legacy-header",
        action="store_true",
        help="Read the length header from the first raw pixel bytes",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _emit_report(line: str) -> None:
    print(f"\n{line}\n")


def _emit_text(text: str) -> None:
    print(f"{text}\n")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.ignore and args.output_text:
        parser.error("argument -I/--ignore: not allowed with argument -O/--output-text")

    configure_logging("DEBUG" if args.verbose else None)

    try:
        buffer = load_image(args.input_image)
        payload = None
        if args.input_text is not None:
            try:
                payload = args.input_text.read_bytes()
            except FileNotFoundError:
                raise FileNotFoundError(f"Text file not found: {args.input_text}")

        options = PipelineOptions(
            report_capacity=args.bytes,
            payload=payload,
            strict=not args.ignore,
            print_text=args.print,
            text_path=args.output_text,
            make_opaque=args.all,
            output_path=args.output,
            header_source="raw" if args.legacy_header else "carriers",
            emit=_emit_report,
            emit_text=_emit_text,
        )
        run_pipeline(buffer, options)
    except Exception as e:
        logger.debug("Run failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
