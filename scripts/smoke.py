#!/usr/bin/env python3
"""Quick smoke test: import the app, then hide and recover text through the full pipeline."""

import os
import sys
from pathlib import Path
from tempfile import TemporaryDirectory

ROOT = Path(__file__).resolve().parent.parent
try:
    import alphaveil  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    sys.path.insert(0, str(ROOT))
    import alphaveil  # type: ignore  # noqa: F401

from alphaveil import PipelineOptions, available_bytes, load_image, run_pipeline


def main() -> int:
    from PIL import Image

    keep = os.getenv("SMOKE_KEEP_FILES", "").lower() in {"1", "true", "yes"}
    message = "hello from the transparent pixels".encode("utf-8")

    with TemporaryDirectory() as tmp:
        out_dir = ROOT if keep else Path(tmp)
        cover = out_dir / "tmp_smoke_cover.png"
        encoded = out_dir / "tmp_smoke_encoded.png"
        opaque = out_dir / "tmp_smoke_opaque.png"

        Image.new("RGBA", (64, 64), color=(200, 200, 200, 0)).save(cover)

        buffer = load_image(cover)
        print(f"Capacity: {available_bytes(buffer)} bytes")
        run_pipeline(buffer, PipelineOptions(payload=message, output_path=encoded))

        buffer = load_image(encoded)
        result = run_pipeline(
            buffer, PipelineOptions(extract=True, make_opaque=True, output_path=opaque)
        )
        assert result.extracted == message, result.extracted

        with Image.open(opaque) as img:
            alpha = img.convert("RGBA").getchannel("A")
            assert alpha.getextrema() == (255, 255)

    print("Encode/decode sanity passed.")

    try:
        import app  # noqa: F401
    except ModuleNotFoundError:
        sys.path.insert(0, str(ROOT))
        import app  # noqa: F401
    print("Smoke test passed: app and codec importable.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
