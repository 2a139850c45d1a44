"""Flask entrypoint that exposes capacity/encode/decode endpoints for the alpha-channel codec."""

import base64
from typing import Optional, Tuple

from flask import Flask, jsonify, request
from PIL import Image

from alphaveil.buffer import ImageBuffer, encode_image_bytes, load_image_bytes, normalize_output_format
from alphaveil.config import get_settings
from alphaveil.errors import AlphaVeilError
from alphaveil.log import configure_logging
from alphaveil.pipeline import PipelineOptions, run_pipeline

settings = get_settings()
configure_logging(settings.log_level)

app = Flask(__name__)
app.config["MAX_UPLOAD_BYTES"] = settings.max_upload_bytes
app.config["DEFAULT_FORMAT"] = settings.default_format


def sniff_image_mime(image_bytes: bytes) -> str:
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes[:4] in (b"II*\x00", b"MM\x00*"):
        return "image/tiff"
    return "application/octet-stream"


def as_data_url(img_bytes: bytes, mime: str = "image/png") -> str:
    """Return a data URL for the provided image bytes."""
    if not img_bytes:
        raise ValueError("Cannot create data URL from empty image data")
    b64 = base64.b64encode(img_bytes).decode()
    return f"data:{mime};base64,{b64}"


def _form_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _read_image_upload() -> Tuple[Optional[ImageBuffer], Optional[Tuple]]:
    """Load the uploaded image, or return a ready (response, status) error."""
    image_file = request.files.get("image")
    if image_file is None:
        return None, (jsonify({"error": "Image file is required"}), 400)

    if not image_file.filename:
        return None, (jsonify({"error": "Image file must have a filename"}), 400)

    try:
        image_bytes = image_file.read()
    except Exception as e:
        return None, (jsonify({"error": f"Failed to read image file: {str(e)}"}), 400)

    if not image_bytes:
        return None, (jsonify({"error": "Image file is empty"}), 400)

    max_size = app.config["MAX_UPLOAD_BYTES"]
    if len(image_bytes) > max_size:
        return None, (
            jsonify({"error": f"Image file too large. Maximum size is {max_size // (1024 * 1024)}MB"}),
            400,
        )

    try:
        return load_image_bytes(image_bytes), None
    except ValueError as e:
        return None, (jsonify({"error": str(e)}), 400)


@app.post("/api/capacity")
def api_capacity():
    buffer, error = _read_image_upload()
    if error:
        return error

    result = run_pipeline(buffer, PipelineOptions(report_capacity=True))
    return jsonify(
        {
            "width": buffer.width,
            "height": buffer.height,
            "color_model": buffer.color_model.value,
            "available_bytes": result.available_bytes,
            "report": result.report,
        }
    )


@app.post("/api/encode")
def api_encode():
    buffer, error = _read_image_upload()
    if error:
        return error

    payload: Optional[bytes] = None
    payload_file = request.files.get("payload")
    if payload_file is not None:
        try:
            payload = payload_file.read()
        except Exception as exc:
            return jsonify({"error": f"Failed to read payload file: {str(exc)}"}), 400
    else:
        text = request.form.get("text") or ""
        if not text:
            return jsonify({"error": "Text payload or payload file is required"}), 400
        payload = text.encode("utf-8")

    try:
        output_format = normalize_output_format(
            request.form.get("outputFormat") or app.config["DEFAULT_FORMAT"]
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    options = PipelineOptions(
        payload=payload,
        strict=_form_flag(request.form.get("strict"), default=True),
    )
    try:
        result = run_pipeline(buffer, options)
        encoded_bytes = encode_image_bytes(buffer, output_format, embedding=True)
    except AlphaVeilError as exc:
        return jsonify({"error": f"Encoding failed: {str(exc)}"}), 400
    except Exception as exc:
        app.logger.exception("Unexpected error during encoding")
        return jsonify({"error": f"Unexpected error during encoding: {str(exc)}"}), 500

    mime = Image.MIME.get(output_format) or sniff_image_mime(encoded_bytes)
    return jsonify(
        {
            "filename": f"encoded.{output_format.lower()}",
            "data_url": as_data_url(encoded_bytes, mime=mime),
            "bytes_written": result.bytes_written,
            "available_bytes": result.available_bytes,
        }
    )


@app.post("/api/decode")
def api_decode():
    buffer, error = _read_image_upload()
    if error:
        return error

    as_text = _form_flag(request.form.get("asText"), default=True)
    make_opaque = _form_flag(request.form.get("makeOpaque"))
    try:
        output_format = normalize_output_format(
            request.form.get("outputFormat") or app.config["DEFAULT_FORMAT"]
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    options = PipelineOptions(
        extract=True,
        make_opaque=make_opaque,
        text_encoding="utf-8" if as_text else None,
        header_source="raw" if _form_flag(request.form.get("legacyHeader")) else "carriers",
    )
    try:
        result = run_pipeline(buffer, options)
        opaque_bytes = encode_image_bytes(buffer, output_format) if make_opaque else None
    except AlphaVeilError as exc:
        return jsonify({"error": f"Decoding failed: {str(exc)}"}), 400
    except Exception as exc:
        app.logger.exception("Unexpected error during decoding")
        return jsonify({"error": f"Unexpected error during decoding: {str(exc)}"}), 500

    body = {"length": len(result.extracted)}
    if as_text:
        body["text"] = result.text
    else:
        body["data_base64"] = base64.b64encode(result.extracted).decode()
    if opaque_bytes is not None:
        mime = Image.MIME.get(output_format) or sniff_image_mime(opaque_bytes)
        body["image"] = {
            "filename": f"opaque.{output_format.lower()}",
            "data_url": as_data_url(opaque_bytes, mime=mime),
        }
    return jsonify(body)


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
