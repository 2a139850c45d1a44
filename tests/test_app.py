import base64
import io

import numpy as np
import pytest
from PIL import Image

from app import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def cover_png(width=10, height=5, mode="RGBA"):
    if mode == "RGBA":
        img = Image.fromarray(np.zeros((height, width, 4), dtype=np.uint8))
    else:
        img = Image.new(mode, (width, height))
    out = io.BytesIO()
    img.save(out, format="PNG")
    return out.getvalue()


def upload(image_bytes, name="cover.png"):
    return (io.BytesIO(image_bytes), name)


def data_url_bytes(data_url):
    return base64.b64decode(data_url.split(",", 1)[1])


def test_capacity(client):
    resp = client.post(
        "/api/capacity", data={"image": upload(cover_png())}, content_type="multipart/form-data"
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["available_bytes"] == 150
    assert body["color_model"] == "rgba8"


def test_capacity_unsupported_color_model(client):
    resp = client.post(
        "/api/capacity",
        data={"image": upload(cover_png(mode="RGB"))},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    assert resp.get_json()["available_bytes"] is None


def test_encode_then_decode(client):
    resp = client.post(
        "/api/encode",
        data={"image": upload(cover_png()), "text": "hidden message"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["bytes_written"] == 12 + len("hidden message")
    assert body["data_url"].startswith("data:image/png;base64,")

    encoded = data_url_bytes(body["data_url"])
    resp = client.post(
        "/api/decode",
        data={"image": upload(encoded, "encoded.png"), "makeOpaque": "true"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["text"] == "hidden message"
    opaque = Image.open(io.BytesIO(data_url_bytes(body["image"]["data_url"])))
    assert opaque.convert("RGBA").getchannel("A").getextrema() == (255, 255)


def test_decode_binary_payload(client):
    resp = client.post(
        "/api/encode",
        data={"image": upload(cover_png()), "payload": (io.BytesIO(b"\xff\x00\x01"), "blob.bin")},
        content_type="multipart/form-data",
    )
    encoded = data_url_bytes(resp.get_json()["data_url"])
    resp = client.post(
        "/api/decode",
        data={"image": upload(encoded, "encoded.png"), "asText": "false"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    assert base64.b64decode(resp.get_json()["data_base64"]) == b"\xff\x00\x01"


def test_encode_too_long_is_rejected(client):
    resp = client.post(
        "/api/encode",
        data={"image": upload(cover_png()), "text": "x" * 500},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert "not enough free space" in resp.get_json()["error"]


def test_encode_refuses_jpeg_output(client):
    resp = client.post(
        "/api/encode",
        data={"image": upload(cover_png()), "text": "hi", "outputFormat": "jpeg"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert "unsupported image output format" in resp.get_json()["error"]


def test_decode_without_payload(client):
    resp = client.post(
        "/api/decode",
        data={"image": upload(cover_png(mode="RGBA", width=1, height=1))},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400


def test_image_required(client):
    resp = client.post("/api/encode", data={"text": "hi"}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Image file is required"


def test_decode_make_opaque_as_jpeg(client):
    resp = client.post(
        "/api/encode",
        data={"image": upload(cover_png()), "text": "hi"},
        content_type="multipart/form-data",
    )
    encoded = data_url_bytes(resp.get_json()["data_url"])

    resp = client.post(
        "/api/decode",
        data={"image": upload(encoded, "encoded.png"), "makeOpaque": "true", "outputFormat": "jpg"},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["text"] == "hi"
    assert body["image"]["filename"] == "opaque.jpeg"
    assert body["image"]["data_url"].startswith("data:image/jpeg;base64,")
    assert data_url_bytes(body["image"]["data_url"]).startswith(b"\xff\xd8\xff")


def test_encode_as_tiff_has_tiff_mime(client):
    resp = client.post(
        "/api/encode",
        data={"image": upload(cover_png()), "text": "hi", "outputFormat": "tiff"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    assert resp.get_json()["data_url"].startswith("data:image/tiff;base64,")
