import numpy as np
import pytest
from PIL import Image

from alphaveil.buffer import load_image
from alphaveil.cli import main


def write_cover(path, width=10, height=5):
    data = np.zeros((height, width, 4), dtype=np.uint8)
    Image.fromarray(data).save(path)
    return path


def test_capacity_flag(tmp_path, capsys):
    cover = write_cover(tmp_path / "cover.png")
    assert main([str(cover), "-b"]) == 0
    assert "150 bytes (0 megabytes) available in the image" in capsys.readouterr().out


def test_hide_then_print(tmp_path, capsys):
    cover = write_cover(tmp_path / "cover.png")
    secret = tmp_path / "secret.txt"
    secret.write_text("meet at noon", encoding="utf-8")
    hidden = tmp_path / "hidden.png"

    assert main([str(cover), "-i", str(secret), "-o", str(hidden)]) == 0
    assert main([str(hidden), "-p"]) == 0

    assert "meet at noon" in capsys.readouterr().out


def test_output_text_and_make_opaque(tmp_path):
    cover = write_cover(tmp_path / "cover.png")
    secret = tmp_path / "secret.txt"
    secret.write_bytes(b"line one\nline two\n")
    recovered = tmp_path / "recovered.txt"
    opaque = tmp_path / "opaque.png"

    code = main(
        [str(cover), "-i", str(secret), "-O", str(recovered), "-a", "-o", str(opaque)]
    )

    assert code == 0
    assert recovered.read_bytes() == b"line one\nline two\n"
    assert (load_image(opaque).pixels()[:, 3] == 255).all()


def test_too_long_text_fails_in_strict_mode(tmp_path, capsys):
    cover = write_cover(tmp_path / "cover.png")
    secret = tmp_path / "secret.txt"
    secret.write_bytes(b"x" * 200)

    assert main([str(cover), "-i", str(secret), "-o", str(tmp_path / "out.png")]) == 1
    assert "not enough free space" in capsys.readouterr().err
    assert not (tmp_path / "out.png").exists()


def test_ignore_truncates(tmp_path):
    cover = write_cover(tmp_path / "cover.png")
    secret = tmp_path / "secret.txt"
    secret.write_bytes(b"x" * 200)
    out = tmp_path / "out.png"

    assert main([str(cover), "-i", str(secret), "-I", "-o", str(out)]) == 0
    assert out.exists()


def test_ignore_conflicts_with_output_text(tmp_path):
    cover = write_cover(tmp_path / "cover.png")
    with pytest.raises(SystemExit) as excinfo:
        main([str(cover), "-I", "-O", str(tmp_path / "t.txt")])
    assert excinfo.value.code == 2


def test_embedding_into_jpeg_fails(tmp_path, capsys):
    cover = write_cover(tmp_path / "cover.png")
    secret = tmp_path / "secret.txt"
    secret.write_bytes(b"hi")
    assert main([str(cover), "-i", str(secret), "-o", str(tmp_path / "out.jpg")]) == 1
    assert "unsupported image output format" in capsys.readouterr().err


def test_missing_input_image(tmp_path, capsys):
    assert main([str(tmp_path / "nope.png"), "-b"]) == 1
    assert "Image file not found" in capsys.readouterr().err


def test_rgb_input_refuses_embedding(tmp_path, capsys):
    cover = tmp_path / "cover.png"
    Image.new("RGB", (10, 5)).save(cover)
    secret = tmp_path / "secret.txt"
    secret.write_bytes(b"hi")

    assert main([str(cover), "-b", "-i", str(secret)]) == 1

    captured = capsys.readouterr()
    assert "there are no available bytes in the image" in captured.out
    assert "unsupported color model" in captured.err


def test_print_output_format(tmp_path, capsys):
    cover = write_cover(tmp_path / "cover.png")
    secret = tmp_path / "secret.txt"
    secret.write_text("meet at noon", encoding="utf-8")
    hidden = tmp_path / "hidden.png"
    assert main([str(cover), "-i", str(secret), "-o", str(hidden)]) == 0
    capsys.readouterr()

    assert main([str(hidden), "-b", "-p"]) == 0

    out = capsys.readouterr().out
    assert out == "\n150 bytes (0 megabytes) available in the image\n\nmeet at noon\n\n"
