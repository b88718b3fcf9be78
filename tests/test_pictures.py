"""Tests for picture encoding."""

import pytest
from PIL import Image

from timeline_editors.utils.pictures import decode_picture, encode_picture


@pytest.fixture
def png_path(tmp_path):
    path = tmp_path / "castle.png"
    Image.new("RGB", (4, 3), color=(200, 10, 10)).save(path, format="PNG")
    return path


def test_encode_picture_builds_data_url(png_path):
    picture = encode_picture(str(png_path))
    assert picture.picture.startswith("data:image/png;base64,")
    assert picture.title == "castle"


def test_decode_returns_original_bytes(png_path):
    picture = encode_picture(str(png_path))
    mime_type, data = decode_picture(picture.picture)
    assert mime_type == "image/png"
    assert data == png_path.read_bytes()


def test_encode_rejects_non_images(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("not an image")
    with pytest.raises(OSError):
        encode_picture(str(path))


def test_decode_rejects_other_urls():
    with pytest.raises(ValueError):
        decode_picture("https://example.com/castle.png")
