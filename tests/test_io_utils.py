import base64
from io import BytesIO

import pytest
from PIL import Image

from drplant.io_utils import base64_to_image, prepare_upload, split_data_uri


def _png_bytes(size=(2000, 1000), mode="RGBA"):
    buf = BytesIO()
    Image.new(mode, size, (0, 128, 0, 255) if mode == "RGBA" else (0, 128, 0)).save(buf, format="PNG")
    return buf.getvalue()


def test_prepare_upload_downscales_to_jpeg():
    uri = prepare_upload(_png_bytes(), max_side=512)
    mime, payload = split_data_uri(uri)
    assert mime == "image/jpeg"
    img = base64_to_image(uri)
    assert img.format == "JPEG"
    assert img.size == (512, 256)


def test_prepare_upload_never_upscales():
    img = base64_to_image(prepare_upload(_png_bytes((100, 50), mode="RGB")))
    assert img.size == (100, 50)


def test_prepare_upload_rejects_non_image():
    with pytest.raises(ValueError):
        prepare_upload(b"definitely not an image")


def test_base64_to_image_bad_input():
    assert base64_to_image("!!!") is None
    assert base64_to_image(base64.b64encode(b"text").decode()) is None


def test_split_data_uri_rejects_plain_base64():
    with pytest.raises(ValueError):
        split_data_uri("AAAA")
