"""Tests for image payload utilities."""

import base64

import pytest

from image_migrator.core.exceptions import DecodeError
from image_migrator.core.image_utils import (
    DEFAULT_MIME,
    build_public_id,
    decode_inline_image,
    describe_image,
    extension_for_mime,
    format_size,
)
from image_migrator.testing.fakes import create_test_image, to_data_uri


class TestDecodeInlineImage:
    """Tests for decode_inline_image."""

    @pytest.mark.parametrize(
        "data,mime",
        [
            (b"\x00\x01\x02\xff", "image/png"),
            (bytes(range(256)), "image/webp"),
            (b"GIF89a" + b"\x00" * 10, "image/gif"),
        ],
    )
    def test_data_uri_restores_bytes_and_mime(self, data, mime):
        decoded = decode_inline_image(to_data_uri(data, mime))
        assert decoded.data == data
        assert decoded.mime == mime

    def test_real_image_round_trip(self):
        png = create_test_image()
        decoded = decode_inline_image(to_data_uri(png, "image/png"))
        assert decoded.data == png
        assert describe_image(decoded.data)["format"] == "PNG"

    def test_bare_base64_defaults_to_jpeg(self):
        data = b"\xff\xd8\xff\xe0 jpeg-ish"
        decoded = decode_inline_image(base64.b64encode(data).decode())
        assert decoded.data == data
        assert decoded.mime == DEFAULT_MIME == "image/jpeg"

    def test_line_breaks_in_payload_are_ignored(self):
        encoded = base64.b64encode(b"hello image bytes").decode()
        wrapped = "data:image/png;base64," + encoded[:8] + "\n" + encoded[8:]
        assert decode_inline_image(wrapped).data == b"hello image bytes"

    @pytest.mark.parametrize(
        "payload",
        [
            "data:image/png;base64,not*valid*base64!",
            "###",
            "abc",  # bad padding
            "data:image/png;base64,",
        ],
    )
    def test_invalid_payload_raises_decode_error(self, payload):
        with pytest.raises(DecodeError):
            decode_inline_image(payload)


class TestDescribeImage:
    def test_reports_dimensions(self):
        metadata = describe_image(create_test_image(30, 20, "JPEG"))
        assert metadata == {"width": 30, "height": 20, "format": "JPEG"}

    def test_unreadable_bytes_return_empty(self):
        assert describe_image(b"not an image") == {}


class TestHelpers:
    def test_build_public_id(self):
        assert build_public_id("product", "42") == "product-42"
        assert build_public_id("", "42") == "42"

    @pytest.mark.parametrize(
        "mime,ext",
        [("image/png", "png"), ("IMAGE/JPEG", "jpg"), ("image/webp", "webp"), ("image/x-unknown", "jpg")],
    )
    def test_extension_for_mime(self, mime, ext):
        assert extension_for_mime(mime) == ext

    def test_format_size(self):
        assert format_size(2048) == "2.00 KB"
