"""Image payload utilities for the image migrator."""

import base64
import binascii
import io
import re
from typing import Any, Dict

from PIL import Image, UnidentifiedImageError

from .exceptions import DecodeError
from .models import DecodedImage

DEFAULT_MIME = "image/jpeg"

_DATA_URI = re.compile(r"^data:([^;,]+);base64,(.*)$", re.DOTALL)
_WHITESPACE = re.compile(r"\s+")

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "image/bmp": "bmp",
    "image/avif": "avif",
}


def decode_inline_image(payload: str) -> DecodedImage:
    """
    Decode an inline image payload into bytes.

    Accepts ``data:<mime>;base64,<data>`` or a bare base64 string, which is
    assumed to be a JPEG.

    Args:
        payload: The inline payload as stored in the image column

    Returns:
        DecodedImage with the raw bytes and MIME type

    Raises:
        DecodeError: If the base64 part contains invalid characters or padding
    """
    match = _DATA_URI.match(payload.strip())
    if match:
        mime, data = match.group(1).strip(), match.group(2)
    else:
        mime, data = DEFAULT_MIME, payload

    data = _WHITESPACE.sub("", data)
    if not data:
        raise DecodeError("Inline payload has no image data")

    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Invalid base64 payload: {exc}") from exc

    return DecodedImage(data=raw, mime=mime)


def describe_image(data: bytes) -> Dict[str, Any]:
    """Return width, height and format of ``data``, or ``{}`` if Pillow cannot read it."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return {
                "width": image.size[0],
                "height": image.size[1],
                "format": image.format or "",
            }
    except (UnidentifiedImageError, OSError, SyntaxError, Image.DecompressionBombError):
        return {}


def extension_for_mime(mime: str) -> str:
    return _EXTENSIONS.get(mime.lower(), "jpg")


def build_public_id(prefix: str, record_id: str) -> str:
    """Stable destination id, so a re-upload overwrites instead of duplicating."""
    return f"{prefix}-{record_id}" if prefix else str(record_id)


def format_size(size: int) -> str:
    return f"{size / 1024:.2f} KB"
