"""Cloudinary delivery URL helpers."""

import re
from typing import Dict, Optional

from .models import DEFAULT_CDN_MARKER

PLACEHOLDER_IMAGE = "/images/placeholder-product.svg"

TRANSFORMATIONS: Dict[str, str] = {
    "thumbnail": "w_200,h_200,c_fill,q_auto,f_auto",
    "card": "w_400,h_400,c_fill,q_auto,f_auto",
    "detail": "w_800,h_800,c_fit,q_auto,f_auto",
    "original": "",
}

_VERSIONED_PATH = re.compile(r"/v\d+/(.+)\.(jpg|jpeg|png|webp|gif)(?:\?.*)?$")


def build_delivery_url(cloud_name: str, public_id: str, size: str = "card") -> str:
    """
    Build the delivery URL of an uploaded asset with a named transformation.

    Args:
        cloud_name: Cloudinary cloud name
        public_id: Public id including the folder, e.g. "products/product-123"
        size: One of TRANSFORMATIONS

    Returns:
        The delivery URL, or the placeholder image path when ``public_id`` is empty

    Raises:
        ValueError: If ``size`` is not a known transformation
    """
    if not public_id:
        return PLACEHOLDER_IMAGE

    if size not in TRANSFORMATIONS:
        raise ValueError(f"Unknown transformation: {size}")

    base = f"https://res.cloudinary.com/{cloud_name}/image/upload"
    transform = TRANSFORMATIONS[size]
    return f"{base}/{transform}/{public_id}" if transform else f"{base}/{public_id}"


def is_cdn_url(url: Optional[str], marker: str = DEFAULT_CDN_MARKER) -> bool:
    return bool(url) and marker in url  # type: ignore[operator]


def extract_public_id(url: str) -> Optional[str]:
    """Public id of a versioned delivery URL, e.g. ``.../v123/products/item.jpg`` -> ``products/item``."""
    match = _VERSIONED_PATH.search(url or "")
    return match.group(1) if match else None


_TRANSFORMATION_SEGMENT = re.compile(r"^(?!v\d+/)[a-z]{1,3}_[^/]*/")

RESPONSIVE_WIDTHS: Dict[str, int] = {
    "thumbnail": 150,
    "small": 400,
    "medium": 800,
    "large": 1200,
}


def optimized_url(
    url: str,
    width: int = 400,
    image_format: str = "auto",
    quality: str = "auto",
    marker: str = DEFAULT_CDN_MARKER,
) -> str:
    """
    Insert a resize and auto-format transformation into a delivery URL.

    ``.../image/upload/v123/products/item.jpg`` becomes
    ``.../image/upload/f_auto,w_400,q_auto,c_fill,g_auto/v123/products/item.jpg``.
    URLs that are not on the CDN, or that already carry a transformation,
    are returned unchanged.
    """
    if not url:
        return ""
    if not is_cdn_url(url, marker):
        return url

    head, sep, tail = url.partition("/upload/")
    if not sep or "/upload/" in tail or _TRANSFORMATION_SEGMENT.match(tail):
        return url

    transformation = ",".join(
        [f"f_{image_format}", f"w_{width}", f"q_{quality}", "c_fill", "g_auto"]
    )
    return f"{head}/upload/{transformation}/{tail}"


def responsive_urls(url: str, marker: str = DEFAULT_CDN_MARKER) -> Dict[str, str]:
    """Variants of one image for a ``<picture>`` element, by width and by format."""
    urls = {
        name: optimized_url(url, width, marker=marker)
        for name, width in RESPONSIVE_WIDTHS.items()
    }
    urls["avif"] = optimized_url(url, 400, "avif", marker=marker)
    urls["webp"] = optimized_url(url, 400, "webp", marker=marker)
    return urls
