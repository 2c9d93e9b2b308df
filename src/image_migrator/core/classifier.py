"""Decide what to do with a product's image field."""

from typing import Any

from .cdn_urls import is_cdn_url
from .models import Action, Decision, DEFAULT_CDN_MARKER

INLINE_PREFIX = "data:image/"
# Bare base64 has no prefix; anything this long is assumed to be a payload.
# Long signed URLs also cross this threshold and will be classified as inline.
INLINE_LENGTH_THRESHOLD = 1000


def looks_inline(image: str) -> bool:
    """Return True when ``image`` looks like an inline-encoded image payload."""
    return image.startswith(INLINE_PREFIX) or len(image) > INLINE_LENGTH_THRESHOLD


def classify(
    image: Any, cdn_marker: str = DEFAULT_CDN_MARKER, allow_remote: bool = False
) -> Decision:
    """
    Classify an image field. Rules are evaluated in order, first match wins:

    1. null or empty -> SKIP_ABSENT
    2. contains ``cdn_marker`` -> SKIP_ALREADY_MIGRATED
    3. not an inline payload -> SKIP_NOT_INLINE (MIGRATE_REMOTE if ``allow_remote``)
    4. otherwise -> MIGRATE carrying the payload

    Never raises.
    """
    if image is None:
        return Decision(action=Action.SKIP_ABSENT)

    text = image if isinstance(image, str) else str(image)
    if not text.strip():
        return Decision(action=Action.SKIP_ABSENT)

    if cdn_marker and is_cdn_url(text, cdn_marker):
        return Decision(action=Action.SKIP_ALREADY_MIGRATED)

    if not looks_inline(text):
        if allow_remote:
            return Decision(action=Action.MIGRATE_REMOTE, payload=text)
        return Decision(action=Action.SKIP_NOT_INLINE)

    return Decision(action=Action.MIGRATE, payload=text)
