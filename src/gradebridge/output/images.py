"""
Module: output.images

Purpose:
    Decode data-URI images and size them to a bounded footprint.

Key Functions:
    - decode_data_uri(): Data URI -> PIL Image
    - fit_within(): Scale (w, h) down to fit a box, preserving aspect

Key Classes:
    - ImageDecodeError: Payload is not a decodable image

Dependencies:
    - PIL: Image decoding
    - base64 (std)

Used By:
    - output.pdf_renderer: Drawing answers and diagrams
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
from typing import Tuple

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


class ImageDecodeError(Exception):
    """Image payload could not be decoded."""
    pass


def decode_data_uri(uri: str) -> Image.Image:
    """
    Decode a ``data:<mime>;base64,<payload>`` URI into a PIL image.

    Raises:
        ImageDecodeError: If the URI is malformed or not an image

    Example:
        >>> img = decode_data_uri("data:image/png;base64,iVBORw0...")
        >>> img.size
        (200, 100)
    """
    if not uri.startswith("data:"):
        raise ImageDecodeError("Not a data URI")
    header, sep, payload = uri.partition(",")
    if not sep:
        raise ImageDecodeError("Data URI has no payload")
    if not header.endswith(";base64"):
        raise ImageDecodeError(f"Unsupported data URI encoding: {header[:40]!r}")

    try:
        raw = base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 payload: {e}") from e

    try:
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"Unreadable image data: {e}") from e

    # ReportLab cannot place palette/alpha images reliably
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    return img


def fit_within(
    width: float,
    height: float,
    max_width: float,
    max_height: float,
) -> Tuple[float, float]:
    """
    Scale (width, height) down to fit inside the box; never scale up.

    Example:
        >>> fit_within(400, 200, 100, 100)
        (100.0, 50.0)
    """
    if width <= 0 or height <= 0:
        return 0.0, 0.0
    scale = min(1.0, max_width / width, max_height / height)
    return width * scale, height * scale
