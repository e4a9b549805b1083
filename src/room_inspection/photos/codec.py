"""Photo compression and circle annotation using Pillow.

Photos travel as ``data:image/jpeg;base64,...`` URLs so they can be embedded
directly in store documents next to the defect entry they belong to.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging

from PIL import Image, ImageDraw, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

MAX_WIDTH = 800
PHOTO_QUALITY = 60
MARKER_QUALITY = 70
MARKER_RADIUS = 50
MARKER_WIDTH = 8
MARKER_COLOR = "#EF4444"

_DATA_URL_PREFIX = "data:image/jpeg;base64,"


def _resample() -> int:
    resample_attr = getattr(Image, "Resampling", None)
    return resample_attr.LANCZOS if resample_attr else Image.LANCZOS


def to_data_url(image: Image.Image, quality: int) -> str:
    buffer = io.BytesIO()
    image.convert("RGB").save(buffer, format="JPEG", quality=quality)
    encoded = base64.b64encode(buffer.getvalue()).decode("utf-8")
    return f"{_DATA_URL_PREFIX}{encoded}"


def decode_data_url(photo: str) -> Image.Image:
    try:
        _, encoded = photo.split(",", 1)
        raw = base64.b64decode(encoded)
    except (ValueError, binascii.Error) as exc:
        raise ValueError(f"Invalid photo payload: {exc}") from exc
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError(f"Invalid photo payload: {exc}") from exc
    return image


def compress(raw: bytes, *, max_width: int = MAX_WIDTH, quality: int = PHOTO_QUALITY) -> str | None:
    """Re-encode a captured photo at a bounded width.

    Returns None when the bytes are not a decodable image, so the defect entry
    simply goes on without a photo.
    """
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            image = ImageOps.exif_transpose(img).convert("RGB")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        logger.warning("Could not decode photo (%d bytes): %s", len(raw), exc)
        return None

    if image.width > max_width:
        height = max(1, round(image.height * max_width / image.width))
        image = image.resize((max_width, height), _resample())
    return to_data_url(image, quality)


def image_size(photo: str) -> tuple[int, int]:
    image = decode_data_url(photo)
    return image.width, image.height


def annotate(
    photo: str,
    x: float,
    y: float,
    *,
    radius: int = MARKER_RADIUS,
    width: int = MARKER_WIDTH,
    color: str = MARKER_COLOR,
    quality: int = MARKER_QUALITY,
) -> str:
    """Draw a ring centred at (x, y), in the photo's own pixel space.

    Returns a new payload; markers accumulate when the result is annotated
    again.
    """
    canvas = decode_data_url(photo).convert("RGB")
    draw = ImageDraw.Draw(canvas)
    draw.ellipse([x - radius, y - radius, x + radius, y + radius], outline=color, width=width)
    return to_data_url(canvas, quality)
