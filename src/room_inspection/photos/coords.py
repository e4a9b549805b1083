"""Map pointer positions on a scaled photo to the photo's native pixels."""

from __future__ import annotations

from room_inspection.errors import PhotoNotReadyError
from room_inspection.photos import codec

Point = tuple[float, float]
Size = tuple[float, float]


def _check_display(display_size: Size) -> None:
    if display_size[0] <= 0 or display_size[1] <= 0:
        raise ValueError(f"Display size must be positive, got {display_size}")


def display_to_image(click: Point, display_size: Size, native_size: Size | None) -> Point:
    """Convert a click relative to the element's top-left corner.

    Horizontal and vertical factors are independent, so a photo stretched to
    a box of a different aspect ratio still maps correctly.
    """
    if native_size is None:
        raise PhotoNotReadyError("Photo dimensions are not available yet")
    _check_display(display_size)
    return (
        click[0] * native_size[0] / display_size[0],
        click[1] * native_size[1] / display_size[1],
    )


def image_to_display(point: Point, display_size: Size, native_size: Size | None) -> Point:
    if native_size is None:
        raise PhotoNotReadyError("Photo dimensions are not available yet")
    _check_display(display_size)
    if native_size[0] <= 0 or native_size[1] <= 0:
        raise ValueError(f"Native size must be positive, got {native_size}")
    return (
        point[0] * display_size[0] / native_size[0],
        point[1] * display_size[1] / native_size[1],
    )


def uniform_scale_to_image(click: Point, display_width: float, reference_width: float) -> Point:
    """Map a click when only a single scale is known.

    The display box is itself scaled from a fixed reference width (the
    compressed photo width), so one factor applies to both axes.
    """
    if display_width <= 0:
        raise ValueError(f"Display width must be positive, got {display_width}")
    scale = reference_width / display_width
    return click[0] * scale, click[1] * scale


def mark_click(photo: str, click: Point, display_size: Size, **marker_options) -> str:
    """Annotate the photo where the user clicked on its on-screen rendering."""
    x, y = display_to_image(click, display_size, codec.image_size(photo))
    return codec.annotate(photo, x, y, **marker_options)
