"""
Layout resolver: element declaration -> absolute box in centimeters.

Pure functions, no I/O and no font metrics. Every backend consumes these boxes;
anchoring math lives here and nowhere else.
"""

from __future__ import annotations

import math
from typing import Tuple

from config import DEFAULT_BADGE_HEIGHT_CM, DEFAULT_BADGE_WIDTH_CM
from errors import ConfigurationError
from models import (
    ELEMENT_BACKGROUND,
    ELEMENT_LOGO,
    ELEMENT_QRCODE,
    ELEMENT_TEXT,
    BadgeTemplate,
    BoundingBox,
    TemplateElement,
)

# Where a text line sits inside its box: line_left = box.left + (box.width - line_width) * factor
ALIGN_FACTORS = {"left": 0.0, "center": 0.5, "right": 1.0}


def page_size(template: BadgeTemplate) -> Tuple[float, float]:
    """Physical page size for a template, defaulting to 8.5 x 12.5 cm when unset."""
    width = DEFAULT_BADGE_WIDTH_CM if template.badge_width_cm is None else template.badge_width_cm
    height = DEFAULT_BADGE_HEIGHT_CM if template.badge_height_cm is None else template.badge_height_cm
    try:
        width, height = float(width), float(height)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Badge size must be numeric, got {width!r} x {height!r}") from e
    if not (math.isfinite(width) and math.isfinite(height) and width > 0 and height > 0):
        raise ConfigurationError(f"Badge size must be > 0 cm, got {width} x {height}")
    return width, height


def resolve(element: TemplateElement, page_width_cm: float, page_height_cm: float) -> BoundingBox:
    """
    Compute the placement box of one element.

    - qrcode / logo: (x, y) is the center of a width x height box.
    - text: (x, y) is the anchor point. The box spans max_width (or is a
      zero-width column at the anchor) and ``top`` is the first baseline;
      ``height`` is 0 because text has no declared box height.
    - background: the full page.

    Boxes are not clipped to the page.
    """
    etype = element.type
    if etype in (ELEMENT_QRCODE, ELEMENT_LOGO):
        width = float(element.width or 0)
        height = float(element.height or 0)
        return BoundingBox(element.x - width / 2, element.y - height / 2, width, height)

    if etype == ELEMENT_TEXT:
        max_width = getattr(element, "max_width", None) or 0.0
        factor = ALIGN_FACTORS.get(getattr(element, "align", "left"), 0.0)
        return BoundingBox(element.x - max_width * factor, element.y, max_width, 0.0)

    if etype == ELEMENT_BACKGROUND:
        return BoundingBox(0.0, 0.0, page_width_cm, page_height_cm)

    raise ConfigurationError(f"Cannot lay out element {element.id!r} of type {etype!r}")


def line_left(box: BoundingBox, line_width: float, align: str) -> float:
    """Left edge of one text line of ``line_width`` cm inside a resolved text box."""
    return box.left + (box.width - line_width) * ALIGN_FACTORS.get(align, 0.0)


def square_box(box: BoundingBox) -> BoundingBox:
    """Largest square centered in ``box`` (QR codes are never stretched)."""
    side = min(box.width, box.height)
    return BoundingBox(box.left + (box.width - side) / 2, box.top + (box.height - side) / 2, side, side)


def contain_box(image_width: float, image_height: float, box: BoundingBox) -> BoundingBox:
    """Scale an image to fit inside ``box`` keeping its aspect ratio, centered (may pad)."""
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Image size must be positive, got {image_width} x {image_height}")
    image_aspect = image_width / image_height
    box_aspect = box.width / box.height
    if image_aspect > box_aspect:
        # wider than the box: full width
        width, height = box.width, box.width / image_aspect
    else:
        width, height = box.height * image_aspect, box.height
    return BoundingBox(box.left + (box.width - width) / 2, box.top + (box.height - height) / 2, width, height)


def cover_crop(
    image_width: int, image_height: int, box_width: float, box_height: float
) -> Tuple[int, int, int, int]:
    """
    Centered crop window (left, top, right, bottom) in image pixels so that the
    cropped image has the box's aspect ratio (cover-fit: fills, never pads).
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Image size must be positive, got {image_width} x {image_height}")
    box_aspect = box_width / box_height
    if image_width / image_height > box_aspect:
        crop_w = max(1, int(round(image_height * box_aspect)))
        left = (image_width - crop_w) // 2
        return left, 0, left + crop_w, image_height
    crop_h = max(1, int(round(image_width / box_aspect)))
    top = (image_height - crop_h) // 2
    return 0, top, image_width, top + crop_h
