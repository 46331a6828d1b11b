"""
Element renderers: draw one resolved element onto a surface.

Each renderer does all fetching, encoding and measuring first and only then
touches the surface, so an element that fails leaves its area empty.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from assets import AssetCache
from bindings import bind_field
from config import DEFAULT_TEXT_COLOR, PAGE_BACKGROUND_COLOR, POINTS_PER_CM, TEXT_ELLIPSIS
from errors import EncodingError, RenderError
from fonts import FontFace, resolve_font
from layout import contain_box, cover_crop, line_left, square_box
from models import (
    ELEMENT_BACKGROUND,
    ELEMENT_LOGO,
    ELEMENT_QRCODE,
    ELEMENT_TEXT,
    BoundingBox,
    RenderContext,
    RenderOptions,
)
from qr_codec import dark_runs, encode
from surfaces import Surface
from utils import hex_to_rgb

logger = logging.getLogger(__name__)

QR_DARK = (0, 0, 0)
QR_LIGHT = (255, 255, 255)


def wrap_text(
    text: str,
    font: FontFace,
    size_pt: float,
    max_width_cm: Optional[float],
    max_lines: int,
) -> List[str]:
    """
    Break text into at most ``max_lines`` lines no wider than ``max_width_cm``.

    Words wrap; a word wider than the box is split by characters. When text is
    left over, the last kept line ends with an ellipsis. Without a max width,
    only explicit newlines break lines.
    """

    def fits(candidate: str) -> bool:
        return max_width_cm is None or font.text_width_cm(candidate, size_pt) <= max_width_cm

    lines: List[str] = []
    for paragraph in text.splitlines():
        words = paragraph.split()
        if not words:
            continue
        if max_width_cm is None:
            lines.append(" ".join(words))
            continue
        cur = ""
        for word in words:
            candidate = f"{cur} {word}" if cur else word
            if fits(candidate):
                cur = candidate
                continue
            if cur:
                lines.append(cur)
                cur = ""
            while len(word) > 1 and not fits(word):
                cut = len(word) - 1
                while cut > 1 and not fits(word[:cut]):
                    cut -= 1
                lines.append(word[:cut])
                word = word[cut:]
            cur = word
        if cur:
            lines.append(cur)

    if len(lines) <= max_lines:
        return lines
    kept = lines[:max_lines]
    last = kept[-1]
    while last and not fits(last + TEXT_ELLIPSIS):
        last = last[:-1].rstrip()
    kept[-1] = last + TEXT_ELLIPSIS
    return kept


class ElementRenderer:
    """Base class; one instance per element type per compose() call."""

    def __init__(self, options: RenderOptions, images: AssetCache):
        self.options = options
        self.images = images

    def render(self, surface: Surface, box: BoundingBox, element, context: RenderContext) -> None:
        raise NotImplementedError


class TextRenderer(ElementRenderer):
    def render(self, surface, box, element, context):
        value = bind_field(element.field, context)
        if not value.strip():
            return

        template = context.template
        family = (template.font_family if template else None) or self.options.font_family
        try:
            font = resolve_font(family, element.font_weight, self.options.font_files)
        except FileNotFoundError as e:
            raise RenderError(element.id, e) from e
        color = hex_to_rgb(
            element.color or (template.primary_color if template else None) or DEFAULT_TEXT_COLOR
        )

        size = element.font_size
        lines = wrap_text(value, font, size, element.max_width, self.options.text_max_lines)
        line_step = size * self.options.line_height / POINTS_PER_CM
        placed: List[Tuple[str, float, float]] = []
        for i, line in enumerate(lines):
            left = line_left(box, font.text_width_cm(line, size), element.align)
            placed.append((line, left, box.top + i * line_step))

        for line, left, baseline in placed:
            surface.draw_text(line, left, baseline, font, size, color)


class QRCodeRenderer(ElementRenderer):
    def render(self, surface, box, element, context):
        try:
            matrix = encode(
                context.attendee.qr_uuid,
                self.options.qr_error_correction,
                self.options.qr_box_size,
            )
        except EncodingError as e:
            raise EncodingError(e.cause, element_id=element.id) from e

        square = square_box(box)
        module = square.width / matrix.module_count
        runs = list(dark_runs(matrix.modules))

        surface.fill_rect(square.left, square.top, square.width, square.height, QR_LIGHT)
        for row, start, length in runs:
            surface.fill_rect(
                square.left + start * module,
                square.top + row * module,
                length * module,
                module,
                QR_DARK,
            )


class LogoRenderer(ElementRenderer):
    def render(self, surface, box, element, context):
        ref = element.asset_ref or context.event.logo_ref
        if not ref:
            return
        image = self.images.image(ref)
        placed = contain_box(image.width, image.height, box)
        surface.draw_image(image, placed.left, placed.top, placed.width, placed.height)


class BackgroundRenderer(ElementRenderer):
    def render(self, surface, box, element, context):
        template = context.template
        ref = element.asset_ref or (template.background_image_ref if template else None)
        if not ref:
            surface.fill_rect(box.left, box.top, box.width, box.height, PAGE_BACKGROUND_COLOR)
            return
        image = self.images.image(ref)
        cropped = image.crop(cover_crop(image.width, image.height, box.width, box.height))
        surface.draw_image(cropped, box.left, box.top, box.width, box.height)


RENDERERS = {
    ELEMENT_TEXT: TextRenderer,
    ELEMENT_QRCODE: QRCodeRenderer,
    ELEMENT_LOGO: LogoRenderer,
    ELEMENT_BACKGROUND: BackgroundRenderer,
}


def build_renderers(options: RenderOptions, images: AssetCache) -> Dict[str, ElementRenderer]:
    return {etype: cls(options, images) for etype, cls in RENDERERS.items()}
