"""
Drawing surfaces.

Every surface takes centimeters with a top-left origin; each backend converts
to its native unit (PDF points, bottom-left origin / raster pixels). Layout is
never computed here.
"""

from __future__ import annotations

from io import BytesIO
from typing import Tuple

from config import (
    MIME_TYPES,
    OUTPUT_PDF,
    OUTPUT_PNG,
    OUTPUT_RASTER_PDF,
    PAGE_BACKGROUND_COLOR,
    POINTS_PER_INCH,
)
from errors import ConfigurationError
from fonts import FontFace
from utils import cm_to_pt, cm_to_px

RGB = Tuple[int, int, int]


class Surface:
    """Minimal drawing capability shared by all backends."""

    output_format = ""

    def __init__(self, width_cm: float, height_cm: float):
        self.width_cm = width_cm
        self.height_cm = height_cm

    @property
    def mime_type(self) -> str:
        return MIME_TYPES[self.output_format]

    def fill_rect(self, left: float, top: float, width: float, height: float, color: RGB) -> None:
        raise NotImplementedError

    def draw_image(self, image, left: float, top: float, width: float, height: float) -> None:
        """Draw a PIL image stretched to exactly the given box (callers handle fit)."""
        raise NotImplementedError

    def draw_text(self, text: str, left: float, baseline: float, font: FontFace, size_pt: float, color: RGB) -> None:
        """Draw one line of text whose baseline starts at (left, baseline)."""
        raise NotImplementedError

    def finalize(self) -> bytes:
        raise NotImplementedError


def _new_pdf_canvas(buf: BytesIO, width_cm: float, height_cm: float):
    from reportlab.pdfgen import canvas

    # invariant=1: no creation date or random document id, so output is reproducible
    return canvas.Canvas(
        buf,
        pagesize=(cm_to_pt(width_cm), cm_to_pt(height_cm)),
        invariant=1,
        pageCompression=1,
    )


class PdfSurface(Surface):
    """Vector PDF via reportlab; page size equals the badge size, no margin."""

    output_format = OUTPUT_PDF

    def __init__(self, width_cm: float, height_cm: float):
        super().__init__(width_cm, height_cm)
        self._buf = BytesIO()
        self._canvas = _new_pdf_canvas(self._buf, width_cm, height_cm)

    def _pdf_y(self, top: float, height: float = 0.0) -> float:
        return cm_to_pt(self.height_cm - top - height)

    def fill_rect(self, left, top, width, height, color):
        c = self._canvas
        c.setFillColorRGB(*(v / 255.0 for v in color))
        c.rect(
            cm_to_pt(left),
            self._pdf_y(top, height),
            cm_to_pt(width),
            cm_to_pt(height),
            stroke=0,
            fill=1,
        )

    def draw_image(self, image, left, top, width, height):
        from reportlab.lib.utils import ImageReader

        self._canvas.drawImage(
            ImageReader(image),
            cm_to_pt(left),
            self._pdf_y(top, height),
            width=cm_to_pt(width),
            height=cm_to_pt(height),
            mask="auto" if image.mode == "RGBA" else None,
        )

    def draw_text(self, text, left, baseline, font, size_pt, color):
        c = self._canvas
        c.setFont(font.pdf_name, size_pt)
        c.setFillColorRGB(*(v / 255.0 for v in color))
        c.drawString(cm_to_pt(left), self._pdf_y(baseline), text)

    def finalize(self) -> bytes:
        self._canvas.showPage()
        self._canvas.save()
        return self._buf.getvalue()


class RasterSurface(Surface):
    """Pillow RGB canvas at a fixed DPI; PNG output carries the DPI so it prints at true size."""

    output_format = OUTPUT_PNG

    def __init__(self, width_cm: float, height_cm: float, dpi: int):
        from PIL import Image, ImageDraw

        super().__init__(width_cm, height_cm)
        self.dpi = dpi
        self.image = Image.new("RGB", (self._px(width_cm), self._px(height_cm)), PAGE_BACKGROUND_COLOR)
        self._draw = ImageDraw.Draw(self.image)

    def _px(self, value: float) -> int:
        return cm_to_px(value, self.dpi)

    def _box_px(self, left, top, width, height):
        # Round edges, not sizes, so adjacent boxes share edges without gaps
        x0, y0 = self._px(left), self._px(top)
        return x0, y0, self._px(left + width), self._px(top + height)

    def fill_rect(self, left, top, width, height, color):
        x0, y0, x1, y1 = self._box_px(left, top, width, height)
        if x1 <= x0 or y1 <= y0:
            return
        self._draw.rectangle([x0, y0, x1 - 1, y1 - 1], fill=tuple(color))

    def draw_image(self, image, left, top, width, height):
        from PIL import Image

        x0, y0, x1, y1 = self._box_px(left, top, width, height)
        if x1 <= x0 or y1 <= y0:
            return
        resized = image.resize((x1 - x0, y1 - y0), Image.Resampling.LANCZOS)
        if resized.mode == "RGBA":
            self.image.paste(resized, (x0, y0), resized)
        else:
            self.image.paste(resized.convert("RGB"), (x0, y0))

    def draw_text(self, text, left, baseline, font, size_pt, color):
        size_px = round(size_pt * self.dpi / POINTS_PER_INCH)
        self._draw.text(
            (self._px(left), self._px(baseline)),
            text,
            font=font.pil_font(size_px),
            fill=tuple(color),
            anchor="ls",  # left / baseline, same anchor as PDF drawString
        )

    def finalize(self) -> bytes:
        buf = BytesIO()
        self.image.save(buf, format="PNG", dpi=(self.dpi, self.dpi))
        return buf.getvalue()


class RasterPdfSurface(RasterSurface):
    """Rasterize with Pillow, then place the bitmap full-bleed on a PDF page of the badge size."""

    output_format = OUTPUT_RASTER_PDF

    def finalize(self) -> bytes:
        from reportlab.lib.utils import ImageReader

        buf = BytesIO()
        c = _new_pdf_canvas(buf, self.width_cm, self.height_cm)
        c.drawImage(
            ImageReader(self.image),
            0,
            0,
            width=cm_to_pt(self.width_cm),
            height=cm_to_pt(self.height_cm),
        )
        c.showPage()
        c.save()
        return buf.getvalue()


def create_surface(output_format: str, width_cm: float, height_cm: float, dpi: int) -> Surface:
    if output_format == OUTPUT_PDF:
        return PdfSurface(width_cm, height_cm)
    if output_format == OUTPUT_PNG:
        return RasterSurface(width_cm, height_cm, dpi)
    if output_format == OUTPUT_RASTER_PDF:
        return RasterPdfSurface(width_cm, height_cm, dpi)
    raise ConfigurationError(f"Unsupported output format {output_format!r}")
