"""
QR payload codec.

The payload is always the attendee's stable identifier (qr_uuid), never a
display name: editing a name must not invalidate badges already printed.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Tuple

from config import QR_BORDER_MODULES, QR_BOX_SIZE, QR_ERROR_CORRECTION
from errors import EncodingError

ERROR_CORRECTION_LEVELS = ("L", "M", "Q", "H")


@dataclass(frozen=True)
class MatrixImage:
    """Encoded QR symbol: module matrix (quiet zone included) plus a PNG rendering."""

    modules: Tuple[Tuple[bool, ...], ...]
    png: bytes
    error_correction: str
    box_size: int
    border: int

    @property
    def module_count(self) -> int:
        return len(self.modules)

    @property
    def size(self) -> int:
        """Edge length of the PNG in pixels."""
        return self.module_count * self.box_size

    def to_image(self):
        from PIL import Image

        return Image.open(BytesIO(self.png))


def _qrcode_level(level: str):
    import qrcode

    return {
        "L": qrcode.constants.ERROR_CORRECT_L,
        "M": qrcode.constants.ERROR_CORRECT_M,
        "Q": qrcode.constants.ERROR_CORRECT_Q,
        "H": qrcode.constants.ERROR_CORRECT_H,
    }[level]


def encode(
    payload: str,
    error_correction: str = QR_ERROR_CORRECTION,
    pixel_size: int = QR_BOX_SIZE,
    border: int = QR_BORDER_MODULES,
) -> MatrixImage:
    """
    Encode a payload into a QR matrix.

    Args:
        payload: Stable attendee identifier (UUID-like string)
        error_correction: One of L, M, Q, H
        pixel_size: Pixels per module in the PNG rendering
        border: Quiet-zone width in modules

    Returns:
        MatrixImage; identical inputs give byte-identical output
    """
    data = "" if payload is None else str(payload).strip()
    if not data:
        raise EncodingError("QR payload is empty (attendee has no identifier)")
    level = str(error_correction or "").upper()
    if level not in ERROR_CORRECTION_LEVELS:
        raise EncodingError(f"Unknown error correction level {error_correction!r}")
    if int(pixel_size) < 1 or int(border) < 0:
        raise EncodingError(f"Invalid QR geometry: pixel_size={pixel_size!r}, border={border!r}")

    import qrcode
    from qrcode.exceptions import DataOverflowError

    qr = qrcode.QRCode(
        version=None,  # smallest version that fits
        error_correction=_qrcode_level(level),
        box_size=int(pixel_size),
        border=int(border),
    )
    try:
        qr.add_data(data)
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as e:
        raise EncodingError(f"QR payload cannot be encoded: {e}") from e

    modules = tuple(tuple(bool(cell) for cell in row) for row in qr.get_matrix())

    qr_img = qr.make_image(fill_color="black", back_color="white")
    pil_img = qr_img.get_image() if hasattr(qr_img, "get_image") else qr_img
    buf = BytesIO()
    pil_img.save(buf, format="PNG")

    return MatrixImage(
        modules=modules,
        png=buf.getvalue(),
        error_correction=level,
        box_size=int(pixel_size),
        border=int(border),
    )


def dark_runs(modules: Tuple[Tuple[bool, ...], ...]):
    """Yield (row, start_col, length) for each horizontal run of dark modules."""
    for r, row in enumerate(modules):
        start = None
        for c, dark in enumerate(row):
            if dark and start is None:
                start = c
            elif not dark and start is not None:
                yield r, start, c - start
                start = None
        if start is not None:
            yield r, start, len(row) - start
