"""
Font resolution shared by every backend.

A FontFace is one TrueType file registered with reportlab (PDF glyphs and all
text measurement) and loadable by Pillow (raster glyphs). Measuring with one
metric source is what keeps line wrapping identical across outputs.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Mapping, Optional

from config import DEFAULT_FONT_FAMILY, FONT_SEARCH_DIRS, POINTS_PER_CM

logger = logging.getLogger(__name__)

_REGISTER_LOCK = threading.Lock()
_REGISTERED: Dict[str, str] = {}  # font file path -> reportlab font name


@dataclass(frozen=True)
class FontFace:
    family: str
    weight: str
    path: str
    pdf_name: str

    def text_width_cm(self, text: str, size_pt: float) -> float:
        from reportlab.pdfbase.pdfmetrics import stringWidth

        return stringWidth(text, self.pdf_name, size_pt) / POINTS_PER_CM

    def pil_font(self, size_px: int):
        return _pil_font(self.path, max(1, int(size_px)))


@lru_cache(maxsize=64)
def _pil_font(path: str, size_px: int):
    from PIL import ImageFont

    return ImageFont.truetype(path, size_px)


def bundled_font_path(weight: str = "normal") -> str:
    """Vera ships inside reportlab, so this path always exists."""
    import reportlab

    name = "VeraBd.ttf" if weight == "bold" else "Vera.ttf"
    return str(Path(reportlab.__file__).resolve().parent / "fonts" / name)


def _normalize_family(family: Optional[str]) -> str:
    # CSS-style stacks ("Inter, Arial, sans-serif") -> first entry
    first = (family or "").split(",")[0].strip().strip("'\"")
    return first or DEFAULT_FONT_FAMILY


@lru_cache(maxsize=128)
def _find_system_font(family: str, weight: str) -> Optional[str]:
    compact = family.replace(" ", "")
    if weight == "bold":
        names = [f"{compact}-Bold.ttf", f"{compact}Bold.ttf", f"{compact}bd.ttf", f"{family} Bold.ttf"]
    else:
        names = [f"{compact}-Regular.ttf", f"{compact}.ttf", f"{family}.ttf"]
    wanted = {n.lower() for n in names}
    for search_dir in FONT_SEARCH_DIRS:
        root_dir = os.path.expanduser(search_dir)
        if not os.path.isdir(root_dir):
            continue
        for root, _dirs, files in os.walk(root_dir):
            for file in files:
                if file.lower() in wanted:
                    return os.path.join(root, file)
    return None


def _register(path: str) -> str:
    """Register a TTF with reportlab once per process; returns its font name."""
    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.ttfonts import TTFont

    with _REGISTER_LOCK:
        name = _REGISTERED.get(path)
        if name is not None:
            return name
        base = f"Badge-{Path(path).stem}"
        name = base
        taken = set(_REGISTERED.values())
        n = 2
        while name in taken:
            name = f"{base}-{n}"
            n += 1
        pdfmetrics.registerFont(TTFont(name, path))
        _REGISTERED[path] = name
        return name


def resolve_font(
    family: Optional[str],
    weight: str = "normal",
    font_files: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> FontFace:
    """
    Pick a font file for (family, weight).

    Order: explicit ``font_files[family][weight]``, installed fonts matching the
    family name, then reportlab's bundled Vera. Files reportlab cannot embed
    (e.g. CFF-flavoured OTF) are skipped.
    """
    from reportlab.pdfbase.ttfonts import TTFError

    fam = _normalize_family(family)
    weight = "bold" if weight == "bold" else "normal"

    candidates = []
    configured = (font_files or {}).get(fam) or {}
    if configured.get(weight):
        candidates.append(configured[weight])
    elif configured.get("normal"):
        candidates.append(configured["normal"])
    if fam.lower() != DEFAULT_FONT_FAMILY.lower():
        found = _find_system_font(fam, weight)
        if found:
            candidates.append(found)
    candidates.append(bundled_font_path(weight))

    for path in candidates:
        path = os.path.expanduser(path)
        if not os.path.exists(path):
            logger.warning("Font file %s for %s/%s does not exist", path, fam, weight)
            continue
        try:
            return FontFace(family=fam, weight=weight, path=path, pdf_name=_register(path))
        except (TTFError, OSError) as e:
            logger.warning("Skipping font %s: %s", path, e)
    raise FileNotFoundError(f"No usable font for {fam}/{weight}")
