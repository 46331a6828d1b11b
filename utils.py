import re

from config import CM_PER_INCH, POINTS_PER_CM

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def safe_badge_filename(name: str, extension: str = "pdf", suffix: str = "") -> str:
    """
    Convert an attendee display name into a safe badge filename.
    - Uses only letters/numbers/spaces/_/-
    - Collapses whitespace to underscores
    - Falls back to 'badge'
    - Optional suffix (e.g. a short id) keeps same-name attendees apart
    """
    raw = "" if name is None else str(name)
    safe = re.sub(r"[^A-Za-z0-9 _-]+", "", raw).strip()
    safe = re.sub(r"\s+", "_", safe)
    if not safe:
        safe = "badge"
    if suffix:
        safe = f"{safe}_{re.sub(r'[^A-Za-z0-9_-]+', '', str(suffix))}"
    return f"{safe}.{extension.lstrip('.')}"


def hex_to_rgb(value, default=(0, 0, 0)):
    """'#1F2937' / '1f2937' / '#abc' -> (r, g, b); anything else -> default."""
    match = _HEX_COLOR.match((value or "").strip()) if isinstance(value, str) else None
    if not match:
        return default
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return tuple(int(digits[i : i + 2], 16) for i in (0, 2, 4))


def cm_to_pt(value: float) -> float:
    return value * POINTS_PER_CM


def cm_to_px(value: float, dpi: int) -> int:
    return int(round(value * dpi / CM_PER_INCH))
