"""
Badge data model.

Templates arrive from a document store as loosely typed dicts (designer JSON in
camelCase, database rows in snake_case). They are validated here, once, into
frozen dataclasses; the renderer never probes raw dicts.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from config import (
    ASSET_FETCH_TIMEOUT_S,
    DEFAULT_DPI,
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE_PT,
    DEFAULT_LOGO_HEIGHT_CM,
    DEFAULT_LOGO_WIDTH_CM,
    DEFAULT_QR_SIZE_CM,
    OUTPUT_FORMATS,
    OUTPUT_PDF,
    QR_BOX_SIZE,
    QR_ERROR_CORRECTION,
    TEXT_LINE_HEIGHT,
    TEXT_MAX_LINES,
)
from errors import ConfigurationError

logger = logging.getLogger(__name__)

ELEMENT_TEXT = "text"
ELEMENT_QRCODE = "qrcode"
ELEMENT_LOGO = "logo"
ELEMENT_BACKGROUND = "background"

ALIGNMENTS = ("left", "center", "right")
FONT_WEIGHTS = ("normal", "bold")


@dataclass(frozen=True)
class BoundingBox:
    """Placement box in centimeters, origin top-left."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class TemplateElement:
    id: str
    type: str
    x: float = 0.0
    y: float = 0.0
    width: Optional[float] = None
    height: Optional[float] = None
    visible: bool = True
    label: str = ""


@dataclass(frozen=True)
class TextElement(TemplateElement):
    type: str = ELEMENT_TEXT
    field: str = ""
    font_size: float = DEFAULT_FONT_SIZE_PT
    font_weight: str = "normal"
    align: str = "left"
    color: Optional[str] = None
    max_width: Optional[float] = None


@dataclass(frozen=True)
class QRCodeElement(TemplateElement):
    type: str = ELEMENT_QRCODE
    width: float = DEFAULT_QR_SIZE_CM
    height: float = DEFAULT_QR_SIZE_CM


@dataclass(frozen=True)
class LogoElement(TemplateElement):
    type: str = ELEMENT_LOGO
    width: float = DEFAULT_LOGO_WIDTH_CM
    height: float = DEFAULT_LOGO_HEIGHT_CM
    asset_ref: Optional[str] = None  # None -> event logo


@dataclass(frozen=True)
class BackgroundElement(TemplateElement):
    type: str = ELEMENT_BACKGROUND
    asset_ref: Optional[str] = None  # None -> template background


AnyElement = Union[TextElement, QRCodeElement, LogoElement, BackgroundElement]


@dataclass(frozen=True)
class BadgeTemplate:
    elements: Tuple[AnyElement, ...] = ()
    category: str = ""
    badge_width_cm: Optional[float] = None
    badge_height_cm: Optional[float] = None
    background_image_ref: Optional[str] = None
    font_family: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    show_qr_code: bool = True
    show_logo: bool = True
    is_active: bool = True
    event_id: Optional[str] = None


@dataclass(frozen=True)
class AttendeeRecord:
    name: str
    qr_uuid: str
    company: Optional[str] = None
    category: Optional[str] = None  # attendee segment, a.k.a. "type"
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    name_ar: Optional[str] = None
    company_ar: Optional[str] = None


@dataclass(frozen=True)
class EventRecord:
    name: str
    date: Union[date, str, None] = None
    location: Optional[str] = None
    logo_ref: Optional[str] = None
    name_ar: Optional[str] = None
    location_ar: Optional[str] = None


@dataclass(frozen=True)
class RenderContext:
    attendee: AttendeeRecord
    event: EventRecord
    template: Optional[BadgeTemplate] = None


@dataclass(frozen=True)
class RenderOptions:
    """Immutable per-call configuration (no ambient global settings)."""

    output_format: str = OUTPUT_PDF
    dpi: int = DEFAULT_DPI
    asset_timeout_s: float = ASSET_FETCH_TIMEOUT_S
    asset_store: Any = None  # assets.AssetStore; None -> assets.default_store()
    font_files: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    font_family: str = DEFAULT_FONT_FAMILY
    line_height: float = TEXT_LINE_HEIGHT
    text_max_lines: int = TEXT_MAX_LINES
    qr_error_correction: str = QR_ERROR_CORRECTION
    qr_box_size: int = QR_BOX_SIZE

    def __post_init__(self):
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"Unsupported output format {self.output_format!r}; expected one of {OUTPUT_FORMATS}"
            )
        if self.dpi <= 0:
            raise ConfigurationError(f"dpi must be > 0, got {self.dpi!r}")
        if self.text_max_lines < 1:
            raise ConfigurationError("text_max_lines must be >= 1")


@dataclass(frozen=True)
class ElementFailure:
    element_id: str
    kind: str
    message: str


@dataclass(frozen=True)
class RenderedDocument:
    content: bytes
    mime_type: str
    width_cm: float
    height_cm: float
    failures: Tuple[ElementFailure, ...] = ()

    @property
    def extension(self) -> str:
        return "png" if self.mime_type == "image/png" else "pdf"


# --- Boundary parsing -------------------------------------------------------


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """First present, non-None value among camelCase/snake_case spellings."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_float(value: Any, what: str) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{what} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise ConfigurationError(f"{what} must be a finite number, got {value!r}")
    return number


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "off")
    return bool(value)


def _clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return None
    return text


def element_from_dict(data: Mapping[str, Any], index: int = 0) -> Optional[AnyElement]:
    """
    Validate one stored element into its typed variant.

    Returns None (and logs) for an unknown element type. Raises
    ConfigurationError for shapes that cannot be rendered sensibly.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"element #{index} must be an object, got {type(data).__name__}")
    etype = str(data.get("type") or "").strip().lower()
    element_id = _clean_str(data.get("id")) or f"{etype or 'element'}-{index}"
    common: Dict[str, Any] = {
        "id": element_id,
        "x": _as_float(data.get("x"), f"{element_id}.x") or 0.0,
        "y": _as_float(data.get("y"), f"{element_id}.y") or 0.0,
        "visible": _as_bool(data.get("visible"), True),
        "label": str(data.get("label") or ""),
    }

    if etype == ELEMENT_TEXT:
        align = str(data.get("align") or "left").lower()
        weight = str(_pick(data, "fontWeight", "font_weight", default="normal")).lower()
        font_size = _as_float(_pick(data, "fontSize", "font_size"), f"{element_id}.fontSize")
        max_width = _as_float(_pick(data, "maxWidth", "max_width"), f"{element_id}.maxWidth")
        if font_size is not None and font_size <= 0:
            raise ConfigurationError(f"{element_id}.fontSize must be > 0")
        if max_width is not None and max_width <= 0:
            max_width = None
        return TextElement(
            **common,
            field=str(data.get("field") or ""),
            font_size=font_size or DEFAULT_FONT_SIZE_PT,
            font_weight=weight if weight in FONT_WEIGHTS else "normal",
            align=align if align in ALIGNMENTS else "left",
            color=_clean_str(data.get("color")),
            max_width=max_width,
        )

    if etype in (ELEMENT_QRCODE, ELEMENT_LOGO):
        default_w, default_h = (
            (DEFAULT_QR_SIZE_CM, DEFAULT_QR_SIZE_CM)
            if etype == ELEMENT_QRCODE
            else (DEFAULT_LOGO_WIDTH_CM, DEFAULT_LOGO_HEIGHT_CM)
        )
        width = _as_float(data.get("width"), f"{element_id}.width")
        height = _as_float(data.get("height"), f"{element_id}.height")
        width = default_w if width is None else width
        height = default_h if height is None else height
        if width <= 0 or height <= 0:
            raise ConfigurationError(
                f"{etype} element {element_id!r} needs width and height > 0 (got {width} x {height})"
            )
        if etype == ELEMENT_QRCODE:
            return QRCodeElement(**common, width=width, height=height)
        return LogoElement(
            **common,
            width=width,
            height=height,
            asset_ref=_clean_str(_pick(data, "assetRef", "asset_ref", "src")),
        )

    if etype == ELEMENT_BACKGROUND:
        return BackgroundElement(**common, asset_ref=_clean_str(_pick(data, "assetRef", "asset_ref", "src")))

    logger.warning("Dropping element %r with unknown type %r", element_id, etype)
    return None


def template_from_dict(data: Mapping[str, Any]) -> BadgeTemplate:
    """Validate a stored badge template (designer JSON or database row)."""
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"template must be an object, got {type(data).__name__}")
    raw_elements = data.get("elements") or []
    if not isinstance(raw_elements, (list, tuple)):
        raise ConfigurationError("template.elements must be a list")

    elements = []
    seen = set()
    for i, raw in enumerate(raw_elements):
        element = element_from_dict(raw, i)
        if element is None:
            continue
        if element.id in seen:
            raise ConfigurationError(f"duplicate element id {element.id!r}")
        seen.add(element.id)
        elements.append(element)

    return BadgeTemplate(
        elements=tuple(elements),
        category=str(_pick(data, "category", "type", default="") or "").strip().lower(),
        badge_width_cm=_as_float(_pick(data, "badgeWidthCm", "badge_width_cm"), "badge_width_cm"),
        badge_height_cm=_as_float(_pick(data, "badgeHeightCm", "badge_height_cm"), "badge_height_cm"),
        background_image_ref=_clean_str(
            _pick(data, "backgroundImageRef", "background_image_ref", "front_template")
        ),
        font_family=_clean_str(_pick(data, "fontFamily", "font_family")),
        primary_color=_clean_str(_pick(data, "primaryColor", "primary_color")),
        secondary_color=_clean_str(_pick(data, "secondaryColor", "secondary_color")),
        show_qr_code=_as_bool(_pick(data, "showQrCode", "show_qr_code"), True),
        show_logo=_as_bool(_pick(data, "showLogo", "show_logo"), True),
        is_active=_as_bool(_pick(data, "isActive", "is_active"), True),
        event_id=_clean_str(_pick(data, "eventId", "event_id")),
    )


def attendee_from_dict(data: Mapping[str, Any]) -> AttendeeRecord:
    return AttendeeRecord(
        name=_clean_str(data.get("name")) or "",
        qr_uuid=_clean_str(_pick(data, "qr_uuid", "qrUuid", "uuid")) or "",
        company=_clean_str(data.get("company")),
        category=_clean_str(_pick(data, "category", "type")),
        email=_clean_str(data.get("email")),
        phone=_clean_str(_pick(data, "phone", "mobile")),
        role=_clean_str(data.get("role")),
        name_ar=_clean_str(_pick(data, "name_ar", "nameAr")),
        company_ar=_clean_str(_pick(data, "company_ar", "companyAr")),
    )


def event_from_dict(data: Mapping[str, Any]) -> EventRecord:
    return EventRecord(
        name=_clean_str(data.get("name")) or "",
        date=data.get("date") or None,
        location=_clean_str(data.get("location")),
        logo_ref=_clean_str(_pick(data, "logo_ref", "logoRef", "logo_url", "logo")),
        name_ar=_clean_str(_pick(data, "name_ar", "nameAr")),
        location_ar=_clean_str(_pick(data, "location_ar", "locationAr")),
    )
