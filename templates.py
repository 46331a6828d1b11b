"""
Template-store helpers.

The renderer itself trusts whatever template it is handed; these helpers are
what a caller uses to produce one: load stored templates, pick the active one
for an attendee segment, start from the designer defaults, or fall back to
the fixed legacy layout when a template has no designed elements.
"""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from config import DEFAULT_BADGE_WIDTH_CM, DEFAULT_QR_SIZE_CM
from errors import ConfigurationError
from models import (
    AnyElement,
    BadgeTemplate,
    LogoElement,
    QRCodeElement,
    RenderContext,
    TextElement,
    template_from_dict,
)

# Designer defaults for an 8.5 x 12.5 cm badge (positions in cm, centered on x = 4.25)
_DEFAULT_ELEMENTS = [
    {"id": "logo", "type": "logo", "label": "Event Logo", "x": 4.25, "y": 1.5, "width": 4, "height": 2},
    {"id": "event_name", "type": "text", "label": "Event Name", "field": "event.name",
     "x": 4.25, "y": 3, "fontSize": 16, "fontWeight": "bold", "align": "center", "color": "#1F2937", "maxWidth": 7.5},
    {"id": "event_date", "type": "text", "label": "Event Date", "field": "event.date",
     "x": 4.25, "y": 3.7, "fontSize": 11, "align": "center", "color": "#6B7280", "maxWidth": 7.5},
    {"id": "event_location", "type": "text", "label": "Event Location", "field": "event.location",
     "x": 4.25, "y": 4.2, "fontSize": 11, "align": "center", "color": "#6B7280", "maxWidth": 7.5},
    {"id": "attendee_name", "type": "text", "label": "Attendee Name", "field": "attendee.name",
     "x": 4.25, "y": 5.5, "fontSize": 24, "fontWeight": "bold", "align": "center", "color": "#000000", "maxWidth": 7.5},
    {"id": "company", "type": "text", "label": "Company", "field": "attendee.company",
     "x": 4.25, "y": 6.5, "fontSize": 16, "align": "center", "color": "#4B5563", "maxWidth": 7.5},
    {"id": "category", "type": "text", "label": "Category", "field": "attendee.type",
     "x": 4.25, "y": 7.2, "fontSize": 12, "fontWeight": "bold", "align": "center", "color": "#059669", "maxWidth": 7.5},
    {"id": "qr_code", "type": "qrcode", "label": "QR Code", "x": 4.25, "y": 9.75, "width": 2.5, "height": 2.5},
    {"id": "qr_uuid", "type": "text", "label": "QR UUID", "field": "attendee.qr_uuid",
     "x": 4.25, "y": 11.6, "fontSize": 8, "align": "center", "color": "#000000", "maxWidth": 7.5},
    {"id": "qr_helper", "type": "text", "label": "QR Helper Text", "field": "static:Scan QR or enter code manually",
     "x": 4.25, "y": 12.1, "fontSize": 7, "align": "center", "color": "#9CA3AF", "maxWidth": 7.5},
]


def default_elements() -> List[dict]:
    """Fresh copy of the designer's starting layout, as stored dicts."""
    return deepcopy(_DEFAULT_ELEMENTS)


def default_template(category: str = "", **fields) -> BadgeTemplate:
    data = {"category": category, "elements": default_elements()}
    data.update(fields)
    return template_from_dict(data)


def legacy_elements(
    template: BadgeTemplate, context: RenderContext, page_width_cm: float = DEFAULT_BADGE_WIDTH_CM
) -> Tuple[AnyElement, ...]:
    """Fixed layout used when a template carries no designed elements."""
    center = page_width_cm / 2
    text_width = max(page_width_cm - 1.0, 0.5)
    elements: List[AnyElement] = []
    if template.show_logo and context.event.logo_ref:
        elements.append(LogoElement(id="legacy-logo", x=center, y=1.5, width=4, height=2))
    elements.append(
        TextElement(id="legacy-event-name", x=center, y=3, field="event.name", font_size=16,
                    font_weight="bold", align="center", color=template.secondary_color, max_width=text_width)
    )
    elements.append(
        TextElement(id="legacy-attendee-name", x=center, y=5.5, field="attendee.name", font_size=24,
                    font_weight="bold", align="center", color=template.primary_color, max_width=text_width)
    )
    if context.attendee.company:
        elements.append(
            TextElement(id="legacy-company", x=center, y=6.5, field="attendee.company", font_size=16,
                        align="center", color=template.secondary_color, max_width=text_width)
        )
    if template.show_qr_code:
        elements.append(
            QRCodeElement(id="legacy-qr", x=center, y=8.5 + DEFAULT_QR_SIZE_CM / 2,
                          width=DEFAULT_QR_SIZE_CM, height=DEFAULT_QR_SIZE_CM)
        )
    return tuple(elements)


def select_template(templates: Iterable[BadgeTemplate], category: Optional[str]) -> BadgeTemplate:
    """
    Active template for an attendee segment.

    Raises:
        ConfigurationError: no active template matches the category
    """
    wanted = (category or "").strip().lower()
    for template in templates:
        if template.is_active and template.category == wanted:
            return template
    raise ConfigurationError(f"No active badge template for category {wanted or '(none)'!r}")


def load_templates(path: str) -> List[BadgeTemplate]:
    """Read one template object, a list of them, or {"templates": [...]} from a JSON file."""
    try:
        with open(Path(path), "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read templates from {path}: {e}") from e
    if isinstance(data, dict) and isinstance(data.get("templates"), list):
        data = data["templates"]
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ConfigurationError(f"{path} must contain a template object or a list of templates")
    return [template_from_dict(item) for item in data]
