"""
Text field bindings: a template's ``field`` key -> the string printed on the badge.

Fixed table; unknown keys print nothing. ``static:<text>`` prints the literal text.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Dict, Optional

from models import RenderContext

STATIC_PREFIX = "static:"
COMPANY_FALLBACK = "Freelancer"
CATEGORY_FALLBACK = "Attendee"


def format_event_date(value) -> str:
    """Long human date, e.g. 'October 26, 2025'. ISO strings are parsed; other strings pass through."""
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        text = value.strip()
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return text
    if isinstance(value, (date, datetime)):
        return value.strftime("%B %d, %Y")
    return str(value)


def format_category(value: Optional[str]) -> str:
    """First letter upper-cased, rest untouched ('vip guest' -> 'Vip guest')."""
    text = (value or "").strip() or CATEGORY_FALLBACK
    return text[:1].upper() + text[1:]


def _text(value) -> str:
    return "" if value is None else str(value)


_BINDINGS: Dict[str, Callable[[RenderContext], str]] = {
    "event.name": lambda c: _text(c.event.name),
    "event.name_ar": lambda c: _text(c.event.name_ar),
    "event.date": lambda c: format_event_date(c.event.date),
    "event.location": lambda c: _text(c.event.location),
    "event.location_ar": lambda c: _text(c.event.location_ar),
    "attendee.name": lambda c: _text(c.attendee.name),
    "attendee.name_ar": lambda c: _text(c.attendee.name_ar),
    "attendee.company": lambda c: c.attendee.company or COMPANY_FALLBACK,
    "attendee.company_ar": lambda c: _text(c.attendee.company_ar),
    "attendee.category": lambda c: format_category(c.attendee.category),
    "attendee.type": lambda c: format_category(c.attendee.category),
    "attendee.email": lambda c: _text(c.attendee.email),
    "attendee.phone": lambda c: _text(c.attendee.phone),
    "attendee.role": lambda c: _text(c.attendee.role),
    "attendee.qr_uuid": lambda c: _text(c.attendee.qr_uuid),
}


def bind_field(field: Optional[str], context: RenderContext) -> str:
    """Resolve a text element's field key against the render context."""
    if not field:
        return ""
    if field.startswith(STATIC_PREFIX):
        return field[len(STATIC_PREFIX):]
    getter = _BINDINGS.get(field)
    if getter is None:
        return ""
    return getter(context)
