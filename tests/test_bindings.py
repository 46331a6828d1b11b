from datetime import date

from bindings import bind_field, format_category, format_event_date
from models import AttendeeRecord, EventRecord, RenderContext


def _context(**attendee_overrides):
    attendee = dict(
        name="Layla Haddad",
        qr_uuid="0b9f3c1e-6f1e-4a53-9a55-3c3f1f7f2d11",
        company="Acme",
        category="exhibitor",
        email="layla@example.com",
        phone="+971 50 000 0000",
        role="Speaker",
        name_ar="ليلى حداد",
    )
    attendee.update(attendee_overrides)
    event = EventRecord(name="Expo 2025", date=date(2025, 10, 26), location="Dubai", location_ar="دبي")
    return RenderContext(attendee=AttendeeRecord(**attendee), event=event)


def test_attendee_and_event_fields():
    ctx = _context()
    assert bind_field("attendee.name", ctx) == "Layla Haddad"
    assert bind_field("attendee.email", ctx) == "layla@example.com"
    assert bind_field("attendee.qr_uuid", ctx) == "0b9f3c1e-6f1e-4a53-9a55-3c3f1f7f2d11"
    assert bind_field("attendee.role", ctx) == "Speaker"
    assert bind_field("event.name", ctx) == "Expo 2025"
    assert bind_field("event.location", ctx) == "Dubai"


def test_event_date_is_long_human_date():
    assert bind_field("event.date", _context()) == "October 26, 2025"
    assert format_event_date("2025-03-05") == "March 05, 2025"
    assert format_event_date("next spring") == "next spring"
    assert format_event_date(None) == ""


def test_company_falls_back_to_freelancer():
    assert bind_field("attendee.company", _context(company=None)) == "Freelancer"
    assert bind_field("attendee.company", _context(company="")) == "Freelancer"


def test_category_and_type_are_the_same_segment():
    ctx = _context(category="visitor")
    assert bind_field("attendee.category", ctx) == "Visitor"
    assert bind_field("attendee.type", ctx) == "Visitor"
    assert format_category("vip guest") == "Vip guest"
    assert format_category(None) == "Attendee"


def test_static_prefix_ignores_context():
    assert bind_field("static:Scan QR or enter code manually", _context()) == "Scan QR or enter code manually"
    assert bind_field("static:", _context()) == ""


def test_unknown_or_missing_field_renders_empty():
    assert bind_field("attendee.shoe_size", _context()) == ""
    assert bind_field("", _context()) == ""
    assert bind_field(None, _context()) == ""


def test_rtl_strings_pass_through():
    ctx = _context()
    assert bind_field("attendee.name_ar", ctx) == "ليلى حداد"
    assert bind_field("event.location_ar", ctx) == "دبي"
    assert bind_field("attendee.company_ar", ctx) == ""
