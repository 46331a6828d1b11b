import pytest

from errors import ConfigurationError
from models import (
    BackgroundElement,
    LogoElement,
    QRCodeElement,
    RenderOptions,
    RenderedDocument,
    TextElement,
    attendee_from_dict,
    element_from_dict,
    event_from_dict,
    template_from_dict,
)


def test_text_element_defaults():
    el = element_from_dict({"id": "n", "type": "text", "field": "attendee.name", "x": 1, "y": 2})
    assert isinstance(el, TextElement)
    assert el.font_size == 16
    assert el.font_weight == "normal"
    assert el.align == "left"
    assert el.max_width is None
    assert el.visible is True


def test_text_element_camel_and_snake_case_keys():
    camel = element_from_dict(
        {"id": "a", "type": "text", "fontSize": 20, "fontWeight": "bold", "maxWidth": 5, "align": "center"}
    )
    snake = element_from_dict(
        {"id": "a", "type": "text", "font_size": 20, "font_weight": "bold", "max_width": 5, "align": "center"}
    )
    assert camel == snake
    assert camel.font_size == 20
    assert camel.font_weight == "bold"
    assert camel.max_width == 5


def test_text_element_bad_values_normalized():
    el = element_from_dict({"id": "t", "type": "text", "align": "justify", "fontWeight": "900", "maxWidth": 0})
    assert el.align == "left"
    assert el.font_weight == "normal"
    assert el.max_width is None


def test_text_element_non_positive_font_size_rejected():
    with pytest.raises(ConfigurationError):
        element_from_dict({"id": "t", "type": "text", "fontSize": 0})


def test_qr_and_logo_defaults():
    qr = element_from_dict({"id": "q", "type": "qrcode", "x": 4, "y": 9})
    logo = element_from_dict({"id": "l", "type": "logo", "x": 4, "y": 1})
    assert isinstance(qr, QRCodeElement)
    assert (qr.width, qr.height) == (2.5, 2.5)
    assert isinstance(logo, LogoElement)
    assert (logo.width, logo.height) == (3.0, 1.5)
    assert logo.asset_ref is None


@pytest.mark.parametrize("etype", ["qrcode", "logo"])
def test_explicit_non_positive_size_is_configuration_error(etype):
    with pytest.raises(ConfigurationError):
        element_from_dict({"id": "x", "type": etype, "width": 0, "height": 2})


def test_non_numeric_coordinate_is_configuration_error():
    with pytest.raises(ConfigurationError):
        element_from_dict({"id": "x", "type": "qrcode", "x": "left"})


def test_unknown_element_type_is_dropped():
    tpl = template_from_dict(
        {"elements": [{"id": "s", "type": "sparkle"}, {"id": "q", "type": "qrcode", "x": 4, "y": 9}]}
    )
    assert [e.id for e in tpl.elements] == ["q"]


def test_missing_id_gets_positional_id():
    el = element_from_dict({"type": "background"}, index=3)
    assert isinstance(el, BackgroundElement)
    assert el.id == "background-3"


def test_visible_accepts_string_flags():
    assert element_from_dict({"id": "a", "type": "text", "visible": "false"}).visible is False
    assert element_from_dict({"id": "a", "type": "text", "visible": 0}).visible is False
    assert element_from_dict({"id": "a", "type": "text", "visible": "yes"}).visible is True


def test_duplicate_element_ids_rejected():
    with pytest.raises(ConfigurationError):
        template_from_dict(
            {"elements": [{"id": "a", "type": "text"}, {"id": "a", "type": "qrcode"}]}
        )


def test_template_from_database_row():
    tpl = template_from_dict(
        {
            "category": " Speaker ",
            "badge_width_cm": "9",
            "badge_height_cm": 13,
            "front_template": "templates/speaker.png",
            "primary_color": "#112233",
            "show_qr_code": 0,
            "is_active": True,
        }
    )
    assert tpl.category == "speaker"
    assert tpl.badge_width_cm == 9.0
    assert tpl.badge_height_cm == 13.0
    assert tpl.background_image_ref == "templates/speaker.png"
    assert tpl.primary_color == "#112233"
    assert tpl.show_qr_code is False
    assert tpl.elements == ()


def test_template_elements_must_be_a_list():
    with pytest.raises(ConfigurationError):
        template_from_dict({"elements": {"id": "a"}})


def test_attendee_and_event_from_dict():
    attendee = attendee_from_dict({"name": " Jane ", "qrUuid": "u-1", "type": "VIP", "company": "nan"})
    event = event_from_dict({"name": "Expo", "date": "2025-10-26", "logo_url": "https://x/logo.png"})
    assert attendee.name == "Jane"
    assert attendee.qr_uuid == "u-1"
    assert attendee.category == "VIP"
    assert attendee.company is None
    assert event.logo_ref == "https://x/logo.png"
    assert event.date == "2025-10-26"


def test_render_options_validation():
    with pytest.raises(ConfigurationError):
        RenderOptions(output_format="svg")
    with pytest.raises(ConfigurationError):
        RenderOptions(dpi=0)
    with pytest.raises(ConfigurationError):
        RenderOptions(text_max_lines=0)


def test_rendered_document_extension():
    assert RenderedDocument(b"", "image/png", 1, 1).extension == "png"
    assert RenderedDocument(b"", "application/pdf", 1, 1).extension == "pdf"


@pytest.mark.parametrize(
    "data",
    [
        {"id": "q", "type": "qrcode", "x": "nan"},
        {"id": "q", "type": "qrcode", "width": "inf"},
        {"id": "l", "type": "logo", "height": float("inf")},
        {"id": "t", "type": "text", "maxWidth": "-inf"},
    ],
)
def test_non_finite_numbers_are_configuration_errors(data):
    with pytest.raises(ConfigurationError):
        element_from_dict(data)


def test_non_finite_badge_size_is_configuration_error():
    with pytest.raises(ConfigurationError):
        template_from_dict({"badgeWidthCm": "inf"})
    with pytest.raises(ConfigurationError):
        template_from_dict({"badge_height_cm": float("nan")})
