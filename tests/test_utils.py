from utils import cm_to_pt, cm_to_px, hex_to_rgb, safe_badge_filename


def test_safe_badge_filename_basic():
    assert safe_badge_filename("John Doe") == "John_Doe.pdf"


def test_safe_badge_filename_strips_weird_chars():
    assert safe_badge_filename("  A/B:C*D?  ") == "ABCD.pdf"


def test_safe_badge_filename_empty_fallback():
    assert safe_badge_filename("") == "badge.pdf"
    assert safe_badge_filename("   ") == "badge.pdf"
    assert safe_badge_filename(None) == "badge.pdf"


def test_safe_badge_filename_extension_and_suffix():
    assert safe_badge_filename("Jane Roe", "png") == "Jane_Roe.png"
    assert safe_badge_filename("Jane Roe", ".png", suffix="1a2b/3c") == "Jane_Roe_1a2b3c.png"


def test_hex_to_rgb():
    assert hex_to_rgb("#1F2937") == (31, 41, 55)
    assert hex_to_rgb("ffffff") == (255, 255, 255)
    assert hex_to_rgb("#abc") == (170, 187, 204)


def test_hex_to_rgb_invalid_falls_back():
    assert hex_to_rgb("red") == (0, 0, 0)
    assert hex_to_rgb(None) == (0, 0, 0)
    assert hex_to_rgb("#12345", default=(1, 2, 3)) == (1, 2, 3)


def test_unit_conversions():
    assert abs(cm_to_pt(1) - 28.3465) < 1e-3
    assert cm_to_px(2.54, 300) == 300
    assert cm_to_px(8.5, 300) == 1004
