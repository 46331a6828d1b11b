import pytest

from config import TEXT_ELLIPSIS
from elements import wrap_text
from fonts import resolve_font


@pytest.fixture(scope="module")
def vera():
    return resolve_font("Vera", "normal")


def test_short_text_is_one_line(vera):
    assert wrap_text("Jane Roe", vera, 16, 7.5, 2) == ["Jane Roe"]


def test_no_max_width_only_breaks_on_newlines(vera):
    long = "word " * 40
    assert wrap_text(long, vera, 16, None, 2) == [long.strip()]
    assert wrap_text("a\nb", vera, 16, None, 2) == ["a", "b"]


def test_wrapped_lines_fit_the_box(vera):
    text = "International Conference on Practical Badge Printing"
    lines = wrap_text(text, vera, 16, 5.0, 5)
    assert len(lines) > 1
    assert " ".join(lines) == text
    assert all(vera.text_width_cm(line, 16) <= 5.0 for line in lines)


def test_overflow_is_truncated_with_ellipsis(vera):
    text = "one two three four five six seven eight nine ten eleven twelve"
    lines = wrap_text(text, vera, 16, 3.0, 2)
    assert len(lines) == 2
    assert lines[-1].endswith(TEXT_ELLIPSIS)
    assert vera.text_width_cm(lines[-1], 16) <= 3.0


def test_long_word_is_split(vera):
    lines = wrap_text("Supercalifragilisticexpialidocious", vera, 16, 2.0, 10)
    assert len(lines) > 1
    assert "".join(lines) == "Supercalifragilisticexpialidocious"
    assert all(vera.text_width_cm(line, 16) <= 2.0 for line in lines)


def test_blank_text_has_no_lines(vera):
    assert wrap_text("   \n  ", vera, 16, 5.0, 2) == []


def test_bold_is_wider_than_regular(vera):
    bold = resolve_font("Vera", "bold")
    assert bold.text_width_cm("Attendee", 16) > vera.text_width_cm("Attendee", 16)


def test_unknown_family_falls_back_to_bundled_font():
    face = resolve_font("Definitely Not Installed, sans-serif", "bold")
    assert face.path.endswith("VeraBd.ttf")
    assert face.family == "Definitely Not Installed"
