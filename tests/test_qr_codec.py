import pytest

from config import QR_ERROR_CORRECTION
from errors import EncodingError
from qr_codec import dark_runs, encode

UUID_A = "0b9f3c1e-6f1e-4a53-9a55-3c3f1f7f2d11"
UUID_B = "5d2a8e7c-1b4f-4c9e-8a3d-7e6f5a4b3c2d"


def test_same_payload_is_byte_identical():
    first = encode(UUID_A, "H", 10)
    second = encode(UUID_A, "H", 10)
    assert first.png == second.png
    assert first.modules == second.modules


def test_different_payloads_differ():
    assert encode(UUID_A).png != encode(UUID_B).png
    assert encode(UUID_A).modules != encode(UUID_B).modules


def test_matrix_shape_and_png_size():
    matrix = encode(UUID_A, "H", 4, border=1)
    n = matrix.module_count
    assert all(len(row) == n for row in matrix.modules)
    # quiet zone stays light
    assert not any(matrix.modules[0]) and not any(matrix.modules[-1])
    img = matrix.to_image()
    assert img.size == (matrix.size, matrix.size) == (n * 4, n * 4)


def test_default_level_is_shared_high_tier():
    assert QR_ERROR_CORRECTION == "H"
    assert encode(UUID_A).error_correction == "H"
    # higher correction needs at least as many modules as a lower one
    assert encode(UUID_A, "H").module_count >= encode(UUID_A, "L").module_count


def test_level_is_case_insensitive():
    assert encode(UUID_A, "h").png == encode(UUID_A, "H").png


def test_bad_inputs_raise_encoding_error():
    with pytest.raises(EncodingError):
        encode("")
    with pytest.raises(EncodingError):
        encode("   ")
    with pytest.raises(EncodingError):
        encode(UUID_A, "X")
    with pytest.raises(EncodingError):
        encode(UUID_A, "H", 0)
    with pytest.raises(EncodingError):
        encode("x" * 5000, "H")


def test_dark_runs_cover_every_dark_module():
    matrix = encode(UUID_A)
    covered = set()
    for r, start, length in dark_runs(matrix.modules):
        for c in range(start, start + length):
            covered.add((r, c))
    expected = {
        (r, c) for r, row in enumerate(matrix.modules) for c, dark in enumerate(row) if dark
    }
    assert covered == expected
