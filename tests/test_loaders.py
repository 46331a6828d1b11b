import tempfile

import pytest

import data_loaders as loaders


def _write_csv(content: str) -> str:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False, encoding="utf-8") as tmp:
        tmp.write(content)
        return tmp.name


def test_load_attendees_dataframe_csv_basic():
    path = _write_csv(
        "name,email,company,type,qr_uuid\n"
        "Jane Roe,jane@example.com,Acme,exhibitor,11111111-1111-4111-8111-111111111111\n"
    )
    df = loaders.load_attendees_dataframe(path)
    assert list(df.columns) == loaders.COLUMNS
    assert len(df) == 1
    assert df.iloc[0]["QR_UUID"] == "11111111-1111-4111-8111-111111111111"
    assert df.iloc[0]["Category"] == "exhibitor"
    assert df.iloc[0]["Company"] == "Acme"


def test_rows_without_identifier_or_name_are_skipped_and_counted():
    path = _write_csv(
        "Full Name,QR UUID,Company\n"
        "Jane Roe,aaa,Acme\n"
        ",bbb,Nameless Inc\n"
        "No Id,,Acme\n"
        "Jane Again,aaa,Acme\n"
    )
    df = loaders.load_attendees_dataframe(path)
    stats = df.attrs["load_stats"]
    assert len(df) == 1
    assert stats["skipped_missing_name"] == 1
    assert stats["skipped_missing_qr_uuid"] == 1
    assert stats["dropped_duplicate_qr_uuid"] == 1


def test_missing_identifier_column_is_an_error():
    path = _write_csv("name,email\nJane,jane@example.com\n")
    with pytest.raises(ValueError):
        loaders.load_attendees_dataframe(path)


def test_attendees_from_dataframe_builds_records():
    path = _write_csv(
        "name,qr_uuid,company,category,phone,name_ar\n"
        "Jane Roe,aaa,,Visitor,+1 555,جين\n"
    )
    records = loaders.attendees_from_dataframe(loaders.load_attendees_dataframe(path))
    assert len(records) == 1
    jane = records[0]
    assert jane.name == "Jane Roe"
    assert jane.qr_uuid == "aaa"
    assert jane.company is None
    assert jane.category == "visitor"
    assert jane.phone == "+1 555"
    assert jane.name_ar == "جين"
