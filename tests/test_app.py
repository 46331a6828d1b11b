import json
from pathlib import Path

from app import BadgeGenerator
from models import AttendeeRecord, EventRecord


def _write(path: Path, content: str) -> str:
    path.write_text(content, encoding="utf-8")
    return str(path)


def test_generate_all_badges_writes_one_file_per_attendee(tmp_path):
    data = _write(
        tmp_path / "attendees.csv",
        "name,qr_uuid,company,category\n"
        "Jane Roe,11111111-aaaa,Acme,speaker\n"
        "John Doe,22222222-bbbb,,visitor\n"
        "No Id,,Acme,visitor\n",
    )
    out = tmp_path / "out"
    generator = BadgeGenerator(
        data,
        EventRecord(name="Expo 2025", date="2025-10-26"),
        output_dir=str(out),
        output_format="png",
        dpi=50,
    )
    assert generator.generate_all_badges() == 2
    assert sorted(p.name for p in out.iterdir()) == ["Jane_Roe_11111111.png", "John_Doe_22222222.png"]


def test_template_for_uses_category_then_catch_all(tmp_path):
    templates = _write(
        tmp_path / "templates.json",
        json.dumps(
            {
                "templates": [
                    {"category": "speaker", "primaryColor": "#FF0000"},
                    {"category": "", "primaryColor": "#0000FF"},
                ]
            }
        ),
    )
    generator = BadgeGenerator("unused.csv", EventRecord(name="Expo"), templates_path=templates)
    speaker = AttendeeRecord(name="A", qr_uuid="1", category="Speaker")
    visitor = AttendeeRecord(name="B", qr_uuid="2", category="visitor")
    assert generator.template_for(speaker).primary_color == "#FF0000"
    assert generator.template_for(visitor).primary_color == "#0000FF"


def test_template_for_without_templates_uses_designer_default():
    generator = BadgeGenerator("unused.csv", EventRecord(name="Expo"))
    template = generator.template_for(AttendeeRecord(name="A", qr_uuid="1", category="vip"))
    assert template.category == "vip"
    assert any(e.type == "qrcode" for e in template.elements)
