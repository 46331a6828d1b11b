#!/usr/bin/env python3
"""
Event Badge Generator
Renders one print-ready badge per attendee from CSV or Excel, using stored
badge templates (JSON) selected by attendee category.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from assets import default_store
from compositor import compose
from config import ASSET_FETCH_TIMEOUT_S, DEFAULT_DPI, OUTPUT_FORMATS, OUTPUT_PDF
from errors import ConfigurationError
from models import AttendeeRecord, BadgeTemplate, EventRecord, RenderContext, RenderOptions
from templates import default_template, load_templates, select_template
from utils import safe_badge_filename

_APP_DIR = Path(__file__).resolve().parent


class BadgeGenerator:
    """Render badges for every attendee in a spreadsheet."""

    def __init__(
        self,
        data_path: str,
        event: EventRecord,
        templates_path: Optional[str] = None,
        output_dir: str = "output",
        output_format: str = OUTPUT_PDF,
        dpi: int = DEFAULT_DPI,
        assets_root: Optional[str] = None,
        asset_timeout_s: float = ASSET_FETCH_TIMEOUT_S,
    ):
        self.data_path = data_path
        self.event = event
        self.templates_path = templates_path
        self.output_dir = Path(output_dir)
        self.options = RenderOptions(
            output_format=output_format,
            dpi=dpi,
            asset_timeout_s=asset_timeout_s,
            asset_store=default_store(timeout_s=asset_timeout_s, root=assets_root or str(_APP_DIR)),
        )
        self._templates: Optional[List[BadgeTemplate]] = None

    def templates(self) -> List[BadgeTemplate]:
        if self._templates is None:
            self._templates = load_templates(self.templates_path) if self.templates_path else []
        return self._templates

    def template_for(self, attendee: AttendeeRecord) -> BadgeTemplate:
        """Active template for the attendee's category; the designer default when none is stored."""
        templates = self.templates()
        if not templates:
            return default_template(attendee.category or "")
        try:
            return select_template(templates, attendee.category)
        except ConfigurationError:
            # An uncategorised template acts as the catch-all
            return select_template(templates, "")

    def read_attendees(self) -> List[AttendeeRecord]:
        from data_loaders import attendees_from_dataframe, load_attendees_dataframe

        df = load_attendees_dataframe(self.data_path)
        stats: Dict[str, int] = df.attrs.get("load_stats", {})
        if stats.get("skipped_missing_qr_uuid"):
            print(f"Skipped {stats['skipped_missing_qr_uuid']} row(s) without a QR identifier")
        if stats.get("dropped_duplicate_qr_uuid"):
            print(f"Dropped {stats['dropped_duplicate_qr_uuid']} duplicate QR identifier(s)")
        return attendees_from_dataframe(df)

    def render(self, attendee: AttendeeRecord):
        template = self.template_for(attendee)
        return compose(template, RenderContext(attendee=attendee, event=self.event), self.options)

    def generate_all_badges(self) -> int:
        """Render every attendee; returns the number of badges written."""
        try:
            attendees = self.read_attendees()
        except (OSError, ValueError, ImportError) as e:
            print(f"Error reading attendees: {e}")
            sys.exit(1)
        print(f"Found {len(attendees)} attendees with QR identifiers")

        self.output_dir.mkdir(exist_ok=True, parents=True)
        written = 0
        for i, attendee in enumerate(attendees, 1):
            print(f"Generating badge {i}/{len(attendees)}: {attendee.name} ({attendee.qr_uuid})")
            try:
                doc = self.render(attendee)
                path = self.output_dir / safe_badge_filename(
                    attendee.name, extension=doc.extension, suffix=attendee.qr_uuid[:8]
                )
                path.write_bytes(doc.content)
                written += 1
                for failure in doc.failures:
                    print(f"  warning: {failure.element_id} ({failure.kind}): {failure.message}")
            except Exception as e:
                print(f"Error generating badge for {attendee.name}: {e}")
                continue

        print(f"\nCompleted! Generated {written} badges in '{self.output_dir}' directory")
        return written


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Generate event badges with QR codes")
    parser.add_argument("data", help="Path to Excel (.xlsx) or CSV with attendee data")
    parser.add_argument("--templates", help="JSON file with badge templates (default: built-in layout)")
    parser.add_argument("--event-name", required=True, help="Event name printed on every badge")
    parser.add_argument("--event-date", help="Event date, ISO format (e.g. 2025-10-26)")
    parser.add_argument("--event-location", help="Event location")
    parser.add_argument("--event-logo", help="Event logo: path under --assets, URL, or data: URL")
    parser.add_argument("-o", "--output", default="output", help="Output directory (default: output)")
    parser.add_argument("-f", "--format", default=OUTPUT_PDF, choices=OUTPUT_FORMATS, help="Output format")
    parser.add_argument("--dpi", type=int, default=DEFAULT_DPI, help=f"Raster resolution (default: {DEFAULT_DPI})")
    parser.add_argument("--assets", help="Root directory for local asset references (default: app directory)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log rendering details")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    event = EventRecord(
        name=args.event_name,
        date=args.event_date,
        location=args.event_location,
        logo_ref=args.event_logo,
    )
    try:
        generator = BadgeGenerator(
            args.data,
            event,
            templates_path=args.templates,
            output_dir=args.output,
            output_format=args.format,
            dpi=args.dpi,
            assets_root=args.assets,
        )
        generator.templates()
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)
    generator.generate_all_badges()


if __name__ == "__main__":
    main()
