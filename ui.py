#!/usr/bin/env python3
"""
Streamlit UI for the Event Badge Generator
"""

import io
import json
import os
import tempfile
import time
from pathlib import Path

import streamlit as st

from config import (
    MAX_PREVIEW_BADGES,
    OUTPUT_FORMATS,
    OUTPUT_PDF,
    PREVIEW_COLUMNS_DESKTOP,
    PREVIEW_COLUMNS_MOBILE,
    PREVIEW_DPI,
    PREVIEW_WIDTH_DESKTOP,
    PREVIEW_WIDTH_MOBILE,
)
from utils import safe_badge_filename

# Startup timing (logged to stdout for Streamlit Cloud logs)
_UI_T0 = time.perf_counter()


def _ui_log(msg: str) -> None:
    print(f"[ui] +{time.perf_counter() - _UI_T0:.3f}s {msg}", flush=True)


_ui_log("ui.py start")

st.set_page_config(page_title="Event Badge Generator", page_icon="🪪", layout="centered")

st.markdown(
    """
<style>
  button, input, textarea, select {
    border-radius: 10px !important;
  }
  .main .block-container {
    max-width: 980px;
    padding-top: 1rem;
    padding-bottom: 2.5rem;
  }
</style>
""",
    unsafe_allow_html=True,
)

st.title("Event Badge Generator")
st.caption("Print-ready badges with QR codes, rendered from your badge templates")

# Initialize session state
for key, default in (
    ("attendees_df", None),
    ("templates", None),
    ("generated_items", []),
    ("_tmp_data_path", None),
):
    if key not in st.session_state:
        st.session_state[key] = default


def _reset_generated():
    st.session_state.generated_items = []


mobile_mode = st.checkbox("Mobile-friendly layout", value=False, help="Fewer preview columns for small screens.")

# --- Attendees ---
st.subheader("Attendees")
data_file = st.file_uploader("Excel or CSV with name and qr_uuid columns", type=["xlsx", "xls", "csv"])
if data_file is not None and st.button("Load attendees"):
    from data_loaders import load_attendees_dataframe

    old = st.session_state._tmp_data_path
    if old and os.path.exists(old):
        os.remove(old)
    suffix = Path(data_file.name).suffix or ".csv"
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        tmp.write(data_file.getvalue())
    st.session_state._tmp_data_path = tmp.name
    try:
        df = load_attendees_dataframe(tmp.name)
        st.session_state.attendees_df = df
        _reset_generated()
        st.success(f"Loaded {len(df)} attendees from {data_file.name}")
        stats = df.attrs.get("load_stats", {})
        if stats.get("skipped_missing_qr_uuid"):
            st.warning(f"Skipped {stats['skipped_missing_qr_uuid']} row(s) without a QR identifier.")
    except (OSError, ValueError, ImportError) as e:
        st.error(f"Error reading {data_file.name}: {e}")

# --- Templates ---
st.subheader("Badge templates")
templates_file = st.file_uploader("Templates JSON (optional; built-in layout when omitted)", type=["json"])
if templates_file is not None:
    from errors import ConfigurationError
    from models import template_from_dict

    try:
        data = json.loads(templates_file.getvalue().decode("utf-8"))
        if isinstance(data, dict) and isinstance(data.get("templates"), list):
            data = data["templates"]
        items = data if isinstance(data, list) else [data]
        st.session_state.templates = [template_from_dict(item) for item in items]
        st.caption(f"{len(st.session_state.templates)} template(s) loaded")
    except (ValueError, ConfigurationError) as e:
        st.session_state.templates = None
        st.error(f"Invalid templates file: {e}")
else:
    st.session_state.templates = None

# --- Event ---
st.subheader("Event")
with st.form("event_form", clear_on_submit=False):
    c1, c2 = st.columns([1, 1])
    with c1:
        event_name = st.text_input("Event name", value="")
        event_location = st.text_input("Location", value="")
    with c2:
        event_date = st.date_input("Date", value=None)
        output_format = st.selectbox("Download format", OUTPUT_FORMATS, index=OUTPUT_FORMATS.index(OUTPUT_PDF))
    logo_file = st.file_uploader("Event logo", type=["png", "jpg", "jpeg"])
    background_file = st.file_uploader("Badge background (used when the template has none)", type=["png", "jpg", "jpeg"])
    st.form_submit_button("Apply", on_click=_reset_generated)

df = st.session_state.attendees_df
if df is None:
    st.info("Load an attendee list to continue.")
    st.stop()

names = [f"{r.Name} ({r.QR_UUID})" for r in df.itertuples(index=False)]
selected = st.multiselect(
    f"Attendees to preview (up to {MAX_PREVIEW_BADGES})",
    names,
    default=names[:1],
    max_selections=MAX_PREVIEW_BADGES,
)
selected_df = df[[n in selected for n in names]]
show_previews = st.checkbox("Show previews", value=True)

if st.button("🚀 Render badges", type="primary", use_container_width=True):
    if selected_df.empty:
        st.warning("Please select at least one attendee")
        st.stop()

    # Import heavy rendering code only when needed (improves Streamlit Cloud startup)
    from dataclasses import replace

    from assets import MemoryAssetStore
    from compositor import compose
    from data_loaders import attendees_from_dataframe
    from errors import ConfigurationError
    from models import EventRecord, RenderContext, RenderOptions
    from templates import default_template, select_template

    _reset_generated()
    store = MemoryAssetStore()
    logo_ref = None
    if logo_file is not None:
        logo_ref = f"upload:{logo_file.name}"
        store.put(logo_ref, logo_file.getvalue())
    background_ref = None
    if background_file is not None:
        background_ref = f"upload:{background_file.name}"
        store.put(background_ref, background_file.getvalue())

    event = EventRecord(
        name=event_name.strip(),
        date=event_date,
        location=event_location.strip() or None,
        logo_ref=logo_ref,
    )
    options = RenderOptions(output_format=output_format, asset_store=store)
    preview_options = RenderOptions(output_format="png", dpi=PREVIEW_DPI, asset_store=store)

    def _template_for(attendee):
        templates = st.session_state.templates
        template = default_template(attendee.category or "")
        if templates:
            try:
                template = select_template(templates, attendee.category)
            except ConfigurationError:
                template = select_template(templates, "")
        if background_ref and not template.background_image_ref:
            template = replace(template, background_image_ref=background_ref)
        return template

    with st.spinner(f"Rendering {len(selected_df)} badge(s)..."):
        for attendee in attendees_from_dataframe(selected_df):
            context = RenderContext(attendee=attendee, event=event)
            try:
                template = _template_for(attendee)
                doc = compose(template, context, options)
                preview = doc if doc.mime_type == "image/png" else compose(template, context, preview_options)
            except ConfigurationError as e:
                st.error(f"{attendee.name}: {e}")
                continue
            st.session_state.generated_items.append(
                {
                    "name": attendee.name,
                    "category": attendee.category or "",
                    "preview_png": preview.content,
                    "content": doc.content,
                    "mime": doc.mime_type,
                    "filename": safe_badge_filename(attendee.name, extension=doc.extension, suffix=attendee.qr_uuid[:8]),
                    "failures": [f"{f.element_id} ({f.kind}): {f.message}" for f in doc.failures],
                }
            )
    _ui_log(f"rendered {len(st.session_state.generated_items)} badge(s)")

# Render generated outputs (persisted in session)
items = st.session_state.generated_items
if items:
    st.success(f"Prepared **{len(items)}** badge(s).")
    columns_per_row = PREVIEW_COLUMNS_MOBILE if mobile_mode else PREVIEW_COLUMNS_DESKTOP
    preview_width = PREVIEW_WIDTH_MOBILE if mobile_mode else PREVIEW_WIDTH_DESKTOP
    for start in range(0, len(items), columns_per_row):
        cols = st.columns(columns_per_row)
        for c, it in enumerate(items[start : start + columns_per_row]):
            with cols[c]:
                if show_previews:
                    st.image(io.BytesIO(it["preview_png"]), width=preview_width)
                st.caption(it["name"] + (f" · {it['category'].title()}" if it["category"] else ""))
                for failure in it["failures"]:
                    st.warning(failure)
                st.download_button(
                    "Download",
                    data=it["content"],
                    file_name=it["filename"],
                    mime=it["mime"],
                    key=f"dl_{start + c}_{it['filename']}",
                )
