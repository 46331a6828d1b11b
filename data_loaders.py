"""
Attendee data loading helpers (CSV / Excel -> AttendeeRecord).

Important: Keep imports light at module import time (Streamlit startup).
We import pandas only inside functions.
"""

from pathlib import Path
from typing import Any, List, Optional

from models import AttendeeRecord

COLUMNS = ["Name", "QR_UUID", "Company", "Category", "Email", "Phone", "Role", "Name_AR", "Company_AR"]


def _find_column(df: Any, exact: Optional[str], *subs) -> Optional[str]:
    """Find column by exact name or by substrings (all must match, case-insensitive)."""
    df_cols = [str(c).strip() for c in df.columns]
    if exact and exact in df_cols:
        return exact
    low = exact.lower() if exact else ""
    for c in df.columns:
        cs = str(c).strip()
        if exact and cs.lower() == low:
            return c
        if subs and all(s.lower() in cs.lower() for s in subs):
            return c
    return None


def _clean(value: Any) -> str:
    if value is None or (isinstance(value, float) and str(value) == "nan"):
        return ""
    text = str(value).strip()
    return "" if text.lower() == "nan" else text


def load_attendees_dataframe(path: str, sheet: Any = 0) -> Any:
    """
    Load attendees from Excel or CSV into a DataFrame with columns:
    Name, QR_UUID, Company, Category, Email, Phone, Role, Name_AR, Company_AR.

    Rows without a name or without a QR identifier are skipped (the identifier is
    what the badge QR encodes; it is never derived from the name). Duplicate
    identifiers keep the first row.
    """
    import pandas as pd

    p = Path(path)
    suf = p.suffix.lower()
    if suf in (".xlsx", ".xls"):
        try:
            df = pd.read_excel(path, sheet_name=sheet, dtype=str)
        except ImportError as e:
            if "openpyxl" in str(e).lower():
                raise ImportError(
                    "Reading Excel requires openpyxl. Install it with:\n  pip install openpyxl"
                ) from e
            raise
    else:
        df = pd.read_csv(path, dtype=str)

    df.columns = [str(c).strip() for c in df.columns]
    name_col = (
        _find_column(df, "Name")
        or _find_column(df, "Full Name")
        or _find_column(df, None, "full", "name")
        or df.columns[0]
    )
    uuid_col = (
        _find_column(df, "QR_UUID")
        or _find_column(df, "qr_uuid")
        or _find_column(df, "UUID")
        or _find_column(df, None, "qr", "uuid")
        or _find_column(df, None, "uuid")
    )
    if not uuid_col:
        raise ValueError(
            "Could not find a QR identifier column. "
            "Expected something like 'qr_uuid' or 'UUID'. "
            f"Columns: {list(df.columns)}"
        )
    optional = {
        "Company": _find_column(df, "Company") or _find_column(df, None, "company"),
        "Category": _find_column(df, "Category") or _find_column(df, "Type") or _find_column(df, None, "category"),
        "Email": _find_column(df, "Email") or _find_column(df, None, "mail"),
        "Phone": _find_column(df, "Phone") or _find_column(df, "Mobile") or _find_column(df, None, "phone"),
        "Role": _find_column(df, "Role"),
        "Name_AR": _find_column(df, "name_ar") or _find_column(df, None, "name", "arabic"),
        "Company_AR": _find_column(df, "company_ar") or _find_column(df, None, "company", "arabic"),
    }
    # Substring matches above may land on the name/uuid columns themselves
    for key, col in list(optional.items()):
        if col in (name_col, uuid_col):
            optional[key] = None

    total_rows = len(df)
    missing_name = 0
    missing_uuid = 0
    rows = []
    for _, r in df.iterrows():
        name = _clean(r.get(name_col))
        if not name:
            missing_name += 1
            continue
        qr_uuid = _clean(r.get(uuid_col))
        if not qr_uuid:
            missing_uuid += 1
            continue
        row = {"Name": name, "QR_UUID": qr_uuid}
        for key, col in optional.items():
            row[key] = _clean(r.get(col)) if col else ""
        rows.append(row)

    out = pd.DataFrame(rows, columns=COLUMNS)
    before_dedup = len(out)
    out = out.drop_duplicates(subset=["QR_UUID"]).reset_index(drop=True)
    out.attrs["load_stats"] = {
        "source_rows": total_rows,
        "kept_rows_before_dedup": before_dedup,
        "loaded_rows": len(out),
        "skipped_missing_name": missing_name,
        "skipped_missing_qr_uuid": missing_uuid,
        "dropped_duplicate_qr_uuid": before_dedup - len(out),
    }
    return out


def attendees_from_dataframe(df: Any) -> List[AttendeeRecord]:
    """Turn a load_attendees_dataframe() result into AttendeeRecord objects."""
    records = []
    for r in df.itertuples(index=False):
        row = r._asdict()
        records.append(
            AttendeeRecord(
                name=row["Name"],
                qr_uuid=row["QR_UUID"],
                company=row.get("Company") or None,
                category=(row.get("Category") or "").lower() or None,
                email=row.get("Email") or None,
                phone=row.get("Phone") or None,
                role=row.get("Role") or None,
                name_ar=row.get("Name_AR") or None,
                company_ar=row.get("Company_AR") or None,
            )
        )
    return records
