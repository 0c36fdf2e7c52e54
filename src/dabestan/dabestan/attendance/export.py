from __future__ import annotations

import io
from datetime import date
from typing import Iterable

import pandas as pd

from ..common.persian import attendance_label
from .model import RosterEntry

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

COLUMNS = ["کد دانش‌آموزی", "نام و نام خانوادگی", "کد ملی", "وضعیت", "توضیحات"]


def export_filename(attendance_date: date) -> str:
    return f"attendance-{attendance_date.isoformat()}.xlsx"


def build_workbook(entries: Iterable[RosterEntry], *, sheet_name: str = "حضور و غیاب") -> bytes:
    """One data row per entry, in the order given."""

    rows = [
        [e.student_code, e.full_name, e.national_id, attendance_label(e.status), e.notes or ""]
        for e in entries
    ]
    df = pd.DataFrame(rows, columns=COLUMNS)

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
        sheet = writer.sheets[sheet_name]
        sheet.sheet_view.rightToLeft = True
        for letter, width in zip("ABCDE", (15, 28, 14, 12, 30)):
            sheet.column_dimensions[letter].width = width
    return out.getvalue()
