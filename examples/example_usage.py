"""Mark a class from a script through the same view-model the UI uses.

Runs in-process against the configured MySQL database:

    APP_ENV=development python examples/example_usage.py 2024-01-15 1
"""

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.dabestan.dabestan.attendance.client import LocalAttendanceGateway
from src.dabestan.dabestan.attendance.sheet import AttendanceSheet, SheetMode
from src.dabestan.dabestan.common.persian import attendance_label
from src.dabestan.dabestan.container import build_container


def main(day: str, class_id: int) -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    sheet = AttendanceSheet(LocalAttendanceGateway(container.attendance_service), mode=SheetMode.BATCHED)
    sheet.load(day, class_id)
    sheet.set_filter(status="unmarked")
    sheet.bulk_set_status("PRESENT")
    results = sheet.flush()
    print(f"{sum(r.success for r in results)} of {len(results)} rows saved")

    sheet.set_filter()
    for row in sheet.rows:
        print(f"{row.student_code:>8}  {row.full_name:<30} {attendance_label(row.status)}")


if __name__ == "__main__":
    main(sys.argv[1], int(sys.argv[2]))
