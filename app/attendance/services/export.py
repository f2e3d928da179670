from __future__ import annotations

import csv
import io
import re

from attendance.models import Attendance

CSV_HEADER = ["Name", "Email", "Checked In At"]


def _display_name(user) -> str:
    return user.get_full_name() or user.get_username()


def attendance_csv(attendance: Attendance) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADER)

    check_ins = attendance.check_ins.select_related("user").order_by("checked_in_at", "id")
    for check_in in check_ins:
        writer.writerow([
            _display_name(check_in.user),
            check_in.user.email,
            check_in.checked_in_at.isoformat(),
        ])
    return output.getvalue()


def export_filename(title: str) -> str:
    clean = re.sub(r"[^a-z0-9\s]", "", title or "", flags=re.IGNORECASE).strip()
    clean = re.sub(r"\s+", " ", clean) or "event"
    return f"{clean} attendance.csv"
