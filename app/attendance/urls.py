from django.urls import path

from attendance.views import (
    attendance_attempts,
    attendance_check_in,
    attendance_check_in_delete,
    attendance_code,
    attendance_code_regenerate,
    attendance_detail,
    attendance_export,
    attendance_manual_check_in,
    attendance_roster,
)

urlpatterns = [
    path("attendance/<int:attendance_id>", attendance_detail, name="attendance-detail"),
    path("attendance/<int:attendance_id>/checkin", attendance_check_in, name="attendance-checkin"),
    path(
        "attendance/<int:attendance_id>/checkin/<int:check_in_id>",
        attendance_check_in_delete,
        name="attendance-checkin-delete",
    ),
    path("attendance/<int:attendance_id>/code", attendance_code, name="attendance-code"),
    path("attendance/<int:attendance_id>/code/regenerate", attendance_code_regenerate, name="attendance-code-regenerate"),
    path("attendance/<int:attendance_id>/manual-checkin", attendance_manual_check_in, name="attendance-manual-checkin"),
    path("attendance/<int:attendance_id>/roster", attendance_roster, name="attendance-roster"),
    path("attendance/<int:attendance_id>/export", attendance_export, name="attendance-export"),
    path("attendance/<int:attendance_id>/attempts", attendance_attempts, name="attendance-attempts"),
]
