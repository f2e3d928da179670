from __future__ import annotations

from datetime import datetime

from rest_framework import status
from rest_framework.exceptions import APIException


class AttendanceCancelled(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "This event has been cancelled"
    default_code = "attendance_cancelled"


class InvalidAttendanceCode(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid code"
    default_code = "invalid_code"


class TooManyAttempts(APIException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Too many attempts. Please try again in a few minutes."
    default_code = "too_many_attempts"


class OutsideCheckInWindow(APIException):
    """Raised when check-in (or code reveal) happens outside the event window.

    Carries the window bounds so clients can tell the user when to come back.
    """

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Check-in is only allowed during meeting hours"
    default_code = "outside_window"

    def __init__(self, event_start: datetime, event_end: datetime, grace_minutes: int, detail: str | None = None):
        super().__init__(detail=detail)
        self.event_start = event_start
        self.event_end = event_end
        self.grace_minutes = grace_minutes

    def as_payload(self) -> dict:
        return {
            "detail": str(self.detail),
            "eventStart": self.event_start,
            "eventEnd": self.event_end,
            "graceMinutes": self.grace_minutes,
        }
