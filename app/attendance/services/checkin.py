from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import IntegrityError, transaction
from django.utils import timezone

from attendance.exceptions import (
    AttendanceCancelled,
    InvalidAttendanceCode,
    OutsideCheckInWindow,
    TooManyAttempts,
)
from attendance.models import Attendance, CheckIn
from attendance.services.attempts import is_rate_limited, log_code_attempt
from attendance.services.codes import verify_code
from attendance.services.window import is_within_window
from clubs.models import Membership

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckInResult:
    check_in: CheckIn
    created: bool

    @property
    def message(self) -> str:
        return "Successfully checked in!" if self.created else "You are already checked in"


def record_check_in(
    attendance: Attendance,
    user,
    membership: Membership | None = None,
    source: str = CheckIn.SOURCE_CODE,
) -> tuple[CheckIn, bool]:
    existing = CheckIn.objects.filter(attendance=attendance, user=user).first()
    if existing is not None:
        return existing, False

    try:
        with transaction.atomic():
            check_in = CheckIn.objects.create(
                attendance=attendance,
                user=user,
                membership=membership,
                source=source,
                checked_in_at=timezone.now(),
            )
    except IntegrityError:
        # A concurrent request inserted the same (attendance, user) pair first.
        check_in = CheckIn.objects.filter(attendance=attendance, user=user).first()
        if check_in is None:
            raise
        return check_in, False

    return check_in, True


def ensure_within_window(attendance: Attendance, now: datetime | None = None, detail: str | None = None) -> None:
    event = attendance.event
    if not is_within_window(event.start_at, event.end_at, attendance.grace_minutes, now=now):
        raise OutsideCheckInWindow(event.start_at, event.end_at, attendance.grace_minutes, detail=detail)


def check_in_with_code(
    attendance: Attendance,
    user,
    code: str,
    ip_address: str,
    membership: Membership | None = None,
    now: datetime | None = None,
) -> CheckInResult:
    """Run the self check-in gates in order and record the check-in.

    cancelled -> window -> rate limit -> code -> attempt log -> record.
    Attempts rejected by the first three gates are not written to the log.
    """
    if attendance.is_cancelled:
        raise AttendanceCancelled()

    ensure_within_window(attendance, now=now)

    if is_rate_limited(attendance, user, ip_address, now=now):
        raise TooManyAttempts()

    code_valid = verify_code(code, attendance.code_hash)
    log_code_attempt(attendance, user, ip_address, code_valid)

    if not code_valid:
        logger.info(
            "Invalid attendance code submitted",
            extra={"attendance_id": attendance.id, "user_id": user.id, "client_ip": ip_address},
        )
        raise InvalidAttendanceCode()

    check_in, created = record_check_in(attendance, user, membership=membership, source=CheckIn.SOURCE_CODE)
    if created:
        logger.info("User checked in", extra={"attendance_id": attendance.id, "user_id": user.id})
    return CheckInResult(check_in=check_in, created=created)
