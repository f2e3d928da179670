from __future__ import annotations

import logging
from datetime import datetime, timedelta

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone

from attendance.models import Attendance, CodeAttempt

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_WINDOW_MINUTES = 5
IP_ADDRESS_MAX_LENGTH = CodeAttempt._meta.get_field("ip_address").max_length


def recent_attempts(
    attendance: Attendance,
    user,
    ip_address: str,
    window_minutes: int,
    now: datetime | None = None,
):
    if now is None:
        now = timezone.now()
    actor = Q(user=user)
    if ip_address:
        actor |= Q(ip_address=ip_address)
    return CodeAttempt.objects.filter(
        actor,
        attendance=attendance,
        attempted_at__gte=now - timedelta(minutes=window_minutes),
    )


def is_rate_limited(
    attendance: Attendance,
    user,
    ip_address: str,
    max_attempts: int | None = None,
    window_minutes: int | None = None,
    now: datetime | None = None,
) -> bool:
    """Soft limit over the attempt log, scoped to the same user or client address.

    Two concurrent requests can both pass before either is logged; the hashed
    code is the actual barrier, so that overshoot is tolerated.
    """
    if max_attempts is None:
        max_attempts = getattr(settings, "ATTENDANCE_RATE_LIMIT_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS)
    if window_minutes is None:
        window_minutes = getattr(settings, "ATTENDANCE_RATE_LIMIT_WINDOW_MINUTES", DEFAULT_WINDOW_MINUTES)

    count = recent_attempts(attendance, user, ip_address, window_minutes, now=now).count()
    if count >= max_attempts:
        logger.warning(
            "Attendance code attempts rate limited",
            extra={
                "attendance_id": attendance.id,
                "user_id": getattr(user, "id", None),
                "client_ip": ip_address,
                "attempts": count,
            },
        )
        return True
    return False


def log_code_attempt(attendance: Attendance, user, ip_address: str, success: bool) -> CodeAttempt | None:
    try:
        with transaction.atomic():
            return CodeAttempt.objects.create(
                attendance=attendance,
                user=user,
                ip_address=(ip_address or "")[:IP_ADDRESS_MAX_LENGTH],
                success=success,
            )
    except DatabaseError:
        logger.exception(
            "Unable to log attendance code attempt",
            extra={"attendance_id": attendance.id, "user_id": getattr(user, "id", None)},
        )
        return None
