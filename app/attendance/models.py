from django.conf import settings
from django.db import models
from django.utils import timezone

from clubs.models import Club, Membership
from events.models import CalendarEvent


class Attendance(models.Model):
    STATUS_OPEN = "OPEN"
    STATUS_CANCELLED = "CANCELLED"
    STATUS_CHOICES = [
        (STATUS_OPEN, "Open"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    event = models.OneToOneField(CalendarEvent, on_delete=models.CASCADE, related_name="attendance")
    club = models.ForeignKey(Club, on_delete=models.CASCADE, related_name="attendances")
    code_hash = models.CharField(max_length=255)
    grace_minutes = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_OPEN)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["club", "status"], name="attendance_club_status_idx")]

    def __str__(self):
        return f"Attendance<{self.event_id}:{self.status}>"

    @property
    def is_cancelled(self):
        return self.status == self.STATUS_CANCELLED


class CheckIn(models.Model):
    SOURCE_CODE = "CODE"
    SOURCE_MANUAL = "MANUAL"
    SOURCE_CHOICES = [
        (SOURCE_CODE, "Code"),
        (SOURCE_MANUAL, "Manual"),
    ]

    attendance = models.ForeignKey(Attendance, on_delete=models.CASCADE, related_name="check_ins")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="attendance_check_ins")
    membership = models.ForeignKey(
        Membership,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="check_ins",
    )
    source = models.CharField(max_length=16, choices=SOURCE_CHOICES, default=SOURCE_CODE)
    checked_in_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["attendance", "user"], name="uq_checkin_attendance_user"),
        ]
        indexes = [models.Index(fields=["attendance", "checked_in_at"], name="checkin_attendance_time_idx")]

    def __str__(self):
        return f"CheckIn<{self.attendance_id}:{self.user_id}>"


class CodeAttempt(models.Model):
    attendance = models.ForeignKey(Attendance, on_delete=models.CASCADE, related_name="code_attempts")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="attendance_code_attempts",
    )
    ip_address = models.CharField(max_length=64, blank=True, default="")
    success = models.BooleanField(default=False)
    attempted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["attendance", "attempted_at"], name="attempt_attendance_time_idx"),
            models.Index(fields=["attendance", "user", "attempted_at"], name="attempt_user_time_idx"),
            models.Index(fields=["attendance", "ip_address", "attempted_at"], name="attempt_ip_time_idx"),
        ]

    def __str__(self):
        return f"CodeAttempt<{self.attendance_id}:{self.user_id}:{'ok' if self.success else 'fail'}>"
