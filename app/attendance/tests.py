from datetime import datetime, timedelta, timezone as dt_timezone
from io import StringIO
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DatabaseError
from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from attendance.models import Attendance, CheckIn, CodeAttempt
from attendance.services.attempts import is_rate_limited, log_code_attempt
from attendance.services.checkin import record_check_in
from attendance.services.codes import generate_code, hash_code, verify_code
from attendance.services.export import export_filename
from attendance.services.window import is_within_window
from clubs.models import Club, Membership
from events.models import CalendarEvent


User = get_user_model()

FAST_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


class WindowValidatorTests(SimpleTestCase):
    def setUp(self):
        self.start = datetime(2026, 3, 2, 10, 0, tzinfo=dt_timezone.utc)
        self.end = datetime(2026, 3, 2, 11, 0, tzinfo=dt_timezone.utc)

    def test_grace_period_extends_window_before_start(self):
        self.assertTrue(is_within_window(self.start, self.end, 5, now=self.start.replace(hour=9, minute=56)))
        self.assertFalse(is_within_window(self.start, self.end, 5, now=self.start.replace(hour=9, minute=54)))

    def test_bounds_are_inclusive(self):
        self.assertTrue(is_within_window(self.start, self.end, 5, now=self.start - timedelta(minutes=5)))
        self.assertTrue(is_within_window(self.start, self.end, 5, now=self.end + timedelta(minutes=5)))
        self.assertFalse(is_within_window(self.start, self.end, 5, now=self.end + timedelta(minutes=5, seconds=1)))

    def test_zero_grace_uses_exact_event_hours(self):
        self.assertTrue(is_within_window(self.start, self.end, 0, now=self.start))
        self.assertFalse(is_within_window(self.start, self.end, 0, now=self.start - timedelta(seconds=1)))

    def test_inverted_window_never_matches(self):
        self.assertFalse(is_within_window(self.end, self.start, 120, now=self.start + timedelta(minutes=30)))


@override_settings(PASSWORD_HASHERS=FAST_HASHERS)
class CodeVerifierTests(SimpleTestCase):
    def test_lowercase_submission_matches_uppercase_code(self):
        code_hash = hash_code("ABC123")
        self.assertTrue(verify_code("abc123", code_hash))
        self.assertFalse(verify_code("ABC124", code_hash))

    def test_hash_never_contains_plaintext(self):
        self.assertNotIn("ABC123", hash_code("ABC123"))

    def test_malformed_hash_fails_closed(self):
        self.assertFalse(verify_code("ABC123", "not-a-real-hash"))
        self.assertFalse(verify_code("ABC123", ""))
        self.assertFalse(verify_code("", hash_code("ABC123")))

    @override_settings(ATTENDANCE_CODE_LENGTH=40)
    def test_generated_codes_are_clamped_uppercase(self):
        code = generate_code()
        self.assertEqual(len(code), 10)
        self.assertEqual(code, code.upper())
        self.assertEqual(len(generate_code(2)), 6)

    def test_export_filename_strips_punctuation(self):
        self.assertEqual(export_filename("Build  Night #3!"), "Build Night 3 attendance.csv")


class AttendanceTestMixin:
    code = "ABC123"

    def setUp(self):
        self.admin = User.objects.create_user(username="admin", password="pwd12345", email="admin@example.com")
        self.alice = User.objects.create_user(
            username="alice", password="pwd12345", email="alice@example.com", first_name="Alice", last_name="Smith"
        )
        self.bob = User.objects.create_user(username="bob", password="pwd12345", email="bob@example.com")
        self.outsider = User.objects.create_user(username="eve", password="pwd12345")

        self.club = Club.objects.create(name="Robotics")
        self.admin_membership = Membership.objects.create(user=self.admin, club=self.club, role=Membership.ROLE_ADMIN)
        self.alice_membership = Membership.objects.create(user=self.alice, club=self.club)
        self.bob_membership = Membership.objects.create(user=self.bob, club=self.club)

        now = timezone.now()
        self.event = CalendarEvent.objects.create(
            club=self.club,
            creator=self.admin_membership,
            title="Build Night",
            start_at=now - timedelta(minutes=10),
            end_at=now + timedelta(minutes=50),
        )
        self.attendance = Attendance.objects.create(
            event=self.event,
            club=self.club,
            code_hash=hash_code(self.code),
            grace_minutes=5,
        )

    def checkin_url(self, attendance=None):
        return f"/api/attendance/{(attendance or self.attendance).id}/checkin"

    def move_event(self, start_offset_minutes, duration_minutes=60):
        start = timezone.now() + timedelta(minutes=start_offset_minutes)
        self.event.start_at = start
        self.event.end_at = start + timedelta(minutes=duration_minutes)
        self.event.save()


@override_settings(PASSWORD_HASHERS=FAST_HASHERS)
class CheckInTests(AttendanceTestMixin, APITestCase):
    def test_member_checks_in_with_valid_code(self):
        self.client.force_authenticate(self.alice)
        response = self.client.post(self.checkin_url(), {"code": self.code}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Successfully checked in!")
        self.assertEqual(response.data["checkIn"]["user"]["id"], self.alice.id)
        self.assertEqual(response.data["checkIn"]["source"], CheckIn.SOURCE_CODE)

        check_in = CheckIn.objects.get()
        self.assertEqual(check_in.membership, self.alice_membership)
        self.assertTrue(CodeAttempt.objects.get().success)

    def test_lowercase_code_is_accepted(self):
        self.client.force_authenticate(self.alice)
        response = self.client.post(self.checkin_url(), {"code": "abc123"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(CheckIn.objects.count(), 1)

    def test_second_check_in_returns_original_record(self):
        self.client.force_authenticate(self.alice)
        first = self.client.post(self.checkin_url(), {"code": self.code}, format="json")
        second = self.client.post(self.checkin_url(), {"code": self.code}, format="json")

        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(second.data["message"], "You are already checked in")
        self.assertEqual(second.data["checkIn"]["id"], first.data["checkIn"]["id"])
        self.assertEqual(CheckIn.objects.count(), 1)

    def test_wrong_code_is_rejected_and_logged(self):
        self.client.force_authenticate(self.alice)
        response = self.client.post(self.checkin_url(), {"code": "ZZZ999"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["detail"], "Invalid code")
        self.assertFalse(CheckIn.objects.exists())
        attempt = CodeAttempt.objects.get()
        self.assertFalse(attempt.success)
        self.assertEqual(attempt.user, self.alice)

    def test_malformed_code_returns_field_errors(self):
        self.client.force_authenticate(self.alice)
        response = self.client.post(self.checkin_url(), {"code": "abc"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("code", response.data["errors"])
        self.assertFalse(CodeAttempt.objects.exists())

    def test_sixth_attempt_within_window_is_rate_limited(self):
        self.client.force_authenticate(self.alice)
        for _ in range(5):
            response = self.client.post(self.checkin_url(), {"code": "WRONG1"}, format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(self.checkin_url(), {"code": self.code}, format="json")

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertFalse(CheckIn.objects.exists())
        self.assertEqual(CodeAttempt.objects.count(), 5)

    def test_rate_limit_is_shared_by_client_address(self):
        self.client.force_authenticate(self.alice)
        for _ in range(5):
            self.client.post(self.checkin_url(), {"code": "WRONG1"}, format="json", HTTP_X_FORWARDED_FOR="10.0.0.7")

        self.client.force_authenticate(self.bob)
        response = self.client.post(
            self.checkin_url(), {"code": self.code}, format="json", HTTP_X_FORWARDED_FOR="10.0.0.7, 172.16.0.1"
        )

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)

    def test_garbage_forwarded_header_does_not_bypass_rate_limit(self):
        self.client.force_authenticate(self.alice)
        for _ in range(5):
            response = self.client.post(
                self.checkin_url(), {"code": "WRONG1"}, format="json", HTTP_X_FORWARDED_FOR="A" * 65
            )
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(
            self.checkin_url(), {"code": self.code}, format="json", HTTP_X_FORWARDED_FOR="A" * 65
        )

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(set(CodeAttempt.objects.values_list("ip_address", flat=True)), {"127.0.0.1"})

    def test_unexpected_error_returns_generic_500(self):
        self.client.force_authenticate(self.alice)
        with patch("attendance.views.check_in_with_code", side_effect=RuntimeError("boom")):
            with self.assertLogs("config.exceptions", "ERROR") as logs:
                response = self.client.post(self.checkin_url(), {"code": self.code}, format="json")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {"detail": "Internal server error"})
        self.assertIn("Unhandled API error", logs.output[0])
        self.assertFalse(CheckIn.objects.exists())

    def test_old_attempts_fall_out_of_rate_window(self):
        for _ in range(5):
            CodeAttempt.objects.create(
                attendance=self.attendance,
                user=self.alice,
                ip_address="10.0.0.7",
                attempted_at=timezone.now() - timedelta(minutes=6),
            )

        self.assertFalse(is_rate_limited(self.attendance, self.alice, "10.0.0.7"))
        self.assertTrue(is_rate_limited(self.attendance, self.alice, "10.0.0.7", window_minutes=10))

    def test_check_in_before_grace_period_returns_window(self):
        self.move_event(start_offset_minutes=6)
        self.client.force_authenticate(self.alice)
        response = self.client.post(self.checkin_url(), {"code": self.code}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        body = response.json()
        self.assertEqual(body["graceMinutes"], 5)
        self.assertIn("eventStart", body)
        self.assertIn("eventEnd", body)
        self.assertFalse(CodeAttempt.objects.exists())

    def test_check_in_inside_grace_period_is_accepted(self):
        self.move_event(start_offset_minutes=4)
        self.client.force_authenticate(self.alice)
        response = self.client.post(self.checkin_url(), {"code": self.code}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_cancelled_session_is_rejected_before_code_check(self):
        self.attendance.status = Attendance.STATUS_CANCELLED
        self.attendance.save()
        self.client.force_authenticate(self.alice)

        response = self.client.post(self.checkin_url(), {"code": self.code}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["detail"], "This event has been cancelled")
        self.assertFalse(CodeAttempt.objects.exists())

    def test_non_member_is_forbidden(self):
        self.client.force_authenticate(self.outsider)
        response = self.client.post(self.checkin_url(), {"code": self.code}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(CodeAttempt.objects.exists())

    def test_unknown_session_returns_404(self):
        self.client.force_authenticate(self.alice)
        response = self.client.post("/api/attendance/999999/checkin", {"code": self.code}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_anonymous_request_is_unauthorized(self):
        response = self.client.post(self.checkin_url(), {"code": self.code}, format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_attempt_log_failure_does_not_block_check_in(self):
        self.client.force_authenticate(self.alice)
        with patch.object(CodeAttempt.objects, "create", side_effect=DatabaseError("disk full")):
            with self.assertLogs("attendance.services.attempts", level="ERROR"):
                response = self.client.post(self.checkin_url(), {"code": self.code}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(CheckIn.objects.count(), 1)


@override_settings(PASSWORD_HASHERS=FAST_HASHERS)
class CheckInRecorderTests(AttendanceTestMixin, APITestCase):
    def test_concurrent_duplicate_returns_existing_record(self):
        existing = CheckIn.objects.create(attendance=self.attendance, user=self.alice)
        real_filter = CheckIn.objects.filter
        calls = []

        def stale_first_lookup(*args, **kwargs):
            calls.append(kwargs)
            if len(calls) == 1:
                return CheckIn.objects.none()
            return real_filter(*args, **kwargs)

        with patch.object(CheckIn.objects, "filter", side_effect=stale_first_lookup):
            check_in, created = record_check_in(self.attendance, self.alice)

        self.assertFalse(created)
        self.assertEqual(check_in.pk, existing.pk)
        self.assertEqual(CheckIn.objects.filter(attendance=self.attendance, user=self.alice).count(), 1)

    def test_log_code_attempt_records_address(self):
        attempt = log_code_attempt(self.attendance, self.alice, "", False)

        self.assertEqual(attempt.ip_address, "")
        self.assertFalse(attempt.success)


@override_settings(PASSWORD_HASHERS=FAST_HASHERS)
class CheckInDeleteTests(AttendanceTestMixin, APITestCase):
    def setUp(self):
        super().setUp()
        self.check_in = CheckIn.objects.create(attendance=self.attendance, user=self.alice, membership=self.alice_membership)

    def delete_url(self, check_in_id=None):
        return f"/api/attendance/{self.attendance.id}/checkin/{check_in_id or self.check_in.id}"

    def test_admin_removes_check_in(self):
        self.client.force_authenticate(self.admin)
        response = self.client.delete(self.delete_url())

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Check-in removed successfully")
        self.assertEqual(response.data["removedUser"]["id"], self.alice.id)
        self.assertEqual(response.data["removedUser"]["name"], "Alice Smith")
        self.assertEqual(response.data["removedUser"]["email"], "alice@example.com")
        self.assertFalse(CheckIn.objects.exists())

    def test_user_can_check_in_again_after_removal(self):
        self.client.force_authenticate(self.admin)
        self.client.delete(self.delete_url())

        self.client.force_authenticate(self.alice)
        response = self.client.post(self.checkin_url(), {"code": self.code}, format="json")

        self.assertEqual(response.data["message"], "Successfully checked in!")

    def test_member_cannot_remove_check_in(self):
        self.client.force_authenticate(self.bob)
        response = self.client.delete(self.delete_url())

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(CheckIn.objects.exists())

    def test_missing_check_in_returns_404(self):
        self.client.force_authenticate(self.admin)
        response = self.client.delete(self.delete_url(check_in_id=999999))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_check_in_from_other_session_is_rejected(self):
        other_event = CalendarEvent.objects.create(
            club=self.club,
            title="Outreach",
            start_at=self.event.start_at,
            end_at=self.event.end_at,
        )
        other_attendance = Attendance.objects.create(event=other_event, club=self.club, code_hash=hash_code("XYZ789"))
        other_check_in = CheckIn.objects.create(attendance=other_attendance, user=self.bob)

        self.client.force_authenticate(self.admin)
        response = self.client.delete(self.delete_url(check_in_id=other_check_in.id))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(CheckIn.objects.filter(pk=other_check_in.pk).exists())


@override_settings(PASSWORD_HASHERS=FAST_HASHERS)
class AttendanceAdminEndpointTests(AttendanceTestMixin, APITestCase):
    def url(self, suffix=""):
        return f"/api/attendance/{self.attendance.id}{suffix}"

    def test_member_sees_session_detail(self):
        CheckIn.objects.create(attendance=self.attendance, user=self.bob)
        self.client.force_authenticate(self.alice)
        response = self.client.get(self.url())

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["attendance"]["event"]["title"], "Build Night")
        self.assertEqual(len(response.data["attendance"]["check_ins"]), 1)
        self.assertNotIn("code_hash", response.data["attendance"])

    def test_admin_cancels_session(self):
        self.client.force_authenticate(self.admin)
        response = self.client.patch(self.url(), {"status": Attendance.STATUS_CANCELLED}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.attendance.refresh_from_db()
        self.assertTrue(self.attendance.is_cancelled)

    def test_member_cannot_update_session(self):
        self.client.force_authenticate(self.alice)
        response = self.client.patch(self.url(), {"grace_minutes": 30}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_negative_grace_is_rejected(self):
        self.client.force_authenticate(self.admin)
        response = self.client.patch(self.url(), {"grace_minutes": -1}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("grace_minutes", response.data)

    def test_admin_deletes_session_but_keeps_event(self):
        self.client.force_authenticate(self.admin)
        response = self.client.delete(self.url())

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Attendance.objects.exists())
        self.assertTrue(CalendarEvent.objects.filter(pk=self.event.pk).exists())

    def test_regenerate_replaces_code(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(self.url("/code/regenerate"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        new_code = response.data["code"]
        self.attendance.refresh_from_db()
        self.assertTrue(verify_code(new_code, self.attendance.code_hash))
        self.assertFalse(verify_code(self.code, self.attendance.code_hash))

    def test_member_cannot_regenerate_code(self):
        self.client.force_authenticate(self.alice)
        response = self.client.post(self.url("/code/regenerate"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_code_reveal_outside_window(self):
        self.move_event(start_offset_minutes=120)
        self.client.force_authenticate(self.admin)
        response = self.client.get(self.url("/code"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.json()["canReveal"])

    def test_code_reveal_inside_window(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get(self.url("/code"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["canReveal"])

    def test_manual_check_in(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(self.url("/manual-checkin"), {"userId": self.bob.id}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        check_in = CheckIn.objects.get(user=self.bob)
        self.assertEqual(check_in.source, CheckIn.SOURCE_MANUAL)
        self.assertEqual(check_in.membership, self.bob_membership)

        duplicate = self.client.post(self.url("/manual-checkin"), {"userId": self.bob.id}, format="json")
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)

    def test_manual_check_in_requires_club_member(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(self.url("/manual-checkin"), {"userId": self.outsider.id}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(CheckIn.objects.exists())

    def test_manual_check_in_unknown_user_returns_404(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(self.url("/manual-checkin"), {"userId": 987654}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["detail"], "User is not a member of this team")

    def test_attempts_survive_user_deletion(self):
        self.client.force_authenticate(self.alice)
        self.client.post(self.checkin_url(), {"code": "WRONG1"}, format="json")

        self.alice.delete()

        attempt = CodeAttempt.objects.get()
        self.assertIsNone(attempt.user)
        self.assertFalse(attempt.success)

    def test_roster_lists_missing_members(self):
        CheckIn.objects.create(attendance=self.attendance, user=self.alice)
        self.client.force_authenticate(self.admin)
        response = self.client.get(self.url("/roster"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["totalMembers"], 3)
        self.assertEqual(response.data["checkedInCount"], 1)
        missing_ids = {member["user"]["id"] for member in response.data["missingMembers"]}
        self.assertEqual(missing_ids, {self.admin.id, self.bob.id})

    def test_export_returns_csv(self):
        CheckIn.objects.create(attendance=self.attendance, user=self.alice)
        self.client.force_authenticate(self.admin)
        response = self.client.get(self.url("/export"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response["Content-Type"], "text/csv")
        self.assertIn('filename="Build Night attendance.csv"', response["Content-Disposition"])
        lines = response.content.decode().strip().splitlines()
        self.assertEqual(lines[0], "Name,Email,Checked In At")
        self.assertTrue(lines[1].startswith("Alice Smith,alice@example.com,"))

    def test_member_cannot_export(self):
        self.client.force_authenticate(self.alice)
        response = self.client.get(self.url("/export"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_lists_attempts(self):
        self.client.force_authenticate(self.alice)
        self.client.post(self.checkin_url(), {"code": "WRONG1"}, format="json", REMOTE_ADDR="192.0.2.10")

        self.client.force_authenticate(self.admin)
        response = self.client.get(self.url("/attempts"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["results"]), 1)
        self.assertEqual(response.data["results"][0]["ip_address"], "192.0.2.10")
        self.assertFalse(response.data["results"][0]["success"])


@override_settings(PASSWORD_HASHERS=FAST_HASHERS)
class AttendanceCodeCommandTests(AttendanceTestMixin, APITestCase):
    def test_command_prints_new_code(self):
        stdout = StringIO()
        call_command("attendance_code", "--attendance", str(self.attendance.id), stdout=stdout)

        self.assertIn("New code for 'Build Night'", stdout.getvalue())
        new_code = stdout.getvalue().strip().rsplit(" ", 1)[-1]
        self.attendance.refresh_from_db()
        self.assertTrue(verify_code(new_code, self.attendance.code_hash))

    def test_command_looks_up_by_event(self):
        stdout = StringIO()
        call_command("attendance_code", "--event", str(self.event.id), "--length", "6", stdout=stdout)

        new_code = stdout.getvalue().strip().rsplit(" ", 1)[-1]
        self.assertEqual(len(new_code), 6)

    def test_command_requires_lookup(self):
        with self.assertRaises(CommandError) as exc:
            call_command("attendance_code")

        self.assertIn("--attendance or --event", str(exc.exception))

    def test_command_reports_unknown_session(self):
        with self.assertRaises(CommandError):
            call_command("attendance_code", "--attendance", "999999")


@override_settings(PASSWORD_HASHERS=FAST_HASHERS)
class AttendanceSiteAdminTests(AttendanceTestMixin, APITestCase):
    def test_admin_site_creates_session_with_code(self):
        superuser = User.objects.create_superuser(username="root", password="pwd12345", email="root@example.com")
        event = CalendarEvent.objects.create(
            club=self.club,
            title="Demo Day",
            start_at=timezone.now(),
            end_at=timezone.now() + timedelta(hours=1),
        )
        self.client.force_login(superuser)

        with patch("attendance.admin.generate_code", return_value="XYZ789"):
            response = self.client.post(
                reverse("admin:attendance_attendance_add"),
                {"event": event.id, "grace_minutes": 10, "status": Attendance.STATUS_OPEN},
                follow=True,
            )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        attendance = Attendance.objects.get(event=event)
        self.assertEqual(attendance.club, self.club)
        self.assertTrue(verify_code("XYZ789", attendance.code_hash))
        self.assertIn("XYZ789", " ".join(str(message) for message in response.context["messages"]))
