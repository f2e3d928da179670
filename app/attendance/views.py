from __future__ import annotations

import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address
from django.http import HttpRequest, HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from attendance.exceptions import OutsideCheckInWindow
from attendance.models import Attendance, CheckIn, CodeAttempt
from attendance.serializers import (
    AttendanceSerializer,
    AttendanceUpdateSerializer,
    CheckInCodeSerializer,
    CheckInSerializer,
    CodeAttemptSerializer,
    ManualCheckInSerializer,
)
from attendance.services.checkin import check_in_with_code, ensure_within_window, record_check_in
from attendance.services.codes import generate_code, hash_code
from attendance.services.export import attendance_csv, export_filename
from clubs.models import Membership
from clubs.permissions import require_admin, require_member
from clubs.serializers import MembershipSerializer, UserSummarySerializer


logger = logging.getLogger(__name__)

MAX_AUDIT_ATTEMPTS = 200


def _valid_ip(value: str | None) -> str:
    value = (value or "").strip()
    if not value:
        return ""
    try:
        validate_ipv46_address(value)
    except ValidationError:
        return ""
    return value


def _client_ip(request: HttpRequest) -> str:
    # Proxy headers are client-controlled; anything that is not an address is ignored.
    if getattr(settings, "ATTENDANCE_TRUST_FORWARDED_FOR", True):
        forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
        client_ip = _valid_ip(forwarded.split(",")[0]) if forwarded else ""
        if not client_ip:
            client_ip = _valid_ip(request.META.get("HTTP_X_REAL_IP"))
        if client_ip:
            return client_ip
    return _valid_ip(request.META.get("REMOTE_ADDR"))


def _get_attendance(attendance_id: int) -> Attendance:
    return get_object_or_404(Attendance.objects.select_related("event", "club"), pk=attendance_id)


@api_view(["GET", "PATCH", "DELETE"])
def attendance_detail(request: HttpRequest, attendance_id: int) -> Response:
    attendance = _get_attendance(attendance_id)

    if request.method == "GET":
        require_member(request.user, attendance.club_id)
        return Response({"attendance": AttendanceSerializer(attendance).data})

    require_admin(request.user, attendance.club_id)

    if request.method == "DELETE":
        # The calendar event stays; only the attendance session goes.
        attendance.delete()
        logger.info("Attendance deleted", extra={"attendance_id": attendance_id, "user_id": request.user.id})
        return Response({"success": True})

    serializer = AttendanceUpdateSerializer(attendance, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    logger.info(
        "Attendance updated",
        extra={"attendance_id": attendance.id, "changes": sorted(serializer.validated_data)},
    )
    return Response({"attendance": AttendanceSerializer(attendance).data})


@api_view(["POST"])
def attendance_check_in(request: HttpRequest, attendance_id: int) -> Response:
    attendance = _get_attendance(attendance_id)
    membership = require_member(request.user, attendance.club_id)

    serializer = CheckInCodeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {"detail": "Invalid code format", "errors": serializer.errors},
            status=status.HTTP_400_BAD_REQUEST,
        )

    try:
        result = check_in_with_code(
            attendance,
            request.user,
            serializer.validated_data["code"],
            _client_ip(request),
            membership=membership,
        )
    except OutsideCheckInWindow as exc:
        return Response(exc.as_payload(), status=exc.status_code)

    return Response({"message": result.message, "checkIn": CheckInSerializer(result.check_in).data})


@api_view(["DELETE"])
def attendance_check_in_delete(request: HttpRequest, attendance_id: int, check_in_id: int) -> Response:
    attendance = _get_attendance(attendance_id)
    require_admin(request.user, attendance.club_id)

    check_in = CheckIn.objects.select_related("user").filter(pk=check_in_id).first()
    if check_in is None:
        return Response({"detail": "Check-in not found"}, status=status.HTTP_404_NOT_FOUND)
    if check_in.attendance_id != attendance.id:
        return Response(
            {"detail": "Check-in does not belong to this attendance"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    removed_user = UserSummarySerializer(check_in.user).data
    check_in.delete()
    logger.info(
        "Check-in removed",
        extra={"attendance_id": attendance.id, "check_in_id": check_in_id, "removed_user_id": removed_user["id"]},
    )
    return Response({"message": "Check-in removed successfully", "removedUser": removed_user})


@api_view(["GET"])
def attendance_code(request: HttpRequest, attendance_id: int) -> Response:
    attendance = _get_attendance(attendance_id)
    require_admin(request.user, attendance.club_id)

    try:
        ensure_within_window(attendance, detail="Code can only be revealed during meeting hours")
    except OutsideCheckInWindow as exc:
        payload = exc.as_payload()
        payload["canReveal"] = False
        return Response(payload, status=exc.status_code)

    # Only the hash is stored, so the plaintext cannot be shown again.
    return Response({"message": "Use POST /regenerate to generate a new code", "canReveal": True})


@api_view(["POST"])
def attendance_code_regenerate(request: HttpRequest, attendance_id: int) -> Response:
    attendance = _get_attendance(attendance_id)
    require_admin(request.user, attendance.club_id)

    code = generate_code()
    attendance.code_hash = hash_code(code)
    attendance.save(update_fields=["code_hash", "updated_at"])
    logger.info("Attendance code regenerated", extra={"attendance_id": attendance.id, "user_id": request.user.id})

    return Response({
        "code": code,
        "message": "Code regenerated successfully. Share this code with attendees.",
    })


@api_view(["POST"])
def attendance_manual_check_in(request: HttpRequest, attendance_id: int) -> Response:
    attendance = _get_attendance(attendance_id)
    require_admin(request.user, attendance.club_id)

    serializer = ManualCheckInSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({"detail": "Invalid input", "errors": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    target_membership = (
        Membership.objects.select_related("user")
        .filter(club_id=attendance.club_id, user_id=serializer.validated_data["user_id"])
        .first()
    )
    if target_membership is None:
        return Response({"detail": "User is not a member of this team"}, status=status.HTTP_404_NOT_FOUND)
    target_user = target_membership.user

    check_in, created = record_check_in(
        attendance,
        target_user,
        membership=target_membership,
        source=CheckIn.SOURCE_MANUAL,
    )
    if not created:
        return Response({"detail": "User is already checked in"}, status=status.HTTP_400_BAD_REQUEST)

    logger.info(
        "Manual check-in added",
        extra={"attendance_id": attendance.id, "user_id": target_user.id, "admin_id": request.user.id},
    )
    return Response({"message": "Manual check-in added successfully", "checkIn": CheckInSerializer(check_in).data})


@api_view(["GET"])
def attendance_roster(request: HttpRequest, attendance_id: int) -> Response:
    attendance = _get_attendance(attendance_id)
    require_admin(request.user, attendance.club_id)

    check_ins = list(attendance.check_ins.select_related("user").order_by("checked_in_at", "id"))
    members = list(
        Membership.objects.select_related("user").filter(club_id=attendance.club_id).order_by("created_at", "id")
    )
    checked_in_user_ids = {check_in.user_id for check_in in check_ins}
    missing = [member for member in members if member.user_id not in checked_in_user_ids]

    return Response({
        "checkIns": CheckInSerializer(check_ins, many=True).data,
        "totalMembers": len(members),
        "checkedInCount": len(check_ins),
        "missingMembers": MembershipSerializer(missing, many=True).data,
        "attendance": {
            "id": attendance.id,
            "status": attendance.status,
            "grace_minutes": attendance.grace_minutes,
            "event": attendance.event_id,
        },
    })


@api_view(["GET"])
def attendance_export(request: HttpRequest, attendance_id: int) -> HttpResponse:
    attendance = _get_attendance(attendance_id)
    require_admin(request.user, attendance.club_id)

    response = HttpResponse(attendance_csv(attendance), content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="{export_filename(attendance.event.title)}"'
    return response


@api_view(["GET"])
def attendance_attempts(request: HttpRequest, attendance_id: int) -> Response:
    attendance = _get_attendance(attendance_id)
    require_admin(request.user, attendance.club_id)

    attempts = CodeAttempt.objects.filter(attendance=attendance).order_by("-attempted_at", "-id")[:MAX_AUDIT_ATTEMPTS]
    return Response({"results": CodeAttemptSerializer(attempts, many=True).data})
