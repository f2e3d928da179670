import logging

from django.db import transaction
from rest_framework import viewsets

from attendance.models import Attendance
from attendance.services.codes import generate_code, hash_code
from clubs.permissions import require_admin
from .models import CalendarEvent
from .serializers import CalendarEventSerializer


logger = logging.getLogger(__name__)


class CalendarEventViewSet(viewsets.ModelViewSet):
    queryset = CalendarEvent.objects.none()
    serializer_class = CalendarEventSerializer

    def get_queryset(self):
        queryset = (
            CalendarEvent.objects.filter(club__memberships__user=self.request.user)
            .select_related('attendance')
            .order_by('-start_at', '-id')
        )
        club_id = self.request.query_params.get('club')
        if club_id and club_id.isdigit():
            queryset = queryset.filter(club_id=int(club_id))
        return queryset

    def perform_create(self, serializer):
        club = serializer.validated_data['club']
        membership = require_admin(self.request.user, club.id)

        with transaction.atomic():
            event = serializer.save(creator=membership)
            # Only the hash is stored; admins obtain a shareable code through regenerate.
            Attendance.objects.create(
                event=event,
                club=club,
                code_hash=hash_code(generate_code()),
            )
        logger.info("Event created with attendance", extra={"event_id": event.id, "club_id": club.id})

    def perform_update(self, serializer):
        require_admin(self.request.user, serializer.instance.club_id)
        serializer.save()

    def perform_destroy(self, instance):
        require_admin(self.request.user, instance.club_id)
        logger.info("Event deleted", extra={"event_id": instance.id, "club_id": instance.club_id})
        instance.delete()
