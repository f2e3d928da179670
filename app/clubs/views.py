import logging

from django.db import transaction
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import Club, Membership
from .permissions import require_member
from .serializers import ClubSerializer, MembershipSerializer


logger = logging.getLogger(__name__)


class ClubViewSet(mixins.CreateModelMixin, mixins.RetrieveModelMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    queryset = Club.objects.none()
    serializer_class = ClubSerializer

    def get_queryset(self):
        return Club.objects.filter(memberships__user=self.request.user).order_by('-id')

    def perform_create(self, serializer):
        with transaction.atomic():
            club = serializer.save()
            Membership.objects.create(user=self.request.user, club=club, role=Membership.ROLE_ADMIN)
        logger.info("Club created", extra={"club_id": club.id, "user_id": self.request.user.id})

    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        club = self.get_object()
        require_member(request.user, club.id)
        memberships = club.memberships.select_related('user').order_by('created_at', 'id')
        return Response(MembershipSerializer(memberships, many=True).data)
