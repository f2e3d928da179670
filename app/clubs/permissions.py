"""Club role lookups used to authorize attendance and event operations."""
from __future__ import annotations

from rest_framework.exceptions import PermissionDenied

from clubs.models import Membership


def get_user_membership(user, club_id: int) -> Membership | None:
    if not getattr(user, 'is_authenticated', False):
        return None
    return Membership.objects.select_related('club', 'user').filter(user=user, club_id=club_id).first()


def is_member(user, club_id: int) -> bool:
    return get_user_membership(user, club_id) is not None


def is_admin(user, club_id: int) -> bool:
    membership = get_user_membership(user, club_id)
    return bool(membership and membership.is_admin)


def require_member(user, club_id: int) -> Membership:
    membership = get_user_membership(user, club_id)
    if membership is None:
        raise PermissionDenied('Club membership required')
    return membership


def require_admin(user, club_id: int) -> Membership:
    membership = get_user_membership(user, club_id)
    if membership is None or not membership.is_admin:
        raise PermissionDenied('Admin role required')
    return membership
