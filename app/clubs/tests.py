from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.test import APITestCase

from clubs.models import Club, Membership
from clubs.permissions import is_admin, is_member, require_admin, require_member


User = get_user_model()


@override_settings(PASSWORD_HASHERS=['django.contrib.auth.hashers.MD5PasswordHasher'])
class ClubApiTests(APITestCase):
    def setUp(self):
        self.user1 = User.objects.create_user(username='alice', password='pwd12345')
        self.user2 = User.objects.create_user(username='bob', password='pwd12345')

    def test_creator_becomes_club_admin(self):
        self.client.force_authenticate(self.user1)
        response = self.client.post('/api/clubs/', {'name': 'Robotics'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        membership = Membership.objects.get(club__name='Robotics')
        self.assertEqual(membership.user, self.user1)
        self.assertEqual(membership.role, Membership.ROLE_ADMIN)

    def test_user_only_sees_own_clubs(self):
        mine = Club.objects.create(name='Robotics')
        Club.objects.create(name='Chess')
        Membership.objects.create(user=self.user1, club=mine)

        self.client.force_authenticate(self.user1)
        response = self.client.get('/api/clubs/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['name'], 'Robotics')
        self.assertEqual(response.data[0]['role'], Membership.ROLE_MEMBER)

    def test_members_listing(self):
        club = Club.objects.create(name='Robotics')
        Membership.objects.create(user=self.user1, club=club, role=Membership.ROLE_ADMIN)
        Membership.objects.create(user=self.user2, club=club)

        self.client.force_authenticate(self.user2)
        response = self.client.get(f'/api/clubs/{club.id}/members/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m['user']['username'] for m in response.data], ['alice', 'bob'])

    def test_anonymous_request_is_unauthorized(self):
        response = self.client.get('/api/clubs/')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


@override_settings(PASSWORD_HASHERS=['django.contrib.auth.hashers.MD5PasswordHasher'])
class ClubPermissionTests(TestCase):
    def setUp(self):
        self.club = Club.objects.create(name='Robotics')
        self.admin = User.objects.create_user(username='admin', password='pwd12345')
        self.member = User.objects.create_user(username='member', password='pwd12345')
        self.stranger = User.objects.create_user(username='stranger', password='pwd12345')
        Membership.objects.create(user=self.admin, club=self.club, role=Membership.ROLE_ADMIN)
        Membership.objects.create(user=self.member, club=self.club)

    def test_role_lookups(self):
        self.assertTrue(is_admin(self.admin, self.club.id))
        self.assertFalse(is_admin(self.member, self.club.id))
        self.assertTrue(is_member(self.member, self.club.id))
        self.assertFalse(is_member(self.stranger, self.club.id))

    def test_require_helpers_raise_permission_denied(self):
        self.assertEqual(require_member(self.member, self.club.id).user, self.member)
        with self.assertRaises(PermissionDenied):
            require_member(self.stranger, self.club.id)
        with self.assertRaises(PermissionDenied):
            require_admin(self.member, self.club.id)
