from django.contrib.auth import get_user_model
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from attendance.models import Attendance
from clubs.models import Club, Membership
from events.models import CalendarEvent


User = get_user_model()


@override_settings(PASSWORD_HASHERS=['django.contrib.auth.hashers.MD5PasswordHasher'])
class CalendarEventTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username='alice', password='pwd12345')
        self.member = User.objects.create_user(username='bob', password='pwd12345')
        self.outsider = User.objects.create_user(username='carol', password='pwd12345')
        self.club = Club.objects.create(name='Science Olympiad')
        self.other_club = Club.objects.create(name='Chess')
        Membership.objects.create(user=self.admin, club=self.club, role=Membership.ROLE_ADMIN)
        Membership.objects.create(user=self.member, club=self.club)
        Membership.objects.create(user=self.outsider, club=self.other_club, role=Membership.ROLE_ADMIN)

    def payload(self, **overrides):
        data = {
            'club': self.club.id,
            'title': 'Practice',
            'start_at': '2026-02-01T18:00:00Z',
            'end_at': '2026-02-01T20:00:00Z',
        }
        data.update(overrides)
        return data

    def test_admin_creates_event_with_attendance_session(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/events/', self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        event = CalendarEvent.objects.get()
        attendance = Attendance.objects.get(event=event)
        self.assertEqual(attendance.club, self.club)
        self.assertEqual(attendance.status, Attendance.STATUS_OPEN)
        self.assertEqual(attendance.grace_minutes, 0)
        self.assertTrue(attendance.code_hash)
        self.assertEqual(event.creator.user, self.admin)

    def test_member_cannot_create_event(self):
        self.client.force_authenticate(self.member)
        response = self.client.post('/api/events/', self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(CalendarEvent.objects.exists())

    def test_event_cannot_end_before_it_starts(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/events/', self.payload(end_at='2026-02-01T17:00:00Z'), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('end_at', response.data)

    def test_user_only_sees_events_of_own_clubs(self):
        CalendarEvent.objects.create(
            club=self.club,
            title='Practice',
            start_at='2026-02-01T18:00:00Z',
            end_at='2026-02-01T20:00:00Z',
        )
        CalendarEvent.objects.create(
            club=self.other_club,
            title='Tournament',
            start_at='2026-02-02T09:00:00Z',
            end_at='2026-02-02T17:00:00Z',
        )

        self.client.force_authenticate(self.member)
        response = self.client.get('/api/events/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['title'], 'Practice')

    def test_member_cannot_update_event(self):
        event = CalendarEvent.objects.create(
            club=self.club,
            title='Practice',
            start_at='2026-02-01T18:00:00Z',
            end_at='2026-02-01T20:00:00Z',
        )

        self.client.force_authenticate(self.member)
        response = self.client.patch(f'/api/events/{event.id}/', {'title': 'Moved'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        event.refresh_from_db()
        self.assertEqual(event.title, 'Practice')

    def test_deleting_event_removes_its_attendance(self):
        self.client.force_authenticate(self.admin)
        self.client.post('/api/events/', self.payload(), format='json')
        event = CalendarEvent.objects.get()

        response = self.client.delete(f'/api/events/{event.id}/')

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Attendance.objects.exists())
