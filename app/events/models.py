from django.db import models
from clubs.models import Club, Membership


class CalendarEvent(models.Model):
    club = models.ForeignKey(Club, on_delete=models.CASCADE, related_name='events')
    creator = models.ForeignKey(Membership, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_events')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    location = models.CharField(max_length=255, blank=True, default='')
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=['club', 'start_at'], name='event_club_start_idx')]

    def __str__(self):
        return self.title
