from django.contrib import admin

from .models import CalendarEvent


@admin.register(CalendarEvent)
class CalendarEventAdmin(admin.ModelAdmin):
    list_display = ("title", "club", "start_at", "end_at")
    list_filter = ("club",)
    search_fields = ("title", "location")
