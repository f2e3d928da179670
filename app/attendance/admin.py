from django.contrib import admin, messages

from .models import Attendance, CheckIn, CodeAttempt
from .services.codes import generate_code, hash_code


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ("event", "club", "status", "grace_minutes", "created_at")
    list_filter = ("status",)
    search_fields = ("event__title", "club__name")
    exclude = ("code_hash", "club")

    def save_model(self, request, obj, form, change):
        if change:
            super().save_model(request, obj, form, change)
            return

        # The session always belongs to its event's club and starts with a fresh code.
        code = generate_code()
        obj.club_id = obj.event.club_id
        obj.code_hash = hash_code(code)
        super().save_model(request, obj, form, change)
        self.message_user(
            request,
            f"Check-in code for '{obj.event.title}': {code}. It will not be shown again.",
            messages.WARNING,
        )


@admin.register(CheckIn)
class CheckInAdmin(admin.ModelAdmin):
    list_display = ("attendance", "user", "source", "checked_in_at")
    list_filter = ("source",)
    search_fields = ("user__username", "user__email", "attendance__event__title")
    readonly_fields = ("attendance", "user", "membership", "source", "checked_in_at")

    def has_add_permission(self, request):
        return False


@admin.register(CodeAttempt)
class CodeAttemptAdmin(admin.ModelAdmin):
    list_display = ("attendance", "user", "ip_address", "success", "attempted_at")
    list_filter = ("success",)
    search_fields = ("user__username", "ip_address")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
