from django.contrib import admin

from .models import Club, Membership


@admin.register(Club)
class ClubAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ("user", "club", "role", "created_at")
    list_filter = ("role",)
    search_fields = ("user__username", "user__email", "club__name")
