from django.contrib import admin

from bhp_core.meetings.models import Meeting


@admin.register(Meeting)
class MeetingAdmin(admin.ModelAdmin):
    list_display = ("title", "facility", "scheduled_at", "status")
    list_filter = ("status",)
    search_fields = ("title", "facility__name")
    ordering = ("-scheduled_at",)
