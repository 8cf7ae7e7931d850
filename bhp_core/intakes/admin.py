from django.contrib import admin

from bhp_core.intakes.models import Intake


@admin.register(Intake)
class IntakeAdmin(admin.ModelAdmin):
    list_display = ("resident_name", "facility", "status", "submitted_at", "decided_at", "created_at")
    list_filter = ("status",)
    search_fields = ("resident_name", "facility__name")
    readonly_fields = ("status", "submitted_by", "submitted_at", "decided_by", "decided_at", "decision_reason")
    ordering = ("-created_at",)
