from django.contrib import admin

from bhp_core.asam.models import ASAMAssessment


@admin.register(ASAMAssessment)
class ASAMAssessmentAdmin(admin.ModelAdmin):
    list_display = ("patient_name", "facility", "level_of_care", "status", "decided_at", "created_at")
    list_filter = ("status", "level_of_care")
    search_fields = ("patient_name", "facility__name")
    readonly_fields = ("status", "submitted_by", "submitted_at", "decided_by", "decided_at", "decision_reason")
    ordering = ("-created_at",)
