# bhp_core/facilities/admin.py
from __future__ import annotations

from django.contrib import admin

from bhp_core.facilities.models import Facility, FacilityApplication


@admin.register(Facility)
class FacilityAdmin(admin.ModelAdmin):
    list_display = ("name", "bhp", "phone", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "address")
    ordering = ("name",)


@admin.register(FacilityApplication)
class FacilityApplicationAdmin(admin.ModelAdmin):
    list_display = ("facility_name", "applicant", "bhp", "status", "decided_at", "created_at")
    list_filter = ("status",)
    search_fields = ("facility_name", "applicant__email")
    readonly_fields = ("status", "decided_by", "decided_at", "rejection_reason", "facility")
    ordering = ("-created_at",)
