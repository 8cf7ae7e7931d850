# bhp_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from bhp_core.iam.models import BHPProfile, BHRFProfile, UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("name", "user", "role", "approval_status", "mfa_enabled", "is_active", "created_at")
    list_filter = ("role", "approval_status", "is_active")
    search_fields = ("name", "user__username", "user__email")
    readonly_fields = ("approval_status", "approved_by", "approved_at", "rejection_reason", "mfa_secret")
    ordering = ("-created_at",)


@admin.register(BHPProfile)
class BHPProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "phone", "created_at")
    search_fields = ("user__email", "phone")
    ordering = ("-created_at",)


@admin.register(BHRFProfile)
class BHRFProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "facility", "created_at")
    search_fields = ("user__email", "facility__name")
    ordering = ("-created_at",)
