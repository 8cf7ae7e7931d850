# bhp_core/audit/admin.py
from django.contrib import admin

from bhp_core.audit.models import AuditEvent


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = (
        "action",
        "entity_type",
        "entity_id",
        "actor_user",
        "ip_address",
        "occurred_at",
    )
    list_filter = ("action", "entity_type")
    search_fields = ("action", "entity_type", "entity_id")
    ordering = ("-occurred_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
