from django.contrib import admin

from bhp_core.messaging.models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("facility", "sender", "created_at", "read_at")
    search_fields = ("facility__name", "content")
    readonly_fields = ("facility", "sender", "content", "linked_type", "linked_id", "read_at")
    ordering = ("-created_at",)
