# bhp_core/audit/api/serializers.py
from rest_framework import serializers

from bhp_core.audit.models import AuditEvent


class AuditEventSerializer(serializers.ModelSerializer):
    # API field "timestamp" maps to the model field "occurred_at"
    timestamp = serializers.DateTimeField(source="occurred_at", read_only=True)
    actor_user_id = serializers.IntegerField(read_only=True)
    actor_email = serializers.EmailField(source="actor_user.email", read_only=True, default=None)

    class Meta:
        model = AuditEvent
        fields = [
            "id",
            "action",
            "entity_type",
            "entity_id",
            "actor_user_id",
            "actor_email",
            "details",
            "ip_address",
            "user_agent",
            "timestamp",
        ]
        read_only_fields = fields
