from __future__ import annotations

from rest_framework import serializers

from bhp_core.messaging.models import MESSAGE_MAX_LENGTH, Message


class MessageSenderSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.SerializerMethodField()
    role = serializers.SerializerMethodField()

    def _profile(self, user):
        return getattr(user, "profile", None)

    def get_name(self, user) -> str:
        profile = self._profile(user)
        return profile.name if profile else user.get_username()

    def get_role(self, user):
        profile = self._profile(user)
        return profile.role if profile else None


class MessageSerializer(serializers.ModelSerializer):
    sender = MessageSenderSerializer(read_only=True)
    facility_name = serializers.CharField(source="facility.name", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "facility_id",
            "facility_name",
            "sender",
            "content",
            "linked_type",
            "linked_id",
            "read_at",
            "created_at",
        ]
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    facility_id = serializers.UUIDField(required=False)
    content = serializers.CharField(max_length=MESSAGE_MAX_LENGTH)
    linked_type = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    linked_id = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")


class MarkReadSerializer(serializers.Serializer):
    # omitted -> mark everything unread as read
    message_ids = serializers.ListField(child=serializers.UUIDField(), required=False, allow_empty=False)


class MarkReadResponseSerializer(serializers.Serializer):
    updated = serializers.IntegerField()
