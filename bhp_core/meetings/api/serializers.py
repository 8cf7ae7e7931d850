from __future__ import annotations

from rest_framework import serializers

from bhp_core.meetings.models import (
    DEFAULT_DURATION_MINUTES,
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    Meeting,
    MeetingStatus,
)


class MeetingSerializer(serializers.ModelSerializer):
    facility_name = serializers.CharField(source="facility.name", read_only=True)

    class Meta:
        model = Meeting
        fields = [
            "id",
            "facility_id",
            "facility_name",
            "title",
            "description",
            "scheduled_at",
            "duration_minutes",
            "meeting_url",
            "status",
            "started_at",
            "ended_at",
            "notes",
            "created_by_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class MeetingCreateSerializer(serializers.Serializer):
    facility_id = serializers.UUIDField()
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    scheduled_at = serializers.DateTimeField()
    duration_minutes = serializers.IntegerField(
        min_value=MIN_DURATION_MINUTES,
        max_value=MAX_DURATION_MINUTES,
        default=DEFAULT_DURATION_MINUTES,
    )
    meeting_url = serializers.URLField(max_length=500, required=False, allow_blank=True, default="")


class MeetingUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    scheduled_at = serializers.DateTimeField(required=False)
    duration_minutes = serializers.IntegerField(
        min_value=MIN_DURATION_MINUTES,
        max_value=MAX_DURATION_MINUTES,
        required=False,
    )
    meeting_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
    # only cancel or restore; start/end have their own actions
    status = serializers.ChoiceField(choices=[MeetingStatus.SCHEDULED, MeetingStatus.CANCELLED], required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class MeetingEndSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True)
