# bhp_core/workflow/serializers.py
from __future__ import annotations

from rest_framework import serializers

from bhp_core.workflow.machine import DECISION_STATUSES

WORKFLOW_READ_FIELDS = [
    "id",
    "facility_id",
    "facility_name",
    "status",
    "status_label",
    "draft_step",
    "form_data",
    "submitted_by_id",
    "submitted_at",
    "decided_by_id",
    "decided_at",
    "decision_reason",
    "created_at",
    "updated_at",
]


class WorkflowDocumentReadSerializer(serializers.ModelSerializer):
    facility_id = serializers.UUIDField(read_only=True)
    facility_name = serializers.CharField(source="facility.name", read_only=True)
    status_label = serializers.CharField(source="get_status_display", read_only=True)
    submitted_by_id = serializers.IntegerField(read_only=True, allow_null=True)
    decided_by_id = serializers.IntegerField(read_only=True, allow_null=True)


class WorkflowDocumentWriteSerializer(serializers.Serializer):
    draft_step = serializers.IntegerField(required=False, min_value=0, max_value=100)
    form_data = serializers.DictField(required=False)


class WorkflowDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=sorted(DECISION_STATUSES))
    decision_reason = serializers.CharField(required=False, allow_blank=True, default="")
