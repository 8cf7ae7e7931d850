# bhp_core/asam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from bhp_core.asam.models import ASAMAssessment, LevelOfCare
from bhp_core.intakes.models import Intake
from bhp_core.workflow.serializers import (
    WORKFLOW_READ_FIELDS,
    WorkflowDocumentReadSerializer,
    WorkflowDocumentWriteSerializer,
)


class ASAMAssessmentSerializer(WorkflowDocumentReadSerializer):
    intake_id = serializers.UUIDField(read_only=True)
    level_of_care_label = serializers.CharField(source="get_level_of_care_display", read_only=True)

    class Meta:
        model = ASAMAssessment
        fields = WORKFLOW_READ_FIELDS + [
            "intake_id",
            "patient_name",
            "date_of_birth",
            "level_of_care",
            "level_of_care_label",
        ]
        read_only_fields = fields


class ASAMWriteSerializer(WorkflowDocumentWriteSerializer):
    submit = serializers.BooleanField(required=False, default=False)
    intake_id = serializers.UUIDField(required=False)

    patient_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    level_of_care = serializers.ChoiceField(choices=LevelOfCare.choices, required=False, allow_blank=True)

    def validate(self, attrs):
        # the intake is fixed once the assessment exists
        if self.partial:
            attrs.pop("intake_id", None)
        return attrs


class EligibleIntakeSerializer(serializers.ModelSerializer):
    facility_name = serializers.CharField(source="facility.name", read_only=True)

    class Meta:
        model = Intake
        fields = [
            "id",
            "facility_id",
            "facility_name",
            "resident_name",
            "date_of_birth",
            "sex",
            "language",
            "insurance_provider",
            "policy_number",
            "decided_at",
        ]
        read_only_fields = fields
