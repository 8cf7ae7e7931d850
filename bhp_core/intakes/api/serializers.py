# bhp_core/intakes/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from bhp_core.intakes.models import Intake
from bhp_core.workflow.serializers import (
    WORKFLOW_READ_FIELDS,
    WorkflowDocumentReadSerializer,
    WorkflowDocumentWriteSerializer,
)

INTAKE_FIELDS = [
    "resident_name",
    "date_of_birth",
    "admission_date",
    "sex",
    "language",
    "patient_phone",
    "emergency_contact_name",
    "emergency_contact_phone",
    "insurance_provider",
    "policy_number",
    "medications",
]


class MedicationSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    dosage = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    frequency = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    route = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")


class IntakeSerializer(WorkflowDocumentReadSerializer):
    class Meta:
        model = Intake
        fields = WORKFLOW_READ_FIELDS + INTAKE_FIELDS
        read_only_fields = fields


class IntakeWriteSerializer(WorkflowDocumentWriteSerializer):
    submit = serializers.BooleanField(required=False, default=False)

    resident_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    admission_date = serializers.DateField(required=False, allow_null=True)
    sex = serializers.CharField(max_length=32, required=False, allow_blank=True)
    language = serializers.CharField(max_length=64, required=False, allow_blank=True)
    patient_phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    emergency_contact_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    emergency_contact_phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    insurance_provider = serializers.CharField(max_length=255, required=False, allow_blank=True)
    policy_number = serializers.CharField(max_length=64, required=False, allow_blank=True)
    medications = MedicationSerializer(many=True, required=False)

    def validate_resident_name(self, value: str) -> str:
        value = value.strip()
        if value and len(value) < 2:
            raise serializers.ValidationError("Resident name must be at least 2 characters.")
        return value

    def validate_medications(self, value):
        return [dict(m) for m in value]
