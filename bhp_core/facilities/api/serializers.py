# bhp_core/facilities/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from bhp_core.facilities.models import Facility, FacilityApplication
from bhp_core.iam.constants import ApprovalStatus


class FacilitySerializer(serializers.ModelSerializer):
    bhp_id = serializers.UUIDField(read_only=True)
    bhrf_email = serializers.SerializerMethodField()

    class Meta:
        model = Facility
        fields = [
            "id",
            "bhp_id",
            "name",
            "address",
            "phone",
            "is_active",
            "bhrf_email",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_bhrf_email(self, obj: Facility):
        bhrf = getattr(obj, "bhrf_profile", None)
        return bhrf.user.email if bhrf else None


class FacilityCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")


class FacilityUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)


class FacilityApplicationSerializer(serializers.ModelSerializer):
    applicant_id = serializers.IntegerField(read_only=True)
    applicant_email = serializers.EmailField(source="applicant.email", read_only=True)
    applicant_name = serializers.CharField(source="applicant.profile.name", read_only=True)
    bhp_id = serializers.UUIDField(read_only=True)
    facility_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = FacilityApplication
        fields = [
            "id",
            "applicant_id",
            "applicant_email",
            "applicant_name",
            "bhp_id",
            "facility_name",
            "facility_address",
            "status",
            "decided_at",
            "rejection_reason",
            "facility_id",
            "created_at",
        ]
        read_only_fields = fields


class FacilityApplicationDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[ApprovalStatus.APPROVED, ApprovalStatus.REJECTED])
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")
