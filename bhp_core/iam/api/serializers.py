# bhp_core/iam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from bhp_core.iam.constants import ApprovalStatus, Role
from bhp_core.iam.models import BHPProfile, UserProfile


def session_user_payload(user) -> dict:
    """
    Account summary shared by login and the pending-status page.
    """
    profile = getattr(user, "profile", None)
    bhp = getattr(user, "bhp_profile", None)
    bhrf = getattr(user, "bhrf_profile", None)
    return {
        "id": user.id,
        "email": user.email,
        "name": profile.name if profile else user.get_username(),
        "role": profile.role if profile else Role.ADMIN,
        "approval_status": profile.approval_status if profile else ApprovalStatus.APPROVED,
        "rejection_reason": profile.rejection_reason if profile else "",
        "mfa_enabled": bool(profile and profile.mfa_enabled),
        "bhp_profile_id": bhp.id if bhp else None,
        "bhrf_profile_id": bhrf.id if bhrf else None,
        "facility_id": bhrf.facility_id if bhrf else None,
    }


class RegistrationSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    confirm_password = serializers.CharField(write_only=True, trim_whitespace=False)
    name = serializers.CharField(max_length=255)
    role = serializers.ChoiceField(choices=[Role.BHP, Role.BHRF])

    phone = serializers.CharField(required=False, allow_blank=True, default="", max_length=32)
    address = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    bio = serializers.CharField(required=False, allow_blank=True, default="")

    selected_bhp_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    facility_name = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    facility_address = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class RegistrationResponseSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    email = serializers.EmailField()
    role = serializers.CharField()
    approval_status = serializers.CharField()


class AvailableBHPSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="user.profile.name", read_only=True)

    class Meta:
        model = BHPProfile
        fields = ["id", "name", "address"]


class UserProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    approved_by_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = UserProfile
        fields = [
            "id",
            "user_id",
            "email",
            "name",
            "role",
            "approval_status",
            "approved_by_id",
            "approved_at",
            "rejection_reason",
            "mfa_enabled",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ApprovalDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[ApprovalStatus.APPROVED, ApprovalStatus.REJECTED])
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")
