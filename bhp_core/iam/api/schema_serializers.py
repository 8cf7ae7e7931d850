# bhp_core/iam/api/schema_serializers.py
from __future__ import annotations

from rest_framework import serializers


class LoginRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()


class SessionUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    email = serializers.EmailField()
    name = serializers.CharField()
    role = serializers.CharField()
    approval_status = serializers.CharField()
    rejection_reason = serializers.CharField(allow_blank=True, required=False)
    mfa_enabled = serializers.BooleanField()
    bhp_profile_id = serializers.UUIDField(allow_null=True, required=False)
    bhrf_profile_id = serializers.UUIDField(allow_null=True, required=False)
    facility_id = serializers.UUIDField(allow_null=True, required=False)


class LoginResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()
    access = serializers.CharField()
    refresh = serializers.CharField()
    user = SessionUserSerializer()


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class MeResponseSerializer(serializers.Serializer):
    user = SessionUserSerializer()


class MFAGenerateResponseSerializer(serializers.Serializer):
    secret = serializers.CharField()
    qr_uri = serializers.CharField()


class MFAVerifyRequestSerializer(serializers.Serializer):
    code = serializers.CharField(min_length=6, max_length=8)
