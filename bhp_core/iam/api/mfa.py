# bhp_core/iam/api/mfa.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from bhp_core.audit.services import RequestMeta
from bhp_core.common.permissions import AnyApprovedRolePermission
from bhp_core.iam.actor import get_actor
from bhp_core.iam.api.schema_serializers import (
    DetailResponseSerializer,
    MFAGenerateResponseSerializer,
    MFAVerifyRequestSerializer,
)
from bhp_core.iam.services.mfa import MFAService


class MFAGenerateView(APIView):
    permission_classes = [AnyApprovedRolePermission]

    @extend_schema(request=None, responses={200: MFAGenerateResponseSerializer}, tags=["Auth"])
    def post(self, request):
        enrollment = MFAService.generate(actor=get_actor(request))
        return Response({"secret": enrollment.secret, "qr_uri": enrollment.qr_uri}, status=status.HTTP_200_OK)


class MFAVerifyView(APIView):
    permission_classes = [AnyApprovedRolePermission]

    @extend_schema(request=MFAVerifyRequestSerializer, responses={200: DetailResponseSerializer}, tags=["Auth"])
    def post(self, request):
        ser = MFAVerifyRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        MFAService.verify(
            actor=get_actor(request),
            code=ser.validated_data["code"],
            meta=RequestMeta.from_request(request),
        )
        return Response({"detail": "MFA enabled"}, status=status.HTTP_200_OK)
