# bhp_core/iam/api/registration.py

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from bhp_core.audit.services import RequestMeta
from bhp_core.common.api.exceptions import as_drf_validation_error
from bhp_core.iam.api.serializers import (
    AvailableBHPSerializer,
    RegistrationResponseSerializer,
    RegistrationSerializer,
)
from bhp_core.iam.selectors import available_bhps
from bhp_core.iam.services.registration import RegistrationData, RegistrationService


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        request=RegistrationSerializer,
        responses={201: RegistrationResponseSerializer},
        tags=["Auth"],
    )
    def post(self, request):
        ser = RegistrationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        if data.get("selected_bhp_id") is not None:
            data["selected_bhp_id"] = str(data["selected_bhp_id"])

        try:
            profile = RegistrationService.register(
                data=RegistrationData(**data),
                meta=RequestMeta.from_request(request),
            )
        except DjangoValidationError as e:
            raise as_drf_validation_error(e)

        return Response(
            {
                "id": profile.user_id,
                "email": profile.user.email,
                "role": profile.role,
                "approval_status": profile.approval_status,
            },
            status=status.HTTP_201_CREATED,
        )


class AvailableBHPsView(APIView):
    """Public list used by the BHRF registration form."""
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(responses={200: AvailableBHPSerializer(many=True)}, tags=["Auth"])
    def get(self, request):
        return Response(AvailableBHPSerializer(available_bhps(), many=True).data, status=status.HTTP_200_OK)
