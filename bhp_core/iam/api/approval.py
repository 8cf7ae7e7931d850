# bhp_core/iam/api/approval.py
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from bhp_core.audit.services import RequestMeta
from bhp_core.common.api.exceptions import as_drf_validation_error
from bhp_core.common.api.pagination import paginate
from bhp_core.common.permissions import FORBIDDEN_MSG, AdminPermission, authorize
from bhp_core.iam.actor import get_actor
from bhp_core.iam.api.serializers import ApprovalDecisionSerializer, UserProfileSerializer
from bhp_core.iam.gate import Action, AdminScope
from bhp_core.iam.models import UserProfile
from bhp_core.iam.selectors import list_user_profiles
from bhp_core.iam.services.approval import ApprovalService


class AdminUserViewSet(viewsets.GenericViewSet):
    """
    Registration review queue. ADMIN only.
    """
    permission_classes = [AdminPermission]
    serializer_class = UserProfileSerializer
    queryset = UserProfile.objects.none()

    @extend_schema(
        tags=["Admin"],
        parameters=[
            OpenApiParameter("role", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("approval_status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("search", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: UserProfileSerializer(many=True)},
    )
    def list(self, request):
        authorize(get_actor(request), Action.REVIEW_USERS, AdminScope())
        qs = list_user_profiles(
            role=request.query_params.get("role") or None,
            approval_status=request.query_params.get("approval_status") or None,
            search=request.query_params.get("search") or None,
        )
        return paginate(request, qs, UserProfileSerializer, paginator=self.paginator)

    @extend_schema(tags=["Admin"], responses={200: UserProfileSerializer})
    def retrieve(self, request, pk=None):
        authorize(get_actor(request), Action.REVIEW_USERS, AdminScope())
        try:
            profile = list_user_profiles().get(id=pk)
        except (UserProfile.DoesNotExist, DjangoValidationError, ValueError):
            raise PermissionDenied(FORBIDDEN_MSG)
        return Response(UserProfileSerializer(profile).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Admin"],
        request=ApprovalDecisionSerializer,
        responses={200: UserProfileSerializer},
    )
    @action(detail=True, methods=["post"], url_path="approval")
    def approval(self, request, pk=None):
        ser = ApprovalDecisionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            profile = ApprovalService.decide_user(
                actor=get_actor(request),
                profile_id=pk,
                decision=ser.validated_data["status"],
                rejection_reason=ser.validated_data.get("rejection_reason"),
                meta=RequestMeta.from_request(request),
            )
        except DjangoValidationError as e:
            raise as_drf_validation_error(e)

        return Response(UserProfileSerializer(profile).data, status=status.HTTP_200_OK)
