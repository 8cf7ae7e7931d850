from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from bhp_core.audit.services import RequestMeta
from bhp_core.common.api.pagination import paginate
from bhp_core.common.permissions import PROVIDER_ROLES, ROLE_BHP, ApprovedActorPermission, get_authorized
from bhp_core.iam.actor import get_actor
from bhp_core.meetings.api.serializers import (
    MeetingCreateSerializer,
    MeetingEndSerializer,
    MeetingSerializer,
    MeetingUpdateSerializer,
)
from bhp_core.meetings.models import Meeting
from bhp_core.meetings.selectors import MeetingFilter, meetings_for_actor
from bhp_core.meetings.services import MeetingService


class MeetingPermission(ApprovedActorPermission):
    allowed_roles_per_action = {
        "list": set(PROVIDER_ROLES),
        "retrieve": set(PROVIDER_ROLES),
        "create": {ROLE_BHP},
        "partial_update": {ROLE_BHP},
        "destroy": {ROLE_BHP},
        "start": {ROLE_BHP},
        "end": {ROLE_BHP},
    }


@extend_schema(tags=["Meetings"])
class MeetingViewSet(viewsets.GenericViewSet):
    permission_classes = [MeetingPermission]
    serializer_class = MeetingSerializer
    queryset = Meeting.objects.none()

    @extend_schema(
        parameters=[
            OpenApiParameter("facility", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("upcoming", OpenApiTypes.BOOL, OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        upcoming = request.query_params.get("upcoming") in {"1", "true", "True"}
        qs = meetings_for_actor(get_actor(request), upcoming=upcoming)
        filterset = MeetingFilter(request.query_params, queryset=qs)
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        return paginate(request, filterset.qs, MeetingSerializer, paginator=self.paginator)

    def retrieve(self, request, pk=None):
        meeting = get_authorized(Meeting.objects.select_related("facility"), pk=pk, actor=get_actor(request))
        return Response(MeetingSerializer(meeting).data, status=status.HTTP_200_OK)

    @extend_schema(request=MeetingCreateSerializer, responses={201: MeetingSerializer})
    def create(self, request):
        ser = MeetingCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        meeting = MeetingService.schedule(
            actor=get_actor(request),
            meta=RequestMeta.from_request(request),
            **ser.validated_data,
        )
        return Response(MeetingSerializer(meeting).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=MeetingUpdateSerializer, responses={200: MeetingSerializer})
    def partial_update(self, request, pk=None):
        ser = MeetingUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        meeting = MeetingService.update(
            actor=get_actor(request),
            meeting_id=pk,
            changes=ser.validated_data,
            meta=RequestMeta.from_request(request),
        )
        return Response(MeetingSerializer(meeting).data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: MeetingSerializer})
    def destroy(self, request, pk=None):
        meeting = MeetingService.cancel(actor=get_actor(request), meeting_id=pk, meta=RequestMeta.from_request(request))
        return Response(MeetingSerializer(meeting).data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: MeetingSerializer})
    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        meeting = MeetingService.start(actor=get_actor(request), meeting_id=pk, meta=RequestMeta.from_request(request))
        return Response(MeetingSerializer(meeting).data, status=status.HTTP_200_OK)

    @extend_schema(request=MeetingEndSerializer, responses={200: MeetingSerializer})
    @action(detail=True, methods=["post"])
    def end(self, request, pk=None):
        ser = MeetingEndSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        meeting = MeetingService.end(
            actor=get_actor(request),
            meeting_id=pk,
            notes=ser.validated_data.get("notes"),
            meta=RequestMeta.from_request(request),
        )
        return Response(MeetingSerializer(meeting).data, status=status.HTTP_200_OK)
