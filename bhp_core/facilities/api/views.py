# bhp_core/facilities/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from bhp_core.audit.services import RequestMeta
from bhp_core.common.api.pagination import paginate
from bhp_core.common.permissions import BHPOnlyPermission, get_authorized
from bhp_core.facilities.api.permissions import FacilityPermission
from bhp_core.facilities.api.serializers import (
    FacilityApplicationDecisionSerializer,
    FacilityApplicationSerializer,
    FacilityCreateSerializer,
    FacilitySerializer,
    FacilityUpdateSerializer,
)
from bhp_core.facilities.models import Facility, FacilityApplication
from bhp_core.facilities.selectors import applications_for_actor, facilities_for_actor
from bhp_core.facilities.services import FacilityApplicationService, FacilityService
from bhp_core.iam.actor import get_actor
from bhp_core.iam.gate import Action


@extend_schema(tags=["Facilities"])
class FacilityViewSet(viewsets.GenericViewSet):
    permission_classes = [FacilityPermission]
    serializer_class = FacilitySerializer
    queryset = Facility.objects.none()

    def list(self, request):
        actor = get_actor(request)
        active_only = request.query_params.get("active") in {"1", "true", "True"}
        qs = facilities_for_actor(actor, active_only=active_only).select_related("bhrf_profile__user")
        return paginate(request, qs, FacilitySerializer, paginator=self.paginator)

    def retrieve(self, request, pk=None):
        facility = get_authorized(Facility.objects.all(), pk=pk, actor=get_actor(request), action=Action.READ)
        return Response(FacilitySerializer(facility).data, status=status.HTTP_200_OK)

    @extend_schema(request=FacilityCreateSerializer, responses={201: FacilitySerializer})
    def create(self, request):
        ser = FacilityCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        facility = FacilityService.create_facility(
            actor=get_actor(request),
            meta=RequestMeta.from_request(request),
            **ser.validated_data,
        )
        return Response(FacilitySerializer(facility).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=FacilityUpdateSerializer, responses={200: FacilitySerializer})
    def partial_update(self, request, pk=None):
        ser = FacilityUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        facility = FacilityService.update_facility(
            actor=get_actor(request),
            facility_id=pk,
            changes=ser.validated_data,
            meta=RequestMeta.from_request(request),
        )
        return Response(FacilitySerializer(facility).data, status=status.HTTP_200_OK)


@extend_schema(tags=["Facilities"])
class FacilityApplicationViewSet(viewsets.GenericViewSet):
    """
    Applications filed by BHRF registrants with the current BHP.
    """
    permission_classes = [BHPOnlyPermission]
    serializer_class = FacilityApplicationSerializer
    queryset = FacilityApplication.objects.none()

    @extend_schema(
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        qs = applications_for_actor(get_actor(request), status=request.query_params.get("status") or None)
        return paginate(request, qs, FacilityApplicationSerializer, paginator=self.paginator)

    def retrieve(self, request, pk=None):
        application = get_authorized(
            FacilityApplication.objects.select_related("applicant", "applicant__profile"),
            pk=pk,
            actor=get_actor(request),
        )
        return Response(FacilityApplicationSerializer(application).data, status=status.HTTP_200_OK)

    @extend_schema(request=FacilityApplicationDecisionSerializer, responses={200: FacilityApplicationSerializer})
    @action(detail=True, methods=["post"])
    def decide(self, request, pk=None):
        ser = FacilityApplicationDecisionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        application = FacilityApplicationService.decide(
            actor=get_actor(request),
            application_id=pk,
            decision=ser.validated_data["status"],
            rejection_reason=ser.validated_data.get("rejection_reason"),
            meta=RequestMeta.from_request(request),
        )
        return Response(FacilityApplicationSerializer(application).data, status=status.HTTP_200_OK)
