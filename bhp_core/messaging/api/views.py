from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from bhp_core.audit.services import RequestMeta
from bhp_core.common.api.pagination import paginate
from bhp_core.common.permissions import PROVIDER_ROLES, ApprovedActorPermission
from bhp_core.iam.actor import BHRFActor, get_actor
from bhp_core.messaging.api.serializers import (
    MarkReadResponseSerializer,
    MarkReadSerializer,
    MessageCreateSerializer,
    MessageSerializer,
)
from bhp_core.messaging.models import Message
from bhp_core.messaging.selectors import messages_for_actor
from bhp_core.messaging.services import MessageService


class MessagePermission(ApprovedActorPermission):
    allowed_roles_per_action = {
        "list": set(PROVIDER_ROLES),
        "create": set(PROVIDER_ROLES),
        "read": set(PROVIDER_ROLES),
    }


@extend_schema(tags=["Messaging"])
class MessageViewSet(viewsets.GenericViewSet):
    permission_classes = [MessagePermission]
    serializer_class = MessageSerializer
    queryset = Message.objects.none()

    @extend_schema(
        parameters=[OpenApiParameter("facility", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False)],
    )
    def list(self, request):
        qs = messages_for_actor(get_actor(request), facility_id=request.query_params.get("facility") or None)
        return paginate(request, qs, MessageSerializer, paginator=self.paginator)

    @extend_schema(request=MessageCreateSerializer, responses={201: MessageSerializer})
    def create(self, request):
        actor = get_actor(request)
        ser = MessageCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)

        facility_id = data.pop("facility_id", None)
        if isinstance(actor, BHRFActor):
            facility_id = facility_id or actor.facility_id
        if not facility_id:
            raise ValidationError({"facility_id": "This field is required."})

        message = MessageService.send(
            actor=actor,
            facility_id=facility_id,
            meta=RequestMeta.from_request(request),
            **data,
        )
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=MarkReadSerializer, responses={200: MarkReadResponseSerializer})
    @action(detail=False, methods=["post"])
    def read(self, request):
        ser = MarkReadSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        updated = MessageService.mark_read(
            actor=get_actor(request),
            message_ids=ser.validated_data.get("message_ids"),
        )
        return Response({"updated": updated}, status=status.HTTP_200_OK)
