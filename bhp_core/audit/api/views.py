# bhp_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from bhp_core.audit.api.serializers import AuditEventSerializer
from bhp_core.audit.models import AuditEvent
from bhp_core.audit.selectors import list_audit_events
from bhp_core.common.permissions import AdminPermission, authorize
from bhp_core.iam.actor import get_actor
from bhp_core.iam.gate import Action, AdminScope


AUDIT_QUERY_PARAMS = [
    OpenApiParameter("entity_type", OpenApiTypes.STR, OpenApiParameter.QUERY, description="Model name, e.g. Intake or Document."),
    OpenApiParameter("entity_id", OpenApiTypes.STR, OpenApiParameter.QUERY),
    OpenApiParameter("action", OpenApiTypes.STR, OpenApiParameter.QUERY, description="Action code, e.g. INTAKE_APPROVED."),
    OpenApiParameter("actor_user_id", OpenApiTypes.INT, OpenApiParameter.QUERY),
    OpenApiParameter("limit", OpenApiTypes.INT, OpenApiParameter.QUERY, description="Default 200, at most 500."),
]
MAX_AUDIT_ROWS = 500


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    Read-only audit log for administrators.
    """
    permission_classes = [AdminPermission]

    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=AUDIT_QUERY_PARAMS,
    )
    def list(self, request):
        authorize(get_actor(request), Action.VIEW_ADMIN, AdminScope())

        actor_user_raw = request.query_params.get("actor_user_id")
        actor_user_id = None
        if actor_user_raw not in (None, ""):
            try:
                actor_user_id = int(actor_user_raw)
            except ValueError:
                raise ValidationError({"actor_user_id": "Invalid actor_user_id (int expected)."})

        qs = list_audit_events(
            entity_type=request.query_params.get("entity_type") or None,
            entity_id=request.query_params.get("entity_id") or None,
            action=request.query_params.get("action") or None,
            actor_user_id=actor_user_id,
        )

        try:
            limit = int(request.query_params.get("limit") or 200)
        except ValueError:
            limit = 200
        limit = max(1, min(limit, MAX_AUDIT_ROWS))

        return Response(AuditEventSerializer(qs[:limit], many=True).data, status=status.HTTP_200_OK)
