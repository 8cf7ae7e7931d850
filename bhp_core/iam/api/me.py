# bhp_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from bhp_core.common.permissions import authorize
from bhp_core.iam.actor import get_actor
from bhp_core.iam.api.schema_serializers import MeResponseSerializer
from bhp_core.iam.api.serializers import session_user_payload
from bhp_core.iam.gate import Action, OwnAccount


class MeView(APIView):
    """
    Own account + approval status. The one dashboard page a PENDING or
    REJECTED account can load.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["Auth"])
    def get(self, request):
        actor = get_actor(request)
        authorize(actor, Action.VIEW_OWN_STATUS, OwnAccount(user_id=actor.user_id))
        return Response({"user": session_user_payload(request.user)}, status=status.HTTP_200_OK)
