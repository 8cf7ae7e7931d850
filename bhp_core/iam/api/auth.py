# bhp_core/iam/api/auth.py

from __future__ import annotations

from datetime import timedelta
from typing import Any

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from bhp_core.audit.actions import AuditAction
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.common.permissions import authorize
from bhp_core.iam.actor import get_actor
from bhp_core.iam.api.schema_serializers import (
    DetailResponseSerializer,
    LoginRequestSerializer,
    LoginResponseSerializer,
)
from bhp_core.iam.api.serializers import session_user_payload
from bhp_core.iam.gate import Action, OwnAccount


def _seconds(value: Any) -> int:
    """
    JWT lifetime setting -> seconds (timedelta or a plain number).
    """
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    return int(value)


def _cookie_names() -> tuple[str, str]:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
    return jwt_cfg.get("AUTH_COOKIE", "bhp_access"), jwt_cfg.get("AUTH_COOKIE_REFRESH", "bhp_refresh")


def _set_auth_cookies(response: Response, *, access: str, refresh: str) -> None:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
    access_name, refresh_name = _cookie_names()

    secure = bool(jwt_cfg.get("AUTH_COOKIE_SECURE", False))
    samesite = jwt_cfg.get("AUTH_COOKIE_SAMESITE", "Lax")

    for name, value, lifetime in (
        (access_name, access, jwt_cfg.get("ACCESS_TOKEN_LIFETIME", timedelta(minutes=15))),
        (refresh_name, refresh, jwt_cfg.get("REFRESH_TOKEN_LIFETIME", timedelta(days=7))),
    ):
        response.set_cookie(
            name,
            value,
            max_age=_seconds(lifetime),
            httponly=True,
            secure=secure,
            samesite=samesite,
            path="/",
        )


def _clear_auth_cookies(response: Response) -> None:
    for name in _cookie_names():
        response.delete_cookie(name, path="/")


class TokenEndpointView(APIView):
    """
    Public token endpoints. No authenticators run here, so the challenge header
    is supplied explicitly to keep bad credentials a 401.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def get_authenticate_header(self, request):
        return 'Bearer realm="api"'


class LoginView(TokenEndpointView):
    """
    Email + password sign-in. Pending and rejected accounts may sign in; the
    client routes them to the pending-status page.
    """

    @extend_schema(
        request=LoginRequestSerializer,
        responses={200: LoginResponseSerializer},
        tags=["Auth"],
    )
    def post(self, request):
        body = LoginRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)

        serializer = TokenObtainPairSerializer(
            data={
                "username": body.validated_data["email"].strip().lower(),
                "password": body.validated_data["password"],
            }
        )
        serializer.is_valid(raise_exception=True)

        access = serializer.validated_data["access"]
        refresh = serializer.validated_data["refresh"]
        user = serializer.user

        AuditService.record(
            actor_user_id=user.id,
            action=AuditAction.USER_LOGIN,
            entity_type="User",
            entity_id=user.id,
            meta=RequestMeta.from_request(request),
        ).ignore()

        res = Response(
            {"detail": "login ok", "access": access, "refresh": refresh, "user": session_user_payload(user)},
            status=status.HTTP_200_OK,
        )
        _set_auth_cookies(res, access=access, refresh=refresh)
        return res


class RefreshView(TokenEndpointView):
    @extend_schema(
        request=None,
        responses={200: DetailResponseSerializer},
        tags=["Auth"],
    )
    def post(self, request):
        _, refresh_cookie_name = _cookie_names()
        refresh = request.data.get("refresh") or request.COOKIES.get(refresh_cookie_name)

        serializer = TokenRefreshSerializer(data={"refresh": refresh})
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            raise InvalidToken(e.args[0]) from e

        access = serializer.validated_data["access"]
        new_refresh = serializer.validated_data.get("refresh", refresh)

        res = Response({"detail": "refreshed"}, status=status.HTTP_200_OK)
        _set_auth_cookies(res, access=access, refresh=new_refresh)
        return res


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=None,
        responses={200: DetailResponseSerializer},
        tags=["Auth"],
    )
    def post(self, request):
        actor = get_actor(request)
        authorize(actor, Action.SIGN_OUT, OwnAccount(user_id=actor.user_id))

        res = Response({"detail": "logged out"}, status=status.HTTP_200_OK)
        _clear_auth_cookies(res)
        return res
