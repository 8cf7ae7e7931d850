from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from bhp_core.common.permissions import AnyApprovedRolePermission
from bhp_core.iam.actor import get_actor
from bhp_core.notifications.api.serializers import (
    BadgeCountsSerializer,
    FeedItemSerializer,
    FeedMarkReadResponseSerializer,
    FeedMarkReadSerializer,
    FeedResponseSerializer,
    UrgentNotificationsResponseSerializer,
)
from bhp_core.notifications.feed import feed_for, mark_feed_read
from bhp_core.notifications.services import badge_counts, urgent_for


class NotificationFeedView(APIView):
    permission_classes = [AnyApprovedRolePermission]

    @extend_schema(tags=["Notifications"], responses={200: FeedResponseSerializer})
    def get(self, request):
        feed = feed_for(get_actor(request))
        return Response(
            {
                "notifications": FeedItemSerializer([n.as_dict() for n in feed.notifications], many=True).data,
                "unread_message_count": feed.unread_message_count,
                "total_count": feed.total_count,
            }
        )


class NotificationReadView(APIView):
    permission_classes = [AnyApprovedRolePermission]

    @extend_schema(
        tags=["Notifications"],
        request=FeedMarkReadSerializer,
        responses={200: FeedMarkReadResponseSerializer},
    )
    def post(self, request):
        ser = FeedMarkReadSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        updated = mark_feed_read(actor=get_actor(request), **ser.validated_data)
        return Response({"success": True, "updated": updated})


class UrgentNotificationsView(APIView):
    permission_classes = [AnyApprovedRolePermission]

    @extend_schema(tags=["Notifications"], responses={200: UrgentNotificationsResponseSerializer})
    def get(self, request):
        notifications = urgent_for(get_actor(request))
        return Response({"notifications": [n.as_dict() for n in notifications]})


class NotificationCountsView(APIView):
    permission_classes = [AnyApprovedRolePermission]

    @extend_schema(tags=["Notifications"], responses={200: BadgeCountsSerializer})
    def get(self, request):
        return Response(badge_counts(get_actor(request)))
