from rest_framework import serializers

from bhp_core.notifications.feed import FeedType


class UrgentNotificationSerializer(serializers.Serializer):
    id = serializers.CharField()
    severity = serializers.ChoiceField(choices=["info", "warning", "urgent"])
    message = serializers.CharField()
    link = serializers.CharField(allow_null=True)
    link_text = serializers.CharField(allow_null=True)


class UrgentNotificationsResponseSerializer(serializers.Serializer):
    notifications = UrgentNotificationSerializer(many=True)


class BadgeCountsSerializer(serializers.Serializer):
    messages = serializers.IntegerField()
    applications = serializers.IntegerField()
    intakes = serializers.IntegerField()
    asam = serializers.IntegerField()
    documents = serializers.IntegerField()


class FeedItemSerializer(serializers.Serializer):
    id = serializers.CharField()
    type = serializers.CharField()
    title = serializers.CharField()
    description = serializers.CharField()
    link = serializers.CharField()
    created_at = serializers.DateTimeField()
    is_read = serializers.BooleanField()


class FeedResponseSerializer(serializers.Serializer):
    notifications = FeedItemSerializer(many=True)
    unread_message_count = serializers.IntegerField()
    total_count = serializers.IntegerField()


class FeedMarkReadSerializer(serializers.Serializer):
    notification_ids = serializers.ListField(child=serializers.CharField(max_length=128), allow_empty=False)
    type = serializers.ChoiceField(choices=FeedType.ALL)


class FeedMarkReadResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    updated = serializers.IntegerField()
