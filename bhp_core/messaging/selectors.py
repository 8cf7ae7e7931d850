# bhp_core/messaging/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from bhp_core.iam.actor import Actor
from bhp_core.iam.gate import facility_q
from bhp_core.messaging.models import Message


def messages_for_actor(actor: Actor, *, facility_id=None) -> QuerySet[Message]:
    qs = Message.objects.select_related("facility", "sender", "sender__profile").filter(facility_q(actor))
    if facility_id:
        qs = qs.filter(facility_id=facility_id)
    return qs.order_by("-created_at")


def unread_for_actor(actor: Actor) -> QuerySet[Message]:
    """Unread messages in the actor's facilities that someone else sent."""
    return Message.objects.filter(facility_q(actor), read_at__isnull=True).exclude(sender_id=actor.user_id)
