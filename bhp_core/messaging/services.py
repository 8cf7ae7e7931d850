# bhp_core/messaging/services.py

from __future__ import annotations

from typing import Iterable, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.timezone import now

from bhp_core.audit.actions import AuditAction
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.common.permissions import authorize, get_authorized
from bhp_core.facilities.models import Facility
from bhp_core.iam.actor import Actor
from bhp_core.iam.gate import Action
from bhp_core.messaging.models import MESSAGE_MAX_LENGTH, Message
from bhp_core.messaging.selectors import unread_for_actor


class MessageService:

    @staticmethod
    @transaction.atomic
    def send(
        *,
        actor: Actor,
        facility_id,
        content: str,
        linked_type: str = "",
        linked_id: str = "",
        meta: Optional[RequestMeta] = None,
    ) -> Message:
        facility = get_authorized(Facility.objects.all(), pk=facility_id, actor=actor, action=Action.READ)
        authorize(actor, Action.CREATE, facility.member_scope())

        content = (content or "").strip()
        if not content:
            raise ValidationError({"content": "Message cannot be empty."})
        if len(content) > MESSAGE_MAX_LENGTH:
            raise ValidationError({"content": f"Message must be at most {MESSAGE_MAX_LENGTH} characters."})

        message = Message.objects.create(
            facility=facility,
            sender_id=actor.user_id,
            content=content,
            linked_type=(linked_type or "").strip(),
            linked_id=(linked_id or "").strip(),
        )

        AuditService.record(
            actor_user_id=actor.user_id,
            action=AuditAction.MESSAGE_SENT,
            entity_type="Message",
            entity_id=message.id,
            details={"facility_id": str(facility.id)},
            meta=meta,
        ).ignore()
        return message

    @staticmethod
    @transaction.atomic
    def mark_read(*, actor: Actor, message_ids: Optional[Iterable] = None) -> int:
        """
        Mark unread messages from others as read: the given ids, or every
        unread message the actor can see when no ids are given.
        Returns the number of rows updated.
        """
        qs = unread_for_actor(actor)
        if message_ids is not None:
            qs = qs.filter(id__in=list(message_ids))
        return qs.update(read_at=now())
