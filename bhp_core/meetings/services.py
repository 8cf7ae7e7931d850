# bhp_core/meetings/services.py

from __future__ import annotations

import logging
from typing import Any, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.timezone import now

from bhp_core.audit.actions import AuditAction
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.common.api.exceptions import InvalidTransition
from bhp_core.common.permissions import authorize, get_authorized
from bhp_core.facilities.models import Facility
from bhp_core.iam.actor import Actor
from bhp_core.iam.gate import Action
from bhp_core.meetings.machine import MeetingEvent, next_meeting_status
from bhp_core.meetings.models import (
    DEFAULT_DURATION_MINUTES,
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    Meeting,
    MeetingStatus,
)

logger = logging.getLogger(__name__)

MEETING_EDITABLE_FIELDS = ("title", "description", "scheduled_at", "duration_minutes", "meeting_url", "notes")


def _clean_title(title: str) -> str:
    title = (title or "").strip()
    if len(title) < 2:
        raise ValidationError({"title": "Title must be at least 2 characters."})
    return title


def _check_duration(minutes: int) -> int:
    if not MIN_DURATION_MINUTES <= minutes <= MAX_DURATION_MINUTES:
        raise ValidationError(
            {"duration_minutes": f"Duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes."}
        )
    return minutes


def _record(actor: Actor, action: str, meeting: Meeting, meta: Optional[RequestMeta], **details: Any) -> None:
    AuditService.record(
        actor_user_id=actor.user_id,
        action=action,
        entity_type="Meeting",
        entity_id=meeting.id,
        details={"facility_id": str(meeting.facility_id), "title": meeting.title, **details},
        meta=meta,
    ).ignore()


class MeetingService:
    """
    Meeting write-model operations. Every mutation belongs to the BHP that
    owns the facility; the gate refuses the facility's BHRF.
    """

    @staticmethod
    def _locked(*, actor: Actor, meeting_id) -> Meeting:
        return get_authorized(
            Meeting.objects.select_for_update(of=("self",)).select_related("facility"),
            pk=meeting_id,
            actor=actor,
            action=Action.UPDATE,
        )

    @staticmethod
    @transaction.atomic
    def schedule(
        *,
        actor: Actor,
        facility_id,
        title: str,
        scheduled_at,
        duration_minutes: int = DEFAULT_DURATION_MINUTES,
        description: str = "",
        meeting_url: str = "",
        meta: Optional[RequestMeta] = None,
    ) -> Meeting:
        facility = get_authorized(Facility.objects.all(), pk=facility_id, actor=actor, action=Action.READ)
        authorize(actor, Action.CREATE, facility.access_scope())

        meeting = Meeting.objects.create(
            facility=facility,
            created_by_id=actor.user_id,
            title=_clean_title(title),
            description=(description or "").strip(),
            scheduled_at=scheduled_at,
            duration_minutes=_check_duration(duration_minutes),
            meeting_url=(meeting_url or "").strip(),
        )
        _record(
            actor,
            AuditAction.MEETING_CREATED,
            meeting,
            meta,
            facility_name=facility.name,
            scheduled_at=meeting.scheduled_at.isoformat(),
        )
        return meeting

    @staticmethod
    @transaction.atomic
    def update(
        *,
        actor: Actor,
        meeting_id,
        changes: dict[str, Any],
        meta: Optional[RequestMeta] = None,
    ) -> Meeting:
        """
        Edit details and optionally move the status: CANCELLED cancels a live
        meeting, SCHEDULED restores a cancelled one. A completed meeting only
        takes notes.
        """
        meeting = MeetingService._locked(actor=actor, meeting_id=meeting_id)

        changed: list[str] = []
        for field in MEETING_EDITABLE_FIELDS:
            if field not in changes:
                continue
            value = changes[field]
            if isinstance(value, str):
                value = value.strip()
            if field == "title":
                value = _clean_title(value)
            if field == "duration_minutes":
                value = _check_duration(value)
            if getattr(meeting, field) != value:
                setattr(meeting, field, value)
                changed.append(field)

        if meeting.status == MeetingStatus.COMPLETED and set(changed) - {"notes"}:
            raise InvalidTransition("A completed meeting only accepts notes.")

        cancelling = False
        target = changes.get("status")
        if target and target != meeting.status:
            event = MeetingEvent.CANCEL if target == MeetingStatus.CANCELLED else MeetingEvent.RESTORE
            meeting.status = next_meeting_status(current=meeting.status, event=event)
            cancelling = event == MeetingEvent.CANCEL
            changed.append("status")

        if not changed:
            return meeting
        meeting.save(update_fields=changed + ["updated_at"])

        action = AuditAction.MEETING_CANCELLED if cancelling else AuditAction.MEETING_UPDATED
        _record(actor, action, meeting, meta, fields=changed)
        return meeting

    @staticmethod
    @transaction.atomic
    def cancel(*, actor: Actor, meeting_id, meta: Optional[RequestMeta] = None) -> Meeting:
        meeting = MeetingService._locked(actor=actor, meeting_id=meeting_id)
        meeting.status = next_meeting_status(current=meeting.status, event=MeetingEvent.CANCEL)
        meeting.save(update_fields=["status", "updated_at"])

        _record(actor, AuditAction.MEETING_CANCELLED, meeting, meta)
        return meeting

    @staticmethod
    @transaction.atomic
    def start(*, actor: Actor, meeting_id, meta: Optional[RequestMeta] = None) -> Meeting:
        meeting = MeetingService._locked(actor=actor, meeting_id=meeting_id)
        meeting.status = next_meeting_status(current=meeting.status, event=MeetingEvent.START)
        meeting.started_at = now()
        meeting.save(update_fields=["status", "started_at", "updated_at"])

        _record(actor, AuditAction.MEETING_STARTED, meeting, meta, started_at=meeting.started_at.isoformat())
        logger.info("Meeting %s started by user %s", meeting.id, actor.user_id)
        return meeting

    @staticmethod
    @transaction.atomic
    def end(
        *,
        actor: Actor,
        meeting_id,
        notes: Optional[str] = None,
        meta: Optional[RequestMeta] = None,
    ) -> Meeting:
        meeting = MeetingService._locked(actor=actor, meeting_id=meeting_id)
        meeting.status = next_meeting_status(current=meeting.status, event=MeetingEvent.END)
        meeting.ended_at = now()
        fields = ["status", "ended_at", "updated_at"]

        notes = (notes or "").strip()
        if notes:
            meeting.notes = notes
            fields.append("notes")
        meeting.save(update_fields=fields)

        _record(
            actor,
            AuditAction.MEETING_ENDED,
            meeting,
            meta,
            ended_at=meeting.ended_at.isoformat(),
            has_notes=bool(notes),
        )
        return meeting
