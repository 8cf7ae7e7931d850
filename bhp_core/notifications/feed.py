# bhp_core/notifications/feed.py
"""
Notification feed.

Like the urgent banners, the feed is derived from current state on every
call. Each source contributes its newest few items; the merged list is sorted
newest first and cut to FEED_LIMIT. Only message items carry a read state.
"""
from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from django.utils.timezone import now as tz_now

from bhp_core.compliance.models import Credential, Document, DocumentStatus, EmployeeDocument
from bhp_core.facilities.models import FacilityApplication
from bhp_core.iam.actor import Actor, AdminActor, BHPActor, BHRFActor, assert_never
from bhp_core.iam.constants import ApprovalStatus, Role
from bhp_core.iam.models import UserProfile
from bhp_core.intakes.models import Intake
from bhp_core.meetings.models import MeetingStatus
from bhp_core.meetings.selectors import meetings_within
from bhp_core.messaging.selectors import unread_for_actor
from bhp_core.messaging.services import MessageService
from bhp_core.workflow.machine import DECISION_STATUSES, DocumentStatus as WorkflowStatus

FEED_LIMIT = 20
EXPIRY_WINDOW = timedelta(days=30)
DECISION_WINDOW = timedelta(days=7)
MESSAGE_PREVIEW_LENGTH = 50


class FeedType:
    MESSAGE = "message"
    INTAKE = "intake"
    DOCUMENT = "document"
    APPLICATION = "application"
    CREDENTIAL = "credential"
    EMPLOYEE_DOCUMENT = "employee_document"
    MEETING = "meeting"

    ALL = (MESSAGE, INTAKE, DOCUMENT, APPLICATION, CREDENTIAL, EMPLOYEE_DOCUMENT, MEETING)


# feed ids are "<prefix>-<uuid>"; mark-read strips the prefix
MESSAGE_PREFIX = "msg"


@dataclass(frozen=True)
class FeedItem:
    id: str
    type: str
    title: str
    description: str
    link: str
    created_at: datetime
    is_read: bool = False

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Feed:
    notifications: list[FeedItem]
    unread_message_count: int
    total_count: int


Source = Callable[[Actor, datetime], Iterable[FeedItem]]


def _name(user) -> str:
    profile = getattr(user, "profile", None)
    return profile.name if profile else user.get_username()


def _day(value: datetime) -> str:
    return value.date().isoformat()


def _meeting_items(actor: Actor, now: datetime, link_root: str, with_facility: bool) -> list[FeedItem]:
    items = []
    for meeting in meetings_within(actor, now=now)[:5]:
        live = meeting.status == MeetingStatus.IN_PROGRESS
        description = f"{meeting.title} with {meeting.facility.name}" if with_facility else meeting.title
        items.append(
            FeedItem(
                id=f"meeting-{meeting.id}",
                type=FeedType.MEETING,
                title="Meeting In Progress" if live else "Upcoming Meeting",
                description=description,
                link=f"{link_root}/meetings/{meeting.id}",
                created_at=meeting.scheduled_at,
            )
        )
    return items


# -----------------------------
# BHP sources
# -----------------------------

def _bhp_applications(actor: BHPActor, now: datetime) -> list[FeedItem]:
    qs = (
        FacilityApplication.objects.select_related("applicant__profile")
        .filter(bhp_id=actor.bhp_profile_id, status=ApprovalStatus.PENDING)
        .order_by("-created_at")[:5]
    )
    return [
        FeedItem(
            id=f"app-{app.id}",
            type=FeedType.APPLICATION,
            title="New Facility Application",
            description=f"{_name(app.applicant)} has applied to register {app.facility_name}",
            link=f"/bhp/applications/{app.id}",
            created_at=app.created_at,
        )
        for app in qs
    ]


def _bhp_intakes(actor: BHPActor, now: datetime) -> list[FeedItem]:
    qs = (
        Intake.objects.select_related("facility")
        .filter(facility__bhp_id=actor.bhp_profile_id, status=WorkflowStatus.PENDING)
        .order_by("-created_at")[:5]
    )
    return [
        FeedItem(
            id=f"intake-{intake.id}",
            type=FeedType.INTAKE,
            title="Pending Intake Review",
            description=f"{intake.resident_name} from {intake.facility.name}",
            link=f"/bhp/intakes/{intake.id}",
            created_at=intake.submitted_at or intake.created_at,
        )
        for intake in qs
    ]


def _bhp_messages(actor: BHPActor, now: datetime) -> list[FeedItem]:
    qs = unread_for_actor(actor).select_related("facility", "sender__profile").order_by("-created_at")[:5]
    return [
        FeedItem(
            id=f"{MESSAGE_PREFIX}-{msg.id}",
            type=FeedType.MESSAGE,
            title="New Message",
            description=f"{_name(msg.sender)} from {msg.facility.name}",
            link=f"/bhp/messages?facility={msg.facility_id}",
            created_at=msg.created_at,
        )
        for msg in qs
    ]


def _bhp_credentials(actor: BHPActor, now: datetime) -> list[FeedItem]:
    qs = Credential.objects.filter(
        bhp_id=actor.bhp_profile_id,
        no_expiration=False,
        expires_at__gte=now,
        expires_at__lte=now + EXPIRY_WINDOW,
    ).order_by("expires_at")[:3]
    return [
        FeedItem(
            id=f"cred-{cred.id}",
            type=FeedType.CREDENTIAL,
            title="Credential Expiring Soon",
            description=f"{cred.name} expires on {_day(cred.expires_at)}",
            link="/bhp/credentials",
            created_at=cred.created_at,
        )
        for cred in qs
    ]


def _bhp_uploads(actor: BHPActor, now: datetime) -> list[FeedItem]:
    qs = (
        Document.objects.select_related("facility")
        .filter(facility__bhp_id=actor.bhp_profile_id, status=DocumentStatus.UPLOADED)
        .order_by("-uploaded_at")[:5]
    )
    return [
        FeedItem(
            id=f"doc-{doc.id}",
            type=FeedType.DOCUMENT,
            title="Document Uploaded",
            description=f"{doc.name} uploaded by {doc.facility.name}",
            link="/bhp/documents",
            created_at=doc.uploaded_at or doc.created_at,
        )
        for doc in qs
    ]


def _bhp_meetings(actor: BHPActor, now: datetime) -> list[FeedItem]:
    return _meeting_items(actor, now, "/bhp", with_facility=True)


# -----------------------------
# BHRF sources
# -----------------------------

_DECISION_WORDS = {
    WorkflowStatus.APPROVED: ("Approved", "approved"),
    WorkflowStatus.CONDITIONAL: ("Conditionally Approved", "conditionally approved"),
    WorkflowStatus.DENIED: ("Denied", "denied"),
}


def _bhrf_decisions(actor: BHRFActor, now: datetime) -> list[FeedItem]:
    qs = Intake.objects.filter(
        facility_id=actor.facility_id,
        status__in=DECISION_STATUSES,
        decided_at__gte=now - DECISION_WINDOW,
    ).order_by("-decided_at")[:5]
    items = []
    for intake in qs:
        title, verb = _DECISION_WORDS[intake.status]
        items.append(
            FeedItem(
                id=f"intake-decision-{intake.id}",
                type=FeedType.INTAKE,
                title=f"Intake {title}",
                description=f"{intake.resident_name} has been {verb}",
                link=f"/facility/intakes/{intake.id}",
                created_at=intake.decided_at,
            )
        )
    return items


def _bhrf_messages(actor: BHRFActor, now: datetime) -> list[FeedItem]:
    qs = unread_for_actor(actor).select_related("sender__profile").order_by("-created_at")[:5]
    items = []
    for msg in qs:
        preview = msg.content[:MESSAGE_PREVIEW_LENGTH]
        if len(msg.content) > MESSAGE_PREVIEW_LENGTH:
            preview += "..."
        items.append(
            FeedItem(
                id=f"{MESSAGE_PREFIX}-{msg.id}",
                type=FeedType.MESSAGE,
                title="New Message from BHP",
                description=f"{_name(msg.sender)}: {preview}",
                link="/facility/messages",
                created_at=msg.created_at,
            )
        )
    return items


def _bhrf_requests(actor: BHRFActor, now: datetime) -> list[FeedItem]:
    qs = Document.objects.filter(facility_id=actor.facility_id, status=DocumentStatus.REQUESTED).order_by(
        "-created_at"
    )[:5]
    return [
        FeedItem(
            id=f"doc-request-{doc.id}",
            type=FeedType.DOCUMENT,
            title="Document Requested",
            description=f"Please upload: {doc.name}",
            link="/facility/documents",
            created_at=doc.created_at,
        )
        for doc in qs
    ]


def _employee_docs(actor: BHRFActor):
    return EmployeeDocument.objects.select_related("employee", "document_type").filter(
        employee__facility_id=actor.facility_id,
        employee__is_active=True,
        no_expiration=False,
    )


def _bhrf_expiring_employee_docs(actor: BHRFActor, now: datetime) -> list[FeedItem]:
    qs = _employee_docs(actor).filter(expires_at__gte=now, expires_at__lte=now + EXPIRY_WINDOW).order_by("expires_at")
    return [
        FeedItem(
            id=f"emp-doc-expiring-{doc.id}",
            type=FeedType.EMPLOYEE_DOCUMENT,
            title="Employee Document Expiring",
            description=f"{doc.employee.full_name}'s {doc.document_type.name} expires on {_day(doc.expires_at)}",
            link=f"/facility/employees/{doc.employee_id}",
            created_at=doc.created_at,
        )
        for doc in qs[:5]
    ]


def _bhrf_expired_employee_docs(actor: BHRFActor, now: datetime) -> list[FeedItem]:
    qs = _employee_docs(actor).filter(expires_at__lt=now).order_by("-expires_at")
    return [
        FeedItem(
            id=f"emp-doc-expired-{doc.id}",
            type=FeedType.EMPLOYEE_DOCUMENT,
            title="Employee Document Expired",
            description=f"{doc.employee.full_name}'s {doc.document_type.name} has expired",
            link=f"/facility/employees/{doc.employee_id}",
            created_at=doc.expires_at,
        )
        for doc in qs[:5]
    ]


def _bhrf_meetings(actor: BHRFActor, now: datetime) -> list[FeedItem]:
    return _meeting_items(actor, now, "/facility", with_facility=False)


# -----------------------------
# Admin sources
# -----------------------------

def _admin_pending_bhps(actor: AdminActor, now: datetime) -> list[FeedItem]:
    qs = (
        UserProfile.objects.select_related("user")
        .filter(role=Role.BHP, approval_status=ApprovalStatus.PENDING)
        .order_by("-created_at")[:10]
    )
    return [
        FeedItem(
            id=f"user-pending-{profile.user_id}",
            type=FeedType.APPLICATION,
            title="Pending BHP Registration",
            description=f"{profile.name} ({profile.user.email}) is awaiting approval",
            link=f"/admin/users/{profile.user_id}",
            created_at=profile.created_at,
        )
        for profile in qs
    ]


BHP_SOURCES: tuple[Source, ...] = (
    _bhp_applications,
    _bhp_intakes,
    _bhp_messages,
    _bhp_credentials,
    _bhp_uploads,
    _bhp_meetings,
)
BHRF_SOURCES: tuple[Source, ...] = (
    _bhrf_decisions,
    _bhrf_messages,
    _bhrf_requests,
    _bhrf_expiring_employee_docs,
    _bhrf_expired_employee_docs,
    _bhrf_meetings,
)
ADMIN_SOURCES: tuple[Source, ...] = (_admin_pending_bhps,)


def sources_for(actor: Actor) -> tuple[Source, ...]:
    if isinstance(actor, BHPActor):
        return BHP_SOURCES if actor.bhp_profile_id else ()
    if isinstance(actor, BHRFActor):
        return BHRF_SOURCES if actor.facility_id else ()
    if isinstance(actor, AdminActor):
        return ADMIN_SOURCES
    assert_never(actor)


def feed_for(actor: Actor, now: Optional[datetime] = None) -> Feed:
    if not actor.is_approved:
        return Feed(notifications=[], unread_message_count=0, total_count=0)
    now = now or tz_now()

    items = [item for source in sources_for(actor) for item in source(actor, now)]
    items.sort(key=lambda item: item.created_at, reverse=True)

    unread = 0 if isinstance(actor, AdminActor) else unread_for_actor(actor).count()
    return Feed(notifications=items[:FEED_LIMIT], unread_message_count=unread, total_count=len(items))


def _message_id(feed_id: str) -> Optional[uuid.UUID]:
    prefix, _, rest = feed_id.partition("-")
    if prefix != MESSAGE_PREFIX:
        return None
    try:
        return uuid.UUID(rest)
    except ValueError:
        return None


def mark_feed_read(*, actor: Actor, notification_ids: Iterable[str], type: str) -> int:
    """
    Message items are marked read through the messaging service. Every other
    feed item clears itself once the underlying work is done, so there is
    nothing to store for it. Returns the number of messages updated.
    """
    if type != FeedType.MESSAGE:
        return 0
    ids = [mid for mid in (_message_id(fid) for fid in notification_ids) if mid is not None]
    if not ids:
        return 0
    return MessageService.mark_read(actor=actor, message_ids=ids)
