# bhp_core/notifications/services.py
"""
Notification aggregator.

Alerts are recomputed from current database state on every call; nothing is
stored. Rules are evaluated independently and returned in declaration order.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Callable, Optional

from django.utils.timezone import now as tz_now

from bhp_core.asam.models import ASAMAssessment
from bhp_core.compliance.selectors import (
    expired_credential_count,
    expiring_document_count,
    requested_document_count,
)
from bhp_core.facilities.selectors import pending_application_count
from bhp_core.iam.actor import Actor, AdminActor, BHPActor, BHRFActor, assert_never
from bhp_core.iam.selectors import pending_bhp_count
from bhp_core.intakes.models import Intake
from bhp_core.messaging.selectors import unread_for_actor
from bhp_core.workflow.machine import DocumentStatus


class Severity:
    INFO = "info"
    WARNING = "warning"
    URGENT = "urgent"


@dataclass(frozen=True)
class UrgentNotification:
    id: str
    severity: str
    message: str
    link: Optional[str] = None
    link_text: Optional[str] = None

    def as_dict(self) -> dict:
        return asdict(self)


def _plural(count: int, singular: str, plural: Optional[str] = None) -> str:
    return singular if count == 1 else (plural or f"{singular}s")


@dataclass(frozen=True)
class Rule:
    id: str
    severity: str
    count: Callable[[Actor, datetime], int]
    message: Callable[[int], str]
    threshold: int = 0
    link: Optional[str] = None
    link_text: Optional[str] = None

    def evaluate(self, actor: Actor, now: datetime) -> Optional[UrgentNotification]:
        n = self.count(actor, now)
        if n <= self.threshold:
            return None
        return UrgentNotification(
            id=self.id,
            severity=self.severity,
            message=self.message(n),
            link=self.link,
            link_text=self.link_text,
        )


BHP_RULES = (
    Rule(
        id="pending-applications",
        severity=Severity.WARNING,
        count=lambda actor, now: pending_application_count(bhp_id=actor.bhp_profile_id),
        message=lambda n: f"You have {n} pending facility {_plural(n, 'application')} awaiting review.",
        link="/bhp/applications",
        link_text="Review now",
    ),
    Rule(
        id="expired-credentials",
        severity=Severity.URGENT,
        count=lambda actor, now: expired_credential_count(bhp_id=actor.bhp_profile_id, now=now),
        message=lambda n: (
            f"You have {n} expired {_plural(n, 'credential')} that "
            f"{_plural(n, 'needs', 'need')} immediate attention."
        ),
        link="/bhp/credentials",
        link_text="Update credentials",
    ),
    Rule(
        id="unread-messages",
        severity=Severity.INFO,
        count=lambda actor, now: unread_for_actor(actor).count(),
        message=lambda n: f"You have {n} unread messages from your facilities.",
        threshold=5,
        link="/bhp/messages",
        link_text="View messages",
    ),
)

BHRF_RULES = (
    Rule(
        id="requested-docs",
        severity=Severity.WARNING,
        count=lambda actor, now: requested_document_count(facility_id=actor.facility_id),
        message=lambda n: f"Your BHP has requested {n} {_plural(n, 'document')}.",
        link="/facility/documents",
        link_text="Upload now",
    ),
    Rule(
        id="expiring-docs",
        severity=Severity.URGENT,
        count=lambda actor, now: expiring_document_count(facility_id=actor.facility_id, now=now, days=7),
        message=lambda n: f"{n} {_plural(n, 'document')} will expire within 7 days.",
        link="/facility/documents",
        link_text="Review",
    ),
    Rule(
        id="unread-messages-bhrf",
        severity=Severity.INFO,
        count=lambda actor, now: unread_for_actor(actor).count(),
        message=lambda n: f"You have {n} unread {_plural(n, 'message')} from your BHP.",
        link="/facility/messages",
        link_text="View",
    ),
)

ADMIN_RULES = (
    Rule(
        id="pending-bhps",
        severity=Severity.WARNING,
        count=lambda actor, now: pending_bhp_count(),
        message=lambda n: f"{n} BHP {_plural(n, 'registration')} awaiting approval.",
        link="/admin/users/pending",
        link_text="Review",
    ),
)


def rules_for(actor: Actor) -> tuple[Rule, ...]:
    if isinstance(actor, BHPActor):
        return BHP_RULES if actor.bhp_profile_id else ()
    if isinstance(actor, BHRFActor):
        return BHRF_RULES if actor.facility_id else ()
    if isinstance(actor, AdminActor):
        return ADMIN_RULES
    assert_never(actor)


def urgent_for(actor: Actor, now: Optional[datetime] = None) -> list[UrgentNotification]:
    if not actor.is_approved:
        return []
    now = now or tz_now()
    results = (rule.evaluate(actor, now) for rule in rules_for(actor))
    return [n for n in results if n is not None]


def badge_counts(actor: Actor) -> dict[str, int]:
    """
    Sidebar badge counters. Every key is present; irrelevant ones are 0.
    """
    counts = {"messages": 0, "applications": 0, "intakes": 0, "asam": 0, "documents": 0}
    if not actor.is_approved:
        return counts

    if isinstance(actor, BHPActor):
        if actor.bhp_profile_id is None:
            return counts
        counts["messages"] = unread_for_actor(actor).count()
        counts["applications"] = pending_application_count(bhp_id=actor.bhp_profile_id)
        awaiting = {"facility__bhp_id": actor.bhp_profile_id, "status": DocumentStatus.PENDING}
        counts["intakes"] = Intake.objects.filter(**awaiting).count()
        counts["asam"] = ASAMAssessment.objects.filter(**awaiting).count()
    elif isinstance(actor, BHRFActor):
        if actor.facility_id is None:
            return counts
        counts["messages"] = unread_for_actor(actor).count()
        counts["documents"] = requested_document_count(facility_id=actor.facility_id)
    elif isinstance(actor, AdminActor):
        counts["applications"] = pending_bhp_count()
    else:
        assert_never(actor)
    return counts
