# bhp_core/facilities/selectors.py
from __future__ import annotations

from typing import Optional

from django.db.models import QuerySet

from bhp_core.facilities.models import Facility, FacilityApplication
from bhp_core.iam.actor import Actor, BHPActor
from bhp_core.iam.constants import ApprovalStatus
from bhp_core.iam.gate import facility_q


def facilities_for_actor(actor: Actor, *, active_only: bool = False) -> QuerySet[Facility]:
    qs = Facility.objects.filter(facility_q(actor, field=None))
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.order_by("name")


def applications_for_actor(actor: Actor, *, status: Optional[str] = None) -> QuerySet[FacilityApplication]:
    if not actor.is_approved or not isinstance(actor, BHPActor) or actor.bhp_profile_id is None:
        return FacilityApplication.objects.none()
    qs = FacilityApplication.objects.select_related("applicant", "applicant__profile").filter(
        bhp_id=actor.bhp_profile_id
    )
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at")


def pending_application_count(*, bhp_id) -> int:
    return FacilityApplication.objects.filter(bhp_id=bhp_id, status=ApprovalStatus.PENDING).count()
