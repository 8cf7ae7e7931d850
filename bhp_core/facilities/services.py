# bhp_core/facilities/services.py

from __future__ import annotations

import logging
from typing import Any, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.timezone import now
from rest_framework.exceptions import PermissionDenied

from bhp_core.audit.actions import AuditAction
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.common.permissions import FORBIDDEN_MSG, authorize, get_authorized
from bhp_core.facilities.models import Facility, FacilityApplication
from bhp_core.iam.actor import Actor, BHPActor
from bhp_core.iam.constants import ApprovalStatus
from bhp_core.iam.gate import Action, ProfileScope
from bhp_core.iam.models import BHRFProfile, UserProfile
from bhp_core.workflow.machine import decide_registration

logger = logging.getLogger(__name__)

FACILITY_EDITABLE_FIELDS = ("name", "address", "phone", "is_active")


class FacilityService:
    """
    Facility write-model operations. Only the owning BHP mutates a facility.
    """

    @staticmethod
    def _touch_updated_at(obj, update_fields: list[str]) -> None:
        obj.updated_at = now()
        update_fields.append("updated_at")

    @staticmethod
    @transaction.atomic
    def create_facility(
        *,
        actor: Actor,
        name: str,
        address: str = "",
        phone: str = "",
        meta: Optional[RequestMeta] = None,
    ) -> Facility:
        bhp_id = actor.bhp_profile_id if isinstance(actor, BHPActor) else None
        if bhp_id is None:
            raise PermissionDenied(FORBIDDEN_MSG)
        authorize(actor, Action.CREATE, ProfileScope(bhp_id=bhp_id))

        name = (name or "").strip()
        if len(name) < 2:
            raise ValidationError({"name": "Facility name must be at least 2 characters."})

        facility = Facility.objects.create(
            bhp_id=bhp_id,
            name=name,
            address=(address or "").strip(),
            phone=(phone or "").strip(),
        )

        AuditService.record(
            actor_user_id=actor.user_id,
            action=AuditAction.FACILITY_CREATED,
            entity_type="Facility",
            entity_id=facility.id,
            details={"name": facility.name},
            meta=meta,
        ).ignore()
        return facility

    @staticmethod
    @transaction.atomic
    def update_facility(
        *,
        actor: Actor,
        facility_id,
        changes: dict[str, Any],
        meta: Optional[RequestMeta] = None,
    ) -> Facility:
        facility = get_authorized(
            Facility.objects.select_for_update(),
            pk=facility_id,
            actor=actor,
            action=Action.UPDATE,
        )

        changed_fields: list[str] = []
        for field in FACILITY_EDITABLE_FIELDS:
            if field not in changes:
                continue
            value = changes[field]
            if isinstance(value, str):
                value = value.strip()
            if field == "name" and len(value or "") < 2:
                raise ValidationError({"name": "Facility name must be at least 2 characters."})
            if getattr(facility, field) != value:
                setattr(facility, field, value)
                changed_fields.append(field)

        if not changed_fields:
            return facility

        audited = list(changed_fields)
        FacilityService._touch_updated_at(facility, changed_fields)
        facility.save(update_fields=changed_fields)

        AuditService.record(
            actor_user_id=actor.user_id,
            action=AuditAction.FACILITY_UPDATED,
            entity_type="Facility",
            entity_id=facility.id,
            details={"fields": audited},
            meta=meta,
        ).ignore()
        return facility


class FacilityApplicationService:
    """
    Decision on a BHRF facility application (PENDING -> APPROVED | REJECTED),
    made exactly once by the BHP the applicant selected.
    """

    @staticmethod
    @transaction.atomic
    def decide(
        *,
        actor: Actor,
        application_id,
        decision: str,
        rejection_reason: Optional[str] = None,
        meta: Optional[RequestMeta] = None,
    ) -> FacilityApplication:
        application = get_authorized(
            FacilityApplication.objects.select_for_update(),
            pk=application_id,
            actor=actor,
            action=Action.DECIDE,
        )

        new_status = decide_registration(current=application.status, decision=decision, reason=rejection_reason)

        profile = UserProfile.objects.select_for_update().get(user_id=application.applicant_id)
        ts = now()

        application.status = new_status
        application.decided_by_id = actor.user_id
        application.decided_at = ts
        update_fields = ["status", "decided_by", "decided_at", "updated_at"]

        if new_status == ApprovalStatus.APPROVED:
            facility = Facility.objects.create(
                bhp_id=application.bhp_id,
                name=application.facility_name,
                address=application.facility_address,
            )
            BHRFProfile.objects.create(user_id=application.applicant_id, facility=facility)
            application.facility = facility
            update_fields.append("facility")

            profile.approval_status = ApprovalStatus.APPROVED
            profile.approved_by_id = actor.user_id
            profile.approved_at = ts
            profile.rejection_reason = ""
            action = AuditAction.FACILITY_APPLICATION_APPROVED
            details = {"facility_id": str(facility.id), "facility_name": facility.name}
        else:
            reason = (rejection_reason or "").strip()
            application.rejection_reason = reason
            update_fields.append("rejection_reason")

            profile.approval_status = ApprovalStatus.REJECTED
            profile.approved_by_id = actor.user_id
            profile.approved_at = ts
            profile.rejection_reason = reason
            action = AuditAction.FACILITY_APPLICATION_REJECTED
            details = {"facility_name": application.facility_name, "rejection_reason": reason}

        application.updated_at = ts
        application.save(update_fields=update_fields)
        profile.save(update_fields=["approval_status", "approved_by", "approved_at", "rejection_reason", "updated_at"])

        details["applicant_user_id"] = application.applicant_id
        AuditService.record(
            actor_user_id=actor.user_id,
            action=action,
            entity_type="FacilityApplication",
            entity_id=application.id,
            details=details,
            meta=meta,
        ).ignore()

        logger.info("Facility application %s decided %s by user %s", application.id, new_status, actor.user_id)
        return application

