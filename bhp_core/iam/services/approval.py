# bhp_core/iam/services/approval.py

from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils.html import escape
from django.utils.timezone import now
from rest_framework.exceptions import PermissionDenied

from bhp_core.audit.actions import AuditAction
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.common.permissions import FORBIDDEN_MSG, authorize
from bhp_core.iam.actor import Actor
from bhp_core.iam.constants import ApprovalStatus, Role
from bhp_core.iam.gate import Action, AdminScope
from bhp_core.iam.models import UserProfile
from bhp_core.integrations.email import send_email
from bhp_core.workflow.machine import decide_registration

logger = logging.getLogger(__name__)


class ApprovalService:
    """
    Admin review of registrations (PENDING -> APPROVED | REJECTED, once).

    The reason is validated and the terminal state checked under a row lock
    before anything is written.
    """

    @staticmethod
    @transaction.atomic
    def decide_user(
        *,
        actor: Actor,
        profile_id,
        decision: str,
        rejection_reason: Optional[str] = None,
        meta: Optional[RequestMeta] = None,
    ) -> UserProfile:
        authorize(actor, Action.REVIEW_USERS, AdminScope())

        try:
            profile = UserProfile.objects.select_for_update().select_related("user").get(id=profile_id)
        except (UserProfile.DoesNotExist, DjangoValidationError, ValueError):
            raise PermissionDenied(FORBIDDEN_MSG)

        if profile.role == Role.ADMIN:
            raise PermissionDenied(FORBIDDEN_MSG)

        new_status = decide_registration(current=profile.approval_status, decision=decision, reason=rejection_reason)

        profile.approval_status = new_status
        profile.approved_by_id = actor.user_id
        profile.approved_at = now()
        profile.rejection_reason = (rejection_reason or "").strip() if new_status == ApprovalStatus.REJECTED else ""
        profile.save(update_fields=["approval_status", "approved_by", "approved_at", "rejection_reason", "updated_at"])

        approved = new_status == ApprovalStatus.APPROVED
        AuditService.record(
            actor_user_id=actor.user_id,
            action=AuditAction.USER_APPROVED if approved else AuditAction.USER_REJECTED,
            entity_type="User",
            entity_id=profile.user_id,
            details={
                "email": profile.user.email,
                "role": profile.role,
                "rejection_reason": profile.rejection_reason or None,
            },
            meta=meta,
        ).ignore()

        transaction.on_commit(lambda: ApprovalService.notify_decision(profile).ignore())
        return profile

    @staticmethod
    def notify_decision(profile: UserProfile):
        """Best-effort decision notice to the registrant."""
        name = escape(profile.name)
        if profile.approval_status == ApprovalStatus.APPROVED:
            subject = "Your BHP Connect account has been approved"
            html = (
                f"<p>Hello {name},</p>"
                f"<p>Your account has been approved. You can now sign in at "
                f'<a href="{settings.APP_BASE_URL}">{settings.APP_BASE_URL}</a>.</p>'
            )
        else:
            subject = "Your BHP Connect registration was not approved"
            html = (
                f"<p>Hello {name},</p>"
                f"<p>Your registration was not approved.</p>"
                f"<p>Reason: {escape(profile.rejection_reason)}</p>"
            )
        return send_email(profile.user.email, subject, html)
