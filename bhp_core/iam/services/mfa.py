# bhp_core/iam/services/mfa.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pyotp
from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import PermissionDenied, ValidationError

from bhp_core.audit.actions import AuditAction
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.common.permissions import FORBIDDEN_MSG, authorize
from bhp_core.iam.actor import Actor
from bhp_core.iam.gate import Action, OwnAccount
from bhp_core.iam.models import UserProfile


@dataclass(frozen=True)
class MFAEnrollment:
    secret: str
    qr_uri: str


class MFAService:
    """
    TOTP enrolment: generate a secret, then enable MFA once the user proves
    their authenticator produces matching codes.
    """

    @staticmethod
    def _profile_for(actor: Actor) -> UserProfile:
        authorize(actor, Action.UPDATE, OwnAccount(user_id=actor.user_id))
        try:
            return UserProfile.objects.select_for_update().select_related("user").get(user_id=actor.user_id)
        except UserProfile.DoesNotExist:
            raise PermissionDenied(FORBIDDEN_MSG)

    @staticmethod
    @transaction.atomic
    def generate(*, actor: Actor) -> MFAEnrollment:
        profile = MFAService._profile_for(actor)

        secret = pyotp.random_base32()
        profile.mfa_secret = secret
        profile.mfa_enabled = False
        profile.save(update_fields=["mfa_secret", "mfa_enabled", "updated_at"])

        uri = pyotp.TOTP(secret).provisioning_uri(
            name=profile.user.email,
            issuer_name=settings.MFA_ISSUER_NAME,
        )
        return MFAEnrollment(secret=secret, qr_uri=uri)

    @staticmethod
    @transaction.atomic
    def verify(*, actor: Actor, code: str, meta: Optional[RequestMeta] = None) -> UserProfile:
        profile = MFAService._profile_for(actor)

        if not profile.mfa_secret:
            raise ValidationError({"detail": "MFA not initialized"})

        if not pyotp.TOTP(profile.mfa_secret).verify(str(code or "").strip(), valid_window=1):
            raise ValidationError({"detail": "Invalid verification code"})

        profile.mfa_enabled = True
        profile.save(update_fields=["mfa_enabled", "updated_at"])

        AuditService.record(
            actor_user_id=actor.user_id,
            action=AuditAction.USER_MFA_ENABLED,
            entity_type="User",
            entity_id=actor.user_id,
            meta=meta,
        ).ignore()
        return profile
