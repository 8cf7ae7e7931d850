# bhp_core/compliance/services/credentials.py

from __future__ import annotations

import logging
from typing import Any, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from rest_framework.exceptions import PermissionDenied

from bhp_core.audit.actions import AuditAction
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.common.permissions import FORBIDDEN_MSG, authorize, get_authorized
from bhp_core.compliance.models import Credential, CredentialType
from bhp_core.integrations.storage import discard_objects, get_storage, store_upload
from bhp_core.iam.actor import Actor, BHPActor
from bhp_core.iam.gate import Action, ProfileScope

logger = logging.getLogger(__name__)

CREDENTIAL_EDITABLE_FIELDS = ("type", "name", "expires_at", "no_expiration", "is_public")


def _validate_fields(fields: dict[str, Any]) -> None:
    errors: dict[str, str] = {}
    if "name" in fields and len((fields["name"] or "").strip()) < 2:
        errors["name"] = "Name must be at least 2 characters."
    if "type" in fields and fields["type"] not in CredentialType.values:
        errors["type"] = "Invalid credential type."
    if errors:
        raise ValidationError(errors)


class CredentialService:
    """
    A BHP's own licenses, certifications and insurance documents.
    """

    @staticmethod
    @transaction.atomic
    def upload(
        *,
        actor: Actor,
        uploaded_file,
        type: str,
        name: str,
        expires_at=None,
        no_expiration: bool = False,
        is_public: bool = False,
        meta: Optional[RequestMeta] = None,
    ) -> Credential:
        bhp_id = actor.bhp_profile_id if isinstance(actor, BHPActor) else None
        if bhp_id is None:
            raise PermissionDenied(FORBIDDEN_MSG)
        authorize(actor, Action.CREATE, ProfileScope(bhp_id=bhp_id))

        _validate_fields({"type": type, "name": name})
        file_key = store_upload(kind="credentials", user_id=actor.user_id, uploaded_file=uploaded_file)

        # the bytes are already in the bucket; drop them if the row is not written
        try:
            with transaction.atomic():
                credential = Credential.objects.create(
                    bhp_id=bhp_id,
                    type=type,
                    name=name.strip(),
                    file_key=file_key,
                    expires_at=None if no_expiration else expires_at,
                    no_expiration=no_expiration,
                    is_public=is_public,
                )
        except Exception:
            discard_objects([file_key]).ignore()
            raise

        AuditService.record(
            actor_user_id=actor.user_id,
            action=AuditAction.CREDENTIAL_UPLOADED,
            entity_type="Credential",
            entity_id=credential.id,
            details={"type": credential.type, "name": credential.name},
            meta=meta,
        ).ignore()
        return credential

    @staticmethod
    @transaction.atomic
    def update(
        *,
        actor: Actor,
        credential_id,
        changes: dict[str, Any],
        meta: Optional[RequestMeta] = None,
    ) -> Credential:
        credential = get_authorized(
            Credential.objects.select_for_update(),
            pk=credential_id,
            actor=actor,
            action=Action.UPDATE,
        )
        _validate_fields(changes)

        changed: list[str] = []
        for field in CREDENTIAL_EDITABLE_FIELDS:
            if field not in changes:
                continue
            value = changes[field]
            if isinstance(value, str):
                value = value.strip()
            if getattr(credential, field) != value:
                setattr(credential, field, value)
                changed.append(field)

        if credential.no_expiration and credential.expires_at is not None:
            credential.expires_at = None
            if "expires_at" not in changed:
                changed.append("expires_at")

        if not changed:
            return credential

        credential.save(update_fields=changed + ["updated_at"])
        AuditService.record(
            actor_user_id=actor.user_id,
            action=AuditAction.CREDENTIAL_UPDATED,
            entity_type="Credential",
            entity_id=credential.id,
            details={"fields": changed},
            meta=meta,
        ).ignore()
        return credential

    @staticmethod
    @transaction.atomic
    def delete(*, actor: Actor, credential_id, meta: Optional[RequestMeta] = None) -> None:
        credential = get_authorized(
            Credential.objects.select_for_update(),
            pk=credential_id,
            actor=actor,
            action=Action.DELETE,
        )
        file_key = credential.file_key
        entity_id = credential.id
        details = {"type": credential.type, "name": credential.name}
        credential.delete()

        AuditService.record(
            actor_user_id=actor.user_id,
            action=AuditAction.CREDENTIAL_DELETED,
            entity_type="Credential",
            entity_id=entity_id,
            details=details,
            meta=meta,
        ).ignore()
        transaction.on_commit(lambda: discard_objects([file_key]).ignore())
        logger.info("Credential %s deleted by user %s", entity_id, actor.user_id)

    @staticmethod
    def download_url(*, actor: Actor, credential_id) -> str:
        credential = get_authorized(Credential.objects.all(), pk=credential_id, actor=actor, action=Action.READ)
        return get_storage().signed_url(credential.file_key)
