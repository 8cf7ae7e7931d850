# bhp_core/compliance/services/catalog.py
"""
Document categories and employee document types.

Both are deleted in two phases: `deactivate` only marks the row inactive so
existing documents keep their reference; `purge_inactive` (PurgeService)
removes inactive rows once nothing points at them.
"""
from __future__ import annotations

from typing import Any, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.timezone import now
from rest_framework.exceptions import PermissionDenied

from bhp_core.audit.actions import AuditAction
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.common.permissions import FORBIDDEN_MSG, authorize, get_authorized
from bhp_core.compliance.models import DocumentCategory, EmployeeDocumentType
from bhp_core.facilities.models import Facility
from bhp_core.iam.actor import Actor, AdminActor, BHPActor, BHRFActor, assert_never
from bhp_core.iam.gate import Action, ProfileScope

CATALOG_EDITABLE_FIELDS = ("name", "description", "is_required")


def _clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if len(name) < 2:
        raise ValidationError({"name": "Name must be at least 2 characters."})
    return name


def _apply(obj, changes: dict[str, Any]) -> list[str]:
    changed: list[str] = []
    for field in CATALOG_EDITABLE_FIELDS:
        if field not in changes:
            continue
        value = changes[field]
        if isinstance(value, str):
            value = value.strip()
        if getattr(obj, field) != value:
            setattr(obj, field, value)
            changed.append(field)
    return changed


def _record(actor: Actor, action: str, entity_type: str, obj, meta: Optional[RequestMeta], **details) -> None:
    AuditService.record(
        actor_user_id=actor.user_id,
        action=action,
        entity_type=entity_type,
        entity_id=obj.id,
        details={"name": obj.name, **details},
        meta=meta,
    ).ignore()


class DocumentCategoryService:

    @staticmethod
    def _owner_for(actor: Actor) -> dict:
        if isinstance(actor, BHPActor):
            if actor.bhp_profile_id is None:
                raise PermissionDenied(FORBIDDEN_MSG)
            authorize(actor, Action.CREATE, ProfileScope(bhp_id=actor.bhp_profile_id))
            return {"bhp_id": actor.bhp_profile_id}
        if isinstance(actor, BHRFActor):
            if actor.facility_id is None:
                raise PermissionDenied(FORBIDDEN_MSG)
            facility = get_authorized(Facility.objects.all(), pk=actor.facility_id, actor=actor, action=Action.READ)
            authorize(actor, Action.CREATE, facility.member_scope())
            return {"facility_id": facility.id}
        if isinstance(actor, AdminActor):
            raise PermissionDenied(FORBIDDEN_MSG)
        assert_never(actor)

    @staticmethod
    def _ensure_unique(owner: dict, name: str, *, exclude_id=None) -> None:
        qs = DocumentCategory.objects.filter(is_active=True, name__iexact=name, **owner)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        if qs.exists():
            raise ValidationError({"name": "A category with this name already exists."})

    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor: Actor,
        name: str,
        description: str = "",
        is_required: bool = False,
        meta: Optional[RequestMeta] = None,
    ) -> DocumentCategory:
        owner = DocumentCategoryService._owner_for(actor)
        name = _clean_name(name)
        DocumentCategoryService._ensure_unique(owner, name)

        category = DocumentCategory.objects.create(
            name=name,
            description=(description or "").strip(),
            is_required=is_required,
            **owner,
        )
        _record(actor, AuditAction.DOCUMENT_CATEGORY_CREATED, "DocumentCategory", category, meta)
        return category

    @staticmethod
    @transaction.atomic
    def update(
        *,
        actor: Actor,
        category_id,
        changes: dict[str, Any],
        meta: Optional[RequestMeta] = None,
    ) -> DocumentCategory:
        category = get_authorized(
            DocumentCategory.objects.select_for_update(of=("self",)).select_related("facility").filter(is_active=True),
            pk=category_id,
            actor=actor,
            action=Action.UPDATE,
        )
        if "name" in changes:
            changes = {**changes, "name": _clean_name(changes["name"])}
            owner = {"facility_id": category.facility_id} if category.facility_id else {"bhp_id": category.bhp_id}
            DocumentCategoryService._ensure_unique(owner, changes["name"], exclude_id=category.id)

        changed = _apply(category, changes)
        if changed:
            category.save(update_fields=changed + ["updated_at"])
            _record(actor, AuditAction.DOCUMENT_CATEGORY_UPDATED, "DocumentCategory", category, meta, fields=changed)
        return category

    @staticmethod
    @transaction.atomic
    def deactivate(*, actor: Actor, category_id, meta: Optional[RequestMeta] = None) -> DocumentCategory:
        category = get_authorized(
            DocumentCategory.objects.select_for_update(of=("self",)).select_related("facility").filter(is_active=True),
            pk=category_id,
            actor=actor,
            action=Action.DELETE,
        )
        category.is_active = False
        category.deactivated_at = now()
        category.save(update_fields=["is_active", "deactivated_at", "updated_at"])

        _record(
            actor,
            AuditAction.DOCUMENT_CATEGORY_DELETED,
            "DocumentCategory",
            category,
            meta,
            documents=category.documents.count(),
        )
        return category


class EmployeeDocumentTypeService:
    """
    Per-facility catalogue of employee document types (CPR card, TB test, ...).
    Names are unique per facility, inactive rows included; creating a name
    that was deactivated brings the old row back.
    """

    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor: Actor,
        facility_id,
        name: str,
        description: str = "",
        is_required: bool = False,
        meta: Optional[RequestMeta] = None,
    ) -> EmployeeDocumentType:
        facility = get_authorized(Facility.objects.all(), pk=facility_id, actor=actor, action=Action.READ)
        authorize(actor, Action.CREATE, facility.member_scope())
        name = _clean_name(name)

        existing = (
            EmployeeDocumentType.objects.select_for_update()
            .filter(facility=facility, name__iexact=name)
            .first()
        )
        if existing is not None and existing.is_active:
            raise ValidationError({"name": "A document type with this name already exists."})

        if existing is not None:
            existing.is_active = True
            existing.deactivated_at = None
            existing.description = (description or "").strip()
            existing.is_required = is_required
            existing.save(update_fields=["is_active", "deactivated_at", "description", "is_required", "updated_at"])
            doc_type = existing
        else:
            doc_type = EmployeeDocumentType.objects.create(
                facility=facility,
                name=name,
                description=(description or "").strip(),
                is_required=is_required,
            )

        _record(
            actor,
            AuditAction.EMPLOYEE_DOC_TYPE_CREATED,
            "EmployeeDocumentType",
            doc_type,
            meta,
            facility_id=str(facility.id),
            reactivated=existing is not None,
        )
        return doc_type

    @staticmethod
    @transaction.atomic
    def update(
        *,
        actor: Actor,
        doc_type_id,
        changes: dict[str, Any],
        meta: Optional[RequestMeta] = None,
    ) -> EmployeeDocumentType:
        doc_type = get_authorized(
            EmployeeDocumentType.objects.select_for_update(of=("self",)).select_related("facility").filter(is_active=True),
            pk=doc_type_id,
            actor=actor,
            action=Action.UPDATE,
        )
        if "name" in changes:
            changes = {**changes, "name": _clean_name(changes["name"])}
            clash = (
                EmployeeDocumentType.objects.filter(facility_id=doc_type.facility_id, name__iexact=changes["name"])
                .exclude(id=doc_type.id)
                .exists()
            )
            if clash:
                raise ValidationError({"name": "A document type with this name already exists."})

        changed = _apply(doc_type, changes)
        if changed:
            doc_type.save(update_fields=changed + ["updated_at"])
            _record(
                actor,
                AuditAction.EMPLOYEE_DOC_TYPE_UPDATED,
                "EmployeeDocumentType",
                doc_type,
                meta,
                fields=changed,
            )
        return doc_type

    @staticmethod
    @transaction.atomic
    def deactivate(*, actor: Actor, doc_type_id, meta: Optional[RequestMeta] = None) -> EmployeeDocumentType:
        doc_type = get_authorized(
            EmployeeDocumentType.objects.select_for_update(of=("self",)).select_related("facility").filter(is_active=True),
            pk=doc_type_id,
            actor=actor,
            action=Action.DELETE,
        )
        doc_type.is_active = False
        doc_type.deactivated_at = now()
        doc_type.save(update_fields=["is_active", "deactivated_at", "updated_at"])

        _record(actor, AuditAction.EMPLOYEE_DOC_TYPE_DELETED, "EmployeeDocumentType", doc_type, meta)
        return doc_type
