# bhp_core/compliance/services/documents.py

from __future__ import annotations

import logging
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.timezone import now

from bhp_core.audit.actions import AuditAction
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.common.permissions import authorize, get_authorized
from bhp_core.compliance.models import (
    Document,
    DocumentCategory,
    DocumentOwnerType,
    DocumentStatus,
    DocumentVersion,
    Employee,
)
from bhp_core.compliance.selectors import category_visible_to_facility
from bhp_core.facilities.models import Facility
from bhp_core.iam.actor import Actor
from bhp_core.iam.gate import Action
from bhp_core.integrations.storage import discard_objects, get_storage, store_upload
from bhp_core.intakes.models import Intake

logger = logging.getLogger(__name__)


def _facility_for_write(actor: Actor, facility_id) -> Facility:
    facility = get_authorized(Facility.objects.all(), pk=facility_id, actor=actor, action=Action.READ)
    authorize(actor, Action.CREATE, facility.member_scope())
    return facility


def _resolve_links(
    facility: Facility,
    *,
    category_id=None,
    employee_id=None,
    intake_id=None,
) -> dict:
    """
    Category, employee and intake must all belong to the document's facility
    (a category may also be shared by the facility's BHP).
    """
    links: dict = {}
    errors: dict[str, str] = {}

    if category_id:
        category = DocumentCategory.objects.filter(id=category_id).first()
        if category is None or not category_visible_to_facility(category, facility):
            errors["category_id"] = "Category not found for this facility."
        else:
            links["category"] = category

    if employee_id:
        employee = Employee.objects.filter(id=employee_id, facility_id=facility.id).first()
        if employee is None:
            errors["employee_id"] = "Employee not found for this facility."
        else:
            links["employee"] = employee

    if intake_id:
        intake = Intake.objects.filter(id=intake_id, facility_id=facility.id).first()
        if intake is None:
            errors["intake_id"] = "Intake not found for this facility."
        else:
            links["intake"] = intake

    if errors:
        raise ValidationError(errors)
    return links


def _validate_name_type(name: str, doc_type: str) -> None:
    errors: dict[str, str] = {}
    if len((name or "").strip()) < 2:
        errors["name"] = "Name must be at least 2 characters."
    if len((doc_type or "").strip()) < 2:
        errors["type"] = "Type must be at least 2 characters."
    if errors:
        raise ValidationError(errors)


def _audit(actor: Actor, action: str, document: Document, meta: Optional[RequestMeta], **details) -> None:
    payload = {"facility_id": str(document.facility_id), "name": document.name}
    payload.update(details)
    AuditService.record(
        actor_user_id=actor.user_id,
        action=action,
        entity_type="Document",
        entity_id=document.id,
        details=payload,
        meta=meta,
    ).ignore()


class DocumentService:
    """
    Facility documents.

    A BHP requests a document from one of its facilities; the facility's BHRF
    fulfils the request or uploads documents on its own. Every stored file is
    also written as a DocumentVersion in the same transaction.
    """

    @staticmethod
    @transaction.atomic
    def request_document(
        *,
        actor: Actor,
        facility_id,
        name: str,
        type: str,
        owner_type: str = DocumentOwnerType.FACILITY,
        category_id=None,
        employee_id=None,
        intake_id=None,
        notes: str = "",
        meta: Optional[RequestMeta] = None,
    ) -> Document:
        facility = _facility_for_write(actor, facility_id)
        _validate_name_type(name, type)
        links = _resolve_links(facility, category_id=category_id, employee_id=employee_id, intake_id=intake_id)

        document = Document.objects.create(
            facility=facility,
            name=name.strip(),
            type=type.strip(),
            status=DocumentStatus.REQUESTED,
            owner_type=owner_type or DocumentOwnerType.FACILITY,
            requested_by_id=actor.user_id,
            notes=(notes or "").strip(),
            **links,
        )
        _audit(actor, AuditAction.DOCUMENT_REQUESTED, document, meta, type=document.type)
        return document

    @staticmethod
    @transaction.atomic
    def upload(
        *,
        actor: Actor,
        facility_id,
        uploaded_file,
        name: str,
        type: str,
        document_id=None,
        owner_type: str = DocumentOwnerType.FACILITY,
        category_id=None,
        employee_id=None,
        intake_id=None,
        expires_at=None,
        no_expiration: bool = False,
        notes: str = "",
        meta: Optional[RequestMeta] = None,
    ) -> Document:
        """
        Upload a new document, or a file for an existing one (fulfilling a
        request or replacing the current file) when document_id is given.
        """
        if document_id:
            document = get_authorized(
                Document.objects.select_for_update(of=("self",)).select_related("facility"),
                pk=document_id,
                actor=actor,
                action=Action.UPDATE,
            )
            facility = document.facility
            fulfilled_request = document.status == DocumentStatus.REQUESTED
        else:
            facility = _facility_for_write(actor, facility_id)
            _validate_name_type(name, type)
            document = Document(facility=facility, name=name.strip(), type=type.strip())
            fulfilled_request = False

        links = _resolve_links(facility, category_id=category_id, employee_id=employee_id, intake_id=intake_id)
        file_key = store_upload(kind="documents", user_id=actor.user_id, uploaded_file=uploaded_file)

        try:
            with transaction.atomic():
                for field, value in links.items():
                    setattr(document, field, value)
                if not document_id:
                    document.owner_type = owner_type or DocumentOwnerType.FACILITY
                document.status = DocumentStatus.UPLOADED
                document.file_key = file_key
                document.uploaded_by_id = actor.user_id
                document.uploaded_at = now()
                document.no_expiration = no_expiration
                document.expires_at = None if no_expiration else expires_at
                if notes:
                    document.notes = notes.strip()
                document.save()

                DocumentVersion.objects.create(document=document, file_key=file_key, uploaded_by_id=actor.user_id)
        except Exception:
            discard_objects([file_key]).ignore()
            raise

        _audit(
            actor,
            AuditAction.DOCUMENT_UPLOADED,
            document,
            meta,
            file_key=file_key,
            fulfilled_request=fulfilled_request,
        )
        logger.info("Document %s uploaded by user %s", document.id, actor.user_id)
        return document

    @staticmethod
    @transaction.atomic
    def delete(*, actor: Actor, document_id, meta: Optional[RequestMeta] = None) -> None:
        document = get_authorized(
            Document.objects.select_for_update(of=("self",)).select_related("facility"),
            pk=document_id,
            actor=actor,
            action=Action.DELETE,
        )
        keys = set(document.versions.values_list("file_key", flat=True))
        if document.file_key:
            keys.add(document.file_key)

        _audit(actor, AuditAction.DOCUMENT_DELETED, document, meta, status=document.status)
        document.delete()
        transaction.on_commit(lambda: discard_objects(sorted(keys)).ignore())

    @staticmethod
    def download_url(*, actor: Actor, document_id) -> str:
        document = get_authorized(
            Document.objects.select_related("facility"),
            pk=document_id,
            actor=actor,
            action=Action.READ,
        )
        if not document.file_key:
            raise ValidationError({"detail": "No file has been uploaded for this document."})
        return get_storage().signed_url(document.file_key)
