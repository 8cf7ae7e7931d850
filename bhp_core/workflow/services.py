# bhp_core/workflow/services.py

from __future__ import annotations

import logging
from typing import Any, Optional, Type

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.timezone import now

from bhp_core.audit.actions import workflow_action
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.common.permissions import authorize, get_authorized
from bhp_core.facilities.models import Facility
from bhp_core.iam.actor import Actor
from bhp_core.iam.gate import Action
from bhp_core.workflow.machine import DocumentEvent, DocumentPolicy, DocumentStatus, next_status, policy_for
from bhp_core.workflow.models import WorkflowDocument

logger = logging.getLogger(__name__)


class WorkflowDocumentService:
    """
    Write-model operations shared by intakes and ASAM assessments.

    Every operation:
      1) loads the row under select_for_update and runs it through the gate
      2) asks the state machine for the next status
      3) persists and records exactly one audit entry per transition,
         inside the same transaction

    Subclasses set `model` and `editable_fields`, and may override
    `before_create` and `before_submit` for cross-entity rules.
    """

    model: Type[WorkflowDocument]
    editable_fields: tuple[str, ...] = ()

    # -------------------------
    # Internal helpers
    # -------------------------
    @classmethod
    def policy(cls) -> DocumentPolicy:
        return policy_for(cls.model.POLICY_KIND)

    @classmethod
    def _locked(cls, *, actor: Actor, doc_id, action: Action) -> WorkflowDocument:
        qs = cls.model.objects.select_for_update(of=("self",)).select_related("facility")
        return get_authorized(qs, pk=doc_id, actor=actor, action=action)

    @classmethod
    def _apply(cls, doc: WorkflowDocument, changes: dict[str, Any]) -> list[str]:
        changed: list[str] = []
        for field in cls.editable_fields + ("form_data", "draft_step"):
            if field not in changes:
                continue
            value = changes[field]
            if getattr(doc, field) != value:
                setattr(doc, field, value)
                changed.append(field)
        return changed

    @classmethod
    def _require_complete(cls, doc: WorkflowDocument) -> None:
        missing = doc.missing_required_fields()
        if missing:
            raise ValidationError({name: "This field is required before submitting." for name in missing})

    @classmethod
    def _audit(
        cls,
        *,
        actor: Actor,
        doc: WorkflowDocument,
        suffix: str,
        details: Optional[dict] = None,
        meta: Optional[RequestMeta] = None,
    ) -> None:
        payload = {"facility_id": str(doc.facility_id), "status": doc.status}
        if details:
            payload.update(details)
        AuditService.record(
            actor_user_id=actor.user_id,
            action=workflow_action(cls.model.AUDIT_PREFIX, suffix),
            entity_type=cls.model.__name__,
            entity_id=doc.id,
            details=payload,
            meta=meta,
        ).ignore()

    @classmethod
    def _mark_submitted(cls, doc: WorkflowDocument, *, actor: Actor) -> list[str]:
        doc.status = next_status(cls.policy(), current=doc.status, event=DocumentEvent.SUBMIT, role=actor.role)
        cls._require_complete(doc)
        doc.submitted_by_id = actor.user_id
        doc.submitted_at = now()
        return ["status", "submitted_by", "submitted_at"]

    @classmethod
    def before_create(cls, *, actor: Actor, facility: Facility, fields: dict[str, Any]) -> dict[str, Any]:
        return fields

    @classmethod
    def before_submit(cls, *, actor: Actor, doc: WorkflowDocument) -> None:
        return None

    # -------------------------
    # Create (draft, or straight to submitted)
    # -------------------------
    @classmethod
    @transaction.atomic
    def create(
        cls,
        *,
        actor: Actor,
        facility_id,
        fields: dict[str, Any],
        submit: bool = False,
        meta: Optional[RequestMeta] = None,
    ) -> WorkflowDocument:
        facility = get_authorized(Facility.objects.all(), pk=facility_id, actor=actor, action=Action.READ)
        authorize(actor, Action.CREATE, facility.member_scope())

        # only the authoring facility starts a document
        next_status(cls.policy(), current=DocumentStatus.DRAFT, event=DocumentEvent.SAVE_DRAFT, role=actor.role)

        fields = cls.before_create(actor=actor, facility=facility, fields=dict(fields))
        doc = cls.model(facility=facility, status=DocumentStatus.DRAFT)
        cls._apply(doc, fields)
        if submit:
            cls._mark_submitted(doc, actor=actor)
        doc.save()

        cls._audit(actor=actor, doc=doc, suffix="CREATED", meta=meta)
        if submit:
            cls._audit(actor=actor, doc=doc, suffix="SUBMITTED", meta=meta)
        return doc

    # -------------------------
    # Author edits
    # -------------------------
    @classmethod
    @transaction.atomic
    def save_draft(
        cls,
        *,
        actor: Actor,
        doc_id,
        changes: dict[str, Any],
        meta: Optional[RequestMeta] = None,
    ) -> WorkflowDocument:
        doc = cls._locked(actor=actor, doc_id=doc_id, action=Action.UPDATE)
        next_status(cls.policy(), current=doc.status, event=DocumentEvent.SAVE_DRAFT, role=actor.role)

        changed = cls._apply(doc, changes)
        if changed:
            doc.save(update_fields=changed + ["updated_at"])
        cls._audit(actor=actor, doc=doc, suffix="DRAFT_SAVED", details={"draft_step": doc.draft_step}, meta=meta)
        return doc

    @classmethod
    @transaction.atomic
    def submit(
        cls,
        *,
        actor: Actor,
        doc_id,
        changes: Optional[dict[str, Any]] = None,
        meta: Optional[RequestMeta] = None,
    ) -> WorkflowDocument:
        doc = cls._locked(actor=actor, doc_id=doc_id, action=Action.SUBMIT)
        cls.before_submit(actor=actor, doc=doc)
        changed = cls._apply(doc, changes or {})
        changed += cls._mark_submitted(doc, actor=actor)
        doc.save(update_fields=changed + ["updated_at"])

        cls._audit(actor=actor, doc=doc, suffix="SUBMITTED", meta=meta)
        logger.info("%s %s submitted by user %s", cls.model.__name__, doc.id, actor.user_id)
        return doc

    @classmethod
    @transaction.atomic
    def edit(
        cls,
        *,
        actor: Actor,
        doc_id,
        changes: dict[str, Any],
        meta: Optional[RequestMeta] = None,
    ) -> WorkflowDocument:
        """
        Content edit that never moves the status. Whether a submitted or a
        decided document may still be edited is the document policy's call.
        """
        doc = cls._locked(actor=actor, doc_id=doc_id, action=Action.UPDATE)
        next_status(cls.policy(), current=doc.status, event=DocumentEvent.EDIT, role=actor.role)

        changed = cls._apply(doc, changes)
        if changed:
            doc.save(update_fields=changed + ["updated_at"])
        cls._audit(actor=actor, doc=doc, suffix="UPDATED", details={"fields": changed}, meta=meta)
        return doc

    # -------------------------
    # Decider
    # -------------------------
    @classmethod
    @transaction.atomic
    def decide(
        cls,
        *,
        actor: Actor,
        doc_id,
        decision: str,
        reason: Optional[str] = None,
        meta: Optional[RequestMeta] = None,
    ) -> WorkflowDocument:
        """
        PENDING -> APPROVED | CONDITIONAL | DENIED, once. The row lock makes a
        concurrent second decision observe the terminal state and fail.
        """
        doc = cls._locked(actor=actor, doc_id=doc_id, action=Action.DECIDE)
        doc.status = next_status(
            cls.policy(),
            current=doc.status,
            event=DocumentEvent.DECIDE,
            role=actor.role,
            decision=decision,
            reason=reason,
        )
        doc.decided_by_id = actor.user_id
        doc.decided_at = now()
        doc.decision_reason = (reason or "").strip()
        doc.save(update_fields=["status", "decided_by", "decided_at", "decision_reason", "updated_at"])

        cls._audit(
            actor=actor,
            doc=doc,
            suffix=doc.status,
            details={"decision_reason": doc.decision_reason or None},
            meta=meta,
        )
        logger.info("%s %s decided %s by user %s", cls.model.__name__, doc.id, doc.status, actor.user_id)
        return doc

    # -------------------------
    # Reads with side effects
    # -------------------------
    @classmethod
    @transaction.atomic
    def record_pdf_download(cls, *, actor: Actor, doc: WorkflowDocument, meta: Optional[RequestMeta] = None) -> None:
        authorize(actor, Action.READ, doc.access_scope())
        cls._audit(actor=actor, doc=doc, suffix="PDF_DOWNLOADED", meta=meta)
