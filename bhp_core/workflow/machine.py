# bhp_core/workflow/machine.py
"""
Approval state machine.

Two instances share the same shape:

* registration approval (users and facility applications):
  PENDING -> APPROVED | REJECTED, decided exactly once.
* workflow documents (intakes, ASAM assessments):
  DRAFT -> PENDING (submitted) -> APPROVED | CONDITIONAL | DENIED,
  decided exactly once per submission cycle by the facility's BHP.

Everything here is pure: callers lock the row, ask for the next status,
persist it and record the audit entry in the same transaction.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from django.conf import settings
from django.db import models
from rest_framework.exceptions import PermissionDenied, ValidationError

from bhp_core.common.api.exceptions import InvalidTransition
from bhp_core.iam.constants import REJECTION_REASON_MIN_LENGTH, ApprovalStatus, Role


class DocumentStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    PENDING = "PENDING", "Submitted"
    APPROVED = "APPROVED", "Approved"
    CONDITIONAL = "CONDITIONAL", "Conditionally approved"
    DENIED = "DENIED", "Denied"


DECISION_STATUSES = frozenset({DocumentStatus.APPROVED, DocumentStatus.CONDITIONAL, DocumentStatus.DENIED})
TERMINAL_STATUSES = DECISION_STATUSES

# A subject with a document in one of these states cannot start a new cycle.
ACTIVE_STATUSES = frozenset({DocumentStatus.PENDING, DocumentStatus.APPROVED, DocumentStatus.CONDITIONAL})


class DocumentEvent(str, Enum):
    SAVE_DRAFT = "save_draft"
    SUBMIT = "submit"
    EDIT = "edit"
    DECIDE = "decide"


# -------------------------
# Registration approval
# -------------------------

def decide_registration(*, current: str, decision: str, reason: Optional[str] = None) -> str:
    """
    PENDING -> APPROVED | REJECTED.

    Terminal states are checked first so a second decision is always reported as
    InvalidTransition, whatever its payload.
    """
    if current != ApprovalStatus.PENDING:
        raise InvalidTransition("This request has already been reviewed.")

    if decision not in {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED}:
        raise ValidationError({"status": "Decision must be APPROVED or REJECTED."})

    if decision == ApprovalStatus.REJECTED:
        if len((reason or "").strip()) < REJECTION_REASON_MIN_LENGTH:
            raise ValidationError(
                {"rejection_reason": f"Rejection reason must be at least {REJECTION_REASON_MIN_LENGTH} characters."}
            )

    return decision


# -------------------------
# Workflow documents
# -------------------------

@dataclass(frozen=True)
class DocumentPolicy:
    """
    Per-document-type edit and decision rules.

    editable_after_submit: the document may still be edited while PENDING.
    editable_after_decision: the document may be edited once decided.
    Neither flag ever moves the status.
    """
    kind: str
    editable_after_submit: bool = False
    editable_after_decision: bool = False
    reason_required_for: frozenset = field(default_factory=frozenset)
    reason_min_length: int = 1


DEFAULT_POLICIES: dict[str, DocumentPolicy] = {
    "intake": DocumentPolicy(
        kind="intake",
        editable_after_submit=False,
        editable_after_decision=False,
        reason_required_for=frozenset({DocumentStatus.CONDITIONAL, DocumentStatus.DENIED}),
        reason_min_length=10,
    ),
    "asam": DocumentPolicy(
        kind="asam",
        editable_after_submit=True,
        editable_after_decision=True,
        reason_required_for=DECISION_STATUSES,
        reason_min_length=1,
    ),
}


def policy_for(kind: str) -> DocumentPolicy:
    base = DEFAULT_POLICIES.get(kind) or DocumentPolicy(kind=kind)
    overrides = (getattr(settings, "WORKFLOW_DOCUMENT_POLICIES", None) or {}).get(kind) or {}
    if not overrides:
        return base
    if "reason_required_for" in overrides:
        overrides = {**overrides, "reason_required_for": frozenset(overrides["reason_required_for"])}
    return replace(base, **overrides)


def next_status(
    policy: DocumentPolicy,
    *,
    current: str,
    event: DocumentEvent,
    role: str,
    decision: Optional[str] = None,
    reason: Optional[str] = None,
) -> str:
    """
    Return the status a document moves to, or raise.

    Raises InvalidTransition for moves the current state does not allow,
    PermissionDenied when the role may never trigger the event and
    ValidationError for a malformed decision.
    """
    if event == DocumentEvent.SAVE_DRAFT:
        if role != Role.BHRF:
            raise PermissionDenied("Forbidden")
        if current != DocumentStatus.DRAFT:
            raise InvalidTransition("Only draft documents can be saved as drafts.")
        return DocumentStatus.DRAFT

    if event == DocumentEvent.SUBMIT:
        if role != Role.BHRF:
            raise PermissionDenied("Forbidden")
        if current != DocumentStatus.DRAFT:
            raise InvalidTransition("Only draft documents can be submitted.")
        return DocumentStatus.PENDING

    if event == DocumentEvent.EDIT:
        if role not in {Role.BHRF, Role.BHP}:
            raise PermissionDenied("Forbidden")
        if current == DocumentStatus.DRAFT:
            if role != Role.BHRF:
                raise InvalidTransition("Draft documents can only be edited by the authoring facility.")
            return current
        if current == DocumentStatus.PENDING:
            if not policy.editable_after_submit:
                raise InvalidTransition(f"Submitted {policy.kind} documents are read-only.")
            return current
        if current in TERMINAL_STATUSES:
            if not policy.editable_after_decision:
                raise InvalidTransition(f"Decided {policy.kind} documents are read-only.")
            return current
        raise InvalidTransition()

    if event == DocumentEvent.DECIDE:
        if role != Role.BHP:
            raise PermissionDenied("Forbidden")
        if current != DocumentStatus.PENDING:
            if current in TERMINAL_STATUSES:
                raise InvalidTransition("This document has already been decided.")
            raise InvalidTransition("Only submitted documents can be decided.")
        if decision not in DECISION_STATUSES:
            raise ValidationError({"status": "Decision must be APPROVED, CONDITIONAL or DENIED."})
        if decision in policy.reason_required_for:
            if len((reason or "").strip()) < policy.reason_min_length:
                raise ValidationError(
                    {"decision_reason": f"A decision reason of at least {policy.reason_min_length} characters is required."}
                )
        return decision

    raise InvalidTransition()


def is_active(status: str) -> bool:
    return status in ACTIVE_STATUSES
