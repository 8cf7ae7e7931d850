# bhp_core/compliance/services/employees.py

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.utils.html import escape
from django.utils.timezone import now
from rest_framework.exceptions import APIException

from bhp_core.audit.actions import AuditAction
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.common.permissions import authorize, get_authorized
from bhp_core.compliance.models import Employee, EmployeeDocument, EmployeeDocumentType
from bhp_core.facilities.models import Facility
from bhp_core.iam.actor import Actor
from bhp_core.iam.gate import Action
from bhp_core.integrations.email import send_email
from bhp_core.integrations.storage import discard_objects, get_storage, store_upload

logger = logging.getLogger(__name__)

EMPLOYEE_EDITABLE_FIELDS = ("first_name", "last_name", "email", "phone", "position", "hire_date")


class EmailDeliveryFailed(APIException):
    status_code = 502
    default_detail = "Failed to send email."
    default_code = "email_failed"


def _validate_employee(fields: dict[str, Any]) -> None:
    errors: dict[str, str] = {}
    for name in ("first_name", "last_name"):
        if name in fields and not (fields[name] or "").strip():
            errors[name] = "This field is required."
    if fields.get("email"):
        try:
            validate_email(fields["email"])
        except ValidationError:
            errors["email"] = "Enter a valid email address."
    if errors:
        raise ValidationError(errors)


def _record(actor: Actor, action: str, entity_type: str, entity_id, meta: Optional[RequestMeta], details: dict) -> None:
    AuditService.record(
        actor_user_id=actor.user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        meta=meta,
    ).ignore()


class EmployeeService:
    """
    Facility staff roster. Employees are never hard-deleted: deactivation
    keeps their documents and audit history intact.
    """

    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor: Actor,
        facility_id,
        fields: dict[str, Any],
        meta: Optional[RequestMeta] = None,
    ) -> Employee:
        facility = get_authorized(Facility.objects.all(), pk=facility_id, actor=actor, action=Action.READ)
        authorize(actor, Action.CREATE, facility.member_scope())

        required = {"first_name": fields.get("first_name"), "last_name": fields.get("last_name")}
        _validate_employee({**fields, **required})

        values = {}
        for field in EMPLOYEE_EDITABLE_FIELDS:
            value = fields.get(field)
            if isinstance(value, str):
                value = value.strip()
            if value not in (None, ""):
                values[field] = value

        employee = Employee.objects.create(facility=facility, **values)
        _record(
            actor,
            AuditAction.EMPLOYEE_CREATED,
            "Employee",
            employee.id,
            meta,
            {"facility_id": str(facility.id), "name": employee.full_name},
        )
        return employee

    @staticmethod
    @transaction.atomic
    def update(
        *,
        actor: Actor,
        employee_id,
        changes: dict[str, Any],
        meta: Optional[RequestMeta] = None,
    ) -> Employee:
        employee = get_authorized(
            Employee.objects.select_for_update(of=("self",)).select_related("facility"),
            pk=employee_id,
            actor=actor,
            action=Action.UPDATE,
        )
        _validate_employee(changes)

        changed: list[str] = []
        for field in EMPLOYEE_EDITABLE_FIELDS:
            if field not in changes:
                continue
            value = changes[field]
            if isinstance(value, str):
                value = value.strip()
            if field in ("email", "phone", "position") and value is None:
                value = ""
            if getattr(employee, field) != value:
                setattr(employee, field, value)
                changed.append(field)

        if changed:
            employee.save(update_fields=changed + ["updated_at"])
            _record(actor, AuditAction.EMPLOYEE_UPDATED, "Employee", employee.id, meta, {"fields": changed})
        return employee

    @staticmethod
    @transaction.atomic
    def deactivate(*, actor: Actor, employee_id, meta: Optional[RequestMeta] = None) -> Employee:
        employee = get_authorized(
            Employee.objects.select_for_update(of=("self",)).select_related("facility"),
            pk=employee_id,
            actor=actor,
            action=Action.DELETE,
        )
        if not employee.is_active:
            return employee

        employee.is_active = False
        employee.deactivated_at = now()
        employee.save(update_fields=["is_active", "deactivated_at", "updated_at"])
        _record(
            actor,
            AuditAction.EMPLOYEE_DEACTIVATED,
            "Employee",
            employee.id,
            meta,
            {"facility_id": str(employee.facility_id), "name": employee.full_name},
        )
        return employee

    # -------------------------
    # Summary email
    # -------------------------
    @staticmethod
    def summary_recipients(employee: Employee, additional: Iterable[str] = ()) -> list[str]:
        """
        The facility's BHP first, then the extra addresses; case-insensitive
        duplicates dropped, order kept.
        """
        candidates = [employee.facility.bhp.user.email, *additional]
        seen: set[str] = set()
        recipients: list[str] = []
        for address in candidates:
            address = (address or "").strip()
            if not address or address.lower() in seen:
                continue
            seen.add(address.lower())
            recipients.append(address)
        return recipients

    @staticmethod
    def render_summary(employee: Employee) -> tuple[str, str]:
        subject = f"Employee information: {employee.full_name}"
        hire_date = employee.hire_date.strftime("%m/%d/%Y") if employee.hire_date else "Not provided"
        rows = [
            ("Name", employee.full_name),
            ("Position", employee.position or "Not provided"),
            ("Email", employee.email or "Not provided"),
            ("Phone", employee.phone or "Not provided"),
            ("Facility", employee.facility.name),
            ("Hire date", hire_date),
        ]
        body = "".join(f"<p><strong>{escape(label)}:</strong> {escape(value)}</p>" for label, value in rows)
        html = f"<h2>Employee information</h2>{body}<p>Sent from BHP Connect.</p>"
        return subject, html

    @staticmethod
    def send_summary_email(
        *,
        actor: Actor,
        employee_id,
        additional_recipients: Iterable[str] = (),
        meta: Optional[RequestMeta] = None,
    ) -> list[str]:
        employee = get_authorized(
            Employee.objects.select_related("facility", "facility__bhp__user"),
            pk=employee_id,
            actor=actor,
            action=Action.READ,
        )
        recipients = EmployeeService.summary_recipients(employee, additional_recipients)
        subject, html = EmployeeService.render_summary(employee)

        outcome = send_email(recipients, subject, html)
        if not outcome.ok:
            raise EmailDeliveryFailed()

        _record(
            actor,
            AuditAction.EMPLOYEE_EMAIL_SENT,
            "Employee",
            employee.id,
            meta,
            {"recipients": recipients},
        )
        logger.info("Employee summary for %s sent to %d recipient(s)", employee.id, len(recipients))
        return recipients


class EmployeeDocumentService:

    @staticmethod
    @transaction.atomic
    def upload(
        *,
        actor: Actor,
        employee_id,
        document_type_id,
        uploaded_file,
        issued_at=None,
        expires_at=None,
        no_expiration: bool = False,
        notes: str = "",
        meta: Optional[RequestMeta] = None,
    ) -> EmployeeDocument:
        employee = get_authorized(
            Employee.objects.select_related("facility"),
            pk=employee_id,
            actor=actor,
            action=Action.UPDATE,
        )
        doc_type = EmployeeDocumentType.objects.filter(
            id=document_type_id,
            facility_id=employee.facility_id,
            is_active=True,
        ).first()
        if doc_type is None:
            raise ValidationError({"document_type_id": "Document type not found for this facility."})

        file_key = store_upload(kind="employee-documents", user_id=actor.user_id, uploaded_file=uploaded_file)
        try:
            with transaction.atomic():
                document = EmployeeDocument.objects.create(
                    employee=employee,
                    document_type=doc_type,
                    file_key=file_key,
                    issued_at=issued_at,
                    expires_at=None if no_expiration else expires_at,
                    no_expiration=no_expiration,
                    notes=(notes or "").strip(),
                    uploaded_by_id=actor.user_id,
                )
        except Exception:
            discard_objects([file_key]).ignore()
            raise

        _record(
            actor,
            AuditAction.EMPLOYEE_DOC_UPLOADED,
            "EmployeeDocument",
            document.id,
            meta,
            {"employee_id": str(employee.id), "document_type": doc_type.name},
        )
        return document

    @staticmethod
    @transaction.atomic
    def delete(*, actor: Actor, document_id, meta: Optional[RequestMeta] = None) -> None:
        document = get_authorized(
            EmployeeDocument.objects.select_for_update(of=("self",)).select_related("employee__facility"),
            pk=document_id,
            actor=actor,
            action=Action.DELETE,
        )
        file_key = document.file_key
        _record(
            actor,
            AuditAction.EMPLOYEE_DOC_DELETED,
            "EmployeeDocument",
            document.id,
            meta,
            {"employee_id": str(document.employee_id)},
        )
        document.delete()
        transaction.on_commit(lambda: discard_objects([file_key]).ignore())

    @staticmethod
    def download_url(*, actor: Actor, document_id) -> str:
        document = get_authorized(
            EmployeeDocument.objects.select_related("employee__facility"),
            pk=document_id,
            actor=actor,
            action=Action.READ,
        )
        return get_storage().signed_url(document.file_key)
