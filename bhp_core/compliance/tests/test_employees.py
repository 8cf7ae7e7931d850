from datetime import date

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.mail import EmailMultiAlternatives
from rest_framework.exceptions import PermissionDenied

from bhp_core.audit.models import AuditEvent
from bhp_core.compliance.models import EmployeeDocument
from bhp_core.compliance.services import (
    EmployeeDocumentService,
    EmployeeDocumentTypeService,
    EmployeeService,
)

pytestmark = pytest.mark.django_db


@pytest.fixture
def employee(bhrf_actor, facility):
    return EmployeeService.create(
        actor=bhrf_actor,
        facility_id=facility.id,
        fields={
            "first_name": "Casey",
            "last_name": "Nguyen",
            "email": "casey@example.com",
            "position": "Behavioral health technician",
            "hire_date": date(2023, 2, 14),
        },
    )


def test_create_requires_names(bhrf_actor, facility):
    with pytest.raises(DjangoValidationError) as exc:
        EmployeeService.create(actor=bhrf_actor, facility_id=facility.id, fields={"first_name": " "})

    assert set(exc.value.message_dict) == {"first_name", "last_name"}


def test_update_records_changed_fields_only(bhrf_actor, employee):
    EmployeeService.update(
        actor=bhrf_actor,
        employee_id=employee.id,
        changes={"first_name": "Casey", "phone": "555-0199"},
    )

    event = AuditEvent.objects.get(action="EMPLOYEE_UPDATED")
    assert event.details == {"fields": ["phone"]}


def test_deactivation_is_idempotent(bhrf_actor, employee):
    EmployeeService.deactivate(actor=bhrf_actor, employee_id=employee.id)
    again = EmployeeService.deactivate(actor=bhrf_actor, employee_id=employee.id)

    assert again.is_active is False
    assert AuditEvent.objects.filter(action="EMPLOYEE_DEACTIVATED").count() == 1


def test_other_facility_cannot_touch_employee(other_bhrf_actor, other_bhp_actor, employee):
    with pytest.raises(PermissionDenied):
        EmployeeService.update(actor=other_bhrf_actor, employee_id=employee.id, changes={"phone": "1"})
    with pytest.raises(PermissionDenied):
        EmployeeService.send_summary_email(actor=other_bhp_actor, employee_id=employee.id)


def test_summary_recipients_put_bhp_first_and_dedupe(employee):
    recipients = EmployeeService.summary_recipients(
        employee,
        ["HR@example.com", "bhp@example.com", "hr@example.com", " "],
    )

    assert recipients == ["bhp@example.com", "HR@example.com"]


def test_summary_email_is_sent_and_audited(mailoutbox, bhrf_actor, employee):
    recipients = EmployeeService.send_summary_email(
        actor=bhrf_actor,
        employee_id=employee.id,
        additional_recipients=["hr@example.com"],
    )

    assert recipients == ["bhp@example.com", "hr@example.com"]
    assert len(mailoutbox) == 1
    message = mailoutbox[0]
    assert message.subject == "Employee information: Casey Nguyen"
    assert message.to == recipients
    assert "02/14/2023" in message.alternatives[0][0]
    event = AuditEvent.objects.get(action="EMPLOYEE_EMAIL_SENT")
    assert event.details == {"recipients": recipients}


def test_summary_escapes_html(bhrf_actor, facility):
    employee = EmployeeService.create(
        actor=bhrf_actor,
        facility_id=facility.id,
        fields={"first_name": "<b>Al</b>", "last_name": "Ray"},
    )

    _, html = EmployeeService.render_summary(employee)

    assert "<b>Al</b>" not in html
    assert "&lt;b&gt;Al&lt;/b&gt;" in html
    assert "Not provided" in html


def test_failed_email_returns_502_without_audit(monkeypatch, client_for, bhrf_user, employee):
    def broken_send(self, fail_silently=False):
        raise OSError("smtp down")

    monkeypatch.setattr(EmailMultiAlternatives, "send", broken_send)

    res = client_for(bhrf_user).post(f"/api/v1/employees/{employee.id}/send-email/", {}, format="json")

    assert res.status_code == 502
    assert res.data["error"]["code"] == "email_failed"
    assert not AuditEvent.objects.filter(action="EMPLOYEE_EMAIL_SENT").exists()


def test_send_email_over_http(client_for, mailoutbox, bhp_user, employee):
    res = client_for(bhp_user).post(
        f"/api/v1/employees/{employee.id}/send-email/",
        {"additional_recipients": ["ops@example.com"]},
        format="json",
    )

    assert res.status_code == 200
    assert res.data == {"detail": "Email sent.", "recipients": ["bhp@example.com", "ops@example.com"]}
    assert len(mailoutbox) == 1


def test_employee_list_hides_inactive_by_default(client_for, bhrf_user, bhrf_actor, employee):
    EmployeeService.deactivate(actor=bhrf_actor, employee_id=employee.id)
    client = client_for(bhrf_user)

    assert client.get("/api/v1/employees/").data["count"] == 0
    assert client.get("/api/v1/employees/", {"include_inactive": "true"}).data["count"] == 1


def test_bhp_names_the_facility_when_creating(client_for, bhp_user, facility):
    client = client_for(bhp_user)

    missing = client.post("/api/v1/employees/", {"first_name": "Ana", "last_name": "Ruiz"}, format="json")
    assert missing.status_code == 400
    assert "facility_id" in missing.data["error"]["details"]

    created = client.post(
        "/api/v1/employees/",
        {"facility_id": str(facility.id), "first_name": "Ana", "last_name": "Ruiz"},
        format="json",
    )
    assert created.status_code == 201


# ----------------------------
# Employee documents
# ----------------------------
def test_employee_document_upload_and_delete(
    django_capture_on_commit_callbacks, fake_storage, pdf_upload, bhrf_actor, facility, employee
):
    doc_type = EmployeeDocumentTypeService.create(actor=bhrf_actor, facility_id=facility.id, name="CPR card")

    document = EmployeeDocumentService.upload(
        actor=bhrf_actor,
        employee_id=employee.id,
        document_type_id=doc_type.id,
        uploaded_file=pdf_upload("cpr.pdf"),
        no_expiration=True,
    )
    assert document.file_key.startswith("employee-documents/")
    assert document.compliance_status().value == "VALID"

    with django_capture_on_commit_callbacks(execute=True):
        EmployeeDocumentService.delete(actor=bhrf_actor, document_id=document.id)

    assert fake_storage.deleted == [document.file_key]
    assert not EmployeeDocument.objects.exists()


def test_inactive_document_type_cannot_be_used(fake_storage, pdf_upload, bhrf_actor, facility, employee):
    doc_type = EmployeeDocumentTypeService.create(actor=bhrf_actor, facility_id=facility.id, name="CPR card")
    EmployeeDocumentTypeService.deactivate(actor=bhrf_actor, doc_type_id=doc_type.id)

    with pytest.raises(DjangoValidationError) as exc:
        EmployeeDocumentService.upload(
            actor=bhrf_actor,
            employee_id=employee.id,
            document_type_id=doc_type.id,
            uploaded_file=pdf_upload(),
        )

    assert "document_type_id" in exc.value.message_dict
    assert fake_storage.objects == {}
