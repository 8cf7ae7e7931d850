from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.timezone import now
from rest_framework.exceptions import PermissionDenied

from bhp_core.audit.selectors import events_for_entity
from bhp_core.compliance.models import Document, DocumentStatus, Employee
from bhp_core.compliance.services import DocumentCategoryService, DocumentService

pytestmark = pytest.mark.django_db


def request_fire_inspection(bhp_actor, facility, **extra):
    return DocumentService.request_document(
        actor=bhp_actor,
        facility_id=facility.id,
        name="Fire inspection",
        type="Inspection",
        **extra,
    )


def test_request_then_fulfil_adds_versions(fake_storage, pdf_upload, bhp_actor, bhrf_actor, bhrf_user, facility):
    document = request_fire_inspection(bhp_actor, facility)
    assert document.status == DocumentStatus.REQUESTED
    assert document.compliance_status() is None

    document = DocumentService.upload(
        actor=bhrf_actor,
        facility_id=None,
        document_id=document.id,
        uploaded_file=pdf_upload("inspection-2024.pdf"),
        name="",
        type="",
        expires_at=now() + timedelta(days=200),
    )
    assert document.status == DocumentStatus.UPLOADED
    assert document.uploaded_by_id == bhrf_user.id
    assert document.compliance_status().value == "VALID"

    DocumentService.upload(
        actor=bhrf_actor,
        facility_id=None,
        document_id=document.id,
        uploaded_file=pdf_upload("inspection-2025.pdf"),
        name="",
        type="",
    )

    document.refresh_from_db()
    assert document.versions.count() == 2
    assert document.file_key.endswith("inspection-2025.pdf")

    uploads = events_for_entity(entity_type="Document", entity_id=document.id).filter(action="DOCUMENT_UPLOADED")
    assert [event.details["fulfilled_request"] for event in uploads] == [True, False]


def test_direct_upload_uses_bhrf_facility(fake_storage, pdf_upload, bhrf_actor, facility):
    document = DocumentService.upload(
        actor=bhrf_actor,
        facility_id=facility.id,
        uploaded_file=pdf_upload(),
        name="Occupancy permit",
        type="Permit",
        no_expiration=True,
    )

    assert document.facility_id == facility.id
    assert document.status == DocumentStatus.UPLOADED
    assert document.versions.count() == 1


def test_links_must_belong_to_the_facility(bhp_actor, facility, other_facility, other_bhp_actor):
    stranger = Employee.objects.create(facility=other_facility, first_name="Sam", last_name="Lee")
    foreign_category = DocumentCategoryService.create(actor=other_bhp_actor, name="Insurance")

    with pytest.raises(DjangoValidationError) as exc:
        request_fire_inspection(bhp_actor, facility, employee_id=stranger.id, category_id=foreign_category.id)

    assert set(exc.value.message_dict) == {"employee_id", "category_id"}
    assert not Document.objects.exists()


def test_bhp_category_is_shared_with_its_facilities(bhp_actor, facility):
    category = DocumentCategoryService.create(actor=bhp_actor, name="Licensing")

    document = request_fire_inspection(bhp_actor, facility, category_id=category.id)

    assert document.category_id == category.id


def test_requested_document_has_nothing_to_download(bhp_actor, facility):
    document = request_fire_inspection(bhp_actor, facility)

    with pytest.raises(DjangoValidationError):
        DocumentService.download_url(actor=bhp_actor, document_id=document.id)


def test_other_tenants_cannot_request(other_bhp_actor, other_bhrf_actor, facility):
    with pytest.raises(PermissionDenied):
        request_fire_inspection(other_bhp_actor, facility)
    with pytest.raises(PermissionDenied):
        DocumentService.upload(
            actor=other_bhrf_actor,
            facility_id=facility.id,
            uploaded_file=None,
            name="Permit",
            type="Permit",
        )


def test_delete_discards_every_version(
    django_capture_on_commit_callbacks, fake_storage, pdf_upload, bhp_actor, bhrf_actor, facility
):
    document = request_fire_inspection(bhp_actor, facility)
    for name in ("first.pdf", "second.pdf"):
        DocumentService.upload(
            actor=bhrf_actor,
            facility_id=None,
            document_id=document.id,
            uploaded_file=pdf_upload(name),
            name="",
            type="",
        )
    keys = set(Document.objects.get(id=document.id).versions.values_list("file_key", flat=True))

    with django_capture_on_commit_callbacks(execute=True):
        DocumentService.delete(actor=bhp_actor, document_id=document.id)

    assert set(fake_storage.deleted) == keys
    assert fake_storage.objects == {}


# ----------------------------
# HTTP
# ----------------------------
def test_request_and_fulfil_over_http(client_for, fake_storage, pdf_upload, bhp_user, bhrf_user, facility):
    bhp = client_for(bhp_user)
    bhrf = client_for(bhrf_user)

    requested = bhp.post(
        "/api/v1/documents/",
        {"facility_id": str(facility.id), "name": "Fire inspection", "type": "Inspection"},
        format="json",
    )
    assert requested.status_code == 201
    assert requested.data["status"] == DocumentStatus.REQUESTED
    assert requested.data["compliance_status"] is None

    missing_file = bhp.get(f"/api/v1/documents/{requested.data['id']}/download/")
    assert missing_file.status_code == 400

    fulfilled = bhrf.post(
        "/api/v1/documents/upload/",
        {"document_id": requested.data["id"], "file": pdf_upload()},
        format="multipart",
    )
    assert fulfilled.status_code == 201
    assert fulfilled.data["status"] == DocumentStatus.UPLOADED

    detail = bhp.get(f"/api/v1/documents/{requested.data['id']}/")
    assert len(detail.data["versions"]) == 1

    pending = bhp.get("/api/v1/documents/", {"status": DocumentStatus.REQUESTED})
    assert pending.data["count"] == 0


def test_upload_without_name_is_rejected(client_for, fake_storage, pdf_upload, bhrf_user):
    res = client_for(bhrf_user).post("/api/v1/documents/upload/", {"file": pdf_upload()}, format="multipart")

    assert res.status_code == 400
    assert set(res.data["error"]["details"]) >= {"name", "type"}
    assert fake_storage.objects == {}


def test_roles_are_split_between_request_and_upload(client_for, pdf_upload, bhp_user, bhrf_user, facility):
    as_bhrf = client_for(bhrf_user).post(
        "/api/v1/documents/",
        {"facility_id": str(facility.id), "name": "Fire inspection", "type": "Inspection"},
        format="json",
    )
    assert as_bhrf.status_code == 403

    as_bhp = client_for(bhp_user).post(
        "/api/v1/documents/upload/",
        {"file": pdf_upload(), "name": "Permit", "type": "Permit"},
        format="multipart",
    )
    assert as_bhp.status_code == 403
