from datetime import timedelta

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils.timezone import now
from rest_framework.exceptions import PermissionDenied, ValidationError

from bhp_core.audit.models import AuditEvent
from bhp_core.compliance.models import Credential, CredentialType
from bhp_core.compliance.services import CredentialService

pytestmark = pytest.mark.django_db


def test_upload_stores_bytes_and_key(fake_storage, pdf_upload, bhp_actor, bhp_user):
    credential = CredentialService.upload(
        actor=bhp_actor,
        uploaded_file=pdf_upload("State License (AZ).pdf"),
        type=CredentialType.LICENSE,
        name="  State license ",
        expires_at=now() + timedelta(days=10),
    )

    assert credential.name == "State license"
    assert credential.file_key.startswith(f"credentials/{bhp_user.id}/")
    assert credential.file_key.endswith("-State_License__AZ_.pdf")
    assert fake_storage.objects[credential.file_key] == b"%PDF-1.4 test file"
    assert credential.compliance_status().value == "EXPIRING_SOON"
    assert AuditEvent.objects.get().action == "CREDENTIAL_UPLOADED"


def test_no_expiration_drops_the_date(fake_storage, pdf_upload, bhp_actor):
    credential = CredentialService.upload(
        actor=bhp_actor,
        uploaded_file=pdf_upload(),
        type=CredentialType.INSURANCE,
        name="Liability insurance",
        expires_at=now() - timedelta(days=1),
        no_expiration=True,
    )

    assert credential.expires_at is None
    assert credential.compliance_status().value == "VALID"


def test_failed_row_write_discards_the_object(monkeypatch, fake_storage, pdf_upload, bhp_actor):
    def broken_create(**kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(Credential.objects, "create", broken_create)

    with pytest.raises(RuntimeError):
        CredentialService.upload(actor=bhp_actor, uploaded_file=pdf_upload(), type="LICENSE", name="License")

    assert fake_storage.objects == {}
    assert len(fake_storage.deleted) == 1


def test_rejected_file_type_stores_nothing(fake_storage, bhp_actor):
    text = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")

    with pytest.raises(ValidationError) as exc:
        CredentialService.upload(actor=bhp_actor, uploaded_file=text, type="LICENSE", name="License")

    assert "file" in exc.value.detail
    assert fake_storage.objects == {}
    assert not Credential.objects.exists()


def test_delete_removes_object_after_commit(
    django_capture_on_commit_callbacks, fake_storage, pdf_upload, bhp_actor
):
    credential = CredentialService.upload(actor=bhp_actor, uploaded_file=pdf_upload(), type="LICENSE", name="License")

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        CredentialService.delete(actor=bhp_actor, credential_id=credential.id)

    assert len(callbacks) == 1
    assert fake_storage.deleted == [credential.file_key]
    assert not Credential.objects.exists()


def test_delete_survives_storage_failure(django_capture_on_commit_callbacks, fake_storage, pdf_upload, bhp_actor):
    credential = CredentialService.upload(actor=bhp_actor, uploaded_file=pdf_upload(), type="LICENSE", name="License")
    fake_storage.fail_deletes = True

    with django_capture_on_commit_callbacks(execute=True):
        CredentialService.delete(actor=bhp_actor, credential_id=credential.id)

    assert not Credential.objects.exists()
    actions = list(AuditEvent.objects.order_by("id").values_list("action", flat=True))
    assert actions == ["CREDENTIAL_UPLOADED", "CREDENTIAL_DELETED"]


def test_credentials_belong_to_one_bhp(fake_storage, pdf_upload, bhp_actor, other_bhp_actor, bhrf_actor):
    credential = CredentialService.upload(actor=bhp_actor, uploaded_file=pdf_upload(), type="LICENSE", name="License")

    with pytest.raises(PermissionDenied):
        CredentialService.download_url(actor=other_bhp_actor, credential_id=credential.id)
    with pytest.raises(PermissionDenied):
        CredentialService.upload(actor=bhrf_actor, uploaded_file=pdf_upload(), type="LICENSE", name="License")


def test_update_clears_expiry_when_marked_permanent(fake_storage, pdf_upload, bhp_actor):
    credential = CredentialService.upload(
        actor=bhp_actor,
        uploaded_file=pdf_upload(),
        type="CERTIFICATION",
        name="CPR",
        expires_at=now() + timedelta(days=90),
    )

    credential = CredentialService.update(actor=bhp_actor, credential_id=credential.id, changes={"no_expiration": True})

    assert credential.no_expiration is True
    assert credential.expires_at is None
    details = AuditEvent.objects.filter(action="CREDENTIAL_UPDATED").get().details
    assert sorted(details["fields"]) == ["expires_at", "no_expiration"]


# ----------------------------
# HTTP
# ----------------------------
def test_upload_and_download_over_http(client_for, fake_storage, pdf_upload, bhp_user):
    client = client_for(bhp_user)

    res = client.post(
        "/api/v1/credentials/",
        {"file": pdf_upload(), "type": "LICENSE", "name": "State license", "no_expiration": True},
        format="multipart",
    )
    assert res.status_code == 201
    assert res.data["compliance_status"] == "VALID"

    listed = client.get("/api/v1/credentials/")
    assert listed.data["count"] == 1

    download = client.get(f"/api/v1/credentials/{res.data['id']}/download/")
    assert download.status_code == 200
    assert download.data["url"].startswith("https://storage.test/bhp/credentials/")
    assert download.data["expires_in"] == 3600


def test_bhrf_has_no_credentials_endpoint(client_for, bhrf_user):
    assert client_for(bhrf_user).get("/api/v1/credentials/").status_code == 403


def test_other_bhp_gets_forbidden(client_for, fake_storage, pdf_upload, bhp_actor, other_bhp_user):
    credential = CredentialService.upload(actor=bhp_actor, uploaded_file=pdf_upload(), type="LICENSE", name="License")

    res = client_for(other_bhp_user).get(f"/api/v1/credentials/{credential.id}/")

    assert res.status_code == 403
    assert res.data["error"]["message"] == "Forbidden"
