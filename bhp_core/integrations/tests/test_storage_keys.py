from types import SimpleNamespace

import pytest
from rest_framework.exceptions import ValidationError

from bhp_core.integrations import storage
from bhp_core.integrations.email import send_email
from bhp_core.integrations.pdf import render_document


def test_file_key_sanitizes_filename(monkeypatch):
    monkeypatch.setattr(storage.time, "time", lambda: 1700000000.5)

    key = storage.generate_file_key("credentials", 42, "My License (2024)!.pdf")

    assert key == "credentials/42/1700000000500-My_License__2024__.pdf"


def test_file_key_keeps_dots_and_dashes():
    key = storage.generate_file_key("documents", 7, "a-b.c.PDF")
    assert key.startswith("documents/7/")
    assert key.endswith("-a-b.c.PDF")


def test_validate_upload_rejects_large_and_unknown_types(settings):
    settings.UPLOAD_MAX_BYTES = 10
    big = SimpleNamespace(size=11, content_type="application/pdf", name="x.pdf")
    with pytest.raises(ValidationError):
        storage.validate_upload(big)

    exe = SimpleNamespace(size=5, content_type="application/x-msdownload", name="x.exe")
    with pytest.raises(ValidationError):
        storage.validate_upload(exe)

    ok = SimpleNamespace(size=5, content_type="application/pdf", name="x.pdf")
    storage.validate_upload(ok)


def test_delete_object_failure_is_returned_not_raised(monkeypatch):
    class _BrokenClient:
        def remove_object(self, bucket, key):
            raise OSError("connection refused")

    s = storage.S3Storage.__new__(storage.S3Storage)
    s.client = _BrokenClient()
    s.bucket = "bhp"

    outcome = s.delete_object("documents/1/x.pdf")

    assert not outcome.ok
    assert isinstance(outcome.error, OSError)


def test_send_email_uses_locmem_outbox(mailoutbox):
    outcome = send_email(["bhp@example.com"], "Employee summary", "<p>Hello <b>there</b></p>")

    assert outcome.ok
    assert len(mailoutbox) == 1
    assert mailoutbox[0].body == "Hello there"
    assert mailoutbox[0].alternatives[0][1] == "text/html"


def test_send_email_without_recipients_fails_quietly():
    outcome = send_email([], "Nothing", "<p>x</p>")
    assert not outcome.ok


def test_render_document_returns_pdf_bytes():
    pdf = render_document(
        "Intake Assessment",
        [("Resident", [("Name", "Jane <Doe>"), ("Medications", ["a", "b"])]), ("Empty", [])],
        subtitle="Sunrise House",
    )
    assert pdf.startswith(b"%PDF")
