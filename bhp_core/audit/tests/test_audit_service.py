import pytest
from django.db import transaction
from rest_framework.test import APIRequestFactory

from bhp_core.audit.models import AuditEvent, AuditLogImmutable
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.facilities.models import Facility
from bhp_core.facilities.services import FacilityService

pytestmark = pytest.mark.django_db


def test_record_fills_unknown_metadata(bhp_user):
    outcome = AuditService.record(actor_user_id=bhp_user.id, action="USER_LOGIN", entity_type="User", entity_id=bhp_user.id)

    assert outcome.ok
    event = AuditEvent.objects.get()
    assert event.ip_address == "unknown"
    assert event.user_agent == "unknown"
    assert event.details == {}
    assert event.entity_id == str(bhp_user.id)


def test_request_meta_prefers_forwarded_for():
    request = APIRequestFactory().get(
        "/",
        HTTP_X_FORWARDED_FOR="203.0.113.9, 10.0.0.1",
        HTTP_X_REAL_IP="10.0.0.2",
        HTTP_USER_AGENT="Mozilla/5.0",
    )

    meta = RequestMeta.from_request(request)

    assert meta == RequestMeta(ip_address="203.0.113.9", user_agent="Mozilla/5.0")


def test_request_meta_falls_back_to_real_ip_then_unknown():
    factory = APIRequestFactory()

    assert RequestMeta.from_request(factory.get("/", HTTP_X_REAL_IP="10.0.0.2")).ip_address == "10.0.0.2"
    assert RequestMeta.from_request(factory.get("/")) == RequestMeta()
    assert RequestMeta.from_request(None) == RequestMeta()


def test_failed_write_is_returned_not_raised(monkeypatch, bhp_actor):
    def broken_create(**kwargs):
        raise RuntimeError("audit table unavailable")

    monkeypatch.setattr(AuditEvent.objects, "create", broken_create)

    outcome = AuditService.record(actor_user_id=None, action="X", entity_type="Test")
    assert not outcome.ok
    assert isinstance(outcome.error, RuntimeError)

    # the triggering operation still commits
    facility = FacilityService.create_facility(actor=bhp_actor, name="Canyon House")
    assert Facility.objects.filter(id=facility.id).exists()


def test_entries_roll_back_with_their_transaction(bhp_user):
    with pytest.raises(RuntimeError):
        with transaction.atomic():
            AuditService.record(actor_user_id=bhp_user.id, action="FACILITY_CREATED", entity_type="Facility").ignore()
            raise RuntimeError("boom")

    assert not AuditEvent.objects.exists()


def test_events_are_append_only(bhp_user):
    AuditService.record(actor_user_id=bhp_user.id, action="USER_LOGIN", entity_type="User").ignore()
    event = AuditEvent.objects.get()

    event.action = "CHANGED"
    with pytest.raises(AuditLogImmutable):
        event.save()
    with pytest.raises(AuditLogImmutable):
        event.delete()
    with pytest.raises(AuditLogImmutable):
        AuditEvent.objects.filter(id=event.id).update(action="CHANGED")
    with pytest.raises(AuditLogImmutable):
        AuditEvent.objects.all().delete()


def test_audit_log_is_admin_only(client_for, admin_user, bhp_user, bhp_actor):
    FacilityService.create_facility(actor=bhp_actor, name="Canyon House")

    res = client_for(admin_user).get("/api/v1/audit/events/", {"action": "FACILITY_CREATED"})
    assert res.status_code == 200
    assert len(res.data) == 1
    assert res.data[0]["entity_type"] == "Facility"

    assert client_for(bhp_user).get("/api/v1/audit/events/").status_code == 403


def test_audit_log_rejects_bad_actor_filter(client_for, admin_user):
    res = client_for(admin_user).get("/api/v1/audit/events/", {"actor_user_id": "abc"})

    assert res.status_code == 400
    assert "actor_user_id" in res.data["error"]["details"]
